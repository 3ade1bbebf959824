"""Common utility functions shared across the library."""

import os
import re
from pathlib import Path
from typing import Iterable, List, Set


_DEF_ENV_LOADED = False


def _load_env_file() -> None:
    """Load environment variables from .env file if present."""
    global _DEF_ENV_LOADED
    if _DEF_ENV_LOADED:
        return
    _DEF_ENV_LOADED = True
    # Look for .env in the working directory, then the project root
    here = Path(__file__).parent
    candidates = [
        Path.cwd() / ".env",
        here.parent.parent / ".env",
    ]
    for p in candidates:
        if not p.is_file():
            continue
        try:
            raw_text = p.read_text(encoding="utf-8", errors="ignore")
        except OSError:
            continue
        for raw in raw_text.splitlines():
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith("export "):
                line = line[len("export "):].strip()
            if "=" not in line:
                continue
            k, v = line.split("=", 1)
            key = k.strip()
            val = v.strip().strip('"').strip("'")
            if key and os.environ.get(key) is None:
                os.environ[key] = val


def unique_preserve_order(items: Iterable[str]) -> List[str]:
    """Return unique items while preserving order."""
    seen: Set[str] = set()
    ordered: List[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            ordered.append(item)
    return ordered


def clean_text(text: str) -> str:
    """Trim scraped text and drop the parentheses wrapping group labels.

    "(noun)" -> "noun". Only the outer edges are touched.
    """
    if not text:
        return ""
    return text.strip().rstrip(")").lstrip("(")


def _clean_value(text: str) -> str:
    """Strip control characters that can render as odd glyphs."""
    if not isinstance(text, str):
        return text
    return "".join(ch for ch in text if (ch == "\n" or ch == "\t" or ord(ch) >= 32))


def sanitize_filename(name: str) -> str:
    """Sanitize a string for use as a filename.

    Replaces invalid characters with underscores.
    """
    return re.sub(r'[/\\:*?"<>|]', '_', name)


def ensure_dir(path: Path) -> None:
    """Create directory if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
