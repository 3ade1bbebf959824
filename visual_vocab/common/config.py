"""Pipeline configuration.

A run can be configured by a -config.json file, for example:

    {
      "image_pool_size": 10,
      "fallback_attempts": 2,
      "rows": 6,
      "columns": 3,
      "output_dir": "out"
    }

Any field can also be overridden from the environment (or a .env file) with
VISUAL_VOCAB_<FIELD> in upper case, e.g. VISUAL_VOCAB_IMAGE_POOL_SIZE=5.
Missing fields keep their defaults; unknown keys are ignored.
"""

import json
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from visual_vocab.common.utils import _load_env_file


CONFIG_FILENAME = "-config.json"
ENV_PREFIX = "VISUAL_VOCAB_"

DEFAULT_MODEL_NAME = "sentence-transformers/all-MiniLM-L12-v2"

# Field -> (expected type, None allowed); values come from JSON and env as-is
_FIELD_KINDS = {
    "image_pool_size": (int, False),
    "fallback_attempts": (int, False),
    "keyword_count": (int, False),
    "model_name": (str, False),
    "request_timeout": (float, False),
    "max_attempts": (int, False),
    "retry_backoff": (float, False),
    "per_host_limit": (int, False),
    "run_deadline": (float, True),
    "rows": (int, False),
    "columns": (int, False),
    "seed": (int, True),
    "output_dir": (str, False),
}


def _check_kind(name: str, value: Any, kind: type, optional: bool) -> None:
    if value is None and optional:
        return
    if isinstance(value, bool):
        ok = False
    elif kind is float:
        ok = isinstance(value, (int, float))
    else:
        ok = isinstance(value, kind)
    if not ok:
        expected = f"{kind.__name__} or null" if optional else kind.__name__
        raise ValueError(f"{name} must be {expected}, got {value!r}")


@dataclass
class PipelineConfig:
    """Configuration for one enrichment run."""
    image_pool_size: int = 10  # Image candidates fetched per word
    fallback_attempts: int = 2  # Keyword lookups tried after an empty dictionary page
    keyword_count: int = 3  # Keywords extracted from a phrase for the fallback
    model_name: str = DEFAULT_MODEL_NAME
    request_timeout: float = 20.0  # Seconds, per HTTP request
    max_attempts: int = 3  # HTTP attempts on transport errors
    retry_backoff: float = 1.0  # Base delay for exponential backoff, seconds
    per_host_limit: int = 8  # Concurrent requests per remote host
    run_deadline: Optional[float] = None  # Seconds for the whole batch, None = unbounded
    rows: int = 6
    columns: int = 3
    seed: Optional[int] = None  # Seed for image candidate shuffling
    output_dir: str = "out"

    def __post_init__(self):
        for name, (kind, optional) in _FIELD_KINDS.items():
            _check_kind(name, getattr(self, name), kind, optional)
        if self.image_pool_size < 1:
            raise ValueError(f"image_pool_size must be >= 1, got {self.image_pool_size}")
        if self.fallback_attempts < 0:
            raise ValueError(f"fallback_attempts must be >= 0, got {self.fallback_attempts}")
        if self.keyword_count < 1:
            raise ValueError(f"keyword_count must be >= 1, got {self.keyword_count}")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.per_host_limit < 1:
            raise ValueError(f"per_host_limit must be >= 1, got {self.per_host_limit}")
        if self.request_timeout <= 0:
            raise ValueError(f"request_timeout must be > 0, got {self.request_timeout}")
        if self.retry_backoff < 0:
            raise ValueError(f"retry_backoff must be >= 0, got {self.retry_backoff}")
        if self.run_deadline is not None and self.run_deadline <= 0:
            raise ValueError(f"run_deadline must be > 0, got {self.run_deadline}")
        if self.rows < 1 or self.columns < 1:
            raise ValueError(f"rows and columns must be >= 1, got {self.rows}x{self.columns}")


def _coerce(raw: str, current: Any, name: str) -> Any:
    """Convert an environment string to the type of the field's default."""
    if raw.strip().lower() in ("", "none", "null"):
        return None
    if isinstance(current, bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(current, int) or name == "seed":
        return int(raw)
    if isinstance(current, float) or name == "run_deadline":
        return float(raw)
    return raw


def _env_overrides(defaults: PipelineConfig) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for f in fields(PipelineConfig):
        raw = os.environ.get(ENV_PREFIX + f.name.upper())
        if raw is None:
            continue
        try:
            overrides[f.name] = _coerce(raw, getattr(defaults, f.name), f.name)
        except ValueError as e:
            raise ValueError(f"Invalid {ENV_PREFIX}{f.name.upper()}={raw!r}: {e}") from e
    return overrides


def load_config(path: Optional[Path] = None, **overrides: Any) -> PipelineConfig:
    """Build a PipelineConfig from defaults, a -config.json file, env, then overrides.

    Later sources win. ``overrides`` with a value of None are ignored so CLI
    flags that were not given do not clobber the file.
    """
    _load_env_file()
    data: Dict[str, Any] = {}
    if path is not None and path.exists():
        with open(path, encoding="utf-8") as f:
            loaded = json.load(f)
        if not isinstance(loaded, dict):
            raise ValueError(f"{path} must contain a JSON object")
        data.update(loaded)

    known = {f.name for f in fields(PipelineConfig)}
    data = {k: v for k, v in data.items() if k in known}
    data.update(_env_overrides(PipelineConfig()))
    data.update({k: v for k, v in overrides.items() if k in known and v is not None})
    return PipelineConfig(**data)


def write_config(folder: Path, config: PipelineConfig) -> Path:
    """Write a configuration file to a folder."""
    config_path = folder / CONFIG_FILENAME
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(asdict(config), f, indent=2, ensure_ascii=False)
    return config_path


def get_output_dir(base: Path, config: PipelineConfig) -> Path:
    """Get the resolved output directory path from config."""
    return (base / config.output_dir).resolve()
