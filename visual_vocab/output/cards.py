"""Markdown rendering of visual flashcards.

Each card is written as ``<n>.<word>.md`` next to its image file, and all
cards are laid out in ``-output.md`` as printable pages of rows x columns
tables: a front page of images and words followed by a back page with the
definitions and example sentences in the same cell positions.
"""

from pathlib import Path
from typing import List, Sequence, Tuple
from urllib.parse import quote

from visual_vocab.common.utils import _clean_value, ensure_dir, sanitize_filename
from visual_vocab.schema.base import FRONT_BACK_DIVIDER, EnrichmentResult, VisualFlashcard


OUTPUT_FILENAME = "-output.md"

_IMAGE_SIGNATURES: Sequence[Tuple[bytes, str]] = (
    (b"\x89PNG\r\n\x1a\n", ".png"),
    (b"\xff\xd8\xff", ".jpg"),
    (b"GIF87a", ".gif"),
    (b"GIF89a", ".gif"),
    (b"BM", ".bmp"),
)


def image_extension(data: bytes) -> str:
    """Guess a file extension from the image's magic bytes."""
    for signature, ext in _IMAGE_SIGNATURES:
        if data.startswith(signature):
            return ext
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return ".webp"
    head = data[:256].lstrip().lower()
    if head.startswith(b"<svg") or (head.startswith(b"<?xml") and b"<svg" in head):
        return ".svg"
    return ".img"


def _cell(text: str) -> str:
    """Make text safe inside a markdown table cell."""
    return _clean_value(text).replace("|", "\\|").replace("\n", "<br>")


def write_visual_card_md(out_dir: Path, file_base: str, card: VisualFlashcard) -> Tuple[Path, str]:
    """Write one card and its image. Returns (markdown path, image file name)."""
    image_name = f"{file_base}{image_extension(card.image)}"
    (out_dir / image_name).write_bytes(card.image)

    lines = [
        f"# {_clean_value(card.word)}",
        "",
        f"![{_cell(card.word)}]({quote(image_name)})",
        "",
        FRONT_BACK_DIVIDER,
        "",
        f"**{_clean_value(card.definition)}**",
        "",
        f"> {_clean_value(card.example)}",
        "",
    ]
    md_path = out_dir / f"{file_base}.md"
    md_path.write_text("\n".join(lines), encoding="utf-8")
    return md_path, image_name


def _table(cells: List[str], columns: int) -> List[str]:
    rows = [cells[i:i + columns] for i in range(0, len(cells), columns)]
    rows[-1] = rows[-1] + [""] * (columns - len(rows[-1]))
    lines = ["| " + " | ".join(rows[0]) + " |", "|" + "---|" * columns]
    lines.extend("| " + " | ".join(row) + " |" for row in rows[1:])
    return lines


def render_layout(placed: Sequence[Tuple[VisualFlashcard, str]], rows: int, columns: int) -> str:
    """Lay cards out as alternating front/back pages of ``rows`` x ``columns``."""
    per_page = rows * columns
    parts: List[str] = []
    for page_no, start in enumerate(range(0, len(placed), per_page), start=1):
        chunk = placed[start:start + per_page]
        front = [f"![{_cell(card.word)}]({quote(image)})<br>**{_cell(card.word)}**" for card, image in chunk]
        back = [f"{_cell(card.definition)}<br>*{_cell(card.example)}*" for card, _ in chunk]
        parts.append(f"## Page {page_no} (front)")
        parts.append("\n".join(_table(front, columns)))
        parts.append(f"## Page {page_no} (back)")
        parts.append("\n".join(_table(back, columns)))
    return "\n\n".join(parts)


def write_visual_cards(
    out_dir: Path,
    results: Sequence[EnrichmentResult],
    rows: int = 6,
    columns: int = 3,
    verbose: bool = False,
) -> int:
    """Write every successful card plus the combined -output.md.

    Failed words are listed at the end of -output.md with their reason.
    Returns the number of cards written.
    """
    ensure_dir(out_dir)
    placed: List[Tuple[VisualFlashcard, str]] = []
    skipped: List[EnrichmentResult] = []
    for position, result in enumerate(results, start=1):
        if result.card is None:
            skipped.append(result)
            continue
        file_base = sanitize_filename(f"{position}.{result.card.word}")
        md_path, image_name = write_visual_card_md(out_dir, file_base, result.card)
        placed.append((result.card, image_name))
        if verbose:
            print(f"[file] Created card: {md_path.name}")

    content = render_layout(placed, rows, columns)
    if skipped:
        skipped_lines = ["## Skipped", ""]
        skipped_lines.extend(f"- {_clean_value(r.word)}: {r.stage.value}: {r.reason}" for r in skipped)
        content = (content + "\n\n" if content else "") + "\n".join(skipped_lines)
    output_md = out_dir / OUTPUT_FILENAME
    output_md.write_text(content + ("\n" if content else ""), encoding="utf-8")
    if verbose:
        print(f"[file] Wrote {output_md.name} with {len(placed)} cards, {len(skipped)} skipped")
    return len(placed)
