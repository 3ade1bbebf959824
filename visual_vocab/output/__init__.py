"""Output generation: visual enrichment and markdown card rendering."""

from visual_vocab.output.visual import (
    VisualVocabEnricher,
    lookup_with_fallback,
    collect_examples,
    pick_image,
    successful_cards,
)
from visual_vocab.output.cards import (
    OUTPUT_FILENAME,
    image_extension,
    write_visual_card_md,
    render_layout,
    write_visual_cards,
)

__all__ = [
    # visual
    "VisualVocabEnricher",
    "lookup_with_fallback",
    "collect_examples",
    "pick_image",
    "successful_cards",
    # cards
    "OUTPUT_FILENAME",
    "image_extension",
    "write_visual_card_md",
    "render_layout",
    "write_visual_cards",
]
