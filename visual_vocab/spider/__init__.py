"""Remote fetchers: shared HTTP client, Google Images, SpanishDict."""

from visual_vocab.spider.client import (
    USER_AGENT,
    HttpClient,
    get_client,
)
from visual_vocab.spider.google_image import (
    GoogleImageSearch,
    parse_image_results,
    parse_image_entry,
    extract_payload,
    first_value,
)
from visual_vocab.spider.spanish_dict import (
    SpanishDict,
    DictionarySection,
    NeodictSection,
    NeoharrapSection,
    translate_url,
)

__all__ = [
    # client
    "USER_AGENT",
    "HttpClient",
    "get_client",
    # google images
    "GoogleImageSearch",
    "parse_image_results",
    "parse_image_entry",
    "extract_payload",
    "first_value",
    # spanishdict
    "SpanishDict",
    "DictionarySection",
    "NeodictSection",
    "NeoharrapSection",
    "translate_url",
]
