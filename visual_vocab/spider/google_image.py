"""Google Images result scraping.

The results page has no API. Its render-time data sits in inline
``AF_initDataCallback({...});`` script calls written as JavaScript object
literals, so the payload is parsed with json5 and walked by position. Every
index below is a guess about the current page layout: when Google reshuffles
it, entries start dropping out instead of the search crashing.
"""

from typing import Any, List, Optional, Tuple

import json5
from bs4 import BeautifulSoup  # type: ignore

from visual_vocab.common.errors import PayloadMalformed, PayloadNotFound, VisualVocabError
from visual_vocab.schema.base import ImageCandidate
from visual_vocab.spider.client import HttpClient, get_client


SEARCH_URL = "https://www.google.com/search"

# Script selection: the image payload is the "ds:1" callback, never "ds:0"
CALLBACK_MARKER = "AF_initDataCallback"
PAYLOAD_MARKER = "ds:1"
EXCLUDED_MARKER = "ds:0"
PAYLOAD_PREFIX = "AF_initDataCallback("
PAYLOAD_SUFFIX = "});"

# Path from the parsed payload to the list of raw result entries
RESULTS_PATH: Tuple[Any, ...] = ("data", 56, 1, 0, 0, 1, 0)
# Inside a record's [1] array
THUMB_INDEX = 2
FULL_INDEX = 3
# Inside the source metadata array
SOURCE_URL_INDEX = 2
SOURCE_TITLE_INDEX = 3


def _at(node: Any, *path: Any) -> Any:
    """Follow a path of list indices / dict keys, None on the first miss."""
    for key in path:
        if isinstance(key, int) and isinstance(node, list):
            if not -len(node) <= key < len(node):
                return None
            node = node[key]
        elif isinstance(key, str) and isinstance(node, dict):
            if key not in node:
                return None
            node = node[key]
        else:
            return None
    return node


def first_value(obj: Any) -> Any:
    """Value under the first key of a dict, or None.

    Result entries wrap their record in a one-key object whose key is an
    opaque id that changes between entries, so it cannot be named.
    """
    if not isinstance(obj, dict) or not obj:
        return None
    return next(iter(obj.values()))


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _image_triple(node: Any) -> Optional[Tuple[str, int, int]]:
    """[url, height, width] -> (url, height, width)."""
    if not isinstance(node, list) or len(node) < 3:
        return None
    url, height, width = node[0], node[1], node[2]
    if not isinstance(url, str) or not _is_int(height) or not _is_int(width):
        return None
    return url, height, width


def _source_meta(items: Any) -> Optional[Tuple[str, str]]:
    """Find (page url, title) among the record's sibling arrays.

    The metadata is the first array inside the first object of ``items``
    holding a string that starts with "http"; its position varies.
    """
    if not isinstance(items, list):
        return None
    container = next((x for x in items if isinstance(x, dict)), None)
    if container is None:
        return None
    for value in container.values():
        if not isinstance(value, list):
            continue
        if not any(isinstance(x, str) and x.startswith("http") for x in value):
            continue
        url = _at(value, SOURCE_URL_INDEX)
        title = _at(value, SOURCE_TITLE_INDEX)
        if isinstance(url, str) and isinstance(title, str):
            return url, title
        return None
    return None


def parse_image_entry(entry: Any) -> Optional[ImageCandidate]:
    """Turn one raw result entry into an ImageCandidate, None if any step fails."""
    record = first_value(_at(entry, 0, 0))
    if record is None:
        return None
    thumb = _image_triple(_at(record, 1, THUMB_INDEX))
    full = _image_triple(_at(record, 1, FULL_INDEX))
    meta = _source_meta(_at(record, 1))
    if thumb is None or full is None or meta is None:
        return None
    thumb_url, thumb_height, thumb_width = thumb
    full_url, full_height, full_width = full
    page_url, title = meta
    return ImageCandidate(
        thumb_url=thumb_url,
        thumb_width=thumb_width,
        thumb_height=thumb_height,
        full_url=full_url,
        full_width=full_width,
        full_height=full_height,
        title=title,
        source_page_url=page_url,
    )


def extract_payload(html: str) -> str:
    """Return the object literal passed to the image-results callback."""
    soup = BeautifulSoup(html, "html.parser")
    for script in soup.find_all("script"):
        text = str(script.string or "")
        if CALLBACK_MARKER not in text or PAYLOAD_MARKER not in text or EXCLUDED_MARKER in text:
            continue
        start = text.find(PAYLOAD_PREFIX)
        if start == -1:
            continue
        end = text.find(PAYLOAD_SUFFIX, start)
        if end == -1:
            raise PayloadMalformed("image payload is not terminated")
        # keep the closing brace of the object literal
        return text[start + len(PAYLOAD_PREFIX):end + 1]
    raise PayloadNotFound("no image payload script on the results page")


def parse_image_results(html: str) -> List[ImageCandidate]:
    """Parse a results page into candidates, silently dropping broken entries."""
    payload = extract_payload(html)
    try:
        data = json5.loads(payload)
    except ValueError as e:
        raise PayloadMalformed(f"image payload is not a valid object literal: {e}") from e
    entries = _at(data, *RESULTS_PATH)
    if not isinstance(entries, list):
        raise PayloadMalformed("image payload has no result list at the expected path")
    candidates: List[ImageCandidate] = []
    for entry in entries:
        candidate = parse_image_entry(entry)
        if candidate is not None:
            candidates.append(candidate)
    return candidates


class GoogleImageSearch:
    def __init__(self, client: Optional[HttpClient] = None, verbose: bool = False) -> None:
        self.client = client or get_client()
        self.verbose = verbose

    def search(self, query: str, offset: int = 0) -> List[ImageCandidate]:
        """One results page starting at ``offset``."""
        params = {
            "tbm": "isch",
            "q": query,
            "start": offset,
            "ijn": offset // 100,
        }
        html = self.client.get_text(SEARCH_URL, params=params)
        candidates = parse_image_results(html)
        if self.verbose:
            print(f"[images] [fetch] {query!r} offset={offset}: {len(candidates)} results")
        return candidates

    def search_up_to(self, query: str, max_count: int) -> List[ImageCandidate]:
        """Collect at most ``max_count`` candidates across result pages.

        Stops early on an empty page or a failed page. A failure after some
        results were collected ends the search with what we have; a failure
        on the first page is raised.
        """
        results: List[ImageCandidate] = []
        offset = 0
        while len(results) < max_count:
            try:
                page = self.search(query, offset)
            except VisualVocabError as e:
                if not results:
                    raise
                if self.verbose:
                    print(f"[images] [warn] {query!r} stopped at offset {offset}: {e}")
                break
            if not page:
                break
            offset += len(page)
            results.extend(page)
        return results[:max_count]

    def download(self, candidate: ImageCandidate) -> bytes:
        """Full-resolution bytes, one attempt; callers move on to the next candidate."""
        return self.client.get_bytes(candidate.full_url, attempts=1)
