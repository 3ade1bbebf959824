"""SpanishDict translation page scraping.

The translate page carries one container per dictionary source, told apart
only by element id. Neither source exposes stable classes or data attributes,
so each is read by its own section handler that relies on ``lang``
attributes (neodict) or on child positions (neoharrap). When the markup
drifts, the affected group or definition is skipped; only the handler for
that section needs editing.
"""

from typing import Dict, Iterable, List, Optional, Sequence
from urllib.parse import quote_plus

from bs4 import BeautifulSoup  # type: ignore
from bs4.element import Tag  # type: ignore

from visual_vocab.common.utils import clean_text
from visual_vocab.schema.base import (
    DictionaryDefinition,
    DictionaryEntry,
    DictionaryExample,
    GroupedDefinition,
    GroupedDefinitionWithExamples,
    TranslatedExample,
)
from visual_vocab.spider.client import HttpClient, get_client


TRANSLATE_URL = "https://www.spanishdict.com/translate/"
CONTAINER_SELECTOR = "#main-container-video"
SECTION_SELECTOR = "div[id^=dictionary]"

LANG_EN = "en"
LANG_ES = "es"


def translate_url(word: str) -> str:
    """Translate page URL, form-encoded like the site's own search box."""
    return TRANSLATE_URL + quote_plus(word)


def element_children(tag: Optional[Tag]) -> List[Tag]:
    """Child elements only; whitespace and comment nodes are ignored."""
    if tag is None:
        return []
    return [c for c in tag.children if isinstance(c, Tag)]


def _nth(items: Sequence[Tag], n: int) -> Optional[Tag]:
    if -len(items) <= n < len(items):
        return items[n]
    return None


def text_of(tag: Optional[Tag]) -> str:
    if tag is None:
        return ""
    return clean_text(tag.get_text())


class DictionarySection:
    """Strategy for one dictionary container on the translate page."""

    section_id: str = ""

    def extract(self, section: Tag) -> List[DictionaryDefinition]:
        raise NotImplementedError


class NeodictSection(DictionarySection):
    """SpanishDict's own dictionary.

    Layout: a header ``div[lang^=en]`` per part of speech whose last span is
    the group label, followed by a sibling whose children are definition
    blocks. Each block holds the English definition link, one Spanish example
    and its English translation, all marked with ``lang``.
    """

    section_id = "dictionary-neodict-es"

    GROUP_SELECTOR = f"div[lang] div[lang^={LANG_EN}]"
    GROUP_LABEL_SELECTOR = "span:last-child"
    DEFINITION_SELECTOR = f"a[lang={LANG_EN}]"
    EXAMPLE_SELECTOR = f"span[lang={LANG_ES}]"
    TRANSLATION_SELECTOR = f"span[lang={LANG_EN}]"

    def _group_label(self, header: Tag) -> Optional[str]:
        label = text_of(header.select_one(self.GROUP_LABEL_SELECTOR))
        if label:
            return label
        # no span: last child that has any text
        for child in reversed(element_children(header)):
            label = text_of(child)
            if label:
                return label
        return None

    def _definition(self, block: Tag, group: str) -> Optional[DictionaryDefinition]:
        link = block.select_one(self.DEFINITION_SELECTOR)
        if link is None:
            return None
        example = TranslatedExample(
            text=text_of(block.select_one(self.EXAMPLE_SELECTOR)),
            translation=text_of(block.select_one(self.TRANSLATION_SELECTOR)),
        )
        return GroupedDefinitionWithExamples(group=group, text=text_of(link), examples=[example])

    def extract(self, section: Tag) -> List[DictionaryDefinition]:
        definitions: List[DictionaryDefinition] = []
        for header in section.select(self.GROUP_SELECTOR):
            group = self._group_label(header)
            body = header.find_next_sibling()
            if group is None or body is None:
                continue
            for block in element_children(body):
                definition = self._definition(block, group)
                if definition is not None:
                    definitions.append(definition)
        return definitions


class NeoharrapSection(DictionarySection):
    """Collins/Harrap dictionary, readable only by child position.

    group
      [0] header        -> [2] group label
      [1] wrapper
            [0] content -> exactly 3 parts: _, definition, examples
    examples
      each example     -> exactly 3 parts: text, _, translation
    """

    section_id = "dictionary-neoharrap-es"

    GROUP_SELECTOR = ":scope > div > div > div:nth-child(2) > div"
    HEADER_CHILD = 0
    LABEL_CHILD = 2
    WRAPPER_CHILD = 1
    CONTENT_PARTS = 3
    DEFINITION_PART = 1
    EXAMPLE_PARTS = 3
    EXAMPLE_TEXT_PART = 0
    EXAMPLE_TRANSLATION_PART = 2

    def _examples(self, container: Tag) -> List[DictionaryExample]:
        examples: List[DictionaryExample] = []
        for block in element_children(container):
            parts = element_children(block)
            if len(parts) != self.EXAMPLE_PARTS:
                continue
            examples.append(TranslatedExample(
                text=text_of(parts[self.EXAMPLE_TEXT_PART]),
                translation=text_of(parts[self.EXAMPLE_TRANSLATION_PART]),
            ))
        return examples

    def _definition(self, group_node: Tag) -> Optional[DictionaryDefinition]:
        children = element_children(group_node)
        header = _nth(children, self.HEADER_CHILD)
        label = _nth(element_children(header), self.LABEL_CHILD)
        wrapper = _nth(children, self.WRAPPER_CHILD)
        content = _nth(element_children(wrapper), 0)
        parts = element_children(content)
        if label is None or not parts:
            return None

        group = text_of(label)
        text = text_of(parts[self.DEFINITION_PART]) if len(parts) == self.CONTENT_PARTS else ""
        # an examples node with no children at all marks a placeholder group
        if next(iter(parts[-1].children), None) is None:
            return None
        examples = self._examples(parts[-1])
        if not examples:
            return GroupedDefinition(group=group, text=text)
        return GroupedDefinitionWithExamples(group=group, text=text, examples=examples)

    def extract(self, section: Tag) -> List[DictionaryDefinition]:
        definitions: List[DictionaryDefinition] = []
        for group_node in section.select(self.GROUP_SELECTOR):
            definition = self._definition(group_node)
            if definition is not None:
                definitions.append(definition)
        return definitions


DEFAULT_SECTIONS: Sequence[DictionarySection] = (NeodictSection(), NeoharrapSection())


class SpanishDict:
    def __init__(
        self,
        client: Optional[HttpClient] = None,
        sections: Optional[Iterable[DictionarySection]] = None,
        verbose: bool = False,
    ) -> None:
        self.client = client or get_client()
        self.sections: Dict[str, DictionarySection] = {
            s.section_id: s for s in (sections if sections is not None else DEFAULT_SECTIONS)
        }
        self.verbose = verbose

    def parse(self, word: str, html: str) -> DictionaryEntry:
        """Recover definitions from a translate page."""
        soup = BeautifulSoup(html, "html.parser")
        root = soup.select_one(CONTAINER_SELECTOR) or soup
        definitions: List[DictionaryDefinition] = []
        for section in root.select(SECTION_SELECTOR):
            section_id = section.get("id", "")
            handler = self.sections.get(section_id)
            if handler is None:
                if self.verbose:
                    print(f"[spanishdict] [info] unknown dictionary section: {section_id}")
                continue
            definitions.extend(handler.extract(section))
        return DictionaryEntry(word=word, definitions=definitions)

    def lookup(self, word: str) -> DictionaryEntry:
        html = self.client.get_text(translate_url(word))
        entry = self.parse(word, html)
        if self.verbose:
            print(f"[spanishdict] [fetch] {word!r}: {len(entry.definitions)} definitions")
        return entry
