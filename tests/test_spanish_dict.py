"""Tests for SpanishDict section handlers."""

from visual_vocab.schema.base import GroupedDefinition, GroupedDefinitionWithExamples, TranslatedExample
from visual_vocab.spider.spanish_dict import SpanishDict, translate_url


def _neodict_block(definition, example, translation):
    return (
        "<div>"
        f'<a lang="en" href="/translate/x">{definition}</a>'
        f'<div><span lang="es">{example}</span><span lang="en">{translation}</span></div>'
        "</div>"
    )


def _neodict_group(label, blocks):
    return (
        '<div lang="es">'
        f'<div lang="en"><span>1.</span><span>{label}</span></div>'
        f"<div>{''.join(blocks)}</div>"
        "</div>"
    )


def _harrap_group(header, parts):
    return (
        "<div>"
        f"<div>{''.join(f'<span>{h}</span>' for h in header)}</div>"
        f"<div><div>{''.join(parts)}</div></div>"
        "</div>"
    )


def _harrap_examples(pairs):
    blocks = []
    for pair in pairs:
        blocks.append("<div>" + "".join(f"<span>{p}</span>" for p in pair) + "</div>")
    return f"<div>{''.join(blocks)}</div>"


def _page(*sections):
    body = "".join(f'<div id="{section_id}">{content}</div>' for section_id, content in sections)
    return f'<html><body><div id="main-container-video">{body}</div></body></html>'


def _neodict(groups):
    return ("dictionary-neodict-es", "".join(groups))


def _harrap(groups):
    return ("dictionary-neoharrap-es", f"<div><div><div>heading</div><div>{''.join(groups)}</div></div></div>")


def _parse(html):
    return SpanishDict(client=object()).parse("luz", html)


class TestNeodict:
    """Tests for the neodict section."""

    def test_definitions_with_examples(self):
        html = _page(_neodict([
            _neodict_group("(feminine noun)", [
                _neodict_block("light", "La luz es bonita.", "The light is pretty."),
                _neodict_block("electricity", "Se fue la luz.", "The power went out."),
            ]),
        ]))
        entry = _parse(html)
        assert entry.word == "luz"
        assert entry.definitions == [
            GroupedDefinitionWithExamples(
                group="feminine noun",
                text="light",
                examples=[TranslatedExample("La luz es bonita.", "The light is pretty.")],
            ),
            GroupedDefinitionWithExamples(
                group="feminine noun",
                text="electricity",
                examples=[TranslatedExample("Se fue la luz.", "The power went out.")],
            ),
        ]

    def test_examples_are_read_per_block(self):
        html = _page(_neodict([
            _neodict_group("noun", [
                _neodict_block("light", "uno", "one"),
                _neodict_block("lamp", "dos", "two"),
            ]),
        ]))
        examples = [d.examples[0].text for d in _parse(html).definitions]
        assert examples == ["uno", "dos"]

    def test_block_without_definition_link_is_skipped(self):
        html = _page(_neodict([
            _neodict_group("noun", [
                '<div><span lang="es">sin enlace</span></div>',
                _neodict_block("light", "La luz.", "The light."),
            ]),
        ]))
        assert [d.text for d in _parse(html).definitions] == ["light"]

    def test_missing_example_reads_as_empty(self):
        html = _page(_neodict([
            _neodict_group("noun", ['<div><a lang="en">light</a></div>']),
        ]))
        (definition,) = _parse(html).definitions
        assert definition.examples == [TranslatedExample("", "")]


class TestNeoharrap:
    """Tests for the neoharrap section."""

    def test_definition_with_examples(self):
        group = _harrap_group(
            ["a", "b", "(noun)"],
            ["<span>1</span>", "<span>light</span>", _harrap_examples([("luz del día", "-", "daylight")])],
        )
        (definition,) = _parse(_page(_harrap([group]))).definitions
        assert definition == GroupedDefinitionWithExamples(
            group="noun",
            text="light",
            examples=[TranslatedExample("luz del día", "daylight")],
        )

    def test_malformed_example_blocks_are_skipped(self):
        group = _harrap_group(
            ["a", "b", "noun"],
            [
                "<span>1</span>",
                "<span>light</span>",
                _harrap_examples([("only", "two"), ("luz del día", "-", "daylight")]),
            ],
        )
        (definition,) = _parse(_page(_harrap([group]))).definitions
        assert definition.examples == [TranslatedExample("luz del día", "daylight")]

    def test_unexpected_part_count_gives_empty_text(self):
        group = _harrap_group(
            ["a", "b", "noun"],
            ["<span>light</span>", _harrap_examples([("luz", "-", "light")])],
        )
        (definition,) = _parse(_page(_harrap([group]))).definitions
        assert definition.text == ""
        assert definition.examples == [TranslatedExample("luz", "light")]

    def test_no_valid_examples_gives_grouped_definition(self):
        group = _harrap_group(
            ["a", "b", "noun"],
            ["<span>1</span>", "<span>light</span>", _harrap_examples([("only", "two")])],
        )
        (definition,) = _parse(_page(_harrap([group]))).definitions
        assert definition == GroupedDefinition(group="noun", text="light")

    def test_empty_examples_node_skips_group(self):
        empty = _harrap_group(["a", "b", "noun"], ["<span>1</span>", "<span>light</span>", "<div></div>"])
        good = _harrap_group(
            ["a", "b", "verb"],
            ["<span>2</span>", "<span>to light</span>", _harrap_examples([("encender", "-", "to turn on")])],
        )
        definitions = _parse(_page(_harrap([empty, good]))).definitions
        assert [d.text for d in definitions] == ["to light"]

    def test_group_without_label_is_skipped_and_siblings_survive(self):
        broken = _harrap_group(["a", "b"], ["<span>1</span>", "<span>broken</span>", "<div></div>"])
        good = _harrap_group(
            ["a", "b", "verb"],
            ["<span>2</span>", "<span>to light</span>", _harrap_examples([("encender", "-", "to turn on")])],
        )
        definitions = _parse(_page(_harrap([broken, good]))).definitions
        assert [(d.group, d.text) for d in definitions] == [("verb", "to light")]


class TestSpanishDict:
    """Tests for page-level parsing."""

    def test_sections_combined_in_page_order(self):
        html = _page(
            _neodict([_neodict_group("noun", [_neodict_block("light", "La luz.", "The light.")])]),
            _harrap([_harrap_group(
                ["a", "b", "noun"],
                ["<span>1</span>", "<span>lamp</span>", _harrap_examples([("una luz", "-", "a lamp")])],
            )]),
        )
        assert [d.text for d in _parse(html).definitions] == ["light", "lamp"]

    def test_unknown_section_is_ignored(self):
        html = _page(
            ("dictionary-something-new", "<div lang='es'><div lang='en'><span>x</span></div></div>"),
            _neodict([_neodict_group("noun", [_neodict_block("light", "La luz.", "The light.")])]),
        )
        assert [d.text for d in _parse(html).definitions] == ["light"]

    def test_empty_page(self):
        assert _parse("<html><body>no results</body></html>").definitions == []

    def test_lookup_fetches_translate_page(self):
        class TextClient:
            def __init__(self):
                self.urls = []

            def get_text(self, url, params=None):
                self.urls.append(url)
                return _page(_neodict([_neodict_group("noun", [_neodict_block("light", "La luz.", "The light.")])]))

        client = TextClient()
        entry = SpanishDict(client).lookup("la luz")
        assert client.urls == ["https://www.spanishdict.com/translate/la+luz"]
        assert entry.word == "la luz"
        assert len(entry.definitions) == 1


def test_translate_url_escapes_words():
    assert translate_url("niño") == "https://www.spanishdict.com/translate/ni%C3%B1o"
