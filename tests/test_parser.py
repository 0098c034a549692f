"""Tests for the inline markdown tokenizer."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from runmark.formatting.ir import FormatKind, FormattingMatch, StyledRun
from runmark.formatting.parser import (
    InlineParser,
    earliest_match,
    find_next_match,
    parse_inline,
    plain_text,
    to_markdown,
)


def bold(text: str) -> StyledRun:
    return StyledRun(FormatKind.BOLD, text)


def italic(text: str) -> StyledRun:
    return StyledRun(FormatKind.ITALIC, text)


def plain(text: str) -> StyledRun:
    return StyledRun.plain(text)


class TestBasicFormatting:
    """Tests for single formatting spans."""

    def test_plain_text(self, parser: InlineParser):
        """Test text without markers becomes one plain run."""
        runs = parser.parse("Hello, world!")

        assert runs == [plain("Hello, world!")]
        assert runs[0].is_plain

    def test_bold_asterisks(self, parser: InlineParser):
        """Test **bold** text."""
        assert parser.parse("**bold**") == [bold("bold")]

    def test_bold_underscores(self, parser: InlineParser):
        """Test __bold__ text."""
        assert parser.parse("a __b__ c") == [plain("a "), bold("b"), plain(" c")]

    def test_italic_asterisk(self, parser: InlineParser):
        """Test *italic* between plain text."""
        runs = parser.parse("plain *italic* more")

        assert runs == [plain("plain "), italic("italic"), plain(" more")]

    def test_italic_underscore(self, parser: InlineParser):
        """Test _italic_ text."""
        assert parser.parse("_it_") == [italic("it")]

    def test_strikethrough(self, parser: InlineParser):
        """Test ~~strikethrough~~ text."""
        runs = parser.parse("was ~~wrong~~")

        assert runs == [plain("was "), StyledRun(FormatKind.STRIKETHROUGH, "wrong")]

    def test_underline(self, parser: InlineParser):
        """Test <u>underline</u> text."""
        runs = parser.parse("<u>note</u>!")

        assert runs == [StyledRun(FormatKind.UNDERLINE, "note"), plain("!")]

    def test_inline_code_then_bold(self, parser: InlineParser):
        """Test inline code followed by bold text."""
        runs = parser.parse("`code` and **bold**")

        assert runs == [
            StyledRun(FormatKind.INLINE_CODE, "code"),
            plain(" and "),
            bold("bold"),
        ]

    def test_link(self, parser: InlineParser):
        """Test [text](url) produces a link run."""
        runs = parser.parse("a [link](https://x.test) b")

        assert runs == [
            plain("a "),
            StyledRun.link("link", "https://x.test"),
            plain(" b"),
        ]
        assert runs[1].is_link
        assert runs[1].url == "https://x.test"

    def test_multiline_content(self, parser: InlineParser):
        """Test spans may cross newlines."""
        assert parser.parse("**multi\nline**") == [bold("multi\nline")]


class TestNoNesting:
    """Captured content is never re-scanned."""

    def test_italic_inside_bold_is_literal(self, parser: InlineParser):
        """Test **a *b* c** is a single bold run."""
        assert parser.parse("**a *b* c**") == [bold("a *b* c")]

    def test_italic_underscore_inside_bold(self, parser: InlineParser):
        """Test **_x_** keeps the underscores as content."""
        assert parser.parse("**_x_**") == [bold("_x_")]

    def test_earliest_start_wins(self, parser: InlineParser):
        """Test *_x_* is italic with literal underscores."""
        assert parser.parse("*_x_*") == [italic("_x_")]
        assert parser.parse("_*x*_") == [italic("*x*")]

    def test_angle_bracket_inside_underline(self, parser: InlineParser):
        """Test underline content runs to the first closing tag."""
        assert parser.parse("<u>a<b</u>") == [
            StyledRun(FormatKind.UNDERLINE, "a<b")
        ]

    def test_markers_inside_code(self, parser: InlineParser):
        """Test markers inside inline code stay literal."""
        runs = parser.parse("`**x**`")

        assert runs == [StyledRun(FormatKind.INLINE_CODE, "**x**")]

    def test_markers_inside_link_label(self, parser: InlineParser):
        """Test a link starting first captures bold markers in its label."""
        runs = parser.parse("[**x**](https://x.test)")

        assert runs == [StyledRun.link("**x**", "https://x.test")]


class TestMalformedInput:
    """Unmatched markers degrade to plain text."""

    def test_unterminated_bold(self, parser: InlineParser):
        """Test **x stays plain."""
        assert parser.parse("**x") == [plain("**x")]

    def test_unterminated_bold_before_italic(self, parser: InlineParser):
        """Test an unclosed ** does not hide a later italic span."""
        assert parser.parse("**a *b*") == [plain("**a "), italic("b")]

    def test_triple_asterisks(self, parser: InlineParser):
        """Test the stray leading asterisk is kept as plain text."""
        assert parser.parse("***x**") == [plain("*"), bold("x")]

    @pytest.mark.parametrize(
        "text",
        ["****", "[]()", "``", "~~~~", "<u></u>", "*", "_", "[a]()", "[a] (b)", "**"],
    )
    def test_degenerate_inputs_stay_plain(self, parser: InlineParser, text: str):
        """Test marker-only and empty-content inputs terminate as plain text."""
        assert parser.parse(text) == [plain(text)]

    def test_empty_string(self, parser: InlineParser):
        """Test empty input produces no runs."""
        assert parser.parse("") == []

    @pytest.mark.parametrize("text", ["*" * 1001, "_" * 1000, "[" * 1000 + "]"])
    def test_long_run_of_markers_terminates(self, parser: InlineParser, text: str):
        """Test long marker-only strings come back as one plain run."""
        assert parser.parse(text) == [plain(text)]

    def test_adjacent_code_ticks(self, parser: InlineParser):
        """Test an empty tick pair does not swallow the following span."""
        runs = parser.parse("``x`")

        assert runs == [plain("`"), StyledRun(FormatKind.INLINE_CODE, "x")]


class TestUnicode:
    """Offsets use code points consistently."""

    def test_multibyte_text_around_spans(self, parser: InlineParser):
        """Test accented and emoji characters do not shift span boundaries."""
        runs = parser.parse("héllo **wörld** 🎉 *ok*")

        assert runs == [
            plain("héllo "),
            bold("wörld"),
            plain(" 🎉 "),
            italic("ok"),
        ]

    def test_link_with_non_ascii_label(self, parser: InlineParser):
        """Test non-ASCII link labels."""
        runs = parser.parse("→ [日本語](https://ja.test)")

        assert runs == [plain("→ "), StyledRun.link("日本語", "https://ja.test")]


class TestMatchSelection:
    """Tests for candidate selection and precedence."""

    def test_earliest_start_is_selected(self):
        """Test the closest candidate wins regardless of order."""
        later = FormattingMatch(FormatKind.BOLD, "a", start=5, full_length=5)
        sooner = FormattingMatch(FormatKind.LINK, "b", start=1, full_length=8, url="u")

        assert earliest_match([later, None, sooner]) is sooner

    def test_tie_goes_to_first_candidate(self):
        """Test equal offsets keep the earlier candidate in precedence order."""
        first = FormattingMatch(FormatKind.BOLD, "a", start=0, full_length=5)
        second = FormattingMatch(FormatKind.ITALIC, "a", start=0, full_length=3)

        assert earliest_match([first, second]) is first
        assert earliest_match([second, first]) is second

    def test_no_candidates(self):
        """Test all-None candidates produce no match."""
        assert earliest_match([None, None]) is None

    def test_find_next_match_with_custom_matchers(self):
        """Test matchers are consulted in the given order."""
        matchers = (
            lambda text: FormattingMatch(FormatKind.STRIKETHROUGH, "x", 0, 5),
            lambda text: FormattingMatch(FormatKind.UNDERLINE, "x", 0, 8),
        )

        match = find_next_match("~~x~~", matchers)

        assert match is not None
        assert match.kind is FormatKind.STRIKETHROUGH

    def test_match_span_includes_markers(self):
        """Test full_length covers both markers and the content."""
        match = find_next_match("say **hi** now")

        assert match is not None
        assert match.start == 4
        assert match.full_length == len("**hi**")
        assert match.full_length >= 2 * len("**") + len(match.content)
        assert match.end == 10

    def test_link_match_captures_url(self):
        """Test link matches carry both the label and the url."""
        match = find_next_match("x [a](b) y")

        assert match is not None
        assert match.kind is FormatKind.LINK
        assert match.content == "a"
        assert match.url == "b"
        assert match.to_run() == StyledRun.link("a", "b")


class TestConversions:
    """Tests for plain text and markdown output."""

    def test_plain_text_strips_markers(self, sample_message: str):
        """Test visible text has every marker removed."""
        text = plain_text(parse_inline(sample_message))

        assert text == (
            "Run pip install runmark, then restart the app. "
            "See the docs for details; old flag is gone and this matters."
        )

    def test_to_markdown_reparses_identically(self, sample_message: str):
        """Test markdown output parses back to the same runs."""
        runs = parse_inline(sample_message)

        assert parse_inline(to_markdown(runs)) == runs

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("_i_**b**", "*i*__b__"),
            ("_a*b_", "_a*b_"),
            ("__x*__ y", "__x*__ y"),
            ("**a_b** _c_", "**a_b** *c*"),
        ],
    )
    def test_to_markdown_picks_safe_emphasis_marker(self, text: str, expected: str):
        """Test underscore markers are used where asterisks would merge."""
        runs = parse_inline(text)
        markdown = to_markdown(runs)

        assert markdown == expected
        assert parse_inline(markdown) == runs

    def test_to_markdown_markers(self):
        """Test each kind is written with its own marker."""
        runs = [
            bold("b"),
            italic("i"),
            StyledRun(FormatKind.STRIKETHROUGH, "s"),
            StyledRun(FormatKind.UNDERLINE, "u"),
            StyledRun(FormatKind.INLINE_CODE, "c"),
            StyledRun.link("l", "https://l.test"),
            plain(" end"),
        ]

        assert to_markdown(runs) == "**b**_i_~~s~~<u>u</u>`c`[l](https://l.test) end"

    def test_parser_helpers(self, parser: InlineParser):
        """Test the parser's convenience methods."""
        runs = parser.parse("**Bold** and *italic* text.")

        assert parser.to_plain_text(runs) == "Bold and italic text."
        assert parser.to_markdown(runs) == "**Bold** and *italic* text."

    def test_str_is_visible_text(self):
        """Test str() of a run returns its text."""
        assert str(StyledRun.link("docs", "https://d.test")) == "docs"


class TestConcurrency:
    """The parser keeps no shared state."""

    def test_parallel_parsing(self, sample_message: str):
        """Test concurrent calls return the same result as a serial call."""
        expected = parse_inline(sample_message)

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(parse_inline, [sample_message] * 32))

        assert all(result == expected for result in results)
