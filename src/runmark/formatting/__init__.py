"""Formatting utilities for parsing and rendering inline markup."""

from runmark.formatting.ir import (
    FormatKind,
    FormattingMatch,
    StyledRun,
)
from runmark.formatting.parser import (
    InlineParser,
    earliest_match,
    find_next_match,
    parse_inline,
    plain_text,
    to_markdown,
)
from runmark.formatting.render import RunTheme, render_markup, to_rich_text

__all__ = [
    "FormatKind",
    "FormattingMatch",
    "StyledRun",
    "InlineParser",
    "earliest_match",
    "find_next_match",
    "parse_inline",
    "plain_text",
    "to_markdown",
    "RunTheme",
    "render_markup",
    "to_rich_text",
]
