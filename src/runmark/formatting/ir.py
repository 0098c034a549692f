"""Intermediate Representation for inline-formatted text.

This module defines the data structures that bridge markdown-style inline
markup to renderer-specific styling. A parsed string becomes an ordered
list of StyledRun objects; each run carries exactly one FormatKind.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FormatKind(Enum):
    """Inline formatting kinds (exactly one per run, never combined)."""

    PLAIN = "plain"
    BOLD = "bold"
    ITALIC = "italic"
    STRIKETHROUGH = "strikethrough"
    UNDERLINE = "underline"
    INLINE_CODE = "inline_code"
    LINK = "link"


@dataclass(frozen=True)
class StyledRun:
    """A contiguous run of visible text with a single format kind.

    Attributes:
        kind: The format kind applied to the whole run
        text: The visible text (markers removed)
        url: Link target, set only for LINK runs
    """

    kind: FormatKind
    text: str
    url: Optional[str] = None

    @property
    def is_plain(self) -> bool:
        """Check if this run carries no formatting."""
        return self.kind is FormatKind.PLAIN

    @property
    def is_link(self) -> bool:
        """Check if this run is a hyperlink."""
        return self.kind is FormatKind.LINK

    @classmethod
    def plain(cls, text: str) -> "StyledRun":
        """Create an unformatted run."""
        return cls(kind=FormatKind.PLAIN, text=text)

    @classmethod
    def link(cls, text: str, url: str) -> "StyledRun":
        """Create a hyperlink run."""
        return cls(kind=FormatKind.LINK, text=text, url=url)

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class FormattingMatch:
    """A candidate formatting span found during one scan step.

    Offsets are str indices (code points) relative to the scan cursor.

    Attributes:
        kind: The format kind this span would produce
        content: Inner text between the markers
        start: Offset of the opening marker from the cursor
        full_length: Length of the whole span, markers included
        url: Link target for LINK matches
    """

    kind: FormatKind
    content: str
    start: int
    full_length: int
    url: Optional[str] = None

    @property
    def end(self) -> int:
        """Offset just past the closing marker."""
        return self.start + self.full_length

    def to_run(self) -> StyledRun:
        """Convert the match into the run it produces."""
        return StyledRun(kind=self.kind, text=self.content, url=self.url)
