"""Rendering adapter from styled runs to rich Text."""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from rich.style import Style
from rich.text import Text

from runmark.config import Settings
from runmark.formatting.ir import FormatKind, StyledRun
from runmark.formatting.parser import parse_inline

DEFAULT_LINK_COLOR = "cyan"
DEFAULT_CODE_BACKGROUND = "grey15"


def _default_styles() -> dict[FormatKind, Style]:
    return {
        FormatKind.PLAIN: Style.null(),
        FormatKind.BOLD: Style(bold=True),
        FormatKind.ITALIC: Style(italic=True),
        FormatKind.STRIKETHROUGH: Style(strike=True),
        FormatKind.UNDERLINE: Style(underline=True),
        FormatKind.INLINE_CODE: Style(bgcolor=DEFAULT_CODE_BACKGROUND),
        FormatKind.LINK: Style(color=DEFAULT_LINK_COLOR, underline=True),
    }


@dataclass
class RunTheme:
    """Visual attributes applied to each format kind.

    Attributes:
        styles: Style per FormatKind; link runs also get their url attached
    """

    styles: dict[FormatKind, Style] = field(default_factory=_default_styles)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RunTheme":
        """Build a theme using the configured link and code colours."""
        theme = cls()
        theme.styles[FormatKind.LINK] = Style(
            color=settings.link_color, underline=True
        )
        theme.styles[FormatKind.INLINE_CODE] = Style(
            bgcolor=settings.code_background
        )
        return theme

    def style_for(self, run: StyledRun) -> Style:
        """Get the style for a run."""
        style = self.styles.get(run.kind, Style.null())
        if run.is_link and run.url:
            style = style + Style(link=run.url)
        return style


def to_rich_text(
    runs: Iterable[StyledRun],
    theme: Optional[RunTheme] = None,
) -> Text:
    """Convert runs to a rich Text object ready for printing."""
    theme = theme or RunTheme()
    text = Text()
    for run in runs:
        text.append(run.text, style=theme.style_for(run))
    return text


def render_markup(text: str, theme: Optional[RunTheme] = None) -> Text:
    """Parse inline markdown and render it in one step."""
    return to_rich_text(parse_inline(text), theme)
