"""Inline markdown tokenizer for converting message text to styled runs."""

from functools import partial
from typing import Callable, Iterable, Optional, Sequence

from runmark.formatting.ir import FormatKind, FormattingMatch, StyledRun

Matcher = Callable[[str], Optional[FormattingMatch]]


def _find_delimited(
    text: str,
    opener: str,
    closer: str,
    kind: FormatKind,
) -> Optional[FormattingMatch]:
    """Find the first opener...closer span with non-empty content.

    The closer is the first one after the opener (shortest span). Content
    may not start with the opener's first character, so ``***x**`` matches
    at the second asterisk rather than capturing a stray marker.
    """
    start = text.find(opener)
    while start != -1:
        content_start = start + len(opener)
        end = text.find(closer, content_start)
        if end == -1:
            return None
        content = text[content_start:end]
        if content and content[0] != opener[0]:
            return FormattingMatch(
                kind=kind,
                content=content,
                start=start,
                full_length=end + len(closer) - start,
            )
        start = text.find(opener, start + 1)
    return None


def _find_emphasis(text: str, marker: str) -> Optional[FormattingMatch]:
    """Find a single-character italic span.

    Neither marker may touch another copy of itself, which keeps ``*`` from
    matching inside a ``**`` pair. Content never contains the marker.
    """
    start = text.find(marker)
    while start != -1:
        content_start = start + 1
        after_opener = text[content_start : content_start + 1]
        if (start == 0 or text[start - 1] != marker) and after_opener not in ("", marker):
            end = text.find(marker, content_start)
            if end == -1:
                return None
            if text[end + 1 : end + 2] != marker:
                return FormattingMatch(
                    kind=FormatKind.ITALIC,
                    content=text[content_start:end],
                    start=start,
                    full_length=end + 1 - start,
                )
        start = text.find(marker, start + 1)
    return None


def _find_link(text: str) -> Optional[FormattingMatch]:
    """Find the first ``[label](url)`` span with non-empty label and url."""
    start = text.find("[")
    while start != -1:
        label_end = text.find("]", start + 1)
        if label_end == -1:
            return None
        if label_end > start + 1 and text.startswith("(", label_end + 1):
            url_start = label_end + 2
            url_end = text.find(")", url_start)
            if url_end == -1:
                return None
            if url_end > url_start:
                return FormattingMatch(
                    kind=FormatKind.LINK,
                    content=text[start + 1 : label_end],
                    start=start,
                    full_length=url_end + 1 - start,
                    url=text[url_start:url_end],
                )
        start = text.find("[", start + 1)
    return None


# Order is the tie-break: on equal start offsets the earlier matcher wins
MATCHERS: tuple[Matcher, ...] = (
    partial(_find_delimited, opener="**", closer="**", kind=FormatKind.BOLD),
    partial(_find_delimited, opener="__", closer="__", kind=FormatKind.BOLD),
    partial(_find_emphasis, marker="*"),
    partial(_find_emphasis, marker="_"),
    partial(_find_delimited, opener="~~", closer="~~", kind=FormatKind.STRIKETHROUGH),
    partial(_find_delimited, opener="<u>", closer="</u>", kind=FormatKind.UNDERLINE),
    partial(_find_delimited, opener="`", closer="`", kind=FormatKind.INLINE_CODE),
    _find_link,
)


def earliest_match(
    candidates: Iterable[Optional[FormattingMatch]],
) -> Optional[FormattingMatch]:
    """Pick the candidate closest to the cursor.

    Candidates must be given in precedence order; on a tie the first one
    seen is kept.
    """
    best: Optional[FormattingMatch] = None
    for candidate in candidates:
        if candidate is None:
            continue
        if best is None or candidate.start < best.start:
            best = candidate
    return best


def find_next_match(
    text: str,
    matchers: Sequence[Matcher] = MATCHERS,
) -> Optional[FormattingMatch]:
    """Run every matcher over text and return the winning span, if any."""
    return earliest_match(matcher(text) for matcher in matchers)


def parse_inline(text: str) -> list[StyledRun]:
    """Tokenize text into styled runs.

    Scans left to right, repeatedly taking the earliest formatting span.
    Captured content is not scanned again, so formatting never nests.
    Unmatched markers are kept as plain text.
    """
    runs: list[StyledRun] = []
    pos = 0

    while pos < len(text):
        remainder = text[pos:]
        match = find_next_match(remainder)
        if match is None:
            runs.append(StyledRun.plain(remainder))
            break

        if match.start > 0:
            runs.append(StyledRun.plain(remainder[: match.start]))
        runs.append(match.to_run())
        pos += match.end

    return runs


def plain_text(runs: Iterable[StyledRun]) -> str:
    """Join the visible text of runs."""
    return "".join(run.text for run in runs)


_MARKERS: dict[FormatKind, tuple[str, str]] = {
    FormatKind.PLAIN: ("", ""),
    FormatKind.STRIKETHROUGH: ("~~", "~~"),
    FormatKind.UNDERLINE: ("<u>", "</u>"),
    FormatKind.INLINE_CODE: ("`", "`"),
}


_EMPHASIS_MARKERS: dict[FormatKind, tuple[str, str]] = {
    FormatKind.BOLD: ("**", "__"),
    FormatKind.ITALIC: ("*", "_"),
}


def _fixed_markdown(run: StyledRun) -> str:
    if run.is_link:
        return f"[{run.text}]({run.url})"
    opener, closer = _MARKERS[run.kind]
    return f"{opener}{run.text}{closer}"


def _emphasis_marker(run: StyledRun, before: str, after: str) -> str:
    """Pick the bold/italic marker that cannot merge with content or neighbours.

    Falls back to the asterisk form when both characters clash.
    """
    options = _EMPHASIS_MARKERS[run.kind]
    for marker in options:
        char = marker[0]
        if before.endswith(char) or after.startswith(char):
            continue
        if run.kind is FormatKind.ITALIC and char in run.text:
            continue
        if run.kind is FormatKind.BOLD and (
            marker in run.text or run.text.startswith(char) or run.text.endswith(char)
        ):
            continue
        return marker
    return options[0]


def to_markdown(runs: Iterable[StyledRun]) -> str:
    """Convert runs back to inline markdown.

    Bold and italic use ``*`` or ``_`` markers, whichever keeps the output
    parsing back to the same runs.
    """
    runs = list(runs)
    output = ""
    for index, run in enumerate(runs):
        if run.kind not in _EMPHASIS_MARKERS:
            output += _fixed_markdown(run)
            continue
        after = ""
        if index + 1 < len(runs) and runs[index + 1].kind not in _EMPHASIS_MARKERS:
            after = _fixed_markdown(runs[index + 1])
        marker = _emphasis_marker(run, output, after)
        output += f"{marker}{run.text}{marker}"
    return output


class InlineParser:
    """Parse inline markdown formatting into styled runs.

    Stateless; a single instance can be shared between threads.
    """

    def parse(self, text: str) -> list[StyledRun]:
        """Convert text to an ordered list of StyledRun objects.

        Args:
            text: Raw message text with inline markers

        Returns:
            Runs in document order; empty for empty input
        """
        return parse_inline(text)

    def to_plain_text(self, runs: Iterable[StyledRun]) -> str:
        """Convert runs back to plain text."""
        return plain_text(runs)

    def to_markdown(self, runs: Iterable[StyledRun]) -> str:
        """Convert runs back to markdown."""
        return to_markdown(runs)
