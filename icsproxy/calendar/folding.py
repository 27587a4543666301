"""RFC 5545 line unfolding and folding.

Folding counts characters, not octets. That is exact for the ASCII feeds
Outlook produces; a line with multi-byte characters may exceed 75 octets on
the wire. Slicing a ``str`` never splits a code point, so the output stays
valid UTF-8 either way.
"""

from __future__ import annotations

from collections.abc import Iterable

MAX_LINE_LENGTH = 75
LINE_ENDING = "\r\n"
_CONTINUATION_CHARS = (" ", "\t")


def unfold_lines(raw: str) -> list[str]:
    """Unfold folded content lines into logical lines.

    A physical line starting with a single space or tab continues the
    previous logical line; that one whitespace character is removed.

    Args:
        raw: Document text with CRLF or LF line endings

    Returns:
        Logical lines without line terminators. The empty element produced by
        a terminating line ending is not returned.
    """
    physical = raw.replace("\r\n", "\n").split("\n")
    if physical and physical[-1] == "":
        physical.pop()

    unfolded: list[str] = []
    for line in physical:
        if line.startswith(_CONTINUATION_CHARS):
            if unfolded:
                unfolded[-1] += line[1:]
            else:
                # Continuation with nothing to continue; keep the content
                unfolded.append(line.lstrip())
        else:
            unfolded.append(line)
    return unfolded


def fold_line(line: str) -> list[str]:
    """Split one logical line into physical segments.

    The first segment holds MAX_LINE_LENGTH characters, each continuation
    holds MAX_LINE_LENGTH characters after its leading space.
    """
    if len(line) <= MAX_LINE_LENGTH:
        return [line]
    segments = []
    for idx in range(0, len(line), MAX_LINE_LENGTH):
        chunk = line[idx : idx + MAX_LINE_LENGTH]
        segments.append(chunk if idx == 0 else " " + chunk)
    return segments


def fold_lines(lines: Iterable[str]) -> str:
    """Fold logical lines and join them with CRLF (no trailing line ending)."""
    folded: list[str] = []
    for line in lines:
        folded.extend(fold_line(line))
    return LINE_ENDING.join(folded)


def fold_document(lines: Iterable[str]) -> str:
    """Fold logical lines into a complete CRLF-terminated document."""
    return fold_lines(lines) + LINE_ENDING
