"""Document pipeline: the whole ICS transform in one pass.

    unfold -> walk lines (rewrite date-times, normalize VEVENTs)
           -> canonical PRODID -> VTIMEZONE integration -> fold

All working state lives in local variables, so concurrent calls on
different documents cannot interfere.
"""

from __future__ import annotations

import logging
from enum import Enum

from icsproxy.calendar.datetime_rewriter import (
    TransformOptions,
    is_datetime_line,
    rewrite_datetime_line,
)
from icsproxy.calendar.event_normalizer import normalize_event
from icsproxy.calendar.folding import fold_document, unfold_lines
from icsproxy.calendar.vtimezone import integrate_vtimezone
from icsproxy.core.timezone_utils import is_likely_iana

logger = logging.getLogger(__name__)

CANONICAL_PRODID = "PRODID:-//Google Inc//Google Calendar 70.9054//EN"

BEGIN_VTIMEZONE = "BEGIN:VTIMEZONE"
END_VTIMEZONE = "END:VTIMEZONE"
BEGIN_VEVENT = "BEGIN:VEVENT"
END_VEVENT = "END:VEVENT"


class BlockState(Enum):
    """Where the line walker currently is in the document."""

    DOCUMENT = "document"
    TIMEZONE = "timezone"
    EVENT = "event"


class _DocumentWalker:
    """Single pass over logical lines, tracking VTIMEZONE/VEVENT nesting."""

    def __init__(self, options: TransformOptions) -> None:
        self.options = options
        self.state = BlockState.DOCUMENT
        self.output: list[str] = []
        self.event: list[str] = []

    def _close_event(self) -> None:
        self.output.extend(normalize_event(self.event))
        self.output.append(END_VEVENT)
        self.event = []
        self.state = BlockState.DOCUMENT

    def _rewrite(self, line: str) -> str:
        if is_datetime_line(line):
            return rewrite_datetime_line(line, self.options)
        return line

    def feed(self, line: str) -> None:
        marker = line.strip().upper()

        if self.state is BlockState.TIMEZONE:
            # Transition DTSTARTs inside VTIMEZONE are structural, never rewritten
            if marker == BEGIN_VEVENT:
                logger.warning("BEGIN:VEVENT inside an unterminated VTIMEZONE block")
                self.state = BlockState.EVENT
                self.output.append(line)
                return
            if marker == END_VTIMEZONE:
                self.state = BlockState.DOCUMENT
            self.output.append(line)
            return

        if self.state is BlockState.EVENT:
            if marker == END_VEVENT:
                self._close_event()
                return
            if marker == BEGIN_VEVENT:
                logger.warning("BEGIN:VEVENT inside an open VEVENT, closing the previous one")
                self._close_event()
                self.state = BlockState.EVENT
                self.output.append(line)
                return
            self.event.append(self._rewrite(line))
            return

        if marker == BEGIN_VTIMEZONE:
            self.state = BlockState.TIMEZONE
            self.output.append(line)
        elif marker == BEGIN_VEVENT:
            self.state = BlockState.EVENT
            self.output.append(line)
        elif marker in (END_VEVENT, END_VTIMEZONE):
            logger.warning("Unbalanced %s outside of its block, passing it through", marker)
            self.output.append(line)
        else:
            self.output.append(self._rewrite(line))

    def finish(self) -> list[str]:
        if self.state is BlockState.EVENT:
            logger.warning("Document ended inside a VEVENT, closing it")
            self._close_event()
        elif self.state is BlockState.TIMEZONE:
            logger.warning("Document ended inside a VTIMEZONE block")
        return self.output


def _canonicalize_prodid(lines: list[str]) -> list[str]:
    for idx, line in enumerate(lines):
        if line.upper().startswith("PRODID:") or line.upper().startswith("PRODID;"):
            lines[idx] = CANONICAL_PRODID
            break
    return lines


def transform_lines(lines: list[str], options: TransformOptions) -> list[str]:
    """Transform unfolded logical lines; returns logical lines (not yet folded)."""
    walker = _DocumentWalker(options)
    for line in lines:
        walker.feed(line)
    transformed = _canonicalize_prodid(walker.finish())

    if is_likely_iana(options.target_tz):
        transformed = integrate_vtimezone(transformed, options.target_tz)
    else:
        logger.warning(
            "Target timezone %r does not look like an IANA name, skipping VTIMEZONE",
            options.target_tz,
        )
    return transformed


def transform_ics(raw: str, options: TransformOptions) -> str:
    """Transform a complete ICS document.

    Args:
        raw: Upstream document text
        options: Timezone policy

    Returns:
        Folded, CRLF-terminated document. Never raises for malformed values;
        lines that cannot be rewritten are passed through unchanged.
    """
    lines = unfold_lines(raw)
    transformed = transform_lines(lines, options)
    logger.debug("Transformed %d logical lines into %d", len(lines), len(transformed))
    return fold_document(transformed)


def transform(raw: str, target_tz: str, override_existing: bool = True) -> str:
    """Convenience wrapper around transform_ics()."""
    return transform_ics(raw, TransformOptions(target_tz=target_tz, override_existing=override_existing))
