"""Bounded failure summaries from large build logs.

The log is streamed once; both the pattern matches and the trailing context
are kept in bounded deques, so memory stays flat regardless of log size.
"""

from __future__ import annotations

import logging
import re
from collections import deque
from pathlib import Path

from wrtforge.models.build import FailureSummary, LogMatch

logger = logging.getLogger(__name__)

MAX_MATCHES = 200
TAIL_LINES = 120

ERROR_PATTERN = re.compile(
    r"ERROR:"
    r"|failed to build"
    r"|cannot stat"
    r"|No such file"
    r"|Permission denied"
    r"|cp: cannot"
    r"|install: cannot"
    r"|make(\[[0-9]+\])?: \*\*\*"
    r"|Error [0-9]+"
)


class FailureTriage:
    """Extracts error-signal lines and trailing context from a build log."""

    def __init__(
        self,
        max_matches: int = MAX_MATCHES,
        tail_lines: int = TAIL_LINES,
        pattern: re.Pattern[str] = ERROR_PATTERN,
    ) -> None:
        self._max_matches = max_matches
        self._tail_lines = tail_lines
        self._pattern = pattern

    def summarize(self, log_path: Path) -> FailureSummary:
        """Return the last matches and the last lines of *log_path*.

        Never raises on a missing or unreadable log; returns a degraded,
        empty summary instead.
        """
        log_path = Path(log_path)
        matches: deque[LogMatch] = deque(maxlen=self._max_matches)
        tail: deque[str] = deque(maxlen=self._tail_lines)

        try:
            with log_path.open("r", encoding="utf-8", errors="replace") as fh:
                for line_no, raw in enumerate(fh, start=1):
                    line = raw.rstrip("\r\n")
                    tail.append(line)
                    if self._pattern.search(line):
                        matches.append(LogMatch(line_no=line_no, text=line))
        except OSError as exc:
            logger.warning("Cannot read build log %s: %s", log_path, exc)
            return FailureSummary(log_path=log_path, degraded=True)

        logger.warning(
            "Build failed. %d error lines matched in %s", len(matches), log_path
        )
        return FailureSummary(log_path=log_path, matches=list(matches), tail=list(tail))
