"""Pass/warn/fail grades and the escalate-only grade state machine."""

from __future__ import annotations

from enum import Enum


class Grade(str, Enum):
    """Module grade, ordered PASS < WARN < FAIL."""

    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {Grade.PASS: 0, Grade.WARN: 1, Grade.FAIL: 2}


class GradeTracker:
    """Tracks a module's grade while it scans its summary.

    The grade starts at PASS and can only move up. Once FAIL is reached,
    ``is_failed`` lets callers stop scanning early.
    """

    def __init__(self) -> None:
        self._grade = Grade.PASS

    @property
    def grade(self) -> Grade:
        return self._grade

    @property
    def is_failed(self) -> bool:
        return self._grade is Grade.FAIL

    def escalate(self, grade: Grade) -> Grade:
        """Raise the grade to ``grade`` if it is worse than the current one."""
        if grade.rank > self._grade.rank:
            self._grade = grade
        return self._grade

    def check_above(
        self, value: float, warn: float, error: float, inclusive: bool = False
    ) -> Grade:
        """Escalate when ``value`` exceeds the thresholds (high is bad)."""
        if _beyond(value, error, inclusive, upper=True):
            return self.escalate(Grade.FAIL)
        if _beyond(value, warn, inclusive, upper=True):
            return self.escalate(Grade.WARN)
        return self._grade

    def check_below(
        self, value: float, warn: float, error: float, inclusive: bool = False
    ) -> Grade:
        """Escalate when ``value`` falls under the thresholds (low is bad)."""
        if _beyond(value, error, inclusive, upper=False):
            return self.escalate(Grade.FAIL)
        if _beyond(value, warn, inclusive, upper=False):
            return self.escalate(Grade.WARN)
        return self._grade


def _beyond(value: float, threshold: float, inclusive: bool, upper: bool) -> bool:
    if upper:
        return value >= threshold if inclusive else value > threshold
    return value <= threshold if inclusive else value < threshold
