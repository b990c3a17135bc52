"""Base-position groups used to keep per-position tables readable."""

from __future__ import annotations

from dataclasses import dataclass

# (position at which the width changes, minimum read length, new width)
_GROUP_STEPS = (
    (9, 75, 5),
    (49, 200, 10),
    (99, 300, 50),
    (499, 1000, 100),
    (999, 2000, 500),
)


@dataclass(frozen=True)
class BaseGroup:
    """Inclusive, 0-based range of read positions reported as one row."""

    start: int
    end: int

    @property
    def label(self) -> str:
        """1-based label, e.g. ``"7"`` or ``"10-14"``."""
        if self.start == self.end:
            return str(self.start + 1)
        return f"{self.start + 1}-{self.end + 1}"

    def positions(self) -> range:
        return range(self.start, self.end + 1)


def make_base_groups(num_bases: int) -> list[BaseGroup]:
    """Split ``num_bases`` positions into groups that widen along the read.

    Widening only kicks in when the read is long enough for the extra rows to
    matter; short reads keep one row per base.
    """
    groups: list[BaseGroup] = []
    start = 0
    interval = 1
    while start < num_bases:
        end = min(start + interval - 1, num_bases - 1)
        groups.append(BaseGroup(start, end))
        start += interval
        for position, min_length, width in _GROUP_STEPS:
            if start == position and num_bases > min_length:
                interval = width
    return groups


def make_default_base_groups(num_bases: int) -> list[BaseGroup]:
    return [BaseGroup(i, i) for i in range(num_bases)]
