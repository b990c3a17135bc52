"""Sequence duplication levels with whole-file extrapolation."""

from __future__ import annotations

from collections import Counter
from typing import Any

from streamqc.engine.aggregate import ReadAggregate
from streamqc.engine.modules import registry
from streamqc.engine.modules.base import ChartPayload, ChartSeries, QCModule
from streamqc.engine.stats import get_corrected_count
from streamqc.errors import AggregateMismatch

# Lower bounds of the bins after the nine exact levels, highest first.
_BIN_FLOORS = ((10000, 15), (5000, 14), (1000, 13), (500, 12), (100, 11), (50, 10), (10, 9))

BIN_LABELS = ["1", "2", "3", "4", "5", "6", "7", "8", "9",
              ">10", ">50", ">100", ">500", ">1k", ">5k", ">10k+"]


def duplication_bin(level: int) -> int:
    """Index (0-15) of the report bin for a duplication level."""
    if level < 1:
        raise ValueError(f"duplication level must be at least 1, got {level}")
    for floor, index in _BIN_FLOORS:
        if level >= floor:
            return index
    return level - 1


@registry.register
class SequenceDuplicationLevels(QCModule):
    name = "Sequence Duplication Levels"
    key = "duplication"
    family = "duplication"
    description = "How many reads are copies of another read"

    def summarize_module(self, aggregate: ReadAggregate) -> None:
        if not aggregate.sequence_count:
            raise AggregateMismatch(f"no sequence frequencies recorded for {aggregate.filename}")

        # duplication level r -> number of distinct sequences seen r times (Nr)
        counts_by_freq = Counter(aggregate.sequence_count.values())
        self.corrected: dict[int, float] = {
            level: get_corrected_count(
                aggregate.count_at_limit, aggregate.num_reads, level, num_obs
            )
            for level, num_obs in sorted(counts_by_freq.items())
        }

        deduplicated = [0.0] * len(BIN_LABELS)
        total = [0.0] * len(BIN_LABELS)
        seq_dedup = 0.0
        seq_total = 0.0
        for level, count in self.corrected.items():
            slot = duplication_bin(level)
            deduplicated[slot] += count
            total[slot] += count * level
            seq_dedup += count
            seq_total += count * level

        self.total_deduplicated_pct = 100.0 * seq_dedup / seq_total
        self.percentage_deduplicated = [100.0 * v / seq_dedup for v in deduplicated]
        self.percentage_total = [100.0 * v / seq_total for v in total]

    def make_grade(self) -> None:
        # Low percentages of unique sequences are bad.
        self.grader.check_below(
            self.total_deduplicated_pct, self.limit("warn"), self.limit("error"), inclusive=True
        )

    def table_preamble(self) -> list[str]:
        return [f"Total Deduplicated Percentage\t{self.total_deduplicated_pct:.6g}"]

    def table_header(self) -> list[str]:
        return ["Duplication Level", "Percentage of deduplicated", "Percentage of total"]

    def table_rows(self) -> list[list[Any]]:
        return [
            [label, dedup, total]
            for label, dedup, total in zip(
                BIN_LABELS, self.percentage_deduplicated, self.percentage_total
            )
        ]

    def make_chart_data(self) -> ChartPayload:
        return ChartPayload(
            title=f"Percent of seqs remaining if deduplicated {self.total_deduplicated_pct:.2f}%",
            x_label="Sequence duplication level",
            y_label="Percentage",
            series=[
                ChartSeries(
                    name="% Total sequences",
                    x=BIN_LABELS,
                    y=self.percentage_total,
                    color="blue",
                ),
                ChartSeries(
                    name="% Deduplicated sequences",
                    x=BIN_LABELS,
                    y=self.percentage_deduplicated,
                    color="red",
                ),
            ],
        )

    def metrics(self) -> dict[str, Any]:
        return {"total_deduplicated_percent": self.total_deduplicated_pct}
