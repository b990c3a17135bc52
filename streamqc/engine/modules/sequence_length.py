"""Sequence length distribution.

Grading is switch-based rather than threshold-based: a nonzero ``error``
enables failing on empty reads, a nonzero ``warn`` enables warning on
mixed read lengths.
"""

from __future__ import annotations

from typing import Any

from streamqc.engine.aggregate import ReadAggregate
from streamqc.engine.grading import Grade
from streamqc.engine.modules import registry
from streamqc.engine.modules.base import ChartPayload, ChartSeries, QCModule


@registry.register
class SequenceLengthDistribution(QCModule):
    name = "Sequence Length Distribution"
    key = "sequence_length"
    family = "sequence_length"
    description = "Histogram of read lengths"

    def summarize_module(self, aggregate: ReadAggregate) -> None:
        self.lengths = {
            length: count
            for length, count in sorted(aggregate.read_length_freq.items())
            if count > 0
        }
        self.is_all_same_length = len(self.lengths) <= 1
        self.has_empty_read = aggregate.min_read_length == 0 or self.lengths.get(0, 0) > 0

    def make_grade(self) -> None:
        if self.limit("warn") != 0 and not self.is_all_same_length:
            self.grader.escalate(Grade.WARN)
        if self.limit("error") != 0 and self.has_empty_read:
            self.grader.escalate(Grade.FAIL)

    def table_header(self) -> list[str]:
        return ["Length", "Count"]

    def table_rows(self) -> list[list[Any]]:
        return [[length, count] for length, count in self.lengths.items()]

    def make_chart_data(self) -> ChartPayload:
        return ChartPayload(
            title="Distribution of sequence lengths over all sequences",
            x_label="Sequence length (bp)",
            y_label="Number of reads",
            series=[
                ChartSeries(
                    name="Sequence length distribution",
                    type="bar",
                    x=[f"{length} bp" for length in self.lengths],
                    y=list(self.lengths.values()),
                    text=list(self.lengths),
                    color="rgba(55,128,191,1.0)",
                )
            ],
        )

    def metrics(self) -> dict[str, Any]:
        return {
            "is_all_same_length": self.is_all_same_length,
            "has_empty_read": self.has_empty_read,
        }
