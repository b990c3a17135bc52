"""Per sequence GC content: distance of the GC histogram from a normal fit."""

from __future__ import annotations

from typing import Any

from streamqc.engine.aggregate import ReadAggregate
from streamqc.engine.modules import registry
from streamqc.engine.modules.base import ChartPayload, ChartSeries, QCModule
from streamqc.engine.stats import sum_deviation_from_normal
from streamqc.errors import AggregateMismatch


@registry.register
class PerSequenceGCContent(QCModule):
    """Compares the GC histogram with a normal curve centred on its mode.

    When the plateau around the mode reaches 0% or 100% the raw mode is used
    as the centre. That fallback is an approximation kept to match
    FastQC's numbers.
    """

    name = "Per sequence GC content"
    key = "gc_content"
    family = "gc_sequence"
    description = "Deviation of per-read GC content from a normal distribution"

    def summarize_module(self, aggregate: ReadAggregate) -> None:
        self.gc_count = list(aggregate.gc_count)
        if sum(self.gc_count) <= 0:
            raise AggregateMismatch(f"GC histogram of {aggregate.filename} is empty")
        self.deviation, self.theoretical = sum_deviation_from_normal(self.gc_count)

    def make_grade(self) -> None:
        self.grader.check_above(
            self.deviation, self.limit("warn"), self.limit("error"), inclusive=True
        )

    def table_header(self) -> list[str]:
        return ["GC Content", "Count"]

    def table_rows(self) -> list[list[Any]]:
        return [[i, count] for i, count in enumerate(self.gc_count)]

    def make_chart_data(self) -> ChartPayload:
        bins = list(range(len(self.gc_count)))
        return ChartPayload(
            title="GC distribution over all sequences",
            x_label="Mean GC content (%)",
            y_label="Number of reads",
            series=[
                ChartSeries(name="GC count per read", x=bins, y=self.gc_count, color="red"),
                ChartSeries(
                    name="Theoretical distribution", x=bins, y=self.theoretical, color="blue"
                ),
            ],
        )

    def metrics(self) -> dict[str, Any]:
        return {"deviation_percent": self.deviation}
