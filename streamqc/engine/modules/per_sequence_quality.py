"""Per sequence quality scores: distribution of mean read quality."""

from __future__ import annotations

from typing import Any

from streamqc.engine.aggregate import ReadAggregate
from streamqc.engine.modules import registry
from streamqc.engine.modules.base import ChartPayload, ChartSeries, QCModule


@registry.register
class PerSequenceQualityScores(QCModule):
    name = "Per sequence quality scores"
    key = "per_sequence_quality"
    family = "quality_sequence"
    description = "Most common mean read quality"

    def summarize_module(self, aggregate: ReadAggregate) -> None:
        self.quality_count = list(aggregate.quality_count)
        self.mode_count = 0
        self.mode_quality = 0
        for quality, count in enumerate(self.quality_count):
            if count > self.mode_count:
                self.mode_count = count
                self.mode_quality = quality

    def make_grade(self) -> None:
        # Thresholds are Phred values.
        self.grader.check_below(self.mode_quality, self.limit("warn"), self.limit("error"))

    def table_header(self) -> list[str]:
        return ["Quality", "Count"]

    def table_rows(self) -> list[list[Any]]:
        return [[q, c] for q, c in enumerate(self.quality_count) if c > 0]

    def make_chart_data(self) -> ChartPayload:
        rows = self.table_rows()
        return ChartPayload(
            title="Quality score distribution over all sequences",
            x_label="Mean sequence quality (Phred score)",
            y_label="Number of reads",
            series=[
                ChartSeries(
                    name="Sequence quality distribution",
                    x=[q for q, _ in rows],
                    y=[c for _, c in rows],
                    color="red",
                )
            ],
        )

    def metrics(self) -> dict[str, Any]:
        return {"mode_quality": self.mode_quality}
