"""Per base N content."""

from __future__ import annotations

from typing import Any

from streamqc.engine.aggregate import ReadAggregate
from streamqc.engine.modules import registry
from streamqc.engine.modules.base import ChartPayload, ChartSeries, QCModule
from streamqc.errors import AggregateMismatch


@registry.register
class PerBaseNContent(QCModule):
    name = "Per base N content"
    key = "n_content"
    family = "n_content"
    description = "Percentage of undetermined bases at each position"

    def summarize_module(self, aggregate: ReadAggregate) -> None:
        self.num_bases = aggregate.max_read_length
        aggregate.require_positions("base_count", self.num_bases)
        n_count = aggregate.require_positions("n_base_count", self.num_bases)

        self.n_pct = []
        for i in range(self.num_bases):
            total = aggregate.bases_at(i)
            if total == 0:
                raise AggregateMismatch(f"no bases recorded at position {i + 1}")
            self.n_pct.append(100.0 * n_count[i] / total)

    def make_grade(self) -> None:
        warn, error = self.limit("warn"), self.limit("error")
        for pct in self.n_pct:
            self.grader.check_above(pct, warn, error)
            if self.grader.is_failed:
                break

    def table_header(self) -> list[str]:
        return ["Base", "N-Count"]

    def table_rows(self) -> list[list[Any]]:
        return [[i + 1, pct] for i, pct in enumerate(self.n_pct)]

    def make_chart_data(self) -> ChartPayload:
        return ChartPayload(
            title="N content across all bases",
            x_label="Position in read (bp)",
            y_label="Percentage of N",
            series=[
                ChartSeries(
                    name="Percentage of N per base",
                    x=list(range(1, self.num_bases + 1)),
                    y=self.n_pct,
                    color="red",
                )
            ],
        )

    def metrics(self) -> dict[str, Any]:
        return {"max_n_percent": max(self.n_pct, default=0.0)}
