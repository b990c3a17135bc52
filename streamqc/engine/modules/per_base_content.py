"""Per base sequence content: A/C/T/G fractions along the read."""

from __future__ import annotations

from itertools import combinations
from typing import Any

from streamqc.engine.aggregate import BASE_ORDER, ReadAggregate
from streamqc.engine.modules import registry
from streamqc.engine.modules.base import ChartPayload, ChartSeries, QCModule
from streamqc.errors import AggregateMismatch

BASE_COLORS = {"A": "green", "C": "blue", "T": "red", "G": "black"}


@registry.register
class PerBaseSequenceContent(QCModule):
    name = "Per base sequence content"
    key = "per_base_content"
    family = "sequence"
    description = "Largest A/C/T/G percentage gap at any position"

    def summarize_module(self, aggregate: ReadAggregate) -> None:
        self.num_bases = aggregate.max_read_length
        base_count = aggregate.require_positions("base_count", self.num_bases)
        n_count = aggregate.require_positions("n_base_count", self.num_bases)

        self.pct: dict[str, list[float]] = {base: [] for base in BASE_ORDER}
        self.n_pct: list[float] = []
        self.max_diff = 0.0
        for i in range(self.num_bases):
            total = sum(base_count[i]) + n_count[i]
            if total == 0:
                raise AggregateMismatch(f"no bases recorded at position {i + 1}")
            percentages = [100.0 * count / total for count in base_count[i]]
            for base, value in zip(BASE_ORDER, percentages):
                self.pct[base].append(value)
            self.n_pct.append(100.0 * n_count[i] / total)

            for a, b in combinations(percentages, 2):
                self.max_diff = max(self.max_diff, abs(a - b))

    def make_grade(self) -> None:
        self.grader.check_above(self.max_diff, self.limit("warn"), self.limit("error"))

    def table_header(self) -> list[str]:
        return ["Base", "G", "A", "T", "C"]

    def table_rows(self) -> list[list[Any]]:
        return [
            [i + 1, self.pct["G"][i], self.pct["A"][i], self.pct["T"][i], self.pct["C"][i]]
            for i in range(self.num_bases)
        ]

    def make_chart_data(self) -> ChartPayload:
        positions = list(range(1, self.num_bases + 1))
        return ChartPayload(
            title="Sequence content across all bases",
            x_label="Position in read (bp)",
            y_label="Percentage of bases",
            series=[
                ChartSeries(name=base, x=positions, y=self.pct[base], color=BASE_COLORS[base])
                for base in BASE_ORDER
            ],
        )

    def metrics(self) -> dict[str, Any]:
        return {"max_difference": self.max_diff}
