"""Adapter content: cumulative share of reads carrying each adapter k-mer."""

from __future__ import annotations

from typing import Any

from streamqc.engine.aggregate import ReadAggregate
from streamqc.engine.kmers import encode_kmer
from streamqc.engine.modules import registry
from streamqc.engine.modules.base import ChartPayload, ChartSeries, QCModule
from streamqc.errors import AggregateMismatch


@registry.register
class AdapterContent(QCModule):
    name = "Adapter Content"
    key = "adapter_content"
    family = "adapter"
    description = "Cumulative percentage of adapter k-mers along the read"

    def summarize_module(self, aggregate: ReadAggregate) -> None:
        k = aggregate.kmer_size
        self.adapter_names = [adapter.name for adapter in self.config.adapters]
        codes = []
        for adapter in self.config.adapters:
            if len(adapter.sequence) < k:
                raise AggregateMismatch(
                    f"adapter {adapter.name} has {len(adapter.sequence)} bases, "
                    f"aggregate k-mers have {k}"
                )
            codes.append(encode_kmer(adapter.sequence[:k]))

        self.num_bases = min(aggregate.max_read_length, len(aggregate.pos_kmer_count))
        kmer_count = aggregate.require_positions("kmer_count", self.num_bases)

        # Running totals make each position count every adapter hit so far.
        running = [0.0] * len(codes)
        self.percentages: list[list[float]] = []
        for i in range(self.num_bases):
            position_counts = kmer_count[i]
            for which, code in enumerate(codes):
                running[which] += position_counts.get(code, 0)

            total = aggregate.pos_kmer_count[i]
            if total > 0:
                self.percentages.append([100.0 * count / total for count in running])
            else:
                self.percentages.append([0.0] * len(codes))

    def make_grade(self) -> None:
        warn, error = self.limit("warn"), self.limit("error")
        for row in self.percentages:
            for pct in row:
                self.grader.check_above(pct, warn, error)
                if self.grader.is_failed:
                    return

    def table_header(self) -> list[str]:
        return ["Position", *self.adapter_names]

    def table_rows(self) -> list[list[Any]]:
        return [[i + 1, *row] for i, row in enumerate(self.percentages)]

    def make_chart_data(self) -> ChartPayload:
        positions = list(range(1, self.num_bases + 1))
        return ChartPayload(
            title="% Adapter",
            x_label="Position in read (bp)",
            y_label="Percentage of reads",
            series=[
                ChartSeries(
                    name=adapter_name,
                    x=positions,
                    y=[row[which] for row in self.percentages],
                )
                for which, adapter_name in enumerate(self.adapter_names)
            ],
        )

    def metrics(self) -> dict[str, Any]:
        peak = max((max(row) for row in self.percentages if row), default=0.0)
        return {"max_adapter_percent": peak}
