"""Basic Statistics module: overall counts for the input file.

Always graded pass.
"""

from __future__ import annotations

from typing import Any

from streamqc.engine.aggregate import ReadAggregate
from streamqc.engine.modules import registry
from streamqc.engine.modules.base import QCModule


@registry.register
class BasicStatistics(QCModule):
    name = "Basic Statistics"
    key = "basic_statistics"
    description = "Read counts, length range and overall GC content"

    def summarize_module(self, aggregate: ReadAggregate) -> None:
        self.file_type = aggregate.file_type
        self.encoding = aggregate.encoding
        self.total_sequences = aggregate.num_reads
        self.min_read_length = aggregate.min_read_length
        self.max_read_length = aggregate.max_read_length
        # Poor-quality filtering happens upstream; nothing is flagged here.
        self.num_poor = 0

        total_bases = aggregate.total_bases
        self.avg_read_length = total_bases / self.total_sequences if self.total_sequences else 0.0
        self.avg_gc = 100.0 * aggregate.total_gc / total_bases if total_bases else 0.0

    def make_grade(self) -> None:
        pass

    @property
    def length_range(self) -> str:
        if self.min_read_length == self.max_read_length:
            return str(self.min_read_length)
        return f"{self.min_read_length}-{self.max_read_length}"

    def table_header(self) -> list[str]:
        return ["Measure", "Value"]

    def table_rows(self) -> list[list[Any]]:
        return [
            ["Filename", self.filename],
            ["File type", self.file_type],
            ["Encoding", self.encoding],
            ["Total Sequences", self.total_sequences],
            ["Sequences flagged as poor quality", self.num_poor],
            ["Sequence length", self.length_range],
            ["Average read length", self.avg_read_length],
            ["%GC", int(self.avg_gc)],
        ]

    def metrics(self) -> dict[str, Any]:
        return {
            "total_sequences": self.total_sequences,
            "sequence_length": self.length_range,
            "avg_read_length": self.avg_read_length,
            "percent_gc": self.avg_gc,
        }
