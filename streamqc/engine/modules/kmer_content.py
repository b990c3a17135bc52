"""K-mer content: k-mers enriched at some position of the read.

When this module runs it is always graded fail, as FastQC does:
the enrichment list is meant for manual review, not for a statistical
verdict. The family is ignored in the default limits for that reason.
"""

from __future__ import annotations

from typing import Any

from streamqc.engine.aggregate import ReadAggregate
from streamqc.engine.grading import Grade
from streamqc.engine.kmers import decode_kmer
from streamqc.engine.modules import registry
from streamqc.engine.modules.base import QCModule

MIN_OBS_EXP_RATIO = 5.0
MAX_REPORTED_KMERS = 20


class KmerEnrichment:
    __slots__ = ("kmer", "sequence", "total", "max_ratio", "max_position")

    def __init__(self, kmer: int, sequence: str, total: int) -> None:
        self.kmer = kmer
        self.sequence = sequence
        self.total = total
        self.max_ratio = 0.0
        self.max_position = 0


@registry.register
class KmerContent(QCModule):
    name = "Kmer Content"
    key = "kmer_content"
    family = "kmer"
    description = "K-mers whose observed/expected ratio peaks above 5"

    def summarize_module(self, aggregate: ReadAggregate) -> None:
        self.kmer_size = aggregate.kmer_size
        num_bases = min(aggregate.max_read_length, len(aggregate.pos_kmer_count))
        kmer_count = aggregate.require_positions("kmer_count", num_bases)
        positions = range(self.kmer_size - 1, num_bases)

        totals: dict[int, int] = {}
        for i in positions:
            for kmer, count in kmer_count[i].items():
                totals[kmer] = totals.get(kmer, 0) + count
        seen = {kmer: total for kmer, total in totals.items() if total > 0}
        self.num_seen_kmers = len(seen)

        # Null model: at each position the k-mers present anywhere are
        # equally likely.
        enrichments = []
        for kmer, total in seen.items():
            entry = KmerEnrichment(kmer, decode_kmer(kmer, self.kmer_size), total)
            for i in positions:
                position_total = aggregate.pos_kmer_count[i]
                if position_total == 0:
                    continue
                expected = position_total / self.num_seen_kmers
                ratio = kmer_count[i].get(kmer, 0) / expected
                if ratio > entry.max_ratio:
                    entry.max_ratio = ratio
                    entry.max_position = i + 1
            if entry.max_ratio > MIN_OBS_EXP_RATIO:
                enrichments.append(entry)

        enrichments.sort(key=lambda e: e.max_ratio, reverse=True)
        self.enriched = enrichments

    def make_grade(self) -> None:
        self.grader.escalate(Grade.FAIL)

    def table_header(self) -> list[str]:
        return ["Sequence", "Count", "PValue", "Obs/Exp Max", "Max Obs/Exp Position"]

    def table_rows(self) -> list[list[Any]]:
        return [
            [e.sequence, e.total, "0.0", e.max_ratio, e.max_position]
            for e in self.enriched[:MAX_REPORTED_KMERS]
        ]

    def metrics(self) -> dict[str, Any]:
        return {"num_enriched": len(self.enriched), "num_seen_kmers": self.num_seen_kmers}
