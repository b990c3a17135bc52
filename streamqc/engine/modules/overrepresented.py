"""Overrepresented sequences and their likely contaminant source."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from streamqc.config import NamedSequence
from streamqc.engine.aggregate import ReadAggregate
from streamqc.engine.modules import registry
from streamqc.engine.modules.base import QCModule

NO_HIT = "No Hit"


def find_matching_contaminant(sequence: str, contaminants: Sequence[NamedSequence]) -> str:
    """Name of the contaminant that best explains ``sequence``.

    A contaminant contained in the sequence counts as a hit, the longest one
    winning. A sequence contained in a contaminant cannot be explained any
    better, so the first such contaminant is returned straight away.
    """
    best_length = 0
    best_name = NO_HIT
    for contaminant in contaminants:
        if len(sequence) > len(contaminant.sequence):
            if contaminant.sequence in sequence and len(contaminant.sequence) > best_length:
                best_length = len(contaminant.sequence)
                best_name = contaminant.name
        elif sequence in contaminant.sequence:
            return contaminant.name
    return best_name


@registry.register
class OverrepresentedSequences(QCModule):
    name = "Overrepresented sequences"
    key = "overrepresented"
    family = "overrepresented"
    description = "Sequences making up an unusually large share of reads"

    def summarize_module(self, aggregate: ReadAggregate) -> None:
        self.num_reads = aggregate.num_reads
        cutoff = self.num_reads * self.config.overrep_min_fraction
        overrep = [
            (sequence, count)
            for sequence, count in aggregate.sequence_count.items()
            if count > cutoff
        ]
        overrep.sort(key=lambda item: item[1], reverse=True)

        self.sequences = [
            (
                sequence,
                count,
                100.0 * count / self.num_reads,
                find_matching_contaminant(sequence, self.config.contaminants),
            )
            for sequence, count in overrep
        ]

    def make_grade(self) -> None:
        warn, error = self.limit("warn"), self.limit("error")
        for _, _, pct, _ in self.sequences:
            self.grader.check_above(pct, warn, error)
            if self.grader.is_failed:
                break

    def table_header(self) -> list[str]:
        return ["Sequence", "Count", "Percentage", "Possible Source"]

    def table_rows(self) -> list[list[Any]]:
        return [list(row) for row in self.sequences]

    def metrics(self) -> dict[str, Any]:
        return {"num_overrepresented": len(self.sequences)}
