"""The read-aggregate snapshot consumed by every analysis module.

The accumulator scans the input once and hands over these counters. The
engine never sees individual reads; every module is a pure function of one
``ReadAggregate`` plus the analysis configuration.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from streamqc.engine.stats import NUM_GC_BINS
from streamqc.errors import AggregateMismatch

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

# Order of the per-position base counters.
BASE_ORDER = ("A", "C", "T", "G")


class ReadAggregate(BaseModel):
    """Counters accumulated over one input file (read-only)."""

    model_config = ConfigDict(frozen=True)

    schema_version: int = Field(default=SCHEMA_VERSION, description="Counter set version")

    # Input identification
    filename: str = Field(default="stdin", description="Input identifier shown in reports")
    file_type: str = Field(default="Conventional base calls")
    encoding: str = Field(default="Sanger / Illumina 1.9")

    # Read counts and lengths
    num_reads: int = Field(..., ge=0)
    min_read_length: int = Field(..., ge=0)
    max_read_length: int = Field(..., ge=0)
    read_length_freq: dict[int, int] = Field(..., description="Read length -> number of reads")

    # Quality
    position_quality_count: list[list[int]] = Field(
        ..., description="[position][quality value] -> bases"
    )
    quality_count: list[int] = Field(..., description="Mean read quality -> number of reads")

    # Composition
    base_count: list[list[int]] = Field(..., description="[position] -> A, C, T, G counts")
    n_base_count: list[int] = Field(..., description="[position] -> N count")
    gc_count: list[float] = Field(..., description="GC percent (0-100) -> number of reads")

    # Tiles
    tile_position_quality: dict[int, list[float]] = Field(
        ..., description="Tile -> summed quality per position"
    )
    tile_position_count: dict[int, list[int]] = Field(
        ..., description="Tile -> bases per position"
    )

    # Sequence frequencies
    sequence_count: dict[str, int] = Field(..., description="Sequence -> times observed")
    count_at_limit: int = Field(..., ge=0, description="Reads inspected while tracking frequencies")

    # K-mers
    kmer_size: int = Field(default=7, ge=1)
    kmer_count: list[dict[int, int]] = Field(
        ..., description="[position] -> packed k-mer -> occurrences ending at that position"
    )
    pos_kmer_count: list[int] = Field(..., description="[position] -> total k-mers")

    @field_validator("schema_version")
    @classmethod
    def _check_schema_version(cls, value: int) -> int:
        if value != SCHEMA_VERSION:
            raise ValueError(
                f"unsupported aggregate schema version {value} (expected {SCHEMA_VERSION})"
            )
        return value

    @field_validator("sequence_count")
    @classmethod
    def _check_sequence_counts(cls, value: dict[str, int]) -> dict[str, int]:
        for sequence, count in value.items():
            if count < 1:
                raise ValueError(f"sequence {sequence} has count {count}, expected at least 1")
        return value

    @field_validator("gc_count")
    @classmethod
    def _check_gc_bins(cls, value: list[float]) -> list[float]:
        if len(value) != NUM_GC_BINS:
            raise ValueError(f"gc_count must have {NUM_GC_BINS} bins, got {len(value)}")
        return value

    @field_validator("base_count")
    @classmethod
    def _check_base_rows(cls, value: list[list[int]]) -> list[list[int]]:
        for position, row in enumerate(value):
            if len(row) != len(BASE_ORDER):
                raise ValueError(
                    f"base_count[{position}] must hold {len(BASE_ORDER)} counts, got {len(row)}"
                )
        return value

    @model_validator(mode="after")
    def _check_totals(self) -> ReadAggregate:
        if self.min_read_length > self.max_read_length:
            raise ValueError(
                f"min_read_length {self.min_read_length} exceeds "
                f"max_read_length {self.max_read_length}"
            )
        if self.count_at_limit > self.num_reads:
            raise ValueError(
                f"count_at_limit {self.count_at_limit} exceeds num_reads {self.num_reads}"
            )
        if self.sequence_count and self.num_reads == 0:
            raise ValueError("sequence frequencies recorded for an aggregate with no reads")
        return self

    def require_positions(self, counter: str, num_positions: int) -> list[Any]:
        """Return a per-position counter, checking it covers ``num_positions``.

        Raises:
            AggregateMismatch: If the counter is shorter than requested.
        """
        values = getattr(self, counter)
        if len(values) < num_positions:
            raise AggregateMismatch(
                f"counter {counter} covers {len(values)} positions but "
                f"{num_positions} are needed ({self.filename})"
            )
        return values

    def bases_at(self, position: int) -> int:
        """Total bases (A, C, T, G and N) observed at a 0-based position."""
        return sum(self.base_count[position]) + self.n_base_count[position]

    @property
    def total_bases(self) -> int:
        return sum(length * count for length, count in self.read_length_freq.items())

    @property
    def total_gc(self) -> int:
        """G and C bases over all positions."""
        c_index, g_index = BASE_ORDER.index("C"), BASE_ORDER.index("G")
        return sum(row[c_index] + row[g_index] for row in self.base_count)


def parse_aggregate(data: dict[str, Any], source: str = "<memory>") -> ReadAggregate:
    """Validate a decoded aggregate document.

    Raises:
        AggregateMismatch: When a counter is missing or malformed.
    """
    if not isinstance(data, dict):
        raise AggregateMismatch(f"aggregate in {source} must be a JSON object")
    try:
        return ReadAggregate.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise AggregateMismatch(f"invalid aggregate in {source}: {problems}") from e


def load_aggregate(path: Path | str) -> ReadAggregate:
    """Load an aggregate snapshot written as JSON by the accumulator."""
    path = Path(path)
    try:
        data = json.loads(path.read_text())
    except OSError as e:
        raise AggregateMismatch(f"cannot read aggregate file {path}: {e.strerror}") from e
    except json.JSONDecodeError as e:
        raise AggregateMismatch(f"aggregate file {path} is not valid JSON: {e}") from e

    aggregate = parse_aggregate(data, source=str(path))
    logger.info(
        "Loaded aggregate for %s: %d reads, lengths %d-%d",
        aggregate.filename,
        aggregate.num_reads,
        aggregate.min_read_length,
        aggregate.max_read_length,
    )
    return aggregate
