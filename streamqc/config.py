"""Analysis configuration: limits, adapters and contaminants.

The three plain-text files follow the layout FastQC uses so
existing configuration directories can be reused as-is:

- limits: ``family instruction value`` per line
- adapters: ``name ... sequence`` per line, sequence truncated to k
- contaminants: ``name ... sequence`` per line
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field

from streamqc.errors import ConfigError

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
DEFAULT_LIMITS_FILE = DATA_DIR / "limits.txt"
DEFAULT_ADAPTERS_FILE = DATA_DIR / "adapter_list.txt"
DEFAULT_CONTAMINANTS_FILE = DATA_DIR / "contaminant_list.txt"

# Every limits file must mention each of these at least once.
LIMIT_FAMILIES = (
    "duplication",
    "kmer",
    "n_content",
    "overrepresented",
    "quality_base",
    "sequence",
    "gc_sequence",
    "quality_sequence",
    "tile",
    "sequence_length",
    "adapter",
    "quality_base_lower",
    "quality_base_median",
)

LIMIT_INSTRUCTIONS = ("warn", "error", "ignore")

VALID_BASES = frozenset("ACTG")


class FamilyLimits(BaseModel):
    """warn/error/ignore values for one limit family."""

    warn: float = 0.0
    error: float = 0.0
    ignore: float = 0.0

    @property
    def enabled(self) -> bool:
        return self.ignore == 0.0


class Limits(BaseModel):
    """Threshold table keyed by limit family."""

    families: dict[str, FamilyLimits] = Field(default_factory=dict)
    source: str = Field(default="<memory>", description="File the limits came from")

    def family(self, name: str) -> FamilyLimits:
        try:
            return self.families[name]
        except KeyError:
            raise ConfigError(
                f"instruction for limit {name} not found in file {self.source}"
            ) from None

    def warn(self, name: str) -> float:
        return self.family(name).warn

    def error(self, name: str) -> float:
        return self.family(name).error

    def is_enabled(self, name: str) -> bool:
        return self.family(name).enabled


class NamedSequence(BaseModel):
    """An adapter or contaminant reference entry."""

    name: str
    sequence: str


class AnalysisConfig(BaseModel):
    """Everything the analysis modules read besides the aggregate itself."""

    limits: Limits
    adapters: list[NamedSequence] = Field(default_factory=list)
    contaminants: list[NamedSequence] = Field(default_factory=list)
    kmer_size: int = Field(default=7, description="Length of the counted k-mers")
    overrep_min_fraction: float = Field(
        default=0.001,
        description="Fraction of all reads a sequence must exceed to be overrepresented",
    )
    nogroup: bool = Field(default=False, description="Report every base position separately")
    threads: int = Field(default=1, ge=1)


def _is_content_line(line: str) -> bool:
    stripped = line.strip()
    return bool(stripped) and not stripped.startswith("#")


def parse_limits(text: str, source: str = "<memory>") -> Limits:
    """Parse the contents of a limits file.

    Args:
        text: File contents.
        source: Name used in error messages.

    Returns:
        The parsed Limits.

    Raises:
        ConfigError: On unknown families or instructions, malformed lines,
            or a family missing from the file.
    """
    families: dict[str, FamilyLimits] = {}

    for lineno, line in enumerate(text.splitlines(), start=1):
        if not _is_content_line(line):
            continue

        tokens = line.split()
        if len(tokens) < 3:
            raise ConfigError(f"malformed limit line {lineno} in {source}: {line.strip()}")

        family, instruction, raw_value = tokens[0], tokens[1], tokens[2]
        if family not in LIMIT_FAMILIES:
            raise ConfigError(f"unknown limit option: {family} ({source}, line {lineno})")
        if instruction not in LIMIT_INSTRUCTIONS:
            raise ConfigError(
                f"unknown instruction for limit {family}: {instruction} "
                f"({source}, line {lineno})"
            )
        try:
            value = float(raw_value)
        except ValueError:
            raise ConfigError(
                f"non-numeric value for limit {family} {instruction}: {raw_value} "
                f"({source}, line {lineno})"
            ) from None

        limits = families.setdefault(family, FamilyLimits())
        setattr(limits, instruction, value)

    for family in LIMIT_FAMILIES:
        if family not in families:
            raise ConfigError(f"instruction for limit {family} not found in file {source}")

    return Limits(families=families, source=source)


def _read_text(path: Path, what: str) -> str:
    try:
        return Path(path).read_text()
    except OSError as e:
        raise ConfigError(f"{what} file not found: {path} ({e.strerror})") from e


def load_limits(path: Path | str | None = None) -> Limits:
    """Load a limits file, defaulting to the one shipped with the package."""
    path = Path(path) if path is not None else DEFAULT_LIMITS_FILE
    return parse_limits(_read_text(path, "limits"), source=str(path))


def parse_named_sequences(text: str, source: str = "<memory>") -> list[NamedSequence]:
    """Parse an adapter or contaminant list.

    The last whitespace-separated token is the sequence and everything before
    it is the name. Comment lines and lines with a single token are skipped.
    """
    entries: list[NamedSequence] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        if not _is_content_line(line):
            continue
        tokens = line.split()
        if len(tokens) < 2:
            continue

        name = " ".join(tokens[:-1])
        sequence = tokens[-1].upper()
        bad = set(sequence) - VALID_BASES
        if bad:
            raise ConfigError(
                f"Bad sequence for {name} (non-ATGC characters) in {source}, "
                f"line {lineno}: {sequence}"
            )
        entries.append(NamedSequence(name=name, sequence=sequence))
    return entries


def load_adapters(path: Path | str | None = None, kmer_size: int = 7) -> list[NamedSequence]:
    """Load adapters, truncating each sequence to ``kmer_size`` bases."""
    path = Path(path) if path is not None else DEFAULT_ADAPTERS_FILE
    adapters = []
    for entry in parse_named_sequences(_read_text(path, "adapter"), source=str(path)):
        if len(entry.sequence) < kmer_size:
            raise ConfigError(
                f"Adapter {entry.name} in {path} is shorter than the k-mer size "
                f"({len(entry.sequence)} < {kmer_size})"
            )
        adapters.append(NamedSequence(name=entry.name, sequence=entry.sequence[:kmer_size]))
    return adapters


def load_contaminants(path: Path | str | None = None) -> list[NamedSequence]:
    path = Path(path) if path is not None else DEFAULT_CONTAMINANTS_FILE
    return parse_named_sequences(_read_text(path, "contaminants"), source=str(path))


def load_config(
    limits_file: Path | str | None = None,
    adapters_file: Path | str | None = None,
    contaminants_file: Path | str | None = None,
    kmer_size: int = 7,
    nogroup: bool = False,
    threads: int = 1,
) -> AnalysisConfig:
    """Build the full AnalysisConfig from files (or the packaged defaults).

    Reference lists are only read for the modules that use them, so a
    disabled family never requires its file to exist.
    """
    limits = load_limits(limits_file)

    adapters: list[NamedSequence] = []
    if limits.is_enabled("adapter"):
        adapters = load_adapters(adapters_file, kmer_size=kmer_size)

    contaminants: list[NamedSequence] = []
    if limits.is_enabled("overrepresented"):
        contaminants = load_contaminants(contaminants_file)

    logger.debug(
        "Loaded config from %s: %d adapters, %d contaminants",
        limits.source,
        len(adapters),
        len(contaminants),
    )
    return AnalysisConfig(
        limits=limits,
        adapters=adapters,
        contaminants=contaminants,
        kmer_size=kmer_size,
        nogroup=nogroup,
        threads=threads,
    )
