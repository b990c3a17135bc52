import pytest

from streamqc.config import AnalysisConfig, load_config
from streamqc.engine.aggregate import parse_aggregate
from streamqc.engine.kmers import encode_kmer

READ_LENGTH = 50
NUM_READS = 1000
QUALITY = 30
NUM_QUALITY_VALUES = 41
TILES = (1101, 1102)

# Two k-mers that no packaged adapter starts with.
BACKGROUND_KMERS = ("ACACACA", "TGTGTGT")


def _unique_sequence(i: int) -> str:
    prefix = "".join("ACGT"[(i >> (2 * j)) & 3] for j in range(10))
    return prefix + "A" * (READ_LENGTH - len(prefix))


def make_aggregate_data(**overrides) -> dict:
    """A clean run: fixed read length, uniform quality, balanced bases, no Ns.

    Every read is distinct and GC sits at exactly 50%, so every default
    module passes.
    """
    quality_row = [0] * NUM_QUALITY_VALUES
    quality_row[QUALITY] = NUM_READS

    gc_count = [0.0] * 101
    gc_count[50] = float(NUM_READS)

    per_tile = NUM_READS // len(TILES)
    kmer_codes = [encode_kmer(kmer) for kmer in BACKGROUND_KMERS]
    kmer_count = []
    pos_kmer_count = []
    for i in range(READ_LENGTH):
        if i < 6:
            kmer_count.append({})
            pos_kmer_count.append(0)
        else:
            kmer_count.append({code: NUM_READS // len(kmer_codes) for code in kmer_codes})
            pos_kmer_count.append(NUM_READS)

    data = {
        "filename": "sample.fastq",
        "num_reads": NUM_READS,
        "min_read_length": READ_LENGTH,
        "max_read_length": READ_LENGTH,
        "read_length_freq": {READ_LENGTH: NUM_READS},
        "position_quality_count": [list(quality_row) for _ in range(READ_LENGTH)],
        "quality_count": list(quality_row),
        "base_count": [[NUM_READS // 4] * 4 for _ in range(READ_LENGTH)],
        "n_base_count": [0] * READ_LENGTH,
        "gc_count": gc_count,
        "tile_position_quality": {
            tile: [float(QUALITY * per_tile)] * READ_LENGTH for tile in TILES
        },
        "tile_position_count": {tile: [per_tile] * READ_LENGTH for tile in TILES},
        "sequence_count": {_unique_sequence(i): 1 for i in range(NUM_READS)},
        "count_at_limit": NUM_READS,
        "kmer_size": 7,
        "kmer_count": kmer_count,
        "pos_kmer_count": pos_kmer_count,
    }
    data.update(overrides)
    return data


def make_aggregate(**overrides):
    return parse_aggregate(make_aggregate_data(**overrides))


@pytest.fixture
def aggregate_data() -> dict:
    return make_aggregate_data()


@pytest.fixture
def aggregate():
    return make_aggregate()


@pytest.fixture
def config() -> AnalysisConfig:
    return load_config()


@pytest.fixture
def kmer_config() -> AnalysisConfig:
    """Default configuration with the k-mer module switched on."""
    config = load_config()
    families = dict(config.limits.families)
    families["kmer"] = families["kmer"].model_copy(update={"ignore": 0.0})
    limits = config.limits.model_copy(update={"families": families})
    return config.model_copy(update={"limits": limits})
