import pytest

from conftest import NUM_QUALITY_VALUES, NUM_READS, READ_LENGTH, make_aggregate
from streamqc.config import NamedSequence
from streamqc.engine.grading import Grade
from streamqc.engine.kmers import encode_kmer
from streamqc.engine.modules import REPORT_ORDER, ModuleState, registry
from streamqc.engine.modules.adapter_content import AdapterContent
from streamqc.engine.modules.basic_statistics import BasicStatistics
from streamqc.engine.modules.duplication import SequenceDuplicationLevels, duplication_bin
from streamqc.engine.modules.gc_content import PerSequenceGCContent
from streamqc.engine.modules.kmer_content import KmerContent
from streamqc.engine.modules.n_content import PerBaseNContent
from streamqc.engine.modules.overrepresented import (
    NO_HIT,
    OverrepresentedSequences,
    find_matching_contaminant,
)
from streamqc.engine.modules.per_base_content import PerBaseSequenceContent
from streamqc.engine.modules.per_base_quality import PerBaseSequenceQuality, histogram_quantiles
from streamqc.engine.modules.per_sequence_quality import PerSequenceQualityScores
from streamqc.engine.modules.per_tile_quality import PerTileSequenceQuality
from streamqc.engine.modules.sequence_length import SequenceLengthDistribution
from streamqc.errors import AggregateMismatch, OrderingViolation


def _run(module_cls, config, aggregate):
    module = module_cls(config)
    module.run(aggregate)
    return module


def _quality_rows(quality: int) -> list[list[int]]:
    row = [0] * NUM_QUALITY_VALUES
    row[quality] = NUM_READS
    return [list(row) for _ in range(READ_LENGTH)]


# -- lifecycle -------------------------------------------------------------


def test_registry_holds_every_module_in_report_order():
    assert registry.keys() == list(REPORT_ORDER)


def test_default_limits_skip_kmer_module(config):
    keys = [module.key for module in registry.build(config)]
    assert "kmer_content" not in keys
    assert keys[0] == "basic_statistics"


def test_outputs_unavailable_before_run(config, aggregate):
    module = BasicStatistics(config)
    with pytest.raises(OrderingViolation):
        module.text
    with pytest.raises(OrderingViolation):
        module.grade
    with pytest.raises(OrderingViolation):
        module.grade_module()


def test_phases_run_exactly_once(config, aggregate):
    module = _run(BasicStatistics, config, aggregate)
    assert module.state is ModuleState.FINALIZED
    with pytest.raises(OrderingViolation):
        module.summarize(aggregate)


def test_text_block_layout(config, aggregate):
    module = _run(BasicStatistics, config, aggregate)
    lines = module.text.splitlines()

    assert lines[0] == ">>Basic Statistics\tpass"
    assert lines[1] == "#Measure\tValue"
    assert lines[-1] == ">>END_MODULE"
    assert module.short_summary() == "PASS\tBasic Statistics\tsample.fastq"


# -- basic statistics ------------------------------------------------------


def test_basic_statistics(config, aggregate):
    module = _run(BasicStatistics, config, aggregate)

    assert module.grade is Grade.PASS
    assert "Total Sequences\t1000" in module.text
    assert "Sequence length\t50" in module.text
    assert "%GC\t50" in module.text
    assert "Average read length\t50.0" in module.text
    assert module.metrics()["avg_read_length"] == 50.0


# -- per base quality ------------------------------------------------------


def test_histogram_quantiles_pick_bins_without_interpolation():
    histogram = [0, 0, 10, 10, 10, 10, 10]
    assert histogram_quantiles(histogram) == [2, 3, 4, 5, 6]


def test_histogram_quantiles_are_monotonic():
    histogram = [3, 0, 7, 1, 0, 0, 12, 40, 2, 9]
    quantiles = histogram_quantiles(histogram)
    assert quantiles == sorted(quantiles)


@pytest.mark.parametrize("quality, expected", [(30, Grade.PASS), (22, Grade.WARN), (15, Grade.FAIL)])
def test_per_base_quality_grades_on_median(config, quality, expected):
    aggregate = make_aggregate(position_quality_count=_quality_rows(quality))
    module = _run(PerBaseSequenceQuality, config, aggregate)
    assert module.grade is expected


def test_per_base_quality_groups_long_reads(config):
    length = 100
    row = [0] * NUM_QUALITY_VALUES
    row[30] = 10
    aggregate = make_aggregate(
        max_read_length=length,
        position_quality_count=[list(row) for _ in range(length)],
    )
    module = _run(PerBaseSequenceQuality, config, aggregate)

    labels = [group.group.label for group in module.groups]
    assert labels[9] == "10-14"
    assert module.chart.series[0].color == "green"


def test_per_base_quality_needs_every_position(config):
    aggregate = make_aggregate(position_quality_count=_quality_rows(30)[:10])
    with pytest.raises(AggregateMismatch):
        _run(PerBaseSequenceQuality, config, aggregate)


# -- per tile quality ------------------------------------------------------


def _tiles(good: float, bad: float, per_tile: int = 500):
    return {
        "tile_position_quality": {
            1101: [good * per_tile] * READ_LENGTH,
            1102: [bad * per_tile] * READ_LENGTH,
        },
        "tile_position_count": {1101: [per_tile] * READ_LENGTH, 1102: [per_tile] * READ_LENGTH},
    }


@pytest.mark.parametrize(
    "bad, expected",
    [(30.0, Grade.PASS), (24.0, Grade.PASS), (18.0, Grade.WARN), (10.0, Grade.FAIL)],
)
def test_tile_deviation_from_positional_mean(config, bad, expected):
    module = _run(PerTileSequenceQuality, config, make_aggregate(**_tiles(30.0, bad)))
    assert module.grade is expected


def test_tile_deviations_are_relative_to_mean(config):
    module = _run(PerTileSequenceQuality, config, make_aggregate(**_tiles(30.0, 18.0)))
    assert module.deviations[1101][0] == pytest.approx(6.0)
    assert module.deviations[1102][0] == pytest.approx(-6.0)
    assert module.tiles_sorted == [1101, 1102]


def test_tile_without_bases_is_a_mismatch(config):
    data = _tiles(30.0, 30.0)
    data["tile_position_count"][1102][3] = 0
    with pytest.raises(AggregateMismatch):
        _run(PerTileSequenceQuality, config, make_aggregate(**data))


# -- per sequence quality --------------------------------------------------


@pytest.mark.parametrize("quality, expected", [(30, Grade.PASS), (25, Grade.WARN), (12, Grade.FAIL)])
def test_per_sequence_quality_mode(config, quality, expected):
    quality_count = [0] * NUM_QUALITY_VALUES
    quality_count[quality] = NUM_READS
    quality_count[35] = 10
    module = _run(PerSequenceQualityScores, config, make_aggregate(quality_count=quality_count))
    assert module.mode_quality == quality
    assert module.grade is expected


# -- per base content ------------------------------------------------------


def test_per_base_content_flags_biased_position(config):
    base_count = [[250, 250, 250, 250] for _ in range(READ_LENGTH)]
    base_count[0] = [400, 100, 250, 250]
    module = _run(PerBaseSequenceContent, config, make_aggregate(base_count=base_count))

    assert module.max_diff == pytest.approx(30.0)
    assert module.grade is Grade.FAIL
    assert "#Base\tG\tA\tT\tC" in module.text


# -- GC content ------------------------------------------------------------


def test_gc_spike_passes(config, aggregate):
    module = _run(PerSequenceGCContent, config, aggregate)
    assert module.deviation == 0.0
    assert module.grade is Grade.PASS
    assert len(module.chart.series) == 2


def test_bimodal_gc_fails(config):
    gc_count = [0.0] * 101
    gc_count[30] = 500.0
    gc_count[70] = 500.0
    module = _run(PerSequenceGCContent, config, make_aggregate(gc_count=gc_count))
    assert module.grade is Grade.FAIL


def test_empty_gc_histogram_is_a_mismatch(config):
    with pytest.raises(AggregateMismatch):
        _run(PerSequenceGCContent, config, make_aggregate(gc_count=[0.0] * 101))


# -- N content -------------------------------------------------------------


def test_n_content_warns(config):
    base_count = [[250, 250, 250, 250] for _ in range(READ_LENGTH)]
    base_count[0] = [225, 225, 225, 225]
    n_base_count = [0] * READ_LENGTH
    n_base_count[0] = 100
    module = _run(
        PerBaseNContent, config, make_aggregate(base_count=base_count, n_base_count=n_base_count)
    )
    assert module.n_pct[0] == pytest.approx(10.0)
    assert module.grade is Grade.WARN


# -- sequence length -------------------------------------------------------


def test_uniform_lengths_pass(config, aggregate):
    module = _run(SequenceLengthDistribution, config, aggregate)
    assert module.grade is Grade.PASS
    assert module.table_rows() == [[50, 1000]]


def test_mixed_lengths_warn(config):
    aggregate = make_aggregate(min_read_length=40, read_length_freq={40: 10, 50: 990})
    module = _run(SequenceLengthDistribution, config, aggregate)
    assert module.grade is Grade.WARN


def test_empty_reads_fail(config):
    aggregate = make_aggregate(min_read_length=0, read_length_freq={0: 5, 50: 995})
    module = _run(SequenceLengthDistribution, config, aggregate)
    assert module.grade is Grade.FAIL


# -- duplication -----------------------------------------------------------


@pytest.mark.parametrize(
    "level, index",
    [(1, 0), (9, 8), (10, 9), (49, 9), (50, 10), (999, 12), (1000, 13), (10000, 15), (123456, 15)],
)
def test_duplication_bins(level, index):
    assert duplication_bin(level) == index


@pytest.mark.parametrize("level", [0, -1])
def test_duplication_bin_rejects_levels_below_one(level):
    with pytest.raises(ValueError, match="at least 1"):
        duplication_bin(level)


def test_duplication_percentages(config):
    aggregate = make_aggregate(
        num_reads=16,
        count_at_limit=16,
        sequence_count={"AAAA": 1, "CCCC": 1, "GGGG": 2, "TTTT": 12},
    )
    module = _run(SequenceDuplicationLevels, config, aggregate)

    assert module.total_deduplicated_pct == pytest.approx(25.0)
    assert sum(module.percentage_deduplicated) == pytest.approx(100.0)
    assert sum(module.percentage_total) == pytest.approx(100.0)
    assert module.percentage_total[9] == pytest.approx(75.0)
    assert module.grade is Grade.FAIL
    assert module.text.splitlines()[1] == "#Total Deduplicated Percentage\t25"


def test_all_unique_reads_pass_duplication(config, aggregate):
    module = _run(SequenceDuplicationLevels, config, aggregate)
    assert module.total_deduplicated_pct == pytest.approx(100.0)
    assert module.grade is Grade.PASS


def test_duplication_without_sequences_is_a_mismatch(config):
    with pytest.raises(AggregateMismatch):
        _run(SequenceDuplicationLevels, config, make_aggregate(sequence_count={}))


# -- overrepresented sequences ---------------------------------------------


def test_contaminant_contained_in_sequence():
    contaminants = [NamedSequence(name="X", sequence="ACGT")]
    assert find_matching_contaminant("ACGTACGT", contaminants) == "X"


def test_sequence_contained_in_contaminant():
    contaminants = [NamedSequence(name="Y", sequence="ACGTACGT")]
    assert find_matching_contaminant("ACGT", contaminants) == "Y"


def test_longest_contained_contaminant_wins():
    contaminants = [
        NamedSequence(name="short", sequence="ACG"),
        NamedSequence(name="long", sequence="ACGTAC"),
    ]
    assert find_matching_contaminant("ACGTACGT", contaminants) == "long"


def test_no_matching_contaminant():
    contaminants = [NamedSequence(name="X", sequence="GGGG")]
    assert find_matching_contaminant("ACGTACGT", contaminants) == NO_HIT


def test_overrepresented_sequences_are_sorted_and_annotated(config):
    adapter = "GATCGGAAGAGCACACGTCT"
    sequence_count = {"ACGT" * 5: 1, adapter + "AAAA": 20, "TTTTTTTTTT": 5}
    module = _run(
        OverrepresentedSequences, config, make_aggregate(sequence_count=sequence_count)
    )

    assert [row[0] for row in module.sequences] == [adapter + "AAAA", "TTTTTTTTTT"]
    assert module.sequences[0][2] == pytest.approx(2.0)
    assert module.sequences[0][3] == "Illumina Multiplexing Adapter 1"
    assert module.sequences[1][3] == NO_HIT
    assert module.grade is Grade.FAIL


def test_no_overrepresented_sequences_pass(config, aggregate):
    module = _run(OverrepresentedSequences, config, aggregate)
    assert module.sequences == []
    assert module.grade is Grade.PASS


# -- adapter content -------------------------------------------------------


def _with_adapter_hits(aggregate_data: dict, position: int, count: int) -> list[dict[int, int]]:
    code = encode_kmer("AGATCGG")
    kmer_count = [dict(row) for row in aggregate_data["kmer_count"]]
    kmer_count[position][code] = count
    return kmer_count


def test_adapter_percentages_are_cumulative(config, aggregate_data):
    kmer_count = _with_adapter_hits(aggregate_data, position=10, count=100)
    module = _run(AdapterContent, config, make_aggregate(kmer_count=kmer_count))

    universal = module.adapter_names.index("Illumina Universal Adapter")
    assert module.percentages[9][universal] == 0.0
    assert module.percentages[10][universal] == pytest.approx(10.0)
    assert module.percentages[-1][universal] == pytest.approx(10.0)
    assert module.grade is Grade.WARN


def test_adapter_positions_without_kmers_report_zero(config, aggregate):
    module = _run(AdapterContent, config, aggregate)
    assert module.percentages[0] == [0.0] * len(config.adapters)
    assert module.grade is Grade.PASS


# -- k-mer content ---------------------------------------------------------


def _kmer_tables(enriched_at: int | None = None):
    kmer_count = []
    pos_kmer_count = []
    for i in range(READ_LENGTH):
        if i < 6:
            kmer_count.append({})
            pos_kmer_count.append(0)
            continue
        row = {code: 50 for code in range(20)}
        if i == enriched_at:
            row = {code: 10 for code in range(20)}
            row[5] = 810
        kmer_count.append(row)
        pos_kmer_count.append(1000)
    return {"kmer_count": kmer_count, "pos_kmer_count": pos_kmer_count}


def test_enriched_kmer_is_reported(kmer_config):
    module = _run(KmerContent, kmer_config, make_aggregate(**_kmer_tables(enriched_at=30)))

    assert module.num_seen_kmers == 20
    assert len(module.enriched) == 1
    top = module.enriched[0]
    assert top.sequence == "AAAAACC"
    assert top.max_ratio == pytest.approx(16.2)
    assert top.max_position == 31
    assert module.table_rows()[0][2] == "0.0"


def test_kmer_module_always_fails(kmer_config):
    module = _run(KmerContent, kmer_config, make_aggregate(**_kmer_tables()))
    assert module.enriched == []
    assert module.grade is Grade.FAIL
