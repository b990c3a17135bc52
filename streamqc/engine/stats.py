"""Numerical helpers shared by the analysis modules."""

from __future__ import annotations

import math
from collections.abc import Sequence

NUM_GC_BINS = 101

# Bins adjacent to the mode stay part of the centroid while above this
# fraction of the modal height.
MODE_NEIGHBOUR_FRACTION = 0.9


def get_corrected_count(
    count_at_limit: int,
    num_reads: int,
    dup_level: int,
    num_obs: float,
) -> float:
    """Extrapolate a duplication class count to the whole file.

    Frequencies are only tracked for the first ``count_at_limit`` reads. A
    sequence seen ``dup_level`` times in the file may have been missed in that
    prefix, so the observed number of distinct sequences at this level
    (``num_obs``) is scaled by the probability of having seen one.

    Args:
        count_at_limit: Reads inspected while frequencies were tracked.
        num_reads: Total reads in the file.
        dup_level: Duplication level r of this class.
        num_obs: Distinct sequences observed exactly r times (Nr).

    Returns:
        The corrected Nr.
    """
    if count_at_limit == num_reads:
        return num_obs

    # Not enough unseen reads left to hide another sequence of this class.
    if num_reads - num_obs < count_at_limit:
        return num_obs

    p_not_seeing = 1.0

    # Below this probability the correction changes Nr by less than 0.01.
    limit_of_caring = 1.0 - (num_obs / (num_obs + 0.01))
    for i in range(count_at_limit):
        p_not_seeing *= ((num_reads - i) - dup_level) / (num_reads - i)
        if p_not_seeing < limit_of_caring:
            p_not_seeing = 0.0
            break

    return num_obs / (1.0 - p_not_seeing)


def gc_mode_centroid(gc_count: Sequence[float]) -> float:
    """Centre of the GC distribution, averaged over the near-modal bins.

    Bins on either side of the first mode are averaged in while they stay
    above 90% of the modal height. If that plateau runs off either end of the
    histogram the distribution is too skewed for the average to mean much and
    the raw mode is returned instead.
    """
    first_mode = 0
    mode_count = 0.0
    for i, count in enumerate(gc_count):
        if count > mode_count:
            mode_count = count
            first_mode = i

    cutoff = mode_count * MODE_NEIGHBOUR_FRACTION
    total = 0.0
    duplicates = 0

    fell_off_top = True
    for i in range(first_mode, len(gc_count)):
        if gc_count[i] > cutoff:
            total += i
            duplicates += 1
        else:
            fell_off_top = False
            break

    fell_off_bottom = True
    for i in range(first_mode - 1, -1, -1):
        if gc_count[i] > cutoff:
            total += i
            duplicates += 1
        else:
            fell_off_bottom = False
            break

    if fell_off_top or fell_off_bottom:
        return float(first_mode)
    return total / duplicates


def theoretical_gc_distribution(
    gc_count: Sequence[float],
) -> tuple[list[float], float, float]:
    """Fit a normal curve to the GC histogram.

    Returns:
        (theoretical bin counts, centroid, standard deviation). The
        theoretical counts sum to the same total as ``gc_count``.
    """
    total_count = float(sum(gc_count))
    mode = gc_mode_centroid(gc_count)

    variance = sum((i - mode) ** 2 * count for i, count in enumerate(gc_count))
    stdev = math.sqrt(variance / total_count)

    if stdev == 0.0:
        # Every read sits in one bin: the fit degenerates to that spike.
        theoretical = [0.0] * len(gc_count)
        theoretical[int(round(mode))] = total_count
        return theoretical, mode, stdev

    theoretical = [math.exp(-((i - mode) ** 2) / (2.0 * stdev * stdev)) for i in range(len(gc_count))]
    theoretical_sum = sum(theoretical)
    theoretical = [t * total_count / theoretical_sum for t in theoretical]
    return theoretical, mode, stdev


def sum_deviation_from_normal(gc_count: Sequence[float]) -> tuple[float, list[float]]:
    """Percentage of reads by which the GC histogram departs from a normal fit.

    Returns:
        (deviation percentage, theoretical bin counts)
    """
    if len(gc_count) != NUM_GC_BINS:
        raise ValueError(f"GC histogram must have {NUM_GC_BINS} bins, got {len(gc_count)}")
    total_count = float(sum(gc_count))
    if total_count <= 0:
        raise ZeroDivisionError("GC histogram is empty")

    theoretical, _, _ = theoretical_gc_distribution(gc_count)
    deviation = sum(abs(observed - expected) for observed, expected in zip(gc_count, theoretical))
    return 100.0 * deviation / total_count, theoretical
