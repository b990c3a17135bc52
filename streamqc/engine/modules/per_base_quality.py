"""Per base sequence quality: quality quantiles for each base group."""

from __future__ import annotations

from typing import Any

from streamqc.engine.aggregate import ReadAggregate
from streamqc.engine.groups import BaseGroup, make_base_groups, make_default_base_groups
from streamqc.engine.grading import Grade
from streamqc.engine.modules import registry
from streamqc.engine.modules.base import ChartPayload, ChartSeries, QCModule
from streamqc.errors import AggregateMismatch

QUANTILES = (0.1, 0.25, 0.5, 0.75, 0.9)


def histogram_quantiles(histogram: list[int], fractions=QUANTILES) -> list[int]:
    """Quality value at which the cumulative count first reaches each fraction.

    No interpolation: the answer is always a histogram bin.
    """
    total = sum(histogram)
    thresholds = [fraction * total for fraction in fractions]
    found = [0] * len(fractions)
    counts = 0
    for value, count in enumerate(histogram):
        for k, threshold in enumerate(thresholds):
            if counts < threshold <= counts + count:
                found[k] = value
        counts += count
    return found


class GroupQuality:
    """Quality summary of one base group."""

    def __init__(self, group: BaseGroup, histogram: list[int]) -> None:
        self.group = group
        bases = sum(histogram)
        if bases == 0:
            raise AggregateMismatch(f"no quality values recorded for bases {group.label}")
        self.mean = sum(value * count for value, count in enumerate(histogram)) / bases
        (
            self.ldecile,
            self.lquartile,
            self.median,
            self.uquartile,
            self.udecile,
        ) = histogram_quantiles(histogram)


@registry.register
class PerBaseSequenceQuality(QCModule):
    name = "Per base sequence quality"
    key = "per_base_quality"
    family = "quality_base"
    description = "Quality score quantiles along the read"

    def __init__(self, config) -> None:
        super().__init__(config)
        self.lower_warn = self.limit("warn", "quality_base_lower")
        self.lower_error = self.limit("error", "quality_base_lower")
        self.median_warn = self.limit("warn", "quality_base_median")
        self.median_error = self.limit("error", "quality_base_median")

    def summarize_module(self, aggregate: ReadAggregate) -> None:
        num_bases = aggregate.max_read_length
        counts = aggregate.require_positions("position_quality_count", num_bases)

        if self.config.nogroup:
            self.base_groups = make_default_base_groups(num_bases)
        else:
            self.base_groups = make_base_groups(num_bases)

        num_quality_values = max((len(row) for row in counts[:num_bases]), default=0)
        self.groups: list[GroupQuality] = []
        for group in self.base_groups:
            histogram = [0] * num_quality_values
            for position in group.positions():
                for value, count in enumerate(counts[position]):
                    histogram[value] += count
            self.groups.append(GroupQuality(group, histogram))

    def _group_grade(self, group: GroupQuality) -> Grade:
        if group.lquartile < self.lower_error or group.median < self.median_error:
            return Grade.FAIL
        if group.lquartile < self.lower_warn or group.median < self.median_warn:
            return Grade.WARN
        return Grade.PASS

    def make_grade(self) -> None:
        for group in self.groups:
            self.grader.escalate(self._group_grade(group))
            if self.grader.is_failed:
                break

    def table_header(self) -> list[str]:
        return [
            "Base",
            "Mean",
            "Median",
            "Lower Quartile",
            "Upper Quartile",
            "10th Percentile",
            "90th Percentile",
        ]

    def table_rows(self) -> list[list[Any]]:
        return [
            [
                g.group.label,
                g.mean,
                float(g.median),
                float(g.lquartile),
                float(g.uquartile),
                float(g.ldecile),
                float(g.udecile),
            ]
            for g in self.groups
        ]

    def make_chart_data(self) -> ChartPayload:
        colors = {Grade.PASS: "green", Grade.WARN: "yellow", Grade.FAIL: "red"}
        series = [
            ChartSeries(
                name=f"{g.group.label}bp",
                type="box",
                y=[g.ldecile, g.lquartile, g.median, g.uquartile, g.udecile],
                color=colors[self._group_grade(g)],
            )
            for g in self.groups
        ]
        return ChartPayload(
            title="Quality scores across all bases",
            x_label="Position in read (bp)",
            y_label="Phred quality",
            series=series,
        )

    def metrics(self) -> dict[str, Any]:
        return {
            "min_median": min((g.median for g in self.groups), default=None),
            "min_lower_quartile": min((g.lquartile for g in self.groups), default=None),
        }
