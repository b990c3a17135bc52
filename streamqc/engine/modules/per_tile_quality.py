"""Per tile sequence quality: how far each tile sits from the positional mean."""

from __future__ import annotations

from typing import Any

from streamqc.engine.aggregate import ReadAggregate
from streamqc.engine.modules import registry
from streamqc.engine.modules.base import ChartPayload, ChartSeries, QCModule
from streamqc.errors import AggregateMismatch


@registry.register
class PerTileSequenceQuality(QCModule):
    name = "Per tile sequence quality"
    key = "per_tile_quality"
    family = "tile"
    description = "Mean quality deviation of each instrument tile"

    def summarize_module(self, aggregate: ReadAggregate) -> None:
        self.max_read_length = aggregate.max_read_length
        qualities = aggregate.tile_position_quality
        counts = aggregate.tile_position_count

        missing = set(qualities) ^ set(counts)
        if missing:
            raise AggregateMismatch(
                f"tiles {sorted(missing)} lack either qualities or counts"
            )

        num_positions = max((len(v) for v in qualities.values()), default=0)
        position_counts = [0] * num_positions
        position_sums = [0.0] * num_positions
        for tile, tile_qualities in qualities.items():
            tile_counts = counts[tile]
            if len(tile_counts) < len(tile_qualities):
                raise AggregateMismatch(f"tile {tile} has fewer counts than qualities")
            for i, quality in enumerate(tile_qualities):
                position_sums[i] += quality
                position_counts[i] += tile_counts[i]

        mean_in_base = []
        for i in range(num_positions):
            if position_counts[i] == 0:
                raise AggregateMismatch(f"no tile bases recorded at position {i + 1}")
            mean_in_base.append(position_sums[i] / position_counts[i])

        # Deviation of each tile's mean from the across-tile mean; negative
        # means the tile is worse than average.
        self.deviations: dict[int, list[float]] = {}
        for tile, tile_qualities in qualities.items():
            tile_counts = counts[tile]
            row = []
            for i, quality in enumerate(tile_qualities):
                if tile_counts[i] == 0:
                    raise AggregateMismatch(f"tile {tile} has no bases at position {i + 1}")
                row.append(quality / tile_counts[i] - mean_in_base[i])
            self.deviations[tile] = row

        self.tiles_sorted = sorted(self.deviations)
        self.num_positions = num_positions

    def make_grade(self) -> None:
        warn = self.limit("warn")
        error = self.limit("error")
        for tile in self.tiles_sorted:
            for deviation in self.deviations[tile]:
                self.grader.check_below(deviation, -warn, -error, inclusive=True)
                if self.grader.is_failed:
                    return

    def table_header(self) -> list[str]:
        return ["Tile", "Base", "Mean"]

    def table_rows(self) -> list[list[Any]]:
        rows = []
        for tile in self.tiles_sorted:
            for i, deviation in enumerate(self.deviations[tile]):
                rows.append([tile, i + 1, deviation])
        return rows

    def make_chart_data(self) -> ChartPayload:
        z = []
        for tile in self.tiles_sorted:
            row = self.deviations[tile]
            z.append(row + [0.0] * (self.num_positions - len(row)))
        return ChartPayload(
            title="Quality per tile",
            x_label="Position in read (bp)",
            y_label="Tile",
            series=[
                ChartSeries(
                    name="Tile deviation from mean quality",
                    type="heatmap",
                    x=list(range(1, self.num_positions + 1)),
                    y=list(self.tiles_sorted),
                    z=z,
                )
            ],
        )

    def metrics(self) -> dict[str, Any]:
        worst = min((min(row) for row in self.deviations.values() if row), default=0.0)
        return {"num_tiles": len(self.tiles_sorted), "worst_deviation": worst}
