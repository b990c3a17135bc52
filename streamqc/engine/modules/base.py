"""Abstract base class for the analysis modules."""

from __future__ import annotations

import abc
import logging
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from streamqc.config import AnalysisConfig
from streamqc.engine.aggregate import ReadAggregate
from streamqc.engine.grading import Grade, GradeTracker
from streamqc.errors import OrderingViolation

logger = logging.getLogger(__name__)


class ChartSeries(BaseModel):
    """One trace of a chart, in the shape the report template plots."""

    name: str = ""
    type: str = Field(default="line", description="line, bar, box or heatmap")
    x: list[Any] = Field(default_factory=list)
    y: list[Any] = Field(default_factory=list)
    z: list[list[float]] | None = Field(default=None, description="Heatmap values, rows follow y")
    text: list[Any] | None = None
    color: str | None = None


class ChartPayload(BaseModel):
    """Chart-ready data for one module."""

    title: str
    x_label: str = ""
    y_label: str = ""
    series: list[ChartSeries] = Field(default_factory=list)


class ModuleResult(BaseModel):
    """Standardized result of one module run."""

    module_name: str
    key: str = Field(default="", description="Registry key of the module")
    success: bool = True
    grade: Grade = Grade.PASS
    summary: str = Field(default="", description="One-line grade digest")
    text: str = Field(default="", description="Tabular text block")
    chart: ChartPayload | None = Field(default=None, description="None for table-only modules")
    metrics: dict[str, Any] = Field(default_factory=dict, description="Key scalars")
    errors: list[str] = Field(default_factory=list, description="Error messages")
    started_at: datetime = Field(default_factory=datetime.now)
    completed_at: datetime | None = None
    duration_seconds: float = 0.0


class ModuleState(str, Enum):
    CREATED = "created"
    SUMMARIZED = "summarized"
    GRADED = "graded"
    FINALIZED = "finalized"


class QCModule(abc.ABC):
    """Abstract base class for an analysis module.

    A module goes through ``CREATED -> SUMMARIZED -> GRADED -> FINALIZED``
    exactly once, driven by ``run()``. Outputs (grade, text, chart) can only
    be read once the module is finalized.

    Subclasses must implement:
    - `name`, `key` (class attributes): report title and registry key.
    - `summarize_module()`: derive the module's summary from the aggregate.
    - `make_grade()`: escalate ``self.grader`` from the summary.
    - `table_header()` / `table_rows()`: the tabular text block.

    Optionally override:
    - `family` (class attribute): limits family gating the module.
    - `make_chart_data()`: chart payload; keep the default None for
      table-only modules.
    - `metrics()`: key scalars exposed in the ModuleResult.
    """

    name: str = ""
    key: str = ""
    family: str | None = None
    description: str = ""
    version: str = "0.1.0"

    def __init__(self, config: AnalysisConfig) -> None:
        self.config = config
        self.grader = GradeTracker()
        self.state = ModuleState.CREATED
        self._text: str | None = None
        self._chart: ChartPayload | None = None
        self.filename = "stdin"

    @classmethod
    def is_enabled(cls, config: AnalysisConfig) -> bool:
        """Whether the limits file lets this module run."""
        if cls.family is None:
            return True
        return config.limits.is_enabled(cls.family)

    def limit(self, instruction: str, family: str | None = None) -> float:
        family_limits = self.config.limits.family(family or self.family)
        return getattr(family_limits, instruction)

    @abc.abstractmethod
    def summarize_module(self, aggregate: ReadAggregate) -> None:
        """Compute the module's summary. Must not modify ``aggregate``."""
        ...

    @abc.abstractmethod
    def make_grade(self) -> None:
        ...

    @abc.abstractmethod
    def table_header(self) -> list[str]:
        ...

    @abc.abstractmethod
    def table_rows(self) -> list[list[Any]]:
        ...

    def table_preamble(self) -> list[str]:
        """Extra ``#`` lines written above the table header."""
        return []

    def make_chart_data(self) -> ChartPayload | None:
        """Chart payload, or None for table-only modules.

        Table-only modules (basic statistics, overrepresented sequences,
        k-mer content) are rendered from their text block alone.
        """
        return None

    def metrics(self) -> dict[str, Any]:
        return {}

    # -- lifecycle -------------------------------------------------------

    def summarize(self, aggregate: ReadAggregate) -> None:
        self._require_state(ModuleState.CREATED, "summarize")
        self.filename = aggregate.filename
        self.summarize_module(aggregate)
        self.state = ModuleState.SUMMARIZED

    def grade_module(self) -> Grade:
        self._require_state(ModuleState.SUMMARIZED, "grade")
        self.make_grade()
        self.state = ModuleState.GRADED
        return self.grader.grade

    def finalize(self) -> None:
        self._require_state(ModuleState.GRADED, "emit")
        self._text = self.write_module()
        self._chart = self.make_chart_data()
        self.state = ModuleState.FINALIZED

    def run(self, aggregate: ReadAggregate) -> None:
        """Summarize, grade and build both outputs."""
        self.summarize(aggregate)
        self.grade_module()
        self.finalize()
        logger.debug("%s graded %s", self.name, self.grader.grade.value)

    def _require_state(self, expected: ModuleState, action: str) -> None:
        if self.state is not expected:
            raise OrderingViolation(
                f"Attempted to {action} module {self.name!r} in state {self.state.value} "
                f"(expected {expected.value})"
            )

    # -- outputs ---------------------------------------------------------

    @property
    def grade(self) -> Grade:
        self._require_state(ModuleState.FINALIZED, "read the grade of")
        return self.grader.grade

    @property
    def text(self) -> str:
        self._require_state(ModuleState.FINALIZED, "write")
        return self._text

    @property
    def chart(self) -> ChartPayload | None:
        self._require_state(ModuleState.FINALIZED, "chart")
        return self._chart

    def short_summary(self, filename: str | None = None) -> str:
        """``GRADE<TAB>Module name<TAB>filename`` line for the summary digest."""
        grade = self.grade
        return f"{grade.value.upper()}\t{self.name}\t{filename or self.filename}"

    def write_module(self) -> str:
        lines = [f">>{self.name}\t{self.grader.grade.value}"]
        lines.extend("#" + line for line in self.table_preamble())
        lines.append("#" + "\t".join(self.table_header()))
        for row in self.table_rows():
            lines.append("\t".join(format_cell(cell) for cell in row))
        lines.append(">>END_MODULE")
        return "\n".join(lines) + "\n"

    def to_result(self) -> ModuleResult:
        return ModuleResult(
            module_name=self.name,
            key=self.key,
            success=True,
            grade=self.grade,
            summary=self.short_summary(),
            text=self.text,
            chart=self.chart,
            metrics=self.metrics(),
        )


def format_cell(value: Any) -> str:
    """Render a table cell; floats keep up to six significant digits."""
    if isinstance(value, float):
        if value.is_integer():
            return f"{value:.1f}"
        return f"{value:.6g}"
    return str(value)
