"""Metric summarization and grading engine."""

from streamqc.engine.aggregate import ReadAggregate, load_aggregate, parse_aggregate
from streamqc.engine.executor import ModuleExecutor
from streamqc.engine.grading import Grade, GradeTracker
from streamqc.engine.report import (
    QCReport,
    report_to_html,
    report_to_summary,
    report_to_text,
    save_report,
)

__all__ = [
    "Grade",
    "GradeTracker",
    "ModuleExecutor",
    "QCReport",
    "ReadAggregate",
    "load_aggregate",
    "parse_aggregate",
    "report_to_html",
    "report_to_summary",
    "report_to_text",
    "save_report",
]
