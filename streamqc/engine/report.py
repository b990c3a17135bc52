"""Combined QC report built from the module results.

The report can be rendered as:
- the tab-separated data file (one ``>>Module`` block per module)
- the short pass/warn/fail summary digest
- a standalone HTML page with tables and embedded chart data
- JSON
"""

from __future__ import annotations

import html
import json
import logging
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field

from streamqc import __version__
from streamqc.engine.grading import Grade
from streamqc.engine.modules import ModuleResult

logger = logging.getLogger(__name__)


class QCReport(BaseModel):
    """All module results for one input file."""

    filename: str = Field(..., description="Input identifier")
    results: list[ModuleResult] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=datetime.now)
    version: str = Field(default=__version__)

    @property
    def overall_grade(self) -> Grade:
        worst = Grade.PASS
        for result in self.results:
            if result.grade.rank > worst.rank:
                worst = result.grade
        return worst

    def get(self, key: str) -> ModuleResult | None:
        for result in self.results:
            if result.key == key:
                return result
        return None


def report_to_text(report: QCReport) -> str:
    """Render the tab-separated data file."""
    parts = [f"##StreamQC\t{report.version}\n"]
    for result in report.results:
        if result.success:
            parts.append(result.text)
        else:
            parts.append(f">>{result.module_name}\t{result.grade.value}\n")
            for error in result.errors:
                parts.append(f"#Error\t{error}\n")
            parts.append(">>END_MODULE\n")
    return "".join(parts)


def report_to_summary(report: QCReport) -> str:
    """Render one ``GRADE<TAB>Module<TAB>filename`` line per module."""
    return "".join(f"{result.summary}\n" for result in report.results)


def _text_to_table(text: str) -> str:
    """Turn a module text block into an HTML table."""
    rows = []
    for line in text.splitlines():
        if line.startswith(">>"):
            continue
        tag = "th" if line.startswith("#") else "td"
        cells = line.lstrip("#").split("\t")
        rows.append("<tr>" + "".join(f"<{tag}>{html.escape(c)}</{tag}>" for c in cells) + "</tr>")
    return "<table>" + "".join(rows) + "</table>"


def report_to_html(report: QCReport) -> str:
    """Convert a report to a standalone HTML page.

    Args:
        report: The combined report

    Returns:
        HTML content as a string
    """
    grade_colors = {
        Grade.PASS: "#16a34a",
        Grade.WARN: "#f59e0b",
        Grade.FAIL: "#dc2626",
    }

    html_parts = [
        "<!DOCTYPE html>",
        "<html lang='en'>",
        "<head>",
        "<meta charset='UTF-8'>",
        f"<title>{html.escape(report.filename)} QC report</title>",
        "<style>",
        """
        body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
               line-height: 1.5; color: #1f2937; max-width: 1100px; margin: 0 auto; padding: 2rem; }
        h1 { font-size: 1.8rem; margin-bottom: 0.25rem; }
        h2 { font-size: 1.3rem; margin: 2rem 0 0.75rem; border-bottom: 2px solid #e5e7eb; }
        .meta { color: #6b7280; font-size: 0.875rem; }
        .grade { display: inline-block; color: white; border-radius: 4px; padding: 0 0.5rem;
                 font-size: 0.8rem; text-transform: uppercase; margin-right: 0.5rem; }
        table { border-collapse: collapse; font-size: 0.85rem; margin: 0.5rem 0; }
        th, td { border: 1px solid #e5e7eb; padding: 0.2rem 0.5rem; text-align: left; }
        th { background: #f3f4f6; }
        .error { color: #dc2626; }
        """,
        "</style>",
        "</head>",
        "<body>",
        f"<h1>{html.escape(report.filename)}</h1>",
        f"<p class='meta'>streamqc {html.escape(report.version)} &middot; "
        f"generated {report.generated_at.strftime('%Y-%m-%d %H:%M')}</p>",
        "<h2>Summary</h2>",
        "<ul>",
    ]
    for i, result in enumerate(report.results):
        color = grade_colors[result.grade]
        html_parts.append(
            f"<li><span class='grade' style='background:{color}'>{result.grade.value}</span>"
            f"<a href='#M{i}'>{html.escape(result.module_name)}</a></li>"
        )
    html_parts.append("</ul>")

    for i, result in enumerate(report.results):
        color = grade_colors[result.grade]
        html_parts.append(
            f"<h2 id='M{i}'><span class='grade' style='background:{color}'>"
            f"{result.grade.value}</span>{html.escape(result.module_name)}</h2>"
        )
        if not result.success:
            for error in result.errors:
                html_parts.append(f"<p class='error'>{html.escape(error)}</p>")
            continue
        html_parts.append(_text_to_table(result.text))
        if result.chart is not None:
            # Chart payloads are rendered client side by the page template.
            payload = result.chart.model_dump_json().replace("</", "<\\/")
            html_parts.append(
                f"<script type='application/json' class='chart-data' "
                f"data-module='{html.escape(result.key)}'>{payload}</script>"
            )

    html_parts.extend([
        "</body>",
        "</html>",
    ])
    return "\n".join(html_parts)


def save_report(report: QCReport, output_dir: Path, prefix: str | None = None) -> dict[str, Path]:
    """Write every rendering of the report to ``output_dir``.

    Args:
        report: The report to save
        output_dir: Directory to save to
        prefix: File name prefix (defaults to the input file name)

    Returns:
        Mapping of rendering name to the written path
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    prefix = prefix or Path(report.filename).name or "streamqc"

    paths = {
        "data": output_dir / f"{prefix}_data.txt",
        "summary": output_dir / f"{prefix}_summary.txt",
        "html": output_dir / f"{prefix}_report.html",
        "json": output_dir / f"{prefix}_report.json",
    }
    paths["data"].write_text(report_to_text(report))
    paths["summary"].write_text(report_to_summary(report))
    paths["html"].write_text(report_to_html(report))
    paths["json"].write_text(json.dumps(report.model_dump(mode="json"), indent=2))

    logger.info("Report for %s written to %s", report.filename, output_dir)
    return paths
