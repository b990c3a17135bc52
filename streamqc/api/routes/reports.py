"""Report generation routes."""

import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from streamqc.config import AnalysisConfig, load_config
from streamqc.engine.aggregate import ReadAggregate
from streamqc.engine.executor import ModuleExecutor
from streamqc.engine.report import QCReport, report_to_text
from streamqc.errors import ConfigError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reports", tags=["reports"])


class GenerateReportRequest(BaseModel):
    """Request to grade one aggregate."""

    aggregate: ReadAggregate
    nogroup: bool = Field(default=False, description="Report every base position separately")


def _build_config(request: GenerateReportRequest) -> AnalysisConfig:
    try:
        return load_config(kmer_size=request.aggregate.kmer_size, nogroup=request.nogroup)
    except ConfigError as e:
        logger.error("Failed to load configuration: %s", e)
        raise HTTPException(status_code=500, detail=str(e))


async def _generate(request: GenerateReportRequest) -> QCReport:
    executor = ModuleExecutor(_build_config(request))
    results = await executor.execute_async(request.aggregate)
    return QCReport(filename=request.aggregate.filename, results=results)


@router.post("", response_model=QCReport)
async def generate_report(request: GenerateReportRequest) -> QCReport:
    """Run every enabled module and return the combined report."""
    return await _generate(request)


@router.post("/text", response_class=PlainTextResponse)
async def generate_report_text(request: GenerateReportRequest) -> str:
    """Same as ``generate_report`` but returns the tab-separated data file."""
    return report_to_text(await _generate(request))
