"""Routes describing the registered analysis modules."""

from fastapi import APIRouter
from pydantic import BaseModel

from streamqc.engine.modules import registry


router = APIRouter(prefix="/api/modules", tags=["modules"])


class ModuleInfo(BaseModel):
    """Metadata of one analysis module."""

    key: str
    name: str
    description: str
    family: str
    version: str


@router.get("", response_model=list[ModuleInfo])
async def list_modules() -> list[ModuleInfo]:
    """List the analysis modules in report order."""
    return [ModuleInfo(**info) for info in registry.info()]
