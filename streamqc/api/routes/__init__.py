"""API route modules."""

from streamqc.api.routes.modules import router as modules_router
from streamqc.api.routes.reports import router as reports_router

__all__ = [
    "modules_router",
    "reports_router",
]
