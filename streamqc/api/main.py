"""FastAPI application for the streamqc API."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from streamqc import __version__
from streamqc.api.routes import modules_router, reports_router
from streamqc.errors import AggregateMismatch


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="streamqc",
        description="Grades sequencing read aggregates with pass/warn/fail QC modules",
        version=__version__,
    )

    app.include_router(modules_router)
    app.include_router(reports_router)

    @app.exception_handler(AggregateMismatch)
    async def aggregate_mismatch_handler(request: Request, exc: AggregateMismatch):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.get("/api/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "streamqc API",
            "version": __version__,
            "docs_url": "/docs",
        }

    return app


# Create the app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "streamqc.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
