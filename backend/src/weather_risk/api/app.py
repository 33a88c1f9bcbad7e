"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from weather_risk.errors import DataNotLoadedError, InvalidInputError, InvalidRangeError
from weather_risk.ingest.orchestrator import load_variables
from weather_risk.store import TimeSeriesStore


def create_app(files: dict[str, Path] | None = None) -> FastAPI:
    """Build the app. files overrides config.VARIABLE_FILES (variable_id -> path)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build the in-memory indices on startup, close on shutdown."""
        store = TimeSeriesStore()
        load_variables(store, files)
        app.state.store = store
        app.state.files = files
        yield
        store.close()

    app = FastAPI(
        title="Weather Risk API",
        version="0.1.0",
        description="Historical threshold risk for weather variables",
        lifespan=lifespan,
    )

    # CORS for frontend dev
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DataNotLoadedError)
    async def not_loaded_handler(request: Request, exc: DataNotLoadedError):
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(InvalidInputError)
    @app.exception_handler(InvalidRangeError)
    async def bad_request_handler(request: Request, exc: ValueError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    from weather_risk.api.routers import analysis, manage, variables

    app.include_router(variables.router, prefix="/variables", tags=["variables"])
    app.include_router(analysis.router, prefix="/analysis", tags=["analysis"])
    app.include_router(manage.router, prefix="/manage", tags=["manage"])

    @app.get("/health")
    def health(request: Request):
        store: TimeSeriesStore = request.app.state.store
        return {"status": "ok", "loaded": store.loaded_variables()}

    return app
