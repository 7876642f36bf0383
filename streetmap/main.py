import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from streetmap.config import settings
from streetmap.config.categories import is_valid_category
from streetmap.logging_config import configure_logging
from streetmap.models.entities import EntityKind
from streetmap.models.response import (
    CategorySelection,
    CategorySummary,
    LoadStatus,
    MapCommandBatch,
    SearchResults,
)
from streetmap.services.map.recording_surface import RecordingMapSurface
from streetmap.services.pipeline import StreetMapPipeline

logger = logging.getLogger(__name__)


class ZoomUpdate(BaseModel):
    zoom: int


class FocusResponse(BaseModel):
    focused: bool
    commands: List[Dict[str, Any]] = []


class SelectionResponse(BaseModel):
    selection: CategorySelection
    commands: List[Dict[str, Any]] = []


async def _load_in_background(pipeline: StreetMapPipeline) -> None:
    status = await pipeline.load_roads()
    logger.info("Street data: %s", status.message)
    loaded = await pipeline.preload_all()
    logger.info("Preloaded categories: %s", loaded)


def create_app(
    pipeline: Optional[StreetMapPipeline] = None, *, autoload: bool = True
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        app.state.pipeline = pipeline or StreetMapPipeline()
        loader = None
        if autoload:
            loader = asyncio.create_task(_load_in_background(app.state.pipeline))
        try:
            yield
        finally:
            if loader is not None and not loader.done():
                loader.cancel()
            await app.state.pipeline.aclose()

    app = FastAPI(
        title="Street Map API",
        description="Street and place geodata for the district map",
        version=settings.api_version,
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, specify exact origins
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _pipeline(request: Request) -> StreetMapPipeline:
        return request.app.state.pipeline

    def _drain(pipeline: StreetMapPipeline) -> List[Dict[str, Any]]:
        if isinstance(pipeline.surface, RecordingMapSurface):
            return pipeline.surface.drain()
        return []

    @app.get("/api/v1/status", response_model=LoadStatus)
    async def road_status(request: Request):
        """Road dataset load status"""
        return _pipeline(request).status

    @app.get("/api/v1/categories", response_model=List[CategorySummary])
    async def list_categories(request: Request):
        return _pipeline(request).category_summaries()

    @app.post("/api/v1/categories/{category}/select", response_model=SelectionResponse)
    async def select_category(category: str, request: Request):
        """Toggle a place category on the map"""
        if not is_valid_category(category):
            raise HTTPException(status_code=404, detail=f"Unknown category: {category}")
        pipeline = _pipeline(request)
        selection = await pipeline.select_category(category)
        return SelectionResponse(selection=selection, commands=_drain(pipeline))

    @app.get("/api/v1/search", response_model=SearchResults)
    async def search(request: Request, q: str = Query(default="")):
        """Search roads and loaded places by name"""
        return _pipeline(request).search(q)

    @app.post("/api/v1/focus/{kind}/{entity_id}", response_model=FocusResponse)
    async def focus(
        kind: EntityKind,
        entity_id: int,
        request: Request,
        category: Optional[str] = None,
    ):
        """Highlight a road or fly to a place"""
        pipeline = _pipeline(request)
        focused = await pipeline.focus(entity_id, kind, category=category)
        if not focused:
            raise HTTPException(
                status_code=404, detail=f"{kind.value} {entity_id} is not loaded"
            )
        return FocusResponse(focused=True, commands=_drain(pipeline))

    @app.post("/api/v1/map/zoom", response_model=MapCommandBatch)
    async def report_zoom(update: ZoomUpdate, request: Request):
        """Browser reports a zoom change; returns the resulting label tier changes"""
        pipeline = _pipeline(request)
        if isinstance(pipeline.surface, RecordingMapSurface):
            pipeline.surface.set_zoom(update.zoom)
        return MapCommandBatch(commands=_drain(pipeline))

    @app.get("/api/v1/map/commands", response_model=MapCommandBatch)
    async def pending_commands(request: Request):
        return MapCommandBatch(commands=_drain(_pipeline(request)))

    @app.get("/health")
    async def health_check():
        """Health check"""
        return {"status": "healthy", "version": settings.api_version}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
