import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from rankedsearch.config import settings
from rankedsearch.middleware.request_logging import RequestLoggingMiddleware
from rankedsearch.services.search.query_engine import EngineState, SearchService

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: load the prebuilt index; a failed load leaves the app up but degraded
    if not hasattr(app.state, "search_service"):
        app.state.search_service = SearchService(settings.index_path)
    if app.state.search_service.state is EngineState.UNLOADED:
        app.state.search_service.load()
    yield


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Ranked full-text search over a prebuilt TF-IDF index.",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)

# --- Routers ---
from rankedsearch.api.v1 import search  # noqa: E402

app.include_router(search.router, prefix="/api/v1", tags=["Search"])
app.include_router(search.static_router, tags=["Index"])


@app.get("/api/v1/health", tags=["Health"])
async def health_check():
    service: SearchService = app.state.search_service
    ready = service.state is EngineState.READY
    index_info = {"state": service.state.value}
    if ready:
        index_info["documents"] = service.index.total_docs
        index_info["terms"] = len(service.index.vocabulary)

    return {
        "status": "healthy" if ready else "degraded",
        "version": settings.app_version,
        "index": index_info,
    }
