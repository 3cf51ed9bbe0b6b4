"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from draft_coach.config import settings
from draft_coach.api.routes.build import router as build_router
from draft_coach.services.build_cache import BuildCache
from draft_coach.services.build_orchestrator import BuildOrchestrator
from draft_coach.services.build_renderer import BuildRenderer
from draft_coach.services.ddragon_client import DataDragonClient
from draft_coach.services.gemini_client import get_build_client
from draft_coach.services.item_set_exporter import ItemSetExporter
from draft_coach.utils.item_ids import ItemIdPolicy
from draft_coach.utils.name_resolver import MatchPolicy

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def get_match_policy() -> MatchPolicy:
    """Name resolver policy from settings."""
    return MatchPolicy(
        min_query_length=settings.resolver_min_query_length,
        accept_threshold=settings.resolver_accept_threshold,
        contained_key_penalty=settings.resolver_contained_key_penalty,
        min_contained_key_length=settings.resolver_min_contained_key_length,
    )


def get_item_id_policy() -> ItemIdPolicy:
    """Item id canonicalization policy from settings."""
    return ItemIdPolicy(
        trigger_length=settings.item_id_trigger_length,
        base_ceiling=settings.item_id_base_ceiling,
        base_digits=settings.item_id_base_digits,
        fallback_digits=settings.item_id_fallback_digits,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup: services already placed on app.state (e.g. by tests) are kept
    if not hasattr(app.state, "orchestrator"):
        if settings.use_mock_llm:
            client = get_build_client(use_mock=True, default_patch=settings.default_patch)
        else:
            client = get_build_client(
                api_key=settings.gemini_api_key,
                model=settings.gemini_model,
                api_url=settings.gemini_api_url,
                timeout=settings.gemini_timeout,
                default_patch=settings.default_patch,
            )
        app.state.build_client = client
        app.state.orchestrator = BuildOrchestrator(
            client=client,
            cache=BuildCache(settings.cache_path),
            max_attempts=settings.generation_max_attempts,
            backoff_base_ms=settings.generation_backoff_base_ms,
            ttl_hours=settings.cache_ttl_hours,
        )
        logger.info(f"Build cache at {settings.cache_path}")
    if not hasattr(app.state, "ddragon"):
        app.state.ddragon = DataDragonClient(
            base_url=settings.ddragon_url,
            timeout=settings.ddragon_timeout,
            version_ttl_seconds=settings.ddragon_version_ttl_seconds,
        )
    if not hasattr(app.state, "renderer"):
        app.state.renderer = BuildRenderer(match_policy=get_match_policy())
    if not hasattr(app.state, "exporter"):
        app.state.exporter = ItemSetExporter(
            match_policy=get_match_policy(),
            id_policy=get_item_id_policy(),
        )
    yield
    # Shutdown: close HTTP clients
    if hasattr(app.state, "build_client"):
        await app.state.build_client.close()
    await app.state.ddragon.close()


app = FastAPI(
    title="Draft Coach",
    description="LoL build assistant - grounded item/rune/skill builds",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for the desktop renderer
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Draft Coach API",
        "version": "0.1.0",
        "docs": "/docs",
    }


# Register routers
app.include_router(build_router)


def run():
    """Run the API server with uvicorn."""
    import uvicorn

    uvicorn.run("draft_coach.main:app", host=settings.host, port=settings.port)
