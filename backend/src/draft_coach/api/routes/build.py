"""REST endpoints for build generation, rendering and export."""

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from draft_coach.errors import BuildValidationError
from draft_coach.models.build import BuildFailure, BuildRequest
from draft_coach.services.build_orchestrator import BuildOrchestrator
from draft_coach.services.build_renderer import BuildRenderer
from draft_coach.services.ddragon_client import DataDragonClient, IconLookups
from draft_coach.services.item_set_exporter import ItemSetExporter
from draft_coach.utils.name_resolver import normalize_name

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["build"])


class RenderRequest(BaseModel):
    """Request body for rendering build text."""

    text: str
    version: str | None = None  # Data Dragon version; current if omitted


class ExportRequest(BaseModel):
    """Request body for exporting build text as an item set."""

    text: str
    champion: str = ""
    champion_key: int | None = None  # Looked up from the champion name if omitted
    role: str = ""
    title: str | None = None
    version: str | None = None


class VersionResponse(BaseModel):
    version: str


def _failure(status_code: int, message: str, retryable: bool) -> JSONResponse:
    body = BuildFailure(message=message, retryable=retryable)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


async def _load_lookups(ddragon: DataDragonClient, version: Optional[str]) -> IconLookups:
    try:
        return await ddragon.get_lookups(version)
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Data Dragon lookup failed: {e}")
        raise HTTPException(status_code=502, detail=f"Metadata service unavailable: {e}")


@router.get("/version", response_model=VersionResponse)
async def get_version(request: Request):
    """Current game version from Data Dragon."""
    ddragon: DataDragonClient = request.app.state.ddragon
    try:
        version = await ddragon.get_version()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Data Dragon version fetch failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    return VersionResponse(version=version)


@router.post("/build")
async def generate_build(body: BuildRequest, request: Request):
    """Generate (or serve from cache) a build for a champion and roster."""
    orchestrator: BuildOrchestrator = request.app.state.orchestrator
    try:
        outcome = await orchestrator.generate(body)
    except BuildValidationError as e:
        return _failure(400, str(e), retryable=False)
    except Exception as e:
        logger.exception("Unexpected error while generating build")
        return _failure(500, str(e) or "Internal server error", retryable=True)

    if not outcome.ok:
        return _failure(500, outcome.message, retryable=outcome.retryable)
    return outcome.model_dump(mode="json")


@router.post("/build/structured")
async def render_build(body: RenderRequest, request: Request):
    """Split build text into sections and link names to icons.

    Icons are omitted (not an error) when Data Dragon is unreachable.
    """
    renderer: BuildRenderer = request.app.state.renderer
    ddragon: DataDragonClient = request.app.state.ddragon
    try:
        lookups = await ddragon.get_lookups(body.version)
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Rendering without icons, Data Dragon unavailable: {e}")
        lookups = None
    return renderer.render(body.text, lookups).to_dict()


@router.post("/build/export")
async def export_build(body: ExportRequest, request: Request):
    """Export the item sections of a build as a client item set."""
    exporter: ItemSetExporter = request.app.state.exporter
    ddragon: DataDragonClient = request.app.state.ddragon
    lookups = await _load_lookups(ddragon, body.version)

    champion_key = body.champion_key
    if champion_key is None and body.champion:
        key = lookups.champions.get(normalize_name(body.champion))
        champion_key = int(key) if key and key.isdigit() else None

    title = body.title or " ".join(part for part in (body.champion, body.role) if part) or "Draft Coach build"
    result = exporter.export(body.text, lookups.item_ids, title=title, champion_key=champion_key)
    if not result.ok:
        return JSONResponse(status_code=422, content=result.to_dict())
    return result.to_dict()
