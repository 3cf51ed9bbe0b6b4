"""Business logic services."""

from draft_coach.services.build_cache import BuildCache
from draft_coach.services.gemini_client import (
    GeminiBuildClient,
    MockBuildClient,
    get_build_client,
)
from draft_coach.services.build_orchestrator import (
    BuildOrchestrator,
    GenerationRun,
    GenerationState,
)
from draft_coach.services.ddragon_client import DataDragonClient, IconLookups
from draft_coach.services.item_set_exporter import ItemSetExporter
from draft_coach.services.build_renderer import BuildRenderer

__all__ = [
    "BuildCache",
    "GeminiBuildClient",
    "MockBuildClient",
    "get_build_client",
    "BuildOrchestrator",
    "GenerationRun",
    "GenerationState",
    "DataDragonClient",
    "IconLookups",
    "ItemSetExporter",
    "BuildRenderer",
]
