"""Data models for the Draft Coach build assistant."""

from draft_coach.models.build import (
    BuildFailure,
    BuildOutcome,
    BuildRequest,
    BuildSuccess,
    Origin,
)
from draft_coach.models.cache import CacheEntry, GenerationResult
from draft_coach.models.item_set import ItemBlock, ItemSet, ItemSetExport, ResolvedItem
from draft_coach.models.sections import ITEM_SECTIONS, Section, SectionTitle
from draft_coach.models.structured import (
    IconRef,
    ItemLine,
    RunePage,
    SituationalItem,
    StructuredBuild,
    SummonerSpell,
)

__all__ = [
    "BuildFailure",
    "BuildOutcome",
    "BuildRequest",
    "BuildSuccess",
    "Origin",
    "CacheEntry",
    "GenerationResult",
    "ItemBlock",
    "ItemSet",
    "ItemSetExport",
    "ResolvedItem",
    "ITEM_SECTIONS",
    "Section",
    "SectionTitle",
    "IconRef",
    "ItemLine",
    "RunePage",
    "SituationalItem",
    "StructuredBuild",
    "SummonerSpell",
]
