"""Exportable item set models (League client item-set format)."""

from dataclasses import dataclass, field
from typing import Optional

# Summoner's Rift (11) and Howling Abyss (12)
DEFAULT_ASSOCIATED_MAPS = [11, 12]


@dataclass
class ResolvedItem:
    """An item line resolved to its canonical (base) identifier."""

    display_name: str
    canonical_id: str
    count: int = 1

    def to_dict(self) -> dict:
        return {"id": self.canonical_id, "count": self.count}


@dataclass
class ItemBlock:
    """A titled group of items inside an item set."""

    type: str  # "Starting Items", "Core Build", "Situational Items"
    items: list[ResolvedItem] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"type": self.type, "items": [item.to_dict() for item in self.items]}


@dataclass
class ItemSet:
    """A League client item set."""

    title: str
    blocks: list[ItemBlock] = field(default_factory=list)
    associated_champions: list[int] = field(default_factory=list)
    associated_maps: list[int] = field(default_factory=lambda: list(DEFAULT_ASSOCIATED_MAPS))

    @property
    def item_count(self) -> int:
        return sum(len(block.items) for block in self.blocks)

    def to_dict(self) -> dict:
        """Serialize in the client's item-set JSON shape."""
        return {
            "title": self.title,
            "type": "custom",
            "map": "any",
            "mode": "any",
            "priority": False,
            "sortrank": 0,
            "associatedMaps": list(self.associated_maps),
            "associatedChampions": list(self.associated_champions),
            "blocks": [block.to_dict() for block in self.blocks],
        }


@dataclass
class ItemSetExport:
    """Result of exporting build text to an item set.

    ``ok`` is False when no item line resolved at all, which means the text
    was unparseable rather than legitimately empty.
    """

    ok: bool
    item_set: Optional[ItemSet] = None
    message: str = ""
    unresolved: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "item_set": self.item_set.to_dict() if self.item_set else None,
            "message": self.message,
            "unresolved": list(self.unresolved),
        }
