"""Structured, icon-linked view of a build answer."""

from dataclasses import asdict, dataclass, field
from typing import Optional


@dataclass
class IconRef:
    """A named entity and the icon it resolved to (if any)."""

    name: str
    icon: Optional[str] = None


@dataclass
class RunePage:
    """Runes section split into trees, keystone and stat shards."""

    primary_tree: Optional[IconRef] = None
    keystone: Optional[IconRef] = None
    primary_runes: list[IconRef] = field(default_factory=list)
    secondary_tree: Optional[IconRef] = None
    secondary_runes: list[IconRef] = field(default_factory=list)
    shards: list[IconRef] = field(default_factory=list)


@dataclass
class SummonerSpell:
    name: str
    reason: Optional[str] = None
    icon: Optional[str] = None


@dataclass
class ItemLine:
    """A starting/core item line: optional list number and reason."""

    name: str
    number: Optional[int] = None
    reason: Optional[str] = None
    icon: Optional[str] = None


@dataclass
class SituationalItem:
    name: str
    condition: Optional[str] = None
    icon: Optional[str] = None


@dataclass
class StructuredBuild:
    """Rendered build. ``sections_found`` False means show ``raw_text`` as-is."""

    sections_found: bool
    raw_text: str = ""
    runes: Optional[RunePage] = None
    summoners: list[SummonerSpell] = field(default_factory=list)
    skill_order: list[str] = field(default_factory=list)
    starting_items: list[ItemLine] = field(default_factory=list)
    core_build: list[ItemLine] = field(default_factory=list)
    situational_items: list[SituationalItem] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)
