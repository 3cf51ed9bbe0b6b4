"""Build text section models."""

from dataclasses import dataclass, field
from enum import Enum


class SectionTitle(str, Enum):
    """Semantic blocks of a generated build answer."""

    RUNES = "RUNES"
    SUMMONERS = "SUMMONERS"
    SKILL_ORDER = "SKILL ORDER"
    STARTING_ITEMS = "STARTING ITEMS"
    CORE_BUILD = "CORE BUILD"
    SITUATIONAL_ITEMS = "SITUATIONAL ITEMS"


# Sections whose lines name purchasable items
ITEM_SECTIONS = (
    SectionTitle.STARTING_ITEMS,
    SectionTitle.CORE_BUILD,
    SectionTitle.SITUATIONAL_ITEMS,
)


@dataclass
class Section:
    """One parsed block of build text.

    ``raw_lines`` keeps blank separators inside the block as empty strings.
    """

    title: SectionTitle
    raw_lines: list[str] = field(default_factory=list)

    @property
    def content(self) -> str:
        return "\n".join(self.raw_lines)

    @property
    def content_lines(self) -> list[str]:
        """Non-blank lines only."""
        return [line for line in self.raw_lines if line.strip()]
