"""Render build text into a structured, icon-linked build."""

import logging
import re
from collections.abc import Mapping
from typing import Optional

from draft_coach.models.sections import Section, SectionTitle
from draft_coach.models.structured import (
    IconRef,
    ItemLine,
    RunePage,
    SituationalItem,
    StructuredBuild,
    SummonerSpell,
)
from draft_coach.services.ddragon_client import IconLookups
from draft_coach.services.item_set_exporter import strip_trailing_aside
from draft_coach.utils.name_resolver import DEFAULT_POLICY, MatchPolicy, resolve
from draft_coach.utils.section_parser import parse_sections

logger = logging.getLogger(__name__)

# Situational lines split into name/condition on a colon before this index
CONDITION_COLON_LIMIT = 40

_RUNE_LABEL = re.compile(r"^(primary|secondary|keystone|shards?)\s*:\s*(.*)$", re.IGNORECASE)
_RUNE_PREFIX = re.compile(r"^(legend|rune)\s*:\s*", re.IGNORECASE)
_NUMBERED = re.compile(r"^(\d+)\.\s*(.+)$")
_REASON = re.compile(r"^([^(]+)\((.+)\)\s*$")


class BuildRenderer:
    """Turns raw build text into a ``StructuredBuild``."""

    def __init__(self, match_policy: MatchPolicy = DEFAULT_POLICY):
        self.match_policy = match_policy

    def _icon(self, name: str, directory: Optional[Mapping[str, str]]) -> Optional[str]:
        if not directory or not name:
            return None
        return resolve(name, directory, self.match_policy)

    def _rune(self, name: str, runes: Optional[Mapping[str, str]]) -> IconRef:
        icon = self._icon(name, runes)
        if icon is None:
            bare = _RUNE_PREFIX.sub("", name).strip()
            if bare != name:
                icon = self._icon(bare, runes)
        return IconRef(name=name, icon=icon)

    def render_runes(self, section: Section, runes: Optional[Mapping[str, str]]) -> RunePage:
        page = RunePage()
        keystone = ""
        primary: list[str] = []
        secondary: list[str] = []
        shards: list[str] = []
        current = "primary"

        for line in section.content_lines:
            label = _RUNE_LABEL.match(line)
            if label:
                kind, value = label.group(1).lower(), label.group(2).strip()
                if kind == "primary":
                    page.primary_tree = self._rune(value, runes) if value else None
                    current = "primary"
                elif kind == "secondary":
                    page.secondary_tree = self._rune(value, runes) if value else None
                    current = "secondary"
                elif kind == "keystone":
                    keystone = strip_trailing_aside(value)
                else:
                    shards.extend(s.strip() for s in value.split(",") if s.strip())
                    current = "shards"
                continue

            name = strip_trailing_aside(line)
            if not name:
                continue
            if current == "primary":
                primary.append(name)
            elif current == "secondary":
                secondary.append(name)
            else:
                shards.extend(s.strip() for s in name.split(",") if s.strip())

        # Without a Keystone: line the first primary rune is the keystone
        if not keystone and primary:
            keystone = primary.pop(0)

        page.keystone = self._rune(keystone, runes) if keystone else None
        page.primary_runes = [self._rune(name, runes) for name in primary]
        page.secondary_runes = [self._rune(name, runes) for name in secondary]
        page.shards = [self._rune(name, runes) for name in shards]
        return page

    def render_summoners(self, section: Section, spells: Optional[Mapping[str, str]]) -> list[SummonerSpell]:
        summoners = []
        for line in section.content_lines:
            match = _REASON.match(line)
            name = match.group(1).strip() if match else line.strip()
            reason = match.group(2).strip() if match else None
            summoners.append(SummonerSpell(name=name, reason=reason, icon=self._icon(name, spells)))
        return summoners

    @staticmethod
    def render_skill_order(section: Section) -> list[str]:
        return [part.strip() for part in section.content.replace("\n", " ").split(">") if part.strip()]

    def render_items(self, section: Section, items: Optional[Mapping[str, str]]) -> list[ItemLine]:
        lines = []
        for line in section.content_lines:
            text = line.strip()
            number = None
            numbered = _NUMBERED.match(text)
            if numbered:
                number, text = int(numbered.group(1)), numbered.group(2)

            reason = None
            with_reason = _REASON.match(text)
            if with_reason:
                text, reason = with_reason.group(1).strip(), with_reason.group(2).strip()

            name = text.strip()
            lines.append(ItemLine(name=name, number=number, reason=reason, icon=self._icon(name, items)))
        return lines

    def render_situational(self, section: Section, items: Optional[Mapping[str, str]]) -> list[SituationalItem]:
        situational = []
        for line in section.content_lines:
            text = re.sub(r"^\d+\.\s*", "", line.strip())
            colon = text.find(":")
            if 0 < colon < CONDITION_COLON_LIMIT:
                name, condition = text[:colon].strip(), text[colon + 1:].strip() or None
            else:
                name, condition = text, None
            situational.append(SituationalItem(name=name, condition=condition, icon=self._icon(name, items)))
        return situational

    def render(self, text: str, lookups: Optional[IconLookups] = None) -> StructuredBuild:
        """Render build text; unparseable text comes back as raw text only."""
        sections = parse_sections(text)
        build = StructuredBuild(sections_found=bool(sections), raw_text=text or "")
        if not sections:
            logger.info("No build sections recognized, returning raw text")
            return build

        runes = lookups.runes if lookups else None
        spells = lookups.spells if lookups else None
        items = lookups.items if lookups else None

        for section in sections:
            if section.title == SectionTitle.RUNES:
                build.runes = self.render_runes(section, runes)
            elif section.title == SectionTitle.SUMMONERS:
                build.summoners.extend(self.render_summoners(section, spells))
            elif section.title == SectionTitle.SKILL_ORDER:
                build.skill_order.extend(self.render_skill_order(section))
            elif section.title == SectionTitle.STARTING_ITEMS:
                build.starting_items.extend(self.render_items(section, items))
            elif section.title == SectionTitle.CORE_BUILD:
                build.core_build.extend(self.render_items(section, items))
            elif section.title == SectionTitle.SITUATIONAL_ITEMS:
                build.situational_items.extend(self.render_situational(section, items))
        return build
