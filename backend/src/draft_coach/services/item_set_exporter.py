"""Export build text as a League client item set.

Only the item-bearing sections are used: STARTING ITEMS, CORE BUILD and
SITUATIONAL ITEMS. Each line is reduced to a bare item name before it is
resolved and canonicalized:

- bullets and list numbers ("1. ", "2) ") are stripped;
- in SITUATIONAL ITEMS only, the line is cut at the first colon whose index
  falls in ``SITUATIONAL_COLON_WINDOW`` ("Mortal Reminder: vs healing");
  colons outside the window belong to the name;
- a trailing parenthesized aside is dropped;
- an explicit quantity ("2x Health Potion", "Health Potion x2") becomes the
  count, otherwise the count is 1.

An export that resolves no item at all is reported as a failure: the text was
unparseable or wholly unresolved rather than legitimately empty.
"""

import logging
import re
from collections.abc import Mapping
from typing import Optional

from draft_coach.models.item_set import ItemBlock, ItemSet, ItemSetExport, ResolvedItem
from draft_coach.models.sections import ITEM_SECTIONS, SectionTitle
from draft_coach.utils.item_ids import DEFAULT_ID_POLICY, ItemIdPolicy, canonicalize_item_id
from draft_coach.utils.name_resolver import DEFAULT_POLICY, MatchPolicy, resolve
from draft_coach.utils.section_parser import clean_line, parse_sections

logger = logging.getLogger(__name__)

BLOCK_TITLES = {
    SectionTitle.STARTING_ITEMS: "Starting Items",
    SectionTitle.CORE_BUILD: "Core Build",
    SectionTitle.SITUATIONAL_ITEMS: "Situational Items",
}

# Inclusive bounds of the colon index that separates name from condition
SITUATIONAL_COLON_WINDOW = (3, 44)
MIN_ITEM_NAME_LENGTH = 3

_LIST_NUMBER = re.compile(r"^\d+\s*[.)]\s*")
_QUANTITY_PREFIX = re.compile(r"^(\d+)\s*[x×]\s+", re.IGNORECASE)
_QUANTITY_SUFFIX = re.compile(r"\s+[x×]\s*(\d+)$", re.IGNORECASE)


def strip_trailing_aside(text: str) -> str:
    """Drop a trailing parenthesized clause.

    "Infinity Edge (crit scaling)" -> "Infinity Edge". Without a closing
    parenthesis at the end, everything from the last unmatched "(" is
    dropped ("Zhonya's Hourglass (vs AD" -> "Zhonya's Hourglass").
    """
    text = text.rstrip()
    depth = 0
    closes_at_end = text.endswith(")")
    for index in range(len(text) - 1, -1, -1):
        char = text[index]
        if char == ")":
            depth += 1
        elif char == "(":
            if closes_at_end:
                depth -= 1
                if depth == 0:
                    return text[:index].rstrip()
            elif depth == 0:
                return text[:index].rstrip()
            else:
                depth -= 1
    return text


def _cut_at_condition_colon(text: str) -> str:
    low, high = SITUATIONAL_COLON_WINDOW
    for match in re.finditer(":", text):
        if low <= match.start() <= high:
            return text[: match.start()]
    return text


def _split_quantity(text: str) -> tuple[str, int]:
    match = _QUANTITY_PREFIX.match(text)
    if match:
        return text[match.end():].strip(), max(1, int(match.group(1)))
    match = _QUANTITY_SUFFIX.search(text)
    if match:
        return text[: match.start()].strip(), max(1, int(match.group(1)))
    return text, 1


def parse_item_line(line: str, situational: bool = False) -> Optional[tuple[str, int]]:
    """Reduce a section line to ``(item name, count)``, or None if too short."""
    text = _LIST_NUMBER.sub("", clean_line(line))
    if situational:
        text = _cut_at_condition_colon(text)
    text = strip_trailing_aside(text).strip()
    text, count = _split_quantity(text)
    if len(text) < MIN_ITEM_NAME_LENGTH:
        return None
    return text, count


class ItemSetExporter:
    """Builds item sets from build text against an item-id directory."""

    def __init__(
        self,
        match_policy: MatchPolicy = DEFAULT_POLICY,
        id_policy: ItemIdPolicy = DEFAULT_ID_POLICY,
    ):
        self.match_policy = match_policy
        self.id_policy = id_policy

    def export(
        self,
        text: str,
        item_ids: Mapping[str, str],
        title: str = "Draft Coach build",
        champion_key: Optional[int] = None,
    ) -> ItemSetExport:
        """Export the item sections of a build as an item set.

        Args:
            text: Raw build text
            item_ids: Normalized item name -> item id directory
            title: Item set title shown in the client
            champion_key: Numeric champion key to associate the set with

        Returns:
            ItemSetExport; ``ok`` is False when nothing resolved
        """
        blocks: dict[SectionTitle, ItemBlock] = {}
        unresolved: list[str] = []

        for section in parse_sections(text):
            if section.title not in ITEM_SECTIONS:
                continue
            block = blocks.setdefault(section.title, ItemBlock(type=BLOCK_TITLES[section.title]))
            situational = section.title == SectionTitle.SITUATIONAL_ITEMS

            for line in section.content_lines:
                parsed = parse_item_line(line, situational=situational)
                if parsed is None:
                    continue
                name, count = parsed
                raw_id = resolve(name, item_ids, self.match_policy)
                if raw_id is None:
                    unresolved.append(name)
                    continue
                block.items.append(
                    ResolvedItem(
                        display_name=name,
                        canonical_id=canonicalize_item_id(raw_id, self.id_policy),
                        count=count,
                    )
                )

        item_set = ItemSet(
            title=title,
            blocks=[blocks[t] for t in ITEM_SECTIONS if t in blocks and blocks[t].items],
            associated_champions=[champion_key] if champion_key is not None else [],
        )

        if item_set.item_count == 0:
            logger.warning(f"Item set export resolved no items ({len(unresolved)} unresolved)")
            return ItemSetExport(
                ok=False,
                message="No items could be resolved from the build text",
                unresolved=unresolved,
            )

        if unresolved:
            logger.info(f"Item set export skipped unresolved items: {unresolved}")
        return ItemSetExport(ok=True, item_set=item_set, unresolved=unresolved)
