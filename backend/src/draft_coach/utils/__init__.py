"""Utility modules for draft_coach."""

from draft_coach.utils.role_normalizer import (
    CANONICAL_ROLES,
    ROLE_ALIASES,
    normalize_role,
    is_bottom_role,
    item_slots_for_role,
)
from draft_coach.utils.name_resolver import (
    DEFAULT_POLICY,
    MatchPolicy,
    NameDirectory,
    normalize_name,
    resolve,
)
from draft_coach.utils.item_ids import DEFAULT_ID_POLICY, ItemIdPolicy, canonicalize_item_id
from draft_coach.utils.expiring_value import ExpiringValue
from draft_coach.utils.section_parser import clean_line, parse_sections

__all__ = [
    "CANONICAL_ROLES",
    "ROLE_ALIASES",
    "normalize_role",
    "is_bottom_role",
    "item_slots_for_role",
    "DEFAULT_POLICY",
    "MatchPolicy",
    "NameDirectory",
    "normalize_name",
    "resolve",
    "DEFAULT_ID_POLICY",
    "ItemIdPolicy",
    "canonicalize_item_id",
    "ExpiringValue",
    "clean_line",
    "parse_sections",
]
