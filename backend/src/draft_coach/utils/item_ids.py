"""Canonicalization of vendor item identifiers.

Data Dragon lists some items under variant ids: a numeric prefix over the
base id (arena copies, e.g. ``223031`` for Infinity Edge
``3031``). Exported item sets must reference the base id.

This unwinds the current prefixing scheme only. If Data Dragon changes its id
ranges, re-derive ``ItemIdPolicy`` from the new ranges instead of patching the
function.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ItemIdPolicy:
    """Versioned thresholds for unwinding prefixed item ids."""

    # Ids at least this long carry a variant prefix
    trigger_length: int = 6
    # Largest valid 4-digit base id; above it the base is 5 digits
    base_ceiling: int = 7000
    base_digits: int = 4
    fallback_digits: int = 5


DEFAULT_ID_POLICY = ItemIdPolicy()


def canonicalize_item_id(raw_id: str | int, policy: ItemIdPolicy = DEFAULT_ID_POLICY) -> str:
    """Map a (possibly prefixed) item id to its base id.

    Examples:
        >>> canonicalize_item_id("223031")
        '3031'
        >>> canonicalize_item_id("3031")
        '3031'
    """
    raw = str(raw_id).strip()
    if len(raw) < policy.trigger_length:
        return raw

    candidate = raw[-policy.base_digits:]
    if not candidate.isdigit():
        return raw
    if int(candidate) > policy.base_ceiling:
        return raw[-policy.fallback_digits:]
    return candidate
