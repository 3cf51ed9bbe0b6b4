"""Centralized role normalization utility.

Build requests arrive with whatever role label the client uses. The canonical
format is lowercase: top, jungle, mid, adc, support.
"""

from typing import Optional

# Canonical roles - the standard format used throughout the application
CANONICAL_ROLES = frozenset({"top", "jungle", "mid", "adc", "support"})

# Mapping from any known role format to canonical lowercase (keys are lowercase)
ROLE_ALIASES: dict[str, str] = {
    # Top lane variations
    "top": "top",
    "top laner": "top",
    "toplane": "top",

    # Jungle variations
    "jungle": "jungle",
    "jungler": "jungle",
    "jng": "jungle",
    "jg": "jungle",

    # Mid lane variations
    "mid": "mid",
    "middle": "mid",
    "mid laner": "mid",
    "midlane": "mid",

    # Bot/ADC variations - all normalize to "adc"
    "adc": "adc",
    "bot": "adc",
    "bottom": "adc",
    "bot laner": "adc",
    "ad carry": "adc",
    "marksman": "adc",

    # Support variations
    "support": "support",
    "sup": "support",
    "supp": "support",
    "utility": "support",
}

# Bottom laners get a seventh item slot
ITEM_SLOTS_BY_ROLE = {"adc": 7}
DEFAULT_ITEM_SLOTS = 6


def normalize_role(role: Optional[str]) -> Optional[str]:
    """Normalize a role string to canonical lowercase format.

    Examples:
        >>> normalize_role("JNG")
        'jungle'
        >>> normalize_role("Bottom")
        'adc'
        >>> normalize_role("") is None
        True
    """
    if role is None:
        return None

    role_lower = " ".join(role.strip().lower().split())
    if not role_lower:
        return None

    return ROLE_ALIASES.get(role_lower)


def is_bottom_role(role: Optional[str]) -> bool:
    """Check whether a role plays in the bottom lane carry slot."""
    return normalize_role(role) == "adc"


def item_slots_for_role(role: Optional[str]) -> int:
    """Number of item slots the CORE BUILD should fill for a role."""
    return ITEM_SLOTS_BY_ROLE.get(normalize_role(role) or "", DEFAULT_ITEM_SLOTS)
