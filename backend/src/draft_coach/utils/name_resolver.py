"""Fuzzy resolution of free-text entity names against a name directory.

Model output names items, runes and summoner spells loosely ("Infinity
Edges", "Berserker’s Greaves", "Zhonya's"). Resolution tries, in order:

1. exact match of the normalized name;
2. exact match after stripping a single trailing "s";
3. scored substring match over every directory key.

The substring score is a heuristic without a correctness guarantee. Its
constants are empirically tuned and exposed through ``MatchPolicy`` so they
can be configured and boundary-tested rather than silently re-derived.
"""

import re
from dataclasses import dataclass
from collections.abc import Iterable, Mapping
from typing import Optional

_APOSTROPHES = re.compile(r"[‘’ʼ`´]")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class MatchPolicy:
    """Tunable constants for scored substring matching."""

    min_query_length: int = 2
    # A best score must strictly exceed this to be accepted
    accept_threshold: float = 0.4
    # Down-weights "query contains key" relative to "key contains query"
    contained_key_penalty: float = 0.8
    # Keys shorter than this never match by being contained in the query
    min_contained_key_length: int = 4


DEFAULT_POLICY = MatchPolicy()


def normalize_name(name: Optional[str]) -> str:
    """Lower-case, unify apostrophes, collapse whitespace, trim."""
    if not name:
        return ""
    normalized = _APOSTROPHES.sub("'", name.lower())
    return _WHITESPACE.sub(" ", normalized).strip()


def score_match(query: str, key: str, policy: MatchPolicy = DEFAULT_POLICY) -> float:
    """Substring similarity of a normalized query against a directory key."""
    if not query or not key:
        return 0.0
    if query in key:
        return len(query) / len(key)
    if len(key) >= policy.min_contained_key_length and key in query:
        return (len(key) / len(query)) * policy.contained_key_penalty
    return 0.0


def resolve_key(
    free_text: Optional[str],
    directory: Mapping[str, str],
    policy: MatchPolicy = DEFAULT_POLICY,
) -> Optional[str]:
    """Return the directory key a free-text name resolves to, or None."""
    query = normalize_name(free_text)
    if len(query) < policy.min_query_length:
        return None

    if query in directory:
        return query

    if query.endswith("s"):
        singular = query[:-1]
        if singular in directory:
            return singular

    best_key: Optional[str] = None
    best_score = 0.0
    for key in directory:
        score = score_match(query, key, policy)
        if score > best_score:
            best_key, best_score = key, score

    if best_key is not None and best_score > policy.accept_threshold:
        return best_key
    return None


def resolve(
    free_text: Optional[str],
    directory: Mapping[str, str],
    policy: MatchPolicy = DEFAULT_POLICY,
) -> Optional[str]:
    """Resolve a free-text name to its identifier (or icon reference).

    Args:
        free_text: Entity name as written by the model
        directory: Normalized name -> identifier mapping
        policy: Substring scoring constants

    Returns:
        The identifier, or None when nothing scores above the threshold
    """
    key = resolve_key(free_text, directory, policy)
    return directory[key] if key is not None else None


class NameDirectory(Mapping[str, str]):
    """Read-only normalized name -> identifier snapshot.

    Keys are normalized on construction; the first identifier seen for a
    normalized name wins.
    """

    def __init__(self, entries: Iterable[tuple[str, str]] | Mapping[str, str] = ()):
        pairs = entries.items() if isinstance(entries, Mapping) else entries
        data: dict[str, str] = {}
        for name, identifier in pairs:
            key = normalize_name(name)
            if key and key not in data:
                data[key] = str(identifier)
        self._data = data

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __iter__(self):
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"NameDirectory({len(self._data)} names)"

    def resolve(self, free_text: Optional[str], policy: MatchPolicy = DEFAULT_POLICY) -> Optional[str]:
        return resolve(free_text, self, policy)
