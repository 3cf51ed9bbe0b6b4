"""Split free-form build text into named sections.

The model is asked for a fixed layout (RUNES, SUMMONERS, SKILL ORDER, ...) but
routinely decorates it: markdown headings, bold markers, bullets, a colon or a
short note after the header. Header recognition therefore works on a cleaned,
uppercased, punctuation-stripped copy of each line and accepts any line that
equals or starts with a known header token.

Parsing is total: text without a recognizable header yields no sections and
the caller falls back to showing the raw text.
"""

import re
from typing import Optional

from draft_coach.models.sections import Section, SectionTitle

# Header tokens, longest first so "SUMMONER SPELLS" wins over shorter tokens
HEADER_TOKENS: list[tuple[str, SectionTitle]] = sorted(
    [
        ("RUNES", SectionTitle.RUNES),
        ("SUMMONERS", SectionTitle.SUMMONERS),
        ("SUMMONER SPELLS", SectionTitle.SUMMONERS),
        ("SKILL ORDER", SectionTitle.SKILL_ORDER),
        ("STARTING ITEMS", SectionTitle.STARTING_ITEMS),
        ("CORE BUILD", SectionTitle.CORE_BUILD),
        ("SITUATIONAL ITEMS", SectionTitle.SITUATIONAL_ITEMS),
    ],
    key=lambda pair: len(pair[0]),
    reverse=True,
)

_EMPHASIS = re.compile(r"\*\*|__")
# Single * or _ opening or closing a word; inner underscores and lone bullets stay
_SINGLE_EMPHASIS = re.compile(r"(?<!\w)[*_](?=\S)|(?<=\S)[*_](?!\w)")
_LEADING_MARKERS = re.compile(r"^(?:[#>*•\-]+\s*)+")
_HEADER_PUNCTUATION = re.compile(r"[#*\-:]")
_TRAILING_SEPARATOR = re.compile(r"^[\s:*_\-–—]+")


def clean_line(line: str) -> str:
    """Strip emphasis markers and leading bullet/heading markers."""
    cleaned = _EMPHASIS.sub("", line.strip())
    cleaned = _SINGLE_EMPHASIS.sub("", cleaned)
    cleaned = _LEADING_MARKERS.sub("", cleaned)
    return cleaned.strip()


def _header_key(cleaned: str) -> str:
    return _HEADER_PUNCTUATION.sub("", cleaned.upper()).strip()


def match_header(cleaned: str) -> Optional[tuple[str, SectionTitle]]:
    """Return the (token, title) a cleaned line opens, if any."""
    key = _header_key(cleaned)
    if not key:
        return None
    for token, title in HEADER_TOKENS:
        if key == token or key.startswith(token):
            return token, title
    return None


def _header_remainder(cleaned: str, token: str) -> str:
    """Text following the header token on its own line."""
    pattern = r"[\s\-]*".join(re.escape(word) for word in token.split())
    match = re.match(pattern, cleaned, re.IGNORECASE)
    if not match:
        return ""
    return _TRAILING_SEPARATOR.sub("", cleaned[match.end():]).strip()


def _close(section: Optional[Section], sections: list[Section]) -> None:
    if section is None:
        return
    lines = section.raw_lines
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    sections.append(section)


def parse_sections(raw_text: Optional[str]) -> list[Section]:
    """Split build text into ordered sections.

    Args:
        raw_text: Model answer, possibly markdown-decorated

    Returns:
        Sections in order of appearance; empty when no header is recognized
    """
    sections: list[Section] = []
    current: Optional[Section] = None

    for line in (raw_text or "").splitlines():
        cleaned = clean_line(line)

        if not cleaned:
            if current is not None:
                current.raw_lines.append("")
            continue

        header = match_header(cleaned)
        if header:
            token, title = header
            _close(current, sections)
            current = Section(title=title)
            remainder = _header_remainder(cleaned, token)
            if remainder:
                current.raw_lines.append(remainder)
        elif current is not None:
            current.raw_lines.append(cleaned)

    _close(current, sections)
    return sections


def sections_by_title(sections: list[Section]) -> dict[SectionTitle, list[Section]]:
    """Group sections by title, keeping order (a title may repeat)."""
    grouped: dict[SectionTitle, list[Section]] = {}
    for section in sections:
        grouped.setdefault(section.title, []).append(section)
    return grouped
