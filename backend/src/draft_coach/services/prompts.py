"""Prompt templates for grounded build generation.

Two variants exist. The long prompt pins the exact output layout the section
parser expects and instructs the model to answer ``NEED_RETRY`` when it cannot
ground the answer in current patch data. The short prompt drops the grounding
demand and is only used as an escalation after a ``NEED_RETRY``.
"""

from draft_coach.models.build import BuildRequest
from draft_coach.utils.role_normalizer import item_slots_for_role

NEED_RETRY = "NEED_RETRY"

LONG_SYSTEM_PROMPT = """You are a League of Legends draft and itemization engine. You MUST use Google Search grounding to verify current live patch data (Patch {patch}). If you cannot confirm current patch-relevant details via grounding, output exactly: NEED_RETRY.

Return ONLY these sections in this exact format:

RUNES
Primary: <TreeName>
Keystone: <RuneName>
<Rune1>
<Rune2>
<Rune3>
Secondary: <TreeName>
<Rune1>
<Rune2>
Shards: <Shard1>, <Shard2>, <Shard3>

SUMMONERS
<Spell1>
<Spell2>

SKILL ORDER
<Key> > <Key> > <Key> > <Key>

STARTING ITEMS
<Item1>
<Item2>

CORE BUILD
1. <Item1> (<why this item>)
2. <Item2> (<why this item>)
3. <Item3> (<why this item>)
4. <Item4> (<why this item>)
5. <Item5> (<why this item>)
6. <Item6> (<why this item>)

SITUATIONAL ITEMS
<ItemName>: <when to buy and why>
<ItemName>: <when to buy and why>
<ItemName>: <when to buy and why>
<ItemName>: <when to buy and why>

Rules:
- CORE BUILD must ALWAYS have exactly 6 items (7 items if the role is Bottom/ADC, since bottom laners have 7 item slots).
- SITUATIONAL ITEMS must ALWAYS have at least 4 items with clear conditions (e.g. "vs heavy AP", "if behind", "vs tanks").
- Boots count as a core item. Include them in CORE BUILD.
- Never suggest removed items or removed runes.
- If unsure, output NEED_RETRY.
- Adapt to enemy comp.
- For jungle, include jungle companion start.
- Keep names exactly as in-game.
- Do NOT add explanations or extra text outside the sections."""

SHORT_SYSTEM_PROMPT = """You are a League of Legends build advisor. Return ONLY: RUNES, SUMMONERS, SKILL ORDER, STARTING ITEMS, CORE BUILD, SITUATIONAL ITEMS. Keep names exactly as in-game. Adapt to enemy comp. CORE BUILD must have exactly 6 items (7 for Bottom/ADC role). SITUATIONAL ITEMS must have at least 4 items with conditions. Boots count as a core item."""


def build_system_prompt(patch: str, short_prompt: bool) -> str:
    """System instruction for the requested prompt variant."""
    if short_prompt:
        return SHORT_SYSTEM_PROMPT
    return LONG_SYSTEM_PROMPT.format(patch=patch)


def build_user_message(request: BuildRequest, patch: str) -> str:
    """Per-request user turn: champion, role, rosters and slot count."""
    item_slots = item_slots_for_role(request.role)
    allies = ", ".join(request.ally_set) or "none"
    enemies = ", ".join(request.enemy_set) or "none"
    return (
        f"Champion: {request.champion_id}, Role: {request.role}, "
        f"Allies: {allies}, Enemies: {enemies}, Patch: {patch}. "
        f"This role has {item_slots} item slots, so CORE BUILD must list exactly "
        f"{item_slots} items. Generate optimized build. Output only the sections."
    )


def is_need_retry(text: str) -> bool:
    """The model's self-reported inability to ground its answer."""
    return text.strip() == NEED_RETRY
