"""Shared fixtures: sample build answers, name directories and fake time."""

import pytest

from draft_coach.models.cache import GenerationResult
from draft_coach.services.ddragon_client import build_icon_lookups
from draft_coach.utils.name_resolver import NameDirectory

SAMPLE_BUILD = """Here is the build for this matchup.

**RUNES**
Primary: Precision
Keystone: Lethal Tempo
Presence of Mind
Legend: Alacrity
Cut Down
Secondary: Inspiration
Magical Footwear
Biscuit Delivery
Shards: Attack Speed, Adaptive Force, Health Scaling

**SUMMONERS**
Flash
Heal (lane sustain)

**SKILL ORDER**
Q > W > E > R

**STARTING ITEMS**
- Doran's Blade
- Health Potion

**CORE BUILD**
1. Kraken Slayer (on-hit damage)
2. Berserker’s Greaves (attack speed)
3. Infinity Edge (crit scaling)
4. Lord Dominik's Regards (armor penetration)
5. Phantom Dancer (survivability)
6. Bloodthirster (sustain)

**SITUATIONAL ITEMS**
Guardian Angel: vs burst assassins
Mercurial Scimitar: vs heavy crowd control
Mortal Reminder: vs healing
Maw of Malmortius: vs heavy AP
"""

ITEM_IDS = {
    "Boots of Speed": "1001",
    "Doran's Blade": "1055",
    "Health Potion": "2003",
    "Berserker's Greaves": "3006",
    "Guardian Angel": "3026",
    "Infinity Edge": "3031",
    "Mortal Reminder": "3033",
    "Lord Dominik's Regards": "3036",
    "Phantom Dancer": "3046",
    "Bloodthirster": "3072",
    "Mercurial Scimitar": "3139",
    "Maw of Malmortius": "3156",
    "Zhonya's Hourglass": "3157",
    "Kraken Slayer": "6672",
}

ITEM_JSON = {"data": {item_id: {"name": name} for name, item_id in ITEM_IDS.items()}}

SUMMONER_JSON = {
    "data": {
        "SummonerFlash": {"id": "SummonerFlash", "name": "Flash"},
        "SummonerHeal": {"id": "SummonerHeal", "name": "Heal"},
        "SummonerDot": {"id": "SummonerDot", "name": "Ignite"},
    }
}

RUNES_JSON = [
    {
        "name": "Precision",
        "icon": "perk-images/Styles/7201_Precision.png",
        "slots": [
            {"runes": [{"name": "Lethal Tempo", "icon": "perk-images/Styles/Precision/LethalTempo/LethalTempoTemp.png"}]},
            {"runes": [{"name": "Presence of Mind", "icon": "perk-images/Styles/Precision/PresenceOfMind/PresenceOfMind.png"}]},
            {"runes": [{"name": "Legend: Alacrity", "icon": "perk-images/Styles/Precision/LegendAlacrity/LegendAlacrity.png"}]},
            {"runes": [{"name": "Cut Down", "icon": "perk-images/Styles/Precision/CutDown/CutDown.png"}]},
        ],
    },
    {
        "name": "Inspiration",
        "icon": "perk-images/Styles/7203_Whimsy.png",
        "slots": [
            {"runes": [{"name": "Magical Footwear", "icon": "perk-images/Styles/Inspiration/MagicalFootwear/MagicalFootwear.png"}]},
            {"runes": [{"name": "Biscuit Delivery", "icon": "perk-images/Styles/Inspiration/BiscuitDelivery/BiscuitDelivery.png"}]},
        ],
    },
]

CHAMPION_JSON = {
    "data": {
        "Jinx": {"id": "Jinx", "key": "222", "name": "Jinx"},
        "KSante": {"id": "KSante", "key": "897", "name": "K'Sante"},
    }
}


class FakeClock:
    """Manually advanced time source (seconds)."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedClient:
    """Generation client replaying a script of texts and exceptions.

    The last scripted response repeats once the script runs out.
    """

    def __init__(self, *responses, patch: str = "26.4"):
        self.responses = list(responses)
        self.patch = patch
        self.calls: list[bool] = []  # short_prompt flag per call

    async def generate(self, request, short_prompt: bool) -> GenerationResult:
        self.calls.append(short_prompt)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return GenerationResult(text=response, patch_detected=self.patch)

    async def close(self):
        pass


@pytest.fixture
def sample_build():
    return SAMPLE_BUILD


@pytest.fixture
def item_directory():
    return NameDirectory(ITEM_IDS)


@pytest.fixture
def icon_lookups():
    return build_icon_lookups("26.4.1", ITEM_JSON, SUMMONER_JSON, RUNES_JSON, CHAMPION_JSON)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def anyio_backend():
    # The code under test is asyncio-specific (asyncio.to_thread/gather).
    return "asyncio"
