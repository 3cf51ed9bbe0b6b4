"""Data Dragon metadata client.

Builds the name directories the resolver works against:
item name -> id / icon URL, summoner spell -> icon, rune (and rune tree,
stat shard) -> icon, champion -> numeric key. Directories are read-only
snapshots built once per game version; the current version itself is held in
an ``ExpiringValue`` so it is re-checked after its TTL.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

import httpx

from draft_coach.utils.expiring_value import ExpiringValue
from draft_coach.utils.name_resolver import NameDirectory

logger = logging.getLogger(__name__)

# Stat shards are not listed in runesReforged.json
STAT_SHARD_ICONS = {
    "adaptive force": "perk-images/StatMods/StatModsAdaptiveForceIcon.png",
    "attack speed": "perk-images/StatMods/StatModsAttackSpeedIcon.png",
    "ability haste": "perk-images/StatMods/StatModsCDRScalingIcon.png",
    "cooldown reduction": "perk-images/StatMods/StatModsCDRScalingIcon.png",
    "armor": "perk-images/StatMods/StatModsArmorIcon.png",
    "magic resist": "perk-images/StatMods/StatModsMagicResIcon.png",
    "magic resistance": "perk-images/StatMods/StatModsMagicResIcon.png",
    "health": "perk-images/StatMods/StatModsHealthScalingIcon.png",
    "health scaling": "perk-images/StatMods/StatModsHealthScalingIcon.png",
    "move speed": "perk-images/StatMods/StatModsMovementSpeedIcon.png",
    "movement speed": "perk-images/StatMods/StatModsMovementSpeedIcon.png",
    "tenacity": "perk-images/StatMods/StatModsTenacityIcon.png",
}


@dataclass
class IconLookups:
    """Name directories for one Data Dragon version."""

    version: str
    items: NameDirectory = field(default_factory=NameDirectory)  # name -> icon url
    item_ids: NameDirectory = field(default_factory=NameDirectory)  # name -> item id
    spells: NameDirectory = field(default_factory=NameDirectory)  # name -> icon url
    runes: NameDirectory = field(default_factory=NameDirectory)  # name -> icon url
    champions: NameDirectory = field(default_factory=NameDirectory)  # name or id -> numeric key


def build_icon_lookups(
    version: str,
    item_data: dict,
    summoner_data: dict,
    rune_data: list,
    champion_data: Optional[dict] = None,
    base_url: str = "https://ddragon.leagueoflegends.com",
) -> IconLookups:
    """Turn raw Data Dragon JSON documents into name directories."""
    cdn = f"{base_url}/cdn"

    items: list[tuple[str, str]] = []
    item_ids: list[tuple[str, str]] = []
    for item_id, item in (item_data.get("data") or {}).items():
        name = item.get("name")
        if not name:
            continue
        items.append((name, f"{cdn}/{version}/img/item/{item_id}.png"))
        item_ids.append((name, str(item_id)))

    spells = [
        (spell["name"], f"{cdn}/{version}/img/spell/{spell['id']}.png")
        for spell in (summoner_data.get("data") or {}).values()
        if spell.get("name") and spell.get("id")
    ]

    runes: list[tuple[str, str]] = []
    for tree in rune_data or []:
        runes.append((tree["name"], f"{cdn}/img/{tree['icon']}"))
        for slot in tree.get("slots", []):
            for rune in slot.get("runes", []):
                runes.append((rune["name"], f"{cdn}/img/{rune['icon']}"))
    runes.extend((name, f"{cdn}/img/{path}") for name, path in STAT_SHARD_ICONS.items())

    champions: list[tuple[str, str]] = []
    for champ in ((champion_data or {}).get("data") or {}).values():
        if champ.get("key"):
            champions.append((champ.get("name", ""), str(champ["key"])))
            champions.append((champ.get("id", ""), str(champ["key"])))

    return IconLookups(
        version=version,
        items=NameDirectory(items),
        item_ids=NameDirectory(item_ids),
        spells=NameDirectory(spells),
        runes=NameDirectory(runes),
        champions=NameDirectory(champions),
    )


class DataDragonClient:
    """Fetches the current game version and its name directories."""

    DEFAULT_URL = "https://ddragon.leagueoflegends.com"

    def __init__(
        self,
        base_url: str = DEFAULT_URL,
        timeout: float = 10.0,
        version_ttl_seconds: float = 60 * 60,
        clock: Callable[[], float] = time.time,
        locale: str = "en_US",
    ):
        """Initialize the Data Dragon client.

        Args:
            base_url: Data Dragon root URL
            timeout: Request timeout in seconds
            version_ttl_seconds: How long a fetched version is trusted
            clock: Time source for the version holder
            locale: Locale of the data files
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.locale = locale
        self._version = ExpiringValue[str](version_ttl_seconds, clock=clock)
        self._lookups: dict[str, IconLookups] = {}
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _get_json(self, url: str):
        client = await self._get_client()
        response = await client.get(url)
        response.raise_for_status()
        return response.json()

    async def get_version(self) -> str:
        """Current game version (first entry of versions.json).

        Raises:
            httpx.HTTPError: Version list could not be fetched
        """
        cached = self._version.get()
        if cached:
            return cached

        versions = await self._get_json(f"{self.base_url}/api/versions.json")
        if not versions:
            raise ValueError("Data Dragon returned an empty version list")
        logger.info(f"Data Dragon version: {versions[0]}")
        return self._version.set(versions[0])

    async def get_lookups(self, version: Optional[str] = None) -> IconLookups:
        """Name directories for a version (current version by default)."""
        version = version or await self.get_version()
        if version in self._lookups:
            return self._lookups[version]

        data_url = f"{self.base_url}/cdn/{version}/data/{self.locale}"
        item_data, summoner_data, rune_data, champion_data = await asyncio.gather(
            self._get_json(f"{data_url}/item.json"),
            self._get_json(f"{data_url}/summoner.json"),
            self._get_json(f"{data_url}/runesReforged.json"),
            self._get_json(f"{data_url}/champion.json"),
        )
        lookups = build_icon_lookups(
            version,
            item_data,
            summoner_data,
            rune_data,
            champion_data,
            base_url=self.base_url,
        )
        logger.info(
            f"Loaded Data Dragon {version}: {len(lookups.item_ids)} items, "
            f"{len(lookups.spells)} spells, {len(lookups.runes)} runes"
        )
        self._lookups[version] = lookups
        return lookups
