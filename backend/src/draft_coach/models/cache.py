"""Build cache and generation result models."""

from dataclasses import asdict, dataclass

# Entries are only ever written by a successful generation
ENTRY_ORIGINS = ("grounded", "cache")


@dataclass
class GenerationResult:
    """Raw model answer for one generation call (not persisted)."""

    text: str
    patch_detected: str


@dataclass
class CacheEntry:
    """A cached build answer keyed by request fingerprint."""

    key: str
    created_at: float  # Unix epoch seconds
    text: str
    patch_detected: str
    origin: str = "grounded"

    def age_seconds(self, now: float) -> float:
        return now - self.created_at

    def is_fresh(self, now: float, ttl_seconds: float) -> bool:
        """Fresh while strictly younger than the TTL."""
        return self.age_seconds(now) < ttl_seconds

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "CacheEntry":
        origin = data.get("origin", "grounded")
        return cls(
            key=str(data["key"]),
            created_at=float(data["created_at"]),
            text=str(data["text"]),
            patch_detected=str(data.get("patch_detected", "")),
            origin=origin if origin in ENTRY_ORIGINS else "grounded",
        )
