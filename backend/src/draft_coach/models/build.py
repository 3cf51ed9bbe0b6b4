"""Build request and response models."""

from enum import Enum
from typing import Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from draft_coach.errors import BuildValidationError
from draft_coach.utils.role_normalizer import normalize_role

MAX_ALLIES = 4
MAX_ENEMIES = 5

CACHE_KEY_DELIMITER = "|"
ROSTER_DELIMITER = ","


class Origin(str, Enum):
    """Where a successful build answer came from."""

    GROUNDED = "grounded"  # Fresh generation
    CACHE = "cache"  # Fresh cache entry (< TTL)
    STALE_CACHE = "stale-cache"  # Expired entry served because generation failed


class BuildRequest(BaseModel):
    """Request body for a build generation.

    Fields are lenient on purpose so a missing champion or role surfaces as a
    ``BuildValidationError`` (HTTP 400, ``retryable=False``) rather than a
    schema error.
    """

    model_config = ConfigDict(populate_by_name=True)

    patch: str = ""
    champion_id: str = Field(
        default="",
        validation_alias=AliasChoices("champion_id", "championId", "myChampion"),
    )
    role: str = ""
    allies: list[str] = Field(default_factory=list)
    enemies: list[str] = Field(default_factory=list)

    @field_validator("champion_id", "patch", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role_alias(cls, value):
        if not isinstance(value, str):
            return value
        # Unknown roles are kept as-is and rejected by ensure_valid()
        return normalize_role(value) or value.strip().lower()

    @field_validator("allies", "enemies", mode="before")
    @classmethod
    def clean_roster(cls, value):
        if value is None:
            return []
        if isinstance(value, (list, tuple, set)):
            return [str(v).strip() for v in value if v and str(v).strip()]
        return value

    @property
    def ally_set(self) -> list[str]:
        """Allies with set semantics, sorted."""
        return sorted(set(self.allies))

    @property
    def enemy_set(self) -> list[str]:
        """Enemies with set semantics, sorted."""
        return sorted(set(self.enemies))

    def ensure_valid(self) -> "BuildRequest":
        """Reject requests the generation pipeline cannot serve.

        Raises:
            BuildValidationError: Missing champion/role, unknown role, or an
                oversized roster
        """
        if not self.champion_id or not self.role:
            raise BuildValidationError("Missing required fields")
        if normalize_role(self.role) is None:
            raise BuildValidationError(f"Unknown role: {self.role}")
        if len(self.ally_set) > MAX_ALLIES:
            raise BuildValidationError(f"At most {MAX_ALLIES} allies allowed")
        if len(self.enemy_set) > MAX_ENEMIES:
            raise BuildValidationError(f"At most {MAX_ENEMIES} enemies allowed")
        return self

    def cache_key(self) -> str:
        """Deterministic, roster-order-insensitive cache key."""
        return CACHE_KEY_DELIMITER.join(
            [
                self.patch,
                self.champion_id,
                self.role,
                ROSTER_DELIMITER.join(self.ally_set),
                ROSTER_DELIMITER.join(self.enemy_set),
            ]
        )


class BuildSuccess(BaseModel):
    """Successful build answer."""

    ok: Literal[True] = True
    origin: Origin
    patch_detected: str
    text: str


class BuildFailure(BaseModel):
    """Build could not be produced."""

    ok: Literal[False] = False
    message: str
    retryable: bool


BuildOutcome = Union[BuildSuccess, BuildFailure]
