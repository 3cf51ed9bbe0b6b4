"""Generation client for grounded build answers.

Provides a real implementation (Gemini with Google Search grounding) and a
mock for testing/development.
"""

import logging
import re
from typing import Optional, Protocol

import httpx

from draft_coach.errors import UpstreamError
from draft_coach.models.build import BuildRequest
from draft_coach.models.cache import GenerationResult
from draft_coach.services.prompts import build_system_prompt, build_user_message

logger = logging.getLogger(__name__)

# "Patch 26.4", "patch 14.23" ...
PATCH_LABEL = re.compile(r"\bpatch\s+v?(\d{1,2}\.\d{1,2})\b", re.IGNORECASE)


def detect_patch(text: str, requested_patch: str, default_patch: str) -> str:
    """Patch label the answer claims, else the requested, else the default."""
    match = PATCH_LABEL.search(text or "")
    if match:
        return match.group(1)
    return requested_patch or default_patch


class BuildGenerator(Protocol):
    """Anything that can turn a build request into raw model text."""

    async def generate(self, request: BuildRequest, short_prompt: bool) -> GenerationResult: ...


class MockBuildClient:
    """Mock generation client returning a fixed build.

    Use this for development when no Gemini API key is configured.
    """

    SAMPLE_BUILD = """RUNES
Primary: Precision
Keystone: Lethal Tempo
Presence of Mind
Legend: Alacrity
Cut Down
Secondary: Inspiration
Magical Footwear
Biscuit Delivery
Shards: Attack Speed, Adaptive Force, Health Scaling

SUMMONERS
Flash
Heal

SKILL ORDER
Q > W > E > R

STARTING ITEMS
Doran's Blade
Health Potion

CORE BUILD
1. Kraken Slayer (on-hit damage)
2. Berserker's Greaves (attack speed)
3. Infinity Edge (crit scaling)
4. Lord Dominik's Regards (armor penetration)
5. Phantom Dancer (survivability)
6. Bloodthirster (sustain)

SITUATIONAL ITEMS
Guardian Angel: vs burst assassins
Mercurial Scimitar: vs heavy crowd control
Mortal Reminder: vs healing
Maw of Malmortius: vs heavy AP"""

    def __init__(self, default_patch: str = "26.4"):
        self.default_patch = default_patch

    async def generate(self, request: BuildRequest, short_prompt: bool) -> GenerationResult:
        logger.info(f"MockBuildClient: Returning sample build for {request.champion_id}")
        return GenerationResult(
            text=self.SAMPLE_BUILD,
            patch_detected=request.patch or self.default_patch,
        )

    async def close(self):
        pass


class GeminiBuildClient:
    """Generates builds with Gemini, grounded by Google Search."""

    DEFAULT_API_URL = "https://generativelanguage.googleapis.com/v1beta"
    DEFAULT_MODEL = "gemini-2.5-pro"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 120.0,
        default_patch: str = "26.4",
    ):
        """Initialize the Gemini client.

        Args:
            api_key: Gemini API key
            model: Model name (e.g. gemini-2.5-pro)
            api_url: Base URL of the Generative Language API
            timeout: Request timeout in seconds
            default_patch: Patch assumed when the request names none
        """
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.default_patch = default_patch
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

    def _build_payload(self, request: BuildRequest, short_prompt: bool) -> dict:
        patch = request.patch or self.default_patch
        return {
            "systemInstruction": {
                "parts": [{"text": build_system_prompt(patch, short_prompt)}],
            },
            "contents": [
                {"role": "user", "parts": [{"text": build_user_message(request, patch)}]},
            ],
            "tools": [{"google_search": {}}],
        }

    async def _call_llm(self, payload: dict) -> dict:
        """Call the Gemini generateContent endpoint."""
        client = await self._get_client()
        response = await client.post(
            f"{self.api_url}/models/{self.model}:generateContent",
            headers={
                "x-goog-api-key": self.api_key,
                "Content-Type": "application/json",
            },
            json=payload,
        )
        response.raise_for_status()
        return response.json()

    @staticmethod
    def _extract_text(response: dict) -> str:
        """Join the text parts of the first candidate."""
        candidates = response.get("candidates") or []
        if not candidates:
            feedback = response.get("promptFeedback", {})
            reason = feedback.get("blockReason", "no candidates returned")
            raise UpstreamError(f"Gemini returned no answer: {reason}", status_code=400)
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts if isinstance(part, dict))

    async def generate(self, request: BuildRequest, short_prompt: bool) -> GenerationResult:
        """Generate a build with the long or short prompt.

        Raises:
            UpstreamError: Missing API key, HTTP error status, or a transport
                failure (code ETIMEDOUT / ECONNRESET / ECONNREFUSED)
        """
        if not self.api_key:
            raise UpstreamError("GEMINI_API_KEY not set")

        payload = self._build_payload(request, short_prompt)
        variant = "short" if short_prompt else "long"
        logger.debug(f"Gemini request ({variant} prompt) for {request.champion_id} {request.role}")

        try:
            response = await self._call_llm(payload)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise UpstreamError(f"Gemini API error {status}: {e.response.text[:200]}", status_code=status) from e
        except httpx.TimeoutException as e:
            raise UpstreamError(f"Gemini request timeout: {e}", code="ETIMEDOUT") from e
        except (httpx.ReadError, httpx.WriteError, httpx.RemoteProtocolError) as e:
            raise UpstreamError(f"Gemini connection reset: {e}", code="ECONNRESET") from e
        except httpx.ConnectError as e:
            raise UpstreamError(f"Gemini connection failed: {e}", code="ECONNREFUSED") from e

        text = self._extract_text(response)
        return GenerationResult(
            text=text,
            patch_detected=detect_patch(text, request.patch, self.default_patch),
        )


def get_build_client(
    api_key: Optional[str] = None,
    model: str = GeminiBuildClient.DEFAULT_MODEL,
    use_mock: bool = False,
    **kwargs,
) -> MockBuildClient | GeminiBuildClient:
    """Factory function to get the appropriate generation client.

    Args:
        api_key: Gemini API key
        model: Gemini model name
        use_mock: Use the mock client (no API key needed)

    Returns:
        GeminiBuildClient or MockBuildClient
    """
    if use_mock:
        logger.info("Using MockBuildClient")
        return MockBuildClient(default_patch=kwargs.get("default_patch", "26.4"))
    logger.info(f"Using GeminiBuildClient ({model})")
    return GeminiBuildClient(api_key, model=model, **kwargs)
