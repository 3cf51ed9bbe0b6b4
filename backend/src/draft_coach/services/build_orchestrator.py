"""Cache-aside build generation with retry, escalation and stale fallback.

A build request runs through an explicit state machine:

    READ_CACHE -> CACHE_HIT
               -> ATTEMPT(n) -> SUCCESS
                             -> ESCALATE -> SUCCESS | EXHAUSTED
                             -> BACKOFF -> ATTEMPT(n + 1)
                             -> EXHAUSTED
    EXHAUSTED  -> STALE_FALLBACK | HARD_FAILURE

- A fresh cache entry (younger than the TTL) short-circuits generation.
- Each attempt uses the long prompt. A ``NEED_RETRY`` answer escalates once
  to the short prompt inside the same attempt; a second ``NEED_RETRY`` ends
  the run without further attempts.
- Failed attempts back off ``2**n * base`` before attempt ``n + 1``. A
  non-retryable error on the first attempt ends the run immediately.
- A successful generation writes exactly one cache entry. An exhausted run
  serves the previous entry (however old) as ``stale-cache`` and only fails
  when there is none.

Cache file reads and writes run in a worker thread so they never block the
event loop for concurrent requests.

Each run keeps its state trace so the retry/escalation/fallback interaction
can be asserted directly.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Optional

from draft_coach.errors import classify_upstream_error
from draft_coach.models.build import BuildFailure, BuildOutcome, BuildRequest, BuildSuccess, Origin
from draft_coach.models.cache import CacheEntry, GenerationResult
from draft_coach.services.build_cache import BuildCache
from draft_coach.services.gemini_client import BuildGenerator
from draft_coach.services.prompts import is_need_retry

logger = logging.getLogger(__name__)

NEED_RETRY_EXHAUSTED = "AI returned NEED_RETRY on all attempts"
DEFAULT_FAILURE_MESSAGE = "Failed to generate build"


class GenerationState(str, Enum):
    """States of a single build generation run."""

    READ_CACHE = "read_cache"
    CACHE_HIT = "cache_hit"
    ATTEMPT = "attempt"
    ESCALATE = "escalate"
    BACKOFF = "backoff"
    SUCCESS = "success"
    EXHAUSTED = "exhausted"
    STALE_FALLBACK = "stale_fallback"
    HARD_FAILURE = "hard_failure"


TERMINAL_STATES = frozenset({
    GenerationState.CACHE_HIT,
    GenerationState.SUCCESS,
    GenerationState.STALE_FALLBACK,
    GenerationState.HARD_FAILURE,
})


@dataclass
class GenerationRun:
    """Mutable context of one request moving through the state machine."""

    request: BuildRequest
    key: str
    state: GenerationState = GenerationState.READ_CACHE
    attempt: int = 0  # 0-based long-prompt attempt
    entry: Optional[CacheEntry] = None  # Cached entry read at start (fresh or stale)
    result: Optional[GenerationResult] = None
    last_error: str = ""
    client_calls: int = 0
    trace: list[GenerationState] = field(default_factory=list)
    outcome: Optional[BuildOutcome] = None


class BuildOrchestrator:
    """Owns the cache-aside policy for build generation."""

    def __init__(
        self,
        client: BuildGenerator,
        cache: BuildCache,
        max_attempts: int = 3,
        backoff_base_ms: int = 1000,
        ttl_hours: float = 24.0,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the orchestrator.

        Args:
            client: Generation client (long/short prompt)
            cache: Build cache store
            max_attempts: Long-prompt attempts before giving up
            backoff_base_ms: Delay before attempt n+1 is ``2**n * backoff_base_ms``
            ttl_hours: Freshness window of cache entries
            clock: Returns the current time in seconds
            sleep: Cooperative wait used for backoff
        """
        self.client = client
        self.cache = cache
        self.max_attempts = max(1, max_attempts)
        self.backoff_base_ms = backoff_base_ms
        self.ttl_seconds = ttl_hours * 3600
        self._clock = clock
        self._sleep = sleep
        self._handlers = {
            GenerationState.READ_CACHE: self._read_cache,
            GenerationState.ATTEMPT: self._attempt,
            GenerationState.ESCALATE: self._escalate,
            GenerationState.BACKOFF: self._backoff,
            GenerationState.EXHAUSTED: self._exhausted,
        }

    async def generate(self, request: BuildRequest) -> BuildOutcome:
        """Answer a build request from cache or a fresh generation.

        Raises:
            BuildValidationError: Request is missing champion/role (no cache
                or model interaction happens)
        """
        run = await self.run(request)
        return run.outcome

    async def run(self, request: BuildRequest) -> GenerationRun:
        """Drive a request through the state machine and return the full run."""
        request.ensure_valid()
        run = GenerationRun(request=request, key=request.cache_key())

        while run.state not in TERMINAL_STATES:
            run.trace.append(run.state)
            run.state = await self._handlers[run.state](run)
        run.trace.append(run.state)

        run.outcome = self._outcome(run)
        return run

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait after failed attempt ``attempt`` (0-based)."""
        return (2 ** attempt) * self.backoff_base_ms / 1000

    # ------------------------------------------------------------------
    # State handlers
    # ------------------------------------------------------------------

    async def _read_cache(self, run: GenerationRun) -> GenerationState:
        run.entry = await asyncio.to_thread(self.cache.get, run.key)
        if run.entry and run.entry.is_fresh(self._clock(), self.ttl_seconds):
            logger.info(f"Cache hit for {run.key}")
            return GenerationState.CACHE_HIT
        if run.entry:
            logger.info(f"Cache entry for {run.key} is stale, regenerating")
        return GenerationState.ATTEMPT

    async def _attempt(self, run: GenerationRun) -> GenerationState:
        try:
            result = await self._call_client(run, short_prompt=False)
        except Exception as e:
            return self._on_failure(run, e)

        if is_need_retry(result.text):
            logger.info(f"Attempt {run.attempt + 1} for {run.key} returned NEED_RETRY, escalating to short prompt")
            return GenerationState.ESCALATE
        return await self._on_success(run, result)

    async def _escalate(self, run: GenerationRun) -> GenerationState:
        try:
            result = await self._call_client(run, short_prompt=True)
        except Exception as e:
            return self._on_failure(run, e)

        if is_need_retry(result.text):
            run.last_error = NEED_RETRY_EXHAUSTED
            logger.warning(f"Short prompt also returned NEED_RETRY for {run.key}")
            return GenerationState.EXHAUSTED
        return await self._on_success(run, result)

    async def _backoff(self, run: GenerationRun) -> GenerationState:
        delay = self.backoff_delay(run.attempt)
        logger.info(f"Retrying {run.key} in {delay:.1f}s")
        await self._sleep(delay)
        run.attempt += 1
        return GenerationState.ATTEMPT

    async def _exhausted(self, run: GenerationRun) -> GenerationState:
        if run.entry:
            logger.warning(f"Generation failed for {run.key}, serving stale cache: {run.last_error}")
            return GenerationState.STALE_FALLBACK
        logger.error(f"Generation failed for {run.key} with no cache to fall back on: {run.last_error}")
        return GenerationState.HARD_FAILURE

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _call_client(self, run: GenerationRun, short_prompt: bool) -> GenerationResult:
        run.client_calls += 1
        return await self.client.generate(run.request, short_prompt=short_prompt)

    async def _on_success(self, run: GenerationRun, result: GenerationResult) -> GenerationState:
        run.result = result
        try:
            await asyncio.to_thread(self.cache.set, run.key, result.text, result.patch_detected)
        except OSError:
            # The answer is still valid; it just will not be reused
            logger.exception(f"Failed to write build cache for {run.key}")
        return GenerationState.SUCCESS

    def _on_failure(self, run: GenerationRun, error: Exception) -> GenerationState:
        upstream = classify_upstream_error(error)
        run.last_error = upstream.message or "Unknown error"
        logger.warning(
            f"Attempt {run.attempt + 1}/{self.max_attempts} for {run.key} failed "
            f"(retryable={upstream.retryable}): {run.last_error}"
        )

        if not upstream.retryable and run.attempt == 0:
            return GenerationState.EXHAUSTED
        if run.attempt + 1 >= self.max_attempts:
            return GenerationState.EXHAUSTED
        return GenerationState.BACKOFF

    def _outcome(self, run: GenerationRun) -> BuildOutcome:
        if run.state == GenerationState.CACHE_HIT:
            return BuildSuccess(
                origin=Origin.CACHE,
                patch_detected=run.entry.patch_detected,
                text=run.entry.text,
            )
        if run.state == GenerationState.SUCCESS:
            return BuildSuccess(
                origin=Origin.GROUNDED,
                patch_detected=run.result.patch_detected,
                text=run.result.text,
            )
        if run.state == GenerationState.STALE_FALLBACK:
            return BuildSuccess(
                origin=Origin.STALE_CACHE,
                patch_detected=run.entry.patch_detected,
                text=run.entry.text,
            )
        return BuildFailure(
            message=run.last_error or DEFAULT_FAILURE_MESSAGE,
            retryable=True,
        )
