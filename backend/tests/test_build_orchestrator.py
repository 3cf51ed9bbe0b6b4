"""Tests for cache-aside build generation."""

import threading

import pytest

from conftest import ScriptedClient
from draft_coach.errors import BuildValidationError, UpstreamError
from draft_coach.models.build import BuildRequest, Origin
from draft_coach.services.build_cache import BuildCache
from draft_coach.services.build_orchestrator import (
    NEED_RETRY_EXHAUSTED,
    BuildOrchestrator,
    GenerationState as S,
)
from draft_coach.services.prompts import NEED_RETRY

pytestmark = pytest.mark.anyio

DAY = 24 * 3600


class RecordingSleep:
    """Async sleep stand-in that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class ThreadRecordingCache(BuildCache):
    """BuildCache that records which thread served each call."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls: list[tuple[str, int]] = []

    def get(self, key):
        self.calls.append(("get", threading.get_ident()))
        return super().get(key)

    def set(self, key, text, patch_detected):
        self.calls.append(("set", threading.get_ident()))
        return super().set(key, text, patch_detected)


@pytest.fixture
def request_body():
    return BuildRequest(patch="26.4", champion_id="Jinx", role="adc", allies=["Thresh"], enemies=["Caitlyn", "Lux"])


@pytest.fixture
def cache(tmp_path, clock):
    return BuildCache(tmp_path / "build-cache.json", clock=clock)


@pytest.fixture
def sleep():
    return RecordingSleep()


def make_orchestrator(client, cache, clock, sleep, **kwargs):
    return BuildOrchestrator(client=client, cache=cache, clock=clock, sleep=sleep, **kwargs)


class TestCacheAside:
    async def test_fresh_generation_is_grounded_and_cached(self, request_body, cache, clock, sleep):
        client = ScriptedClient("RUNES\nLethal Tempo")
        orchestrator = make_orchestrator(client, cache, clock, sleep)

        outcome = await orchestrator.generate(request_body)

        assert outcome.ok
        assert outcome.origin == Origin.GROUNDED
        assert outcome.text == "RUNES\nLethal Tempo"
        assert outcome.patch_detected == "26.4"
        assert client.calls == [False]
        entry = cache.get(request_body.cache_key())
        assert entry is not None
        assert entry.created_at == clock.now

    async def test_second_request_served_from_cache(self, request_body, cache, clock, sleep):
        client = ScriptedClient("RUNES\nLethal Tempo")
        orchestrator = make_orchestrator(client, cache, clock, sleep)

        await orchestrator.generate(request_body)
        clock.advance(60)
        run = await orchestrator.run(request_body)

        assert run.outcome.origin == Origin.CACHE
        assert run.trace == [S.READ_CACHE, S.CACHE_HIT]
        assert run.client_calls == 0
        assert len(client.calls) == 1

    async def test_roster_order_shares_cache_entry(self, cache, clock, sleep):
        client = ScriptedClient("build text")
        orchestrator = make_orchestrator(client, cache, clock, sleep)

        first = BuildRequest(patch="26.4", champion_id="Jinx", role="adc", enemies=["Lux", "Caitlyn"])
        second = BuildRequest(patch="26.4", champion_id="Jinx", role="adc", enemies=["Caitlyn", "Lux", "Lux"])
        await orchestrator.generate(first)
        outcome = await orchestrator.generate(second)

        assert outcome.origin == Origin.CACHE
        assert len(client.calls) == 1

    async def test_entry_just_inside_ttl_is_fresh(self, request_body, cache, clock, sleep):
        cache.set(request_body.cache_key(), "old build", "26.3")
        clock.advance(DAY - 60)
        client = ScriptedClient("new build")

        outcome = await make_orchestrator(client, cache, clock, sleep).generate(request_body)

        assert outcome.origin == Origin.CACHE
        assert outcome.text == "old build"
        assert client.calls == []

    async def test_entry_just_past_ttl_regenerates(self, request_body, cache, clock, sleep):
        cache.set(request_body.cache_key(), "old build", "26.3")
        clock.advance(DAY + 1)
        client = ScriptedClient("new build")

        outcome = await make_orchestrator(client, cache, clock, sleep).generate(request_body)

        assert outcome.origin == Origin.GROUNDED
        assert outcome.text == "new build"
        assert cache.get(request_body.cache_key()).text == "new build"

    async def test_entry_exactly_at_ttl_is_stale(self, request_body, cache, clock, sleep):
        cache.set(request_body.cache_key(), "old build", "26.3")
        clock.advance(DAY)
        client = ScriptedClient("new build")

        outcome = await make_orchestrator(client, cache, clock, sleep).generate(request_body)

        assert outcome.origin == Origin.GROUNDED


class TestRetryAndBackoff:
    async def test_retryable_error_exhausts_all_attempts(self, request_body, cache, clock, sleep):
        client = ScriptedClient(UpstreamError("Service unavailable", status_code=503))
        orchestrator = make_orchestrator(client, cache, clock, sleep)

        run = await orchestrator.run(request_body)

        assert len(client.calls) == 3
        assert sleep.delays == [1.0, 2.0]
        assert run.trace == [
            S.READ_CACHE,
            S.ATTEMPT, S.BACKOFF,
            S.ATTEMPT, S.BACKOFF,
            S.ATTEMPT,
            S.EXHAUSTED, S.HARD_FAILURE,
        ]
        assert not run.outcome.ok
        assert run.outcome.message == "Service unavailable"
        assert run.outcome.retryable is True
        assert len(cache) == 0

    async def test_exhausted_run_serves_stale_entry(self, request_body, cache, clock, sleep):
        cache.set(request_body.cache_key(), "yesterday's build", "26.3")
        clock.advance(3 * DAY)
        client = ScriptedClient(UpstreamError("Service unavailable", status_code=503))

        outcome = await make_orchestrator(client, cache, clock, sleep).generate(request_body)

        assert outcome.ok
        assert outcome.origin == Origin.STALE_CACHE
        assert outcome.text == "yesterday's build"
        assert outcome.patch_detected == "26.3"
        assert len(client.calls) == 3

    async def test_recovers_on_later_attempt(self, request_body, cache, clock, sleep):
        client = ScriptedClient(
            UpstreamError("socket hang up", code="ECONNRESET"),
            "build text",
        )

        run = await make_orchestrator(client, cache, clock, sleep).run(request_body)

        assert run.outcome.origin == Origin.GROUNDED
        assert sleep.delays == [1.0]
        assert run.trace == [S.READ_CACHE, S.ATTEMPT, S.BACKOFF, S.ATTEMPT, S.SUCCESS]

    async def test_non_retryable_first_attempt_aborts(self, request_body, cache, clock, sleep):
        client = ScriptedClient(UpstreamError("Bad request", status_code=400), "build text")

        run = await make_orchestrator(client, cache, clock, sleep).run(request_body)

        assert len(client.calls) == 1
        assert sleep.delays == []
        assert run.trace == [S.READ_CACHE, S.ATTEMPT, S.EXHAUSTED, S.HARD_FAILURE]
        assert run.outcome.message == "Bad request"

    async def test_non_retryable_after_first_attempt_continues(self, request_body, cache, clock, sleep):
        client = ScriptedClient(
            UpstreamError("Service unavailable", status_code=503),
            UpstreamError("Bad request", status_code=400),
            "build text",
        )

        outcome = await make_orchestrator(client, cache, clock, sleep).generate(request_body)

        assert outcome.origin == Origin.GROUNDED
        assert len(client.calls) == 3
        assert sleep.delays == [1.0, 2.0]

    async def test_timeout_message_is_retryable(self, request_body, cache, clock, sleep):
        client = ScriptedClient(RuntimeError("request timeout after 120s"), "build text")

        outcome = await make_orchestrator(client, cache, clock, sleep).generate(request_body)

        assert outcome.origin == Origin.GROUNDED
        assert len(client.calls) == 2

    async def test_backoff_base_is_configurable(self, request_body, cache, clock, sleep):
        client = ScriptedClient(UpstreamError("Service unavailable", status_code=502))
        orchestrator = make_orchestrator(client, cache, clock, sleep, max_attempts=4, backoff_base_ms=250)

        await orchestrator.generate(request_body)

        assert sleep.delays == [0.25, 0.5, 1.0]
        assert orchestrator.backoff_delay(0) == 0.25


class TestNeedRetryEscalation:
    async def test_need_retry_twice_fails_without_cache_write(self, request_body, cache, clock, sleep):
        client = ScriptedClient(NEED_RETRY)

        run = await make_orchestrator(client, cache, clock, sleep).run(request_body)

        assert client.calls == [False, True]
        assert run.trace == [S.READ_CACHE, S.ATTEMPT, S.ESCALATE, S.EXHAUSTED, S.HARD_FAILURE]
        assert not run.outcome.ok
        assert run.outcome.message == NEED_RETRY_EXHAUSTED
        assert run.outcome.retryable is True
        assert sleep.delays == []
        assert len(cache) == 0

    async def test_need_retry_then_short_prompt_succeeds(self, request_body, cache, clock, sleep):
        client = ScriptedClient(NEED_RETRY, "RUNES\nConqueror")

        outcome = await make_orchestrator(client, cache, clock, sleep).generate(request_body)

        assert client.calls == [False, True]
        assert outcome.origin == Origin.GROUNDED
        assert outcome.text == "RUNES\nConqueror"
        assert len(cache) == 1

    async def test_need_retry_twice_falls_back_to_stale(self, request_body, cache, clock, sleep):
        cache.set(request_body.cache_key(), "old build", "26.3")
        clock.advance(2 * DAY)
        client = ScriptedClient(NEED_RETRY)

        outcome = await make_orchestrator(client, cache, clock, sleep).generate(request_body)

        assert outcome.origin == Origin.STALE_CACHE
        assert len(client.calls) == 2

    async def test_short_prompt_error_goes_through_backoff(self, request_body, cache, clock, sleep):
        client = ScriptedClient(
            NEED_RETRY,
            UpstreamError("Service unavailable", status_code=503),
            "build text",
        )

        run = await make_orchestrator(client, cache, clock, sleep).run(request_body)

        assert client.calls == [False, True, False]
        assert run.trace == [S.READ_CACHE, S.ATTEMPT, S.ESCALATE, S.BACKOFF, S.ATTEMPT, S.SUCCESS]


class TestValidationAndCacheFailures:
    async def test_missing_fields_touch_nothing(self, cache, clock, sleep):
        client = ScriptedClient("build text")
        orchestrator = make_orchestrator(client, cache, clock, sleep)

        with pytest.raises(BuildValidationError, match="Missing required fields"):
            await orchestrator.generate(BuildRequest(patch="26.4", champion_id="", role="adc"))

        assert client.calls == []
        assert not cache.path.exists()

    async def test_cache_io_runs_off_event_loop_thread(self, request_body, tmp_path, clock, sleep):
        cache = ThreadRecordingCache(tmp_path / "cache.json", clock=clock)
        client = ScriptedClient("build text")

        await make_orchestrator(client, cache, clock, sleep).generate(request_body)

        loop_thread = threading.get_ident()
        assert [name for name, _ in cache.calls] == ["get", "set"]
        assert all(ident != loop_thread for _, ident in cache.calls)

    async def test_cache_write_failure_still_returns_answer(self, request_body, clock, sleep, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file")
        cache = BuildCache(blocker / "cache.json", clock=clock)
        client = ScriptedClient("build text")

        outcome = await make_orchestrator(client, cache, clock, sleep).generate(request_body)

        assert outcome.ok
        assert outcome.origin == Origin.GROUNDED
        assert outcome.text == "build text"
