"""Error taxonomy for build generation.

Only two kinds of failure are raised as exceptions:

- ``BuildValidationError``: the request is missing required fields. Rejected
  before any cache or model interaction; never retried.
- ``UpstreamError``: the generation call failed. ``retryable`` decides whether
  the orchestrator backs off and tries again.

An ungrounded answer (``NEED_RETRY`` after escalation) is an orchestrator
state, and a failed item-set export is reported in its result; neither is
raised.
"""

from typing import Optional

# Transport-level error codes that count as transient
RETRYABLE_ERROR_CODES = frozenset({"ECONNRESET", "ETIMEDOUT"})


class DraftCoachError(Exception):
    """Base class for all draft_coach errors."""


class BuildValidationError(DraftCoachError):
    """Build request is missing required fields or is malformed."""


class UpstreamError(DraftCoachError):
    """Generation call to the model provider failed.

    Args:
        message: Human-readable failure description
        status_code: HTTP status returned by the provider, if any
        code: Transport error code (ECONNRESET, ETIMEDOUT), if any
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    @property
    def retryable(self) -> bool:
        """5xx, connection reset/timeout, or a message mentioning a timeout."""
        if self.status_code is not None and self.status_code >= 500:
            return True
        if self.code in RETRYABLE_ERROR_CODES:
            return True
        return "timeout" in self.message


class TransientUpstreamError(UpstreamError):
    """Server-side or network failure; retried with backoff."""


class PermanentUpstreamError(UpstreamError):
    """Client-side failure (4xx, bad key); not worth retrying."""


def classify_upstream_error(error: Exception) -> UpstreamError:
    """Wrap any generation failure into a Transient/Permanent upstream error."""
    if isinstance(error, (TransientUpstreamError, PermanentUpstreamError)):
        return error

    if isinstance(error, UpstreamError):
        upstream = error
    else:
        status_code = getattr(error, "status_code", None)
        code = getattr(error, "code", None)
        upstream = UpstreamError(
            str(error) or error.__class__.__name__,
            status_code=status_code if isinstance(status_code, int) else None,
            code=code if isinstance(code, str) else None,
        )

    cls = TransientUpstreamError if upstream.retryable else PermanentUpstreamError
    return cls(upstream.message, status_code=upstream.status_code, code=upstream.code)
