"""AdForge client error taxonomy.

Every failure the client can observe comes from the backend or the network:

  - ApiError and subclasses      : backend answered with an error status or
                                   an envelope carrying ``success: false``
  - ApiConnectionError           : no response at all
  - ApiTimeoutError              : the request timed out
  - JobError and subclasses      : terminal outcomes of an async job
  - InputError, MissingFieldsError : pre-flight validation, raised before
                                   any network call

``user_message()`` turns any of them into the string shown to the user.
"""
from __future__ import annotations

from typing import Any, Iterable, Optional


class AdForgeError(Exception):
    """Base class for every error raised by the AdForge client."""


# ---------------------------------------------------------------------------
# Transport / backend errors
# ---------------------------------------------------------------------------


class ApiError(AdForgeError):
    """The backend rejected a request."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class ApiValidationError(ApiError):
    """HTTP 422 from request validation on the backend."""


class AuthenticationError(ApiError):
    """HTTP 401: missing or expired credentials."""


class NotFoundError(ApiError):
    """HTTP 404."""


class InsufficientCreditsError(ApiError):
    """HTTP 402: the account cannot pay for the requested operation."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = 402,
        payload: Any = None,
    ) -> None:
        super().__init__(message, status_code=status_code, payload=payload)
        details = payload.get("error_details") if isinstance(payload, dict) else None
        details = details or {}
        self.credits_needed: int = int(details.get("credits_needed") or 0)
        self.credits_available: int = int(details.get("credits_available") or 0)
        self.current_plan: str = details.get("current_plan") or "free"


class ApiConnectionError(AdForgeError):
    """The backend could not be reached."""

    def __init__(self, message: str = "The server is temporarily unavailable. Please try again.") -> None:
        super().__init__(message)


class ApiTimeoutError(AdForgeError):
    """The backend did not answer within the request timeout."""

    def __init__(self, message: str = "The server is taking too long to respond.") -> None:
        super().__init__(message)


# ---------------------------------------------------------------------------
# Job outcomes
# ---------------------------------------------------------------------------


class JobError(AdForgeError):
    """A job ended without a usable result."""

    def __init__(self, job_id: str, message: str) -> None:
        super().__init__(message)
        self.job_id = job_id
        self.message = message


class JobFailedError(JobError):
    """The backend reported ``status: failed``."""


class JobCancelledError(JobError):
    """The backend reported ``status: cancelled``."""


class JobTimeoutError(JobError):
    """The attempt cap ran out before the job reached a terminal status."""

    def __init__(self, job_id: str, attempts: int) -> None:
        super().__init__(
            job_id,
            f"Job {job_id} timeout - taking longer than expected. Check the tasks page for status.",
        )
        self.attempts = attempts


class JobNotFoundError(JobError):
    """The status endpoint does not know the job."""


# ---------------------------------------------------------------------------
# Pre-flight validation
# ---------------------------------------------------------------------------


class InputError(AdForgeError):
    """An argument is out of range or not one of the accepted values; nothing was sent."""


class MissingFieldsError(InputError):
    """Required selections are missing; nothing was sent to the backend."""

    def __init__(self, fields: Iterable[str]) -> None:
        self.fields = list(fields)
        super().__init__("Missing required fields: " + ", ".join(self.fields))


# ---------------------------------------------------------------------------
# User-facing messages
# ---------------------------------------------------------------------------

_REWRITES: list[tuple[tuple[str, ...], str]] = [
    (
        ("API_KEY", "not configured", "misconfigured"),
        "This service is not configured on the backend. Please contact support.",
    ),
    (("quota", "rate limit"), "Service quota exceeded. Please try again later."),
    (("Insufficient credits",), "Insufficient credits for this operation."),
    (("timeout", "timed out", "ECONNABORTED"), "The operation took too long. Please try again."),
]


def user_message(exc: BaseException, default: str = "An error occurred. Please try again.") -> str:
    """Return the message to show the user for *exc*.

    Known backend phrasings are rewritten; anything else is passed through.
    """
    if isinstance(exc, InputError):
        return str(exc)
    if isinstance(exc, InsufficientCreditsError):
        if exc.credits_needed:
            return (
                f"Insufficient credits: {exc.credits_needed} needed, "
                f"{exc.credits_available} available on the {exc.current_plan} plan."
            )
        return "Insufficient credits for this operation."
    if isinstance(exc, JobTimeoutError):
        return "This is taking longer than expected. Check the tasks page, or try again."

    message = str(exc).strip()
    if not message:
        return default
    lowered = message.lower()
    for needles, rewritten in _REWRITES:
        if any(needle.lower() in lowered for needle in needles):
            return rewritten
    return message
