from __future__ import annotations

import pytest

from adforge.errors import (
    ApiError,
    ApiTimeoutError,
    InsufficientCreditsError,
    JobFailedError,
    JobTimeoutError,
    MissingFieldsError,
    user_message,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("HEYGEN_API_KEY is not set", "This service is not configured on the backend. Please contact support."),
        ("Provider quota exhausted", "Service quota exceeded. Please try again later."),
        ("Rate limit reached for model", "Service quota exceeded. Please try again later."),
        ("Insufficient credits: need 40", "Insufficient credits for this operation."),
        ("timeout of 120000ms exceeded", "The operation took too long. Please try again."),
    ],
)
def test_known_phrasings_are_rewritten(raw, expected):
    assert user_message(ApiError(raw, status_code=500)) == expected


def test_unknown_messages_pass_through():
    assert user_message(JobFailedError("job-1", "Product page returned 403")) == "Product page returned 403"


def test_empty_message_uses_default():
    assert user_message(ApiError(""), default="Failed to scrape product") == "Failed to scrape product"


def test_timeout_error_default_message_is_rewritten():
    assert user_message(ApiTimeoutError()) == "The server is taking too long to respond."


def test_job_timeout_points_to_tasks_page():
    error = JobTimeoutError("job-9", attempts=180)
    assert "job-9" in str(error)
    assert "tasks page" in user_message(error)


def test_missing_fields_lists_every_field():
    error = MissingFieldsError(["script", "avatar_image_url"])
    assert error.fields == ["script", "avatar_image_url"]
    assert user_message(error) == "Missing required fields: script, avatar_image_url"


def test_insufficient_credits_details():
    error = InsufficientCreditsError(
        "Insufficient credits",
        payload={"error_details": {"credits_needed": 40, "credits_available": 12, "current_plan": "starter"}},
    )
    assert (error.credits_needed, error.credits_available, error.current_plan) == (40, 12, "starter")
    assert user_message(error) == "Insufficient credits: 40 needed, 12 available on the starter plan."


def test_insufficient_credits_without_details():
    error = InsufficientCreditsError("Insufficient credits")
    assert error.current_plan == "free"
    assert user_message(error) == "Insufficient credits for this operation."
