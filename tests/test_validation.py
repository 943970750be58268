"""
Tests for visitor field sanitization and validation.

Run with: pytest tests/test_validation.py -v
"""
from __future__ import annotations

import pytest

from visitor_service.errors import ValidationFailed
from visitor_service.validation import (
    MAX_FIELD_LENGTH,
    MAX_USER_AGENT_LENGTH,
    collect_errors,
    sanitize_text,
    validate_submission,
)


def _payload(**overrides):
    data = {"firstName": "Ada", "company": "Analytical Engines", "role": "Engineer"}
    data.update(overrides)
    return data


# ---------------------------------------------------------------------------
# sanitize_text
# ---------------------------------------------------------------------------

class TestSanitizeText:
    def test_trims_whitespace(self):
        assert sanitize_text("  Ada \n") == "Ada"

    def test_strips_null_bytes(self):
        assert sanitize_text("A\x00d\x00a") == "Ada"

    @pytest.mark.parametrize("value", [None, 42, ["Ada"], {"name": "Ada"}, True])
    def test_non_string_becomes_empty(self, value):
        assert sanitize_text(value) == ""

    def test_truncates_to_field_limit(self):
        assert sanitize_text("x" * 300) == "x" * MAX_FIELD_LENGTH

    def test_custom_limit(self):
        assert sanitize_text("y" * 1200, max_length=MAX_USER_AGENT_LENGTH) == "y" * 1000


# ---------------------------------------------------------------------------
# collect_errors / validate_submission
# ---------------------------------------------------------------------------

def test_valid_payload_has_no_errors():
    assert collect_errors(_payload()) == []


@pytest.mark.parametrize("field", ["firstName", "company", "role"])
@pytest.mark.parametrize("value", ["", "   ", "\t\n", None, 7])
def test_missing_field_is_named(field, value):
    errors = collect_errors(_payload(**{field: value}))
    assert errors == [f"{field} is required"]


def test_null_bytes_only_counts_as_missing():
    assert collect_errors(_payload(role="\x00\x00")) == ["role is required"]


def test_all_violations_are_reported_together():
    errors = collect_errors({"firstName": " ", "company": "c" * 256})
    assert errors == [
        "firstName is required",
        f"company must be {MAX_FIELD_LENGTH} characters or fewer",
        "role is required",
    ]


def test_length_boundary():
    assert collect_errors(_payload(company="c" * 255)) == []
    assert collect_errors(_payload(company="c" * 256)) == [
        "company must be 255 characters or fewer"
    ]


def test_surrounding_whitespace_does_not_count_towards_length():
    assert collect_errors(_payload(role="  " + "r" * 255 + "  ")) == []


def test_validate_submission_returns_sanitized_values():
    sub = validate_submission(
        _payload(firstName="  Ada\x00 ", company="\tAnalytical Engines", userAgent=" Mozilla/5.0 ")
    )
    assert sub.first_name == "Ada"
    assert sub.company == "Analytical Engines"
    assert sub.role == "Engineer"
    assert sub.user_agent == "Mozilla/5.0"


def test_user_agent_is_optional_and_truncated():
    assert validate_submission(_payload()).user_agent is None
    assert validate_submission(_payload(userAgent="   ")).user_agent is None
    long_ua = validate_submission(_payload(userAgent="u" * 5000)).user_agent
    assert long_ua == "u" * MAX_USER_AGENT_LENGTH


def test_validate_submission_raises_with_every_detail():
    with pytest.raises(ValidationFailed) as exc_info:
        validate_submission({})
    assert exc_info.value.details == [
        "firstName is required",
        "company is required",
        "role is required",
    ]
    assert exc_info.value.status_code == 400


@pytest.mark.parametrize("payload", [None, [], "Ada", 3])
def test_non_object_body_is_treated_as_empty(payload):
    with pytest.raises(ValidationFailed) as exc_info:
        validate_submission(payload)
    assert len(exc_info.value.details) == 3


def test_lone_surrogate_is_reported():
    assert collect_errors(_payload(company="Acme \ud800")) == [
        "company contains invalid characters"
    ]


def test_sanitize_drops_lone_surrogates():
    assert sanitize_text(" Moz\udc00illa ") == "Mozilla"
    assert sanitize_text("\ud800") == ""
