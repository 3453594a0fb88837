"""Tests for request parsing and identity helpers."""

from datetime import timedelta

from shortlinks.api.schemas import LinkCreateRequest, LinkUpdateRequest
from shortlinks.api.validation import describe_issue, safe_parse
from shortlinks.core.security import create_access_token, decode_owner_id


def test_safe_parse_success():
    result = safe_parse(LinkCreateRequest, {"original_url": "https://example.com", "custom_code": "  "})

    assert result.success is True
    assert result.error is None
    assert result.data.custom_code is None


def test_safe_parse_reports_first_issue():
    result = safe_parse(LinkUpdateRequest, {"short_code": "no"})

    assert result.success is False
    assert result.data is None
    assert result.error.startswith("Validation failed: short_code:")


def test_safe_parse_non_object_payload():
    result = safe_parse(LinkCreateRequest, ["https://example.com"])

    assert result.success is False
    assert result.error.startswith("Validation failed: ")


def test_describe_issue_drops_request_location():
    issue = {"loc": ("path", "link_id"), "msg": "Input should be a valid integer"}

    assert describe_issue(issue) == "link_id: Input should be a valid integer"
    assert describe_issue({"loc": (), "msg": "bad"}) == "bad"


def test_token_round_trip():
    token = create_access_token("user_carol")

    assert decode_owner_id(token) == "user_carol"


def test_expired_token_rejected():
    token = create_access_token("user_carol", expires_delta=timedelta(minutes=-1))

    assert decode_owner_id(token) is None


def test_garbage_token_rejected():
    assert decode_owner_id("definitely.not.valid") is None
