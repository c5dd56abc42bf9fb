"""Unit tests for request payload builders."""

from datetime import datetime

import pytest

from fisafe import IdentifierType, InvalidArgumentError
from fisafe.models import granted_access_payload, identifier_payload, list_params


@pytest.mark.parametrize("kind", ["pin", "rfid-tag", "licence-plate", IdentifierType.PIN])
def test_identifier_payload_types(kind) -> None:
    payload = identifier_payload("1234", kind)
    assert payload["type"] == IdentifierType(kind).value
    assert payload["value"] == "1234"


@pytest.mark.parametrize("kind", ["PIN", "rfid", "license-plate", ""])
def test_identifier_payload_rejects_unknown_type(kind: str) -> None:
    with pytest.raises(InvalidArgumentError):
        identifier_payload("1234", kind)


def test_invalid_argument_is_value_error() -> None:
    with pytest.raises(ValueError):
        identifier_payload("1234", "bogus")


def test_granted_access_uses_valid_to_for_end() -> None:
    payload = granted_access_payload(
        7,
        42,
        valid_from=datetime(2024, 5, 1, 9, 0, 0),
        valid_to=datetime(2024, 5, 2, 18, 0, 0),
    )

    assert payload == {
        "user_id": 42,
        "expiry_time_start": "2024-05-01 09:00:00",
        "expiry_time_end": "2024-05-02 18:00:00",
        "context_id": 7,
    }
    assert list(payload) == ["user_id", "expiry_time_start", "expiry_time_end", "context_id"]


def test_granted_access_rejects_bad_context() -> None:
    with pytest.raises(InvalidArgumentError, match="context_id"):
        granted_access_payload("front-door", 42)


def test_list_params_defaults() -> None:
    assert list_params(None, 1, 100) == {"page": 1, "itemsPerPage": 100}


def test_list_params_merges_filters() -> None:
    filters = {"identifier": "alice", "identifierSubstring": "ali", "ignored": None}
    params = list_params(filters, 2, 50)

    assert params == {"identifier": "alice", "identifierSubstring": "ali", "page": 2, "itemsPerPage": 50}
    assert "page" not in filters


def test_list_params_short_substring() -> None:
    with pytest.raises(InvalidArgumentError):
        list_params({"identifierSubstring": "ab"}, 1, 100)


@pytest.mark.parametrize(("page", "per_page"), [(0, 100), (1, 0), (-1, 10)])
def test_list_params_rejects_bad_pagination(page: int, per_page: int) -> None:
    with pytest.raises(InvalidArgumentError, match="pagination"):
        list_params({}, page, per_page)
