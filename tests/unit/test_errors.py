"""Unit tests for Keyward error types."""

from __future__ import annotations

from keyward.errors import (
    DuplicateNameError,
    InvalidPatternError,
    KeywardError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)


def test_to_dict_with_request_id():
    err = NotFoundError("could not find api key id[7] in DB", details={"api_key_id": 7})

    assert err.to_dict("req-1") == {
        "error": {
            "code": "not_found",
            "message": "could not find api key id[7] in DB",
            "details": {"api_key_id": 7},
            "request_id": "req-1",
        }
    }


def test_default_message():
    err = PersistenceError()
    assert err.message == "Database operation failed"
    assert err.to_dict() == {
        "error": {"code": "persistence_error", "message": err.message, "details": {}}
    }


def test_client_errors_share_validation_base():
    """Pattern and name errors map to client-input errors."""
    assert issubclass(InvalidPatternError, ValidationError)
    assert issubclass(DuplicateNameError, ValidationError)
    assert DuplicateNameError("k1").status_code == 400
    assert InvalidPatternError().status_code == 400


def test_duplicate_name_carries_name():
    err = DuplicateNameError("k1")

    assert err.name == "k1"
    assert err.code == "duplicate_name"
    assert err.details == {"name": "k1"}
    assert isinstance(err, KeywardError)
