"""
Base Contract Tests
===================

INVARIANTS TESTED:
1. Error.of stores context as sorted, stringified pairs
2. Errors are frozen
3. A Result carries a value or an error, never both
"""

import dataclasses

import pytest

from factiongraph.contracts.base import Error, ErrorCode, Result


class TestError:

    def test_context_sorted_and_stringified(self):
        error = Error.of(ErrorCode.EVENT_NOT_FOUND, "Event not in view", year=2001, event_id="7")
        assert error.context == (("event_id", "7"), ("year", "2001"))
        assert error.timestamp.tzinfo is not None

    def test_frozen(self):
        error = Error.of(ErrorCode.MALFORMED_ROW, "bad row")
        with pytest.raises(dataclasses.FrozenInstanceError):
            error.message = "changed"


class TestResult:

    def test_success(self):
        result = Result.success(3)
        assert result.is_success and not result.is_failure
        assert result.value == 3

    def test_failure(self):
        error = Error.of(ErrorCode.DUPLICATE_SELECTION, "Repeated selection ignored")
        result = Result.failure(error)
        assert result.is_failure
        assert result.value is None
        assert result.error is error
