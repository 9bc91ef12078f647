"""Unit tests for the UTCDateTime column type."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from keyward.models.types import UTCDateTime


class TestUTCDateTime:
    def test_bind_converts_to_naive_utc(self):
        value = datetime(2030, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        assert UTCDateTime().process_bind_param(value, None) == datetime(2030, 1, 1, 12, 0)

    def test_bind_rejects_naive(self):
        with pytest.raises(ValueError):
            UTCDateTime().process_bind_param(datetime(2030, 1, 1), None)

    def test_result_is_aware_utc(self):
        result = UTCDateTime().process_result_value(datetime(2030, 1, 1, 12, 0), None)
        assert result == datetime(2030, 1, 1, 12, 0, tzinfo=UTC)
        assert result.utcoffset() == timedelta(0)

    def test_none_passthrough(self):
        assert UTCDateTime().process_bind_param(None, None) is None
        assert UTCDateTime().process_result_value(None, None) is None
