"""Tests for shared helpers."""

from datetime import date, datetime, timezone
from unittest.mock import Mock

import pytest
from exchangelib import EWSDateTime, EWSTimeZone

from ews_mailbox.models import ItemSearchRequest
from ews_mailbox.utils import (
    ews_id_to_str,
    format_success_response,
    parse_datetime_tz_aware,
    safe_get,
    sanitize_filename,
)


def test_safe_get_defaults():
    assert safe_get(None, "subject", "x") == "x"
    item = Mock(subject=None)
    assert safe_get(item, "subject", "") == ""


def test_ews_id_to_str():
    assert ews_id_to_str(None) is None
    assert ews_id_to_str("AAMk1") == "AAMk1"
    assert ews_id_to_str(Mock(id="AAMk2")) == "AAMk2"


def test_format_success_response():
    assert format_success_response("done", count=2) == {"success": True, "message": "done", "count": 2}


class TestParseDatetime:

    def test_naive_string_uses_timezone(self):
        tz = EWSTimeZone("Europe/Copenhagen")
        result = parse_datetime_tz_aware("2024-06-01T12:00:00", tz)

        assert isinstance(result, EWSDateTime)
        assert result.utcoffset().total_seconds() == 7200

    def test_zulu_suffix(self):
        result = parse_datetime_tz_aware("2024-06-01T12:00:00Z")
        assert result.utcoffset().total_seconds() == 0

    def test_aware_datetime(self):
        result = parse_datetime_tz_aware(datetime(2024, 1, 1, tzinfo=timezone.utc))
        assert result.hour == 0

    def test_fixed_offset_becomes_utc(self):
        result = parse_datetime_tz_aware("2024-06-01T12:00:00+02:00")

        assert isinstance(result.tzinfo, EWSTimeZone)
        assert result == EWSDateTime(2024, 6, 1, 10, 0, tzinfo=EWSTimeZone("UTC"))

    def test_pydantic_parsed_datetime(self):
        # pydantic attaches its own tzinfo type to parsed offsets
        request = ItemSearchRequest(start_date="2024-06-01T12:00:00Z")
        result = parse_datetime_tz_aware(request.start_date, EWSTimeZone("Europe/Copenhagen"))

        assert result == EWSDateTime(2024, 6, 1, 12, 0, tzinfo=EWSTimeZone("UTC"))

    def test_date(self):
        result = parse_datetime_tz_aware(date(2024, 1, 31))
        assert (result.year, result.month, result.day, result.hour) == (2024, 1, 31, 0)

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_datetime_tz_aware("next tuesday")


@pytest.mark.parametrize("name, expected", [
    ("Quarterly report", "Quarterly report"),
    ('a/b\\c:d*e?f"g<h>i|j', "a_b_c_d_e_f_g_h_i_j"),
    ("", "untitled"),
    (None, "untitled"),
    ("...", "untitled"),
])
def test_sanitize_filename(name, expected):
    assert sanitize_filename(name) == expected
