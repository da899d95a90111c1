"""Tests for the small core helpers: clock, pagination, timezone and identifiers."""

from datetime import datetime, timedelta
import logging

from helpers import NOW
from pydantic import ValidationError
import pytest
import pytz

from tutorbooking.core.clock import FixedClock, SystemClock, get_clock
from tutorbooking.core.config import Settings
from tutorbooking.core.pagination import build_pagination, clamp_page, clamp_per_page
from tutorbooking.core.request_context import (
    RequestIdFilter,
    get_request_id,
    reset_request_id,
    set_request_id,
)
from tutorbooking.core.timezone_utils import ensure_utc, minutes_between
from tutorbooking.core.ulid_helper import generate_public_id, generate_ulid, is_valid_ulid


class TestClock:
    def test_fixed_clock_advances(self):
        clock = FixedClock(NOW)
        assert clock.now() == NOW
        assert clock.advance(minutes=90) == NOW + timedelta(minutes=90)
        assert clock.now() == NOW + timedelta(minutes=90)

    def test_fixed_clock_normalizes_to_utc(self):
        eastern = pytz.timezone("America/New_York").localize(datetime(2025, 3, 1, 4, 0))
        clock = FixedClock(eastern)
        assert clock.now() == NOW
        assert clock.now().tzinfo is not None

    def test_system_clock_is_aware(self):
        assert SystemClock().now().tzinfo is not None
        assert get_clock() is get_clock()


class TestTimezoneUtils:
    def test_naive_values_are_assumed_utc(self):
        assert ensure_utc(datetime(2025, 3, 1, 9, 0)) == NOW

    def test_none_passes_through(self):
        assert ensure_utc(None) is None

    def test_minutes_between_rounds_to_nearest_minute(self):
        assert minutes_between(NOW, NOW + timedelta(minutes=90)) == 90
        assert minutes_between(NOW, NOW + timedelta(minutes=44, seconds=40)) == 45


class TestPagination:
    def test_page_is_at_least_one(self):
        assert clamp_page(0) == 1
        assert clamp_page(None) == 1
        assert clamp_page(3) == 3

    def test_per_page_defaults_and_caps(self):
        assert clamp_per_page(None) == 25
        assert clamp_per_page(0) == 25
        assert clamp_per_page(500) == 100
        assert clamp_per_page(10) == 10

    def test_total_pages_never_below_one(self):
        assert build_pagination(1, 25, 0) == {
            "page": 1,
            "per_page": 25,
            "total": 0,
            "total_pages": 1,
        }

    def test_total_pages_rounds_up(self):
        assert build_pagination(2, 10, 21)["total_pages"] == 3


class TestSettings:
    def test_currency_is_upper_cased(self):
        assert Settings(default_currency=" eur ").default_currency == "EUR"

    def test_invalid_currency_is_rejected(self):
        with pytest.raises(ValidationError):
            Settings(default_currency="euro")

    def test_default_status_must_be_known(self):
        assert Settings(default_booking_status="Requested").default_booking_status == "requested"
        with pytest.raises(ValidationError):
            Settings(default_booking_status="pending")

    def test_max_page_size_must_cover_default(self):
        with pytest.raises(ValidationError):
            Settings(default_page_size=50, max_page_size=10)


class TestIdentifiers:
    def test_ulids_are_valid_and_unique(self):
        first, second = generate_ulid(), generate_ulid()
        assert first != second
        assert is_valid_ulid(first)
        assert not is_valid_ulid("not-a-ulid")

    def test_public_ids_are_uuid4(self):
        public_id = generate_public_id()
        assert len(public_id) == 36
        assert public_id[14] == "4"


class TestRequestContext:
    def test_filter_stamps_current_request_id(self):
        token = set_request_id("01HREQUEST")
        try:
            record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
            assert RequestIdFilter().filter(record)
            assert record.request_id == "01HREQUEST"
        finally:
            reset_request_id(token)
        assert get_request_id() is None

    def test_filter_outside_a_request(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        RequestIdFilter().filter(record)
        assert record.request_id == "no-request"