from datetime import datetime, timedelta, timezone

from src.shared.config import get_storage_key
from src.shared.utils import ensure_utc_datetime, new_id, start_of_day


def test_naive_datetime_is_treated_as_utc():
    value = ensure_utc_datetime(datetime(2024, 1, 15, 10, 30))
    assert value == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


def test_aware_datetime_is_converted_to_utc():
    plus_two = timezone(timedelta(hours=2))
    value = ensure_utc_datetime(datetime(2024, 1, 15, 12, 30, tzinfo=plus_two))
    assert value == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    assert value.tzinfo == timezone.utc


def test_iso_string_is_parsed():
    assert ensure_utc_datetime("2024-01-15T10:30:00+00:00") == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


def test_unparseable_string_falls_back_to_now():
    before = datetime.now(timezone.utc)
    assert ensure_utc_datetime("not a date") >= before


def test_start_of_day():
    value = start_of_day(datetime(2024, 1, 15, 23, 59, 59, 999, tzinfo=timezone.utc))
    assert value == datetime(2024, 1, 15, tzinfo=timezone.utc)


def test_new_id_is_unique_uuid():
    first, second = new_id(), new_id()
    assert first != second
    assert len(first) == 36


def test_storage_key_override():
    assert get_storage_key("custom") == "custom"
    assert get_storage_key() == get_storage_key(None)
