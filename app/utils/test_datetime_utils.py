# app/utils/test_datetime_utils.py
"""
통합 시간 관리 유틸리티 기능 테스트

사용법: python -m pytest app/utils/test_datetime_utils.py -v
"""

import pytest
from datetime import datetime, date, timezone
from dateutil.relativedelta import relativedelta

from app.utils.datetime_utils import DateTimeUtils

TODAY = date(2026, 10, 19)


def test_parse_iso_datetime():
    """ISO 포맷 파싱 테스트"""
    test_cases = [
        "2026-01-15T10:30:00Z",
        "2026-01-15T10:30:00+09:00",
        "2026-01-15T10:30:00.123456Z",
        "2026-01-15T10:30:00"
    ]

    for iso_string in test_cases:
        dt = DateTimeUtils.parse_iso_datetime(iso_string)
        assert isinstance(dt, datetime)
        assert dt.tzinfo == timezone.utc


def test_parse_date_string():
    """날짜 문자열 파싱 테스트"""
    for date_string in ["2026-01-15", "2026/01/15", "2026-01-15T00:00:00.000Z"]:
        assert DateTimeUtils.parse_date_string(date_string) == date(2026, 1, 15)


def test_for_firestore_converts_dates_recursively():
    """Firestore 변환 테스트"""
    converted = DateTimeUtils.for_firestore({
        'birth_date': date(2020, 1, 15),
        'nested': {'created_at': datetime(2024, 1, 15, 10, 30)},
        'items': [date(2023, 12, 25)]
    })

    assert converted['birth_date'] == datetime(2020, 1, 15, tzinfo=timezone.utc)
    assert converted['nested']['created_at'].tzinfo == timezone.utc
    assert isinstance(converted['items'][0], datetime)


@pytest.mark.parametrize("birth, expected", [
    (TODAY, "0 months"),
    (TODAY - relativedelta(months=1), "1 month"),
    (TODAY - relativedelta(months=6), "6 months"),
    (TODAY - relativedelta(years=1), "1 year"),
    (TODAY - relativedelta(years=1, months=1), "1 year and 1 month"),
    (TODAY - relativedelta(years=3, months=5), "3 years and 5 months"),
    (TODAY - relativedelta(years=2), "2 years"),
])
def test_calculate_age(birth, expected):
    """나이 문자열 계산 테스트"""
    assert DateTimeUtils.calculate_age(birth, today=TODAY) == expected


def test_calculate_age_partial_month_is_not_counted():
    """오늘의 일이 생일의 일보다 작으면 마지막 달은 세지 않음"""
    assert DateTimeUtils.calculate_age(date(2025, 10, 20), today=TODAY) == "11 months"
    assert DateTimeUtils.calculate_age("2025-10-19", today=TODAY) == "1 year"


def test_calculate_age_at_month_end_is_not_rounded_up():
    """3월 31일생은 4월 30일에 아직 1개월이 되지 않음"""
    assert DateTimeUtils.calculate_age(date(2026, 3, 31), today=date(2026, 4, 30)) == "0 months"
    assert DateTimeUtils.calculate_age(date(2026, 3, 31), today=date(2026, 5, 31)) == "2 months"
    assert DateTimeUtils.calculate_age(date(2024, 2, 29), today=date(2025, 2, 28)) == "11 months"


def test_calculate_age_missing_birth_date():
    assert DateTimeUtils.calculate_age(None) == "Unknown"


def test_approx_age_months_uses_thirty_day_months():
    now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
    assert DateTimeUtils.approx_age_months(date(2026, 4, 19), now) >= 6
    assert DateTimeUtils.approx_age_months(date(2026, 5, 1), now) < 6


def test_month_windows():
    current_start, previous_start = DateTimeUtils.month_windows(datetime(2026, 1, 15, tzinfo=timezone.utc))
    assert current_start == datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert previous_start == datetime(2025, 12, 1, tzinfo=timezone.utc)


def test_to_long_date_string():
    assert DateTimeUtils.to_long_date_string(date(2026, 10, 20)) == "Tuesday, October 20, 2026"


def test_error_handling():
    """오류 처리 테스트"""
    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("invalid-date")

    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("")

    with pytest.raises(ValueError):
        DateTimeUtils.validate_datetime_field(None)


def test_module_level_helpers():
    """패키지 단축 함수 테스트"""
    from app.utils import parse_iso, to_iso, calculate_age

    dt = parse_iso("2026-01-15T10:30:00+09:00")
    assert to_iso(dt) == "2026-01-15T01:30:00Z"
    assert calculate_age("2025-10-19", today=TODAY) == "1 year"
