# app/utils/datetime_utils.py
"""
예약/반려동물 기록 전반에서 일관된 시간/날짜 처리를 위한 중앙화된 유틸리티 모듈

이 모듈의 목적:
1. 모든 시간 관련 작업을 UTC 기준으로 표준화
2. Firestore 호환성 보장
3. 예약 날짜(YYYY-MM-DD) 파싱/생성 통일
4. 나이 문자열, 월 단위 통계 구간 계산 제공
"""

import logging
from datetime import datetime, date, timezone, time, timedelta
from typing import Union, Optional, Any, Tuple
from dateutil import parser as dateutil_parser
from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

# 백엔드는 UTC로 통일, 클라이언트에서 현지 시간으로 변환
UTC = timezone.utc

# 예방접종 알림 등에서 사용하는 근사 월 길이
APPROX_MONTH_DAYS = 30


class DateTimeUtils:
    """시간/날짜 처리를 위한 중앙화된 유틸리티 클래스"""

    @staticmethod
    def now() -> datetime:
        """현재 시간을 UTC timezone-aware datetime으로 반환"""
        return datetime.now(UTC)

    @staticmethod
    def today() -> date:
        """오늘 날짜를 반환"""
        return datetime.now(UTC).date()

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        ISO 포맷 문자열을 UTC datetime 객체로 파싱

        지원 포맷:
        - 2024-01-15T10:30:00Z
        - 2024-01-15T10:30:00+09:00
        - 2024-01-15T10:30:00
        """
        try:
            if not iso_string:
                raise ValueError("빈 문자열은 파싱할 수 없습니다")

            if iso_string.endswith('Z'):
                iso_string = iso_string[:-1] + '+00:00'

            dt = dateutil_parser.isoparse(iso_string)
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=UTC)
            return dt.astimezone(UTC)

        except Exception as e:
            logger.error(f"ISO datetime 파싱 실패: {iso_string} - {e}")
            raise ValueError(f"잘못된 ISO 날짜 형식입니다: {iso_string}")

    @staticmethod
    def parse_date_string(date_string: str) -> date:
        """
        날짜 문자열을 date 객체로 파싱

        지원 포맷:
        - 2024-01-15
        - 2024/01/15
        - 2024-01-15T00:00:00.000Z (날짜 부분만 사용)
        """
        try:
            if not date_string:
                raise ValueError("빈 문자열은 파싱할 수 없습니다")
            return dateutil_parser.parse(date_string).date()

        except Exception as e:
            logger.error(f"날짜 문자열 파싱 실패: {date_string} - {e}")
            raise ValueError(f"잘못된 날짜 형식입니다: {date_string}")

    @staticmethod
    def to_iso_string(dt: datetime) -> str:
        """datetime 객체를 Z 접미사가 붙은 ISO 포맷 문자열로 변환"""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        else:
            dt = dt.astimezone(UTC)
        return dt.isoformat().replace('+00:00', 'Z')

    @staticmethod
    def to_date_string(d: date) -> str:
        """date 객체를 YYYY-MM-DD 형식 문자열로 변환"""
        return d.strftime('%Y-%m-%d')

    @staticmethod
    def to_long_date_string(d: date) -> str:
        """확인 메일용 긴 날짜 표기 (예: Monday, October 20, 2026)"""
        return f"{d.strftime('%A, %B')} {d.day}, {d.year}"

    @staticmethod
    def for_firestore(obj: Any) -> Any:
        """
        Firestore 저장을 위해 객체의 날짜/시간 필드를 변환

        변환 규칙:
        - date -> datetime (00:00:00 UTC)
        - timezone-naive datetime -> timezone-aware datetime (UTC)
        - dict/list 내부 재귀적 변환
        """
        if isinstance(obj, datetime):
            if obj.tzinfo is None:
                return obj.replace(tzinfo=UTC)
            return obj.astimezone(UTC)
        elif isinstance(obj, date):
            return datetime.combine(obj, time.min).replace(tzinfo=UTC)
        elif isinstance(obj, dict):
            return {k: DateTimeUtils.for_firestore(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [DateTimeUtils.for_firestore(item) for item in obj]
        return obj

    @staticmethod
    def from_firestore(obj: Any) -> Any:
        """
        Firestore에서 읽은 데이터의 datetime 필드를 UTC datetime으로 변환
        변환 실패 시 원본 객체를 그대로 반환합니다.
        """
        try:
            if isinstance(obj, datetime):
                if obj.tzinfo is None:
                    return obj.replace(tzinfo=UTC)
                return obj.astimezone(UTC)
            elif hasattr(obj, 'timestamp') and callable(obj.timestamp):
                # Firestore DatetimeWithNanoseconds / Timestamp
                return datetime.fromtimestamp(obj.timestamp(), tz=UTC)
            elif isinstance(obj, dict):
                return {k: DateTimeUtils.from_firestore(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [DateTimeUtils.from_firestore(item) for item in obj]
            return obj

        except Exception as e:
            logger.error(f"Firestore 읽기 변환 실패: {obj} ({type(obj)}) - {e}")
            return obj

    @staticmethod
    def validate_date_field(value: Any, field_name: str = "date") -> date:
        """
        저장소나 API에서 받은 date 값을 검증하고 변환

        Raises:
            ValueError: 잘못된 형식이거나 파싱할 수 없는 경우
        """
        if value is None:
            raise ValueError(f"{field_name}은 필수 필드입니다")
        if isinstance(value, datetime):
            return value.astimezone(UTC).date() if value.tzinfo else value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            return DateTimeUtils.parse_date_string(value)
        raise ValueError(f"{field_name}은 문자열 또는 date/datetime 객체여야 합니다")

    @staticmethod
    def validate_datetime_field(value: Any, field_name: str = "datetime") -> datetime:
        """
        created_at 등 timestamp 값을 UTC datetime으로 검증/변환
        ISO 문자열, datetime, Unix timestamp(ms)를 허용합니다.
        """
        if value is None:
            raise ValueError(f"{field_name}은 필수 필드입니다")
        if isinstance(value, str):
            return DateTimeUtils.parse_iso_datetime(value)
        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=UTC)
            return value.astimezone(UTC)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return datetime.fromtimestamp(value / 1000.0, tz=UTC)
        raise ValueError(f"{field_name}은 문자열, datetime 또는 timestamp(ms)여야 합니다")

    @staticmethod
    def calculate_age(birth_date: Union[date, datetime, str, None], today: Optional[date] = None) -> str:
        """
        생년월일로부터 사람이 읽을 수 있는 나이 문자열을 계산합니다.

        - 1년 미만: "N month(s)"
        - 남은 개월이 0: "N year(s)"
        - 그 외: "N year(s) and M month(s)"
        오늘의 일(day)이 생일의 일보다 작으면 해당 월은 채워지지 않은 것으로 봅니다.
        """
        if not birth_date:
            return "Unknown"

        birth = DateTimeUtils.validate_date_field(birth_date, "birth_date")
        today = today or DateTimeUtils.today()
        if birth > today:
            return "0 months"

        # relativedelta는 월말을 보정하므로(3/31 -> 4/30 = 1개월) 일(day) 비교로 직접 계산
        total_months = (today.year - birth.year) * 12 + (today.month - birth.month)
        if today.day < birth.day:
            total_months -= 1
        years, months = divmod(total_months, 12)

        if years < 1:
            return f"{months} month{'s' if months != 1 else ''}"
        year_part = f"{years} year{'s' if years != 1 else ''}"
        if months == 0:
            return year_part
        return f"{year_part} and {months} month{'s' if months != 1 else ''}"

    @staticmethod
    def approx_age_months(birth_date: Union[date, datetime, str], now: Optional[datetime] = None) -> float:
        """30일 = 1개월 근사로 계산한 개월 수 (예방접종 알림 판정용)"""
        birth = DateTimeUtils.validate_date_field(birth_date, "birth_date")
        now = now or DateTimeUtils.now()
        birth_dt = datetime.combine(birth, time.min).replace(tzinfo=UTC)
        return (now - birth_dt) / timedelta(days=APPROX_MONTH_DAYS)

    @staticmethod
    def get_month_range(year: int, month: int) -> Tuple[date, date]:
        """특정 년월의 첫째 날과 마지막 날을 반환"""
        start_date = date(year, month, 1)
        end_date = start_date + relativedelta(months=1) - relativedelta(days=1)
        return start_date, end_date

    @staticmethod
    def month_windows(now: datetime) -> Tuple[datetime, datetime]:
        """
        대시보드 통계용 월 구간 경계를 반환합니다.

        :return: (이번 달 시작, 지난 달 시작) - 지난 달은 [지난 달 시작, 이번 달 시작) 구간
        """
        now = now.astimezone(UTC) if now.tzinfo else now.replace(tzinfo=UTC)
        current_start = datetime(now.year, now.month, 1, tzinfo=UTC)
        previous_start = current_start - relativedelta(months=1)
        return current_start, previous_start

    @staticmethod
    def hours_until(target: datetime, now: Optional[datetime] = None) -> float:
        """now 기준 target까지 남은 시간(시간 단위, 과거면 음수)"""
        now = now or DateTimeUtils.now()
        return (target - now) / timedelta(hours=1)


# 편의를 위한 글로벌 함수들
def now() -> datetime:
    """현재 UTC 시간 반환"""
    return DateTimeUtils.now()

def today() -> date:
    """오늘 날짜 반환"""
    return DateTimeUtils.today()

def parse_iso(iso_string: str) -> datetime:
    """ISO 문자열을 datetime으로 파싱"""
    return DateTimeUtils.parse_iso_datetime(iso_string)

def to_iso(dt: datetime) -> str:
    """datetime을 ISO 문자열로 변환"""
    return DateTimeUtils.to_iso_string(dt)

def for_firestore(obj: Any) -> Any:
    """Firestore 저장용 변환"""
    return DateTimeUtils.for_firestore(obj)

def from_firestore(obj: Any) -> Any:
    """Firestore 읽기용 변환"""
    return DateTimeUtils.from_firestore(obj)

def calculate_age(birth_date: Union[date, datetime, str, None], today: Optional[date] = None) -> str:
    """나이 문자열 계산"""
    return DateTimeUtils.calculate_age(birth_date, today)
