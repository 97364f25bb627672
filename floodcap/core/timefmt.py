"""
Timestamp helpers for floodcap.

All CAP timestamps are rendered in a single civil time zone
(Asia/Jakarta by default). Naive timestamps are taken as wall-clock
time in that zone.
"""

from datetime import datetime
from typing import Union
from zoneinfo import ZoneInfo

from .errors import InvalidFeature

DEFAULT_TIMEZONE = "Asia/Jakarta"


def localize(value: Union[datetime, str, None], tz_name: str = DEFAULT_TIMEZONE) -> datetime:
    """
    타임스탬프를 지정된 시간대의 aware datetime으로 변환합니다.

    Args:
        value: datetime 또는 ISO 8601 문자열
        tz_name: IANA 시간대 이름

    Returns:
        시간대가 적용된 datetime

    Raises:
        InvalidFeature: 값이 없거나 파싱할 수 없는 경우
    """
    if value is None:
        raise InvalidFeature("Feature has no last_updated timestamp")

    tz = ZoneInfo(tz_name)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError as e:
            raise InvalidFeature(f"Invalid last_updated timestamp '{value}': {e}") from e

    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def iso_timestamp(value: datetime) -> str:
    """CAP `sent` 형식 (YYYY-MM-DDTHH:MM:SS+HH:MM)"""
    return value.isoformat(timespec="seconds")


def description_time(value: datetime) -> str:
    """설명문용 시각 (HH:MM 시간대 약어)"""
    return value.strftime("%H:%M %Z")


def now(tz_name: str = DEFAULT_TIMEZONE) -> datetime:
    return datetime.now(ZoneInfo(tz_name))
