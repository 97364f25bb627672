"""
Parameter validation helpers for floodcap.

Pure predicates used by the query layer to validate caller options
before any database access.
"""

import math
from typing import Any, Optional


def _is_number(param: Any) -> bool:
    # bool은 int의 하위 타입이지만 숫자로 취급하지 않음
    return isinstance(param, (int, float)) and not isinstance(param, bool)


def validate_number_parameter(param: Any, min: Optional[float] = None, max: Optional[float] = None) -> bool:
    """
    숫자 파라미터를 검증합니다.

    Args:
        param: 검증할 값
        min: 허용 최솟값 (포함)
        max: 허용 최댓값 (포함)

    Returns:
        검증 통과 여부
    """
    if not _is_number(param) or math.isnan(param):
        return False
    if min is not None and param < min:
        return False
    if max is not None and param > max:
        return False
    return True


def validate_integer_parameter(param: Any) -> bool:
    """정수 파라미터를 검증합니다 (2.0처럼 정수값인 float 포함)."""
    if not _is_number(param) or math.isnan(param) or math.isinf(param):
        return False
    return param == int(param)


def validate_boolean_parameter(param: Any) -> bool:
    """불리언 파라미터를 검증합니다."""
    return isinstance(param, bool)


def validate_string_parameter(param: Any, empty_allowed: bool = False) -> bool:
    """
    문자열 파라미터를 검증합니다.

    Args:
        param: 검증할 값
        empty_allowed: True면 빈 문자열도 허용
    """
    if not isinstance(param, str):
        return False
    return empty_allowed or param != ""
