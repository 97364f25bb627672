"""
CAP info and alert construction for floodcap.

Maps the flooded state of a feature onto the CAP severity vocabulary and
builds the alert document around the feature's area.
"""

from typing import Dict, Tuple
from urllib.parse import quote

from .area import build_area
from .errors import InvalidFeature, UnmappedSeverityState
from .models import Alert, Feature, IdentifierStyle, Info, Severity
from .result import Err, Ok, Result
from .timefmt import DEFAULT_TIMEZONE, description_time, iso_timestamp, localize
from .xmltree import is_xml_text

# 침수 상태 -> (CAP 심각도, 설명 문구)
SEVERITY_BY_STATE: Dict[int, Tuple[Severity, str]] = {
    1: ("Unknown", "AN UNKNOWN LEVEL OF FLOODING - USE CAUTION -"),
    2: ("Minor", "FLOODING OF BETWEEN 10 and 70 CENTIMETERS"),
    3: ("Moderate", "FLOODING OF BETWEEN 71 and 150 CENTIMETERS"),
    4: ("Severe", "FLOODING OF OVER 150 CENTIMETERS"),
}

DESCRIPTION_TEMPLATE = (
    "AT {time} THE JAKARTA EMERGENCY MANAGEMENT AGENCY OBSERVED "
    "{level_description} IN {parent_name}, {level_name}."
)

# 식별자 인코딩 시 그대로 남길 문자 (영숫자와 "_.-~"는 항상 유지)
IDENTIFIER_SAFE = ",:+"


def resolve_severity(state) -> Tuple[Severity, str]:
    """
    침수 상태를 CAP 심각도와 설명으로 변환합니다.

    Raises:
        UnmappedSeverityState: 1~4 이외의 값
    """
    # bool은 int의 하위 타입이므로 제외
    if isinstance(state, bool) or state not in SEVERITY_BY_STATE:
        raise UnmappedSeverityState(state)
    return SEVERITY_BY_STATE[state]


def encode_identifier(parent_name: str, level_name: str, timestamp: str,
                      style: IdentifierStyle = IdentifierStyle.COMMA) -> str:
    """
    alert identifier를 생성합니다.

    Args:
        parent_name: 상위 행정구역 이름
        level_name: 영역 이름
        timestamp: ISO 8601 타임스탬프
        style: 조합 방식

    Returns:
        URL 인코딩된 식별자 (`<`, `&`, 공백은 항상 인코딩됨)
    """
    style = IdentifierStyle(style)
    if style is IdentifierStyle.DOT:
        raw = ".".join((parent_name, level_name, timestamp)).replace(" ", "_")
    else:
        raw = ",".join((parent_name, level_name, timestamp))
    return quote(raw, safe=IDENTIFIER_SAFE)


def build_info(feature: Feature, tz_name: str = DEFAULT_TIMEZONE) -> Result[Info]:
    """
    피처로부터 CAP info 블록을 생성합니다.

    Returns:
        Ok(Info) 또는 Err(CapError) - 상태 매핑 또는 Area 생성 실패 시
    """
    props = feature.properties
    try:
        severity, level_description = resolve_severity(props.state)
        observed = localize(props.last_updated, tz_name)
        for field, value in (("level_name", props.level_name), ("parent_name", props.parent_name)):
            if not is_xml_text(value):
                raise InvalidFeature(f"{field} {value!r} contains characters not allowed in XML")
    except (UnmappedSeverityState, InvalidFeature) as e:
        return Err(e)

    area = build_area(feature.geometry, f"{props.level_name}, {props.parent_name}")
    if not area.ok:
        return area

    description = DESCRIPTION_TEMPLATE.format(
        time=description_time(observed),
        level_description=level_description,
        parent_name=props.parent_name,
        level_name=props.level_name,
    )
    return Ok(Info(severity=severity, description=description, area=area.value))


def build_alert(feature: Feature, tz_name: str = DEFAULT_TIMEZONE,
                identifier_style: IdentifierStyle = IdentifierStyle.COMMA) -> Result[Alert]:
    """
    피처로부터 CAP alert를 생성합니다.

    info 생성에 실패하면 alert도 생성하지 않습니다.
    """
    info = build_info(feature, tz_name)
    if not info.ok:
        return info

    props = feature.properties
    sent = iso_timestamp(localize(props.last_updated, tz_name))
    identifier = encode_identifier(props.parent_name, props.level_name, sent, identifier_style)
    return Ok(Alert(identifier=identifier, sent=sent, info=info.value))
