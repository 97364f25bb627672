"""
CAP transformer facade for floodcap.

Transforms flood-state GeoJSON features into CAP 1.2 alerts and an ATOM
feed of CAP alerts. All collaborators (logger, settings) are injected.
"""

from typing import Iterable, Optional

from floodcap.observability import metrics
from floodcap.observability.logging_setup import get_logger
from floodcap.settings import CapSettings
from .alert import build_alert, build_info
from .area import build_area
from .feed import FeatureLike, FeedAssembler, alert_tree, parse_feature
from .models import Alert, Area, Info
from .result import Ok, Result
from .xmltree import to_xml


class CapTransformer:
    """GeoJSON 피처 -> CAP/ATOM XML 변환기"""

    def __init__(self, logger=None, settings: Optional[CapSettings] = None):
        """
        초기화합니다.

        Args:
            logger: loguru 로거, None이면 "floodcap.cap" 로거 사용
            settings: CAP 설정
        """
        self.logger = logger if logger is not None else get_logger("floodcap.cap")
        self.settings = settings or CapSettings()
        self.assembler = FeedAssembler(self.logger, self.settings)

    def _log_failure(self, stage: str, result: Result) -> None:
        if not result.ok:
            self.logger.error(f"Cap: {stage}(): {result.error}")

    def create_area(self, raw: FeatureLike) -> Result[Area]:
        """피처 지오메트리로 CAP area를 생성합니다."""
        parsed = parse_feature(raw)
        if not parsed.ok:
            self._log_failure("create_area", parsed)
            return parsed
        props = parsed.value.properties
        result = build_area(parsed.value.geometry, f"{props.level_name}, {props.parent_name}")
        if result.ok:
            self.logger.debug(
                f"Cap: create_area(): {len(result.value.polygon)} polygons detected for {result.value.area_desc}"
            )
        self._log_failure("create_area", result)
        return result

    def create_info(self, raw: FeatureLike) -> Result[Info]:
        """피처로 CAP info 블록을 생성합니다."""
        parsed = parse_feature(raw)
        result = build_info(parsed.value, self.settings.timezone) if parsed.ok else parsed
        self._log_failure("create_info", result)
        return result

    def create_alert(self, raw: FeatureLike) -> Result[Alert]:
        """피처로 CAP alert를 생성합니다."""
        parsed = parse_feature(raw)
        if parsed.ok:
            result = build_alert(parsed.value, self.settings.timezone, self.settings.identifier_style)
        else:
            result = parsed
        self._log_failure("create_alert", result)
        return result

    def geojson_to_cap_alert(self, raw: FeatureLike) -> Result[str]:
        """단일 피처를 독립 CAP alert XML 문서로 변환합니다."""
        result = self.create_alert(raw)
        if not result.ok:
            return result
        return Ok(to_xml({"alert": alert_tree(result.value)}))

    def geojson_to_atom_cap(self, features: Iterable[FeatureLike]) -> str:
        """
        피처 목록을 CAP alert를 담은 ATOM 피드 XML로 변환합니다.

        개별 피처의 실패는 로그만 남기고 건너뛰며, 호출자에게 예외를 던지지 않습니다.
        """
        with metrics.cap_feed_seconds.time():
            return to_xml(self.assembler.assemble(features))
