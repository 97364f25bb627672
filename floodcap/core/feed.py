"""
ATOM feed assembly for floodcap.

Builds one CAP alert per feature and wraps every successful alert in an
ATOM entry. A feature that fails conversion is logged and skipped; it never
aborts the feed.
"""

from typing import Any, Dict, Iterable, List, Optional, Union
from urllib.parse import quote

from pydantic import ValidationError

from floodcap.observability import metrics
from floodcap.observability.logging_setup import with_context
from floodcap.settings import CapSettings
from .alert import build_alert
from .errors import InvalidFeature
from .models import Alert, Feature
from .result import Err, Ok, Result
from .timefmt import iso_timestamp, now

ATOM_NAMESPACE = "http://www.w3.org/2005/Atom"
CAP_NAMESPACE = "urn:oasis:names:tc:emergency:cap:1.2"

FeatureLike = Union[Feature, Dict[str, Any]]


def parse_feature(raw: FeatureLike) -> Result[Feature]:
    """딕셔너리 또는 Feature를 검증된 Feature로 변환합니다."""
    if isinstance(raw, Feature):
        return Ok(raw)
    try:
        return Ok(Feature.model_validate(raw))
    except ValidationError as e:
        return Err(InvalidFeature(f"Malformed feature: {e.error_count()} validation errors"))


def alert_tree(alert: Alert) -> Dict[str, Any]:
    """CAP 1.2 스키마 순서를 따르는 alert 트리"""
    info = alert.info
    return {
        "@xmlns": CAP_NAMESPACE,
        "identifier": alert.identifier,
        "sender": alert.sender,
        "sent": alert.sent,
        "status": alert.status,
        "msgType": alert.msg_type,
        "scope": alert.scope,
        "info": {
            "category": info.category,
            "event": info.event,
            "urgency": info.urgency,
            "severity": info.severity,
            "certainty": info.certainty,
            "senderName": info.sender_name,
            "headline": info.headline,
            "description": info.description,
            "web": info.web,
            "area": {
                "areaDesc": info.area.area_desc,
                "polygon": list(info.area.polygon),
            },
        },
    }


class FeedAssembler:
    """피처 목록을 ATOM + CAP 피드 트리로 조립합니다."""

    def __init__(self, logger, settings: Optional[CapSettings] = None):
        """
        초기화합니다.

        Args:
            logger: loguru 로거 (error/debug 메서드 사용)
            settings: 피드 메타데이터 및 시간대 설정
        """
        self.logger = logger
        self.settings = settings or CapSettings()

    def build(self, feature: Feature) -> Result[Alert]:
        """단일 피처로 alert를 생성합니다. 실패 시 Err를 반환하고 로그를 남깁니다."""
        result = build_alert(feature, self.settings.timezone, self.settings.identifier_style)
        if not result.ok:
            props = feature.properties
            self.logger.error(
                f"Cap: alert for '{props.level_name}, {props.parent_name}' not created: {result.error}"
            )
        return result

    def entry_tree(self, alert: Alert, feature: Feature) -> Dict[str, Any]:
        props = feature.properties
        entry_id = (
            f"{self.settings.entry_base_url}"
            f"?parent_name={quote(props.parent_name, safe='')}"
            f"&level_name={quote(props.level_name, safe='')}"
            f"&time={quote(alert.sent, safe=':')}"
        )
        return {
            "id": entry_id,
            "title": f"{alert.identifier} Flood Report",
            "updated": alert.sent,
            "content": {
                "@type": "text/xml",
                "alert": alert_tree(alert),
            },
        }

    def assemble(self, features: Iterable[FeatureLike]) -> Dict[str, Any]:
        """
        피드 트리를 조립합니다.

        입력 순서를 유지하며, 실패한 피처는 건너뜁니다.
        성공한 피처가 없으면 entry가 없는 피드를 반환합니다.
        """
        entries: List[Dict[str, Any]] = []
        skipped = 0
        for index, raw in enumerate(features):
            # 피처 단위 로그에 입력 순번을 붙임
            with with_context(feature_index=index):
                parsed = parse_feature(raw)
                if not parsed.ok:
                    self.logger.error(f"Cap: {parsed.error}")
                    result = parsed
                else:
                    result = self.build(parsed.value)
            if not result.ok:
                skipped += 1
                metrics.cap_features.labels(result="skipped").inc()
                continue
            metrics.cap_features.labels(result="ok").inc()
            entries.append(self.entry_tree(result.value, parsed.value))

        self.logger.debug(f"Cap: feed assembled with {len(entries)} entries, {skipped} skipped")

        feed: Dict[str, Any] = {
            "@xmlns": ATOM_NAMESPACE,
            "id": self.settings.feed_id,
            "title": self.settings.feed_title,
            "updated": iso_timestamp(now(self.settings.timezone)),
            "author": {
                "name": self.settings.author_name,
                "uri": self.settings.author_uri,
            },
            "entry": entries,
        }
        return {"feed": feed}
