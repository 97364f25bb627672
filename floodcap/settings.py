# floodcap/settings.py
from __future__ import annotations
from typing import Dict, Literal
from pydantic import BaseModel, Field


class Postgres(BaseModel):
    dsn: str = "postgresql://postgres@localhost/cognicity"
    connect_timeout_sec: int = 10
    reconnection_delay_sec: float = 180.0     # 재연결 시도 간격
    reconnection_attempts: int = 5            # 포기하기 전 재연결 시도 횟수
    tbl_reports: str = "all_reports"
    tbl_reports_unconfirmed: str = "tweet_reports_unconfirmed"
    aggregate_levels: Dict[str, str] = Field(default_factory=lambda: {
        "city": "jkt_city_boundary",
        "subdistrict": "jkt_subdistrict_boundary",
        "village": "jkt_village_boundary",
        "rw": "jkt_rw_boundary",
    })
    infrastructure_tbls: Dict[str, str] = Field(default_factory=lambda: {
        "waterways": "waterways",
        "pumps": "pumps",
        "floodgates": "floodgates",
    })


class CapSettings(BaseModel):
    timezone: str = "Asia/Jakarta"
    feed_id: str = "https://rem.petajakarta.org/data/api/v2/rem/flooded"
    feed_title: str = "Peta Jakarta REM Flooded RW Feed"
    author_name: str = "Peta Jakarta REM"
    author_uri: str = "https://rem.petajakarta.org/"
    entry_base_url: str = "https://rem.petajakarta.org/data/api/v2/rem/flooded"
    identifier_style: Literal["comma", "dot"] = "comma"   # comma: parent,level,time | dot: parent.level.time


class Observability(BaseModel):
    http_port: int = 8082
    metrics_enabled: bool = True
    service_name: str = "floodcap"
    build_version: str = "0.1.0"
    build_date: str = "2026-01-01"
    log_level: str = "INFO"


class Settings(BaseModel):
    instance: str = "cognicity-rem-server"

    # 하위 섹션 (기본값/팩토리로 누락 방지)
    pg: Postgres = Field(default_factory=Postgres)
    cap: CapSettings = Field(default_factory=CapSettings)
    observability: Observability = Field(default_factory=Observability)
