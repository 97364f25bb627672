"""
Core domain models for floodcap.

This module defines the GeoJSON input models and the CAP output models
using Pydantic v2 for type safety and validation.
"""

from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, StrictInt

# CAP 심각도 타입 정의
Severity = Literal["Unknown", "Minor", "Moderate", "Severe"]


class IdentifierStyle(str, Enum):
    """alert identifier 조합 방식"""
    COMMA = "comma"   # parent,level,time
    DOT = "dot"       # parent.level.time, 공백은 "_"


class FeatureGeometry(BaseModel):
    """GeoJSON 지오메트리 모델 (타입 검사는 AreaBuilder에서 수행)"""
    model_config = ConfigDict(frozen=True)

    type: str
    coordinates: list = Field(default_factory=list)


class FeatureProperties(BaseModel):
    """GeoJSON 피처 속성 모델"""
    model_config = ConfigDict(frozen=True, extra="allow")

    state: Optional[StrictInt] = None      # bool, "2", 2.0 모두 거부
    last_updated: Optional[Union[datetime, str]] = None
    level_name: str = ""
    parent_name: str = ""


class Feature(BaseModel):
    """침수 상태를 가진 GeoJSON 피처"""
    model_config = ConfigDict(frozen=True, extra="allow")

    type: str = "Feature"
    properties: FeatureProperties
    geometry: FeatureGeometry


class Area(BaseModel):
    """CAP area 블록"""
    model_config = ConfigDict(frozen=True)

    area_desc: str
    polygon: List[str] = Field(default_factory=list)


class Info(BaseModel):
    """CAP info 블록"""
    model_config = ConfigDict(frozen=True)

    category: str = "Met"
    event: str = "FLOODING"
    urgency: str = "Immediate"
    severity: Severity
    certainty: str = "Observed"
    sender_name: str = "JAKARTA EMERGENCY MANAGEMENT AGENCY"
    headline: str = "FLOOD WARNING"
    description: str
    web: str = "http://petajakarta.org/banjir/id/map"
    area: Area


class Alert(BaseModel):
    """CAP alert 문서"""
    model_config = ConfigDict(frozen=True)

    identifier: str
    sender: str = "BPBD.JAKARTA.GOV.ID"
    sent: str
    status: str = "Actual"
    msg_type: str = "Alert"
    scope: str = "Public"
    info: Info
