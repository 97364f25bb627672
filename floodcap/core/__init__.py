"""
Core domain models and pure functions for floodcap.

This module contains the CAP/ATOM transformation and the parameter
validation helpers, independent of database and HTTP concerns.
"""

from .models import Alert, Area, Feature, FeatureGeometry, FeatureProperties, IdentifierStyle, Info, Severity
from .errors import CapError, UnmappedSeverityState, UnsupportedGeometryType, UnsupportedInteriorRing
from .result import Err, Ok, Result
from .area import build_area
from .alert import build_alert, build_info, encode_identifier
from .feed import FeedAssembler
from .cap import CapTransformer

__all__ = [
    "Alert", "Area", "Feature", "FeatureGeometry", "FeatureProperties", "IdentifierStyle", "Info", "Severity",
    "CapError", "UnmappedSeverityState", "UnsupportedGeometryType", "UnsupportedInteriorRing",
    "Err", "Ok", "Result",
    "build_area", "build_alert", "build_info", "encode_identifier",
    "FeedAssembler", "CapTransformer",
]
