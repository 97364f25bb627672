"""
CAP area construction for floodcap.

Converts GeoJSON Polygon/MultiPolygon geometry into CAP polygon strings:
whitespace-delimited "lat,lon" pairs, one string per ring.
"""

from typing import List

from .errors import InvalidFeature, UnsupportedGeometryType, UnsupportedInteriorRing
from .models import Area, FeatureGeometry
from .result import Err, Ok, Result


def feature_polygons(geometry: FeatureGeometry) -> List[list]:
    """
    지오메트리를 폴리곤 목록으로 정규화합니다.

    Raises:
        UnsupportedGeometryType: Polygon/MultiPolygon이 아닌 경우
    """
    if geometry.type == "Polygon":
        return [geometry.coordinates]
    if geometry.type == "MultiPolygon":
        return list(geometry.coordinates)
    raise UnsupportedGeometryType(geometry.type)


def ring_to_cap(ring: list) -> str:
    """[lon, lat] 점 목록을 "lat,lon lat,lon ... " 문자열로 변환합니다."""
    if not isinstance(ring, (list, tuple)):
        raise InvalidFeature(f"Ring {ring!r} is not a sequence of points")
    polygon = ""
    for point in ring:
        if not isinstance(point, (list, tuple)) or len(point) < 2:
            raise InvalidFeature(f"Point {point!r} needs both longitude and latitude")
        polygon += f"{point[1]},{point[0]} "
    return polygon


def build_area(geometry: FeatureGeometry, area_desc: str) -> Result[Area]:
    """
    CAP area를 생성합니다.

    모든 폴리곤은 외곽 링 하나만 가져야 하며, 하나라도 위반하면
    전체 Area 생성이 실패합니다.

    Args:
        geometry: 피처 지오메트리
        area_desc: 사람이 읽을 수 있는 영역 이름

    Returns:
        Ok(Area) 또는 Err(CapError)
    """
    try:
        polygons = feature_polygons(geometry)
        cap_polygons = []
        for index, polygon in enumerate(polygons):
            if not isinstance(polygon, (list, tuple)) or not polygon:
                raise InvalidFeature(f"Polygon {index} has no rings")
            # 단순 폴리곤만 지원 (LinearRing 하나)
            if len(polygon) > 1:
                raise UnsupportedInteriorRing(index, len(polygon))
            cap_polygons.append(ring_to_cap(polygon[0]))
    except (UnsupportedGeometryType, UnsupportedInteriorRing, InvalidFeature) as e:
        return Err(e)

    return Ok(Area(area_desc=area_desc, polygon=cap_polygons))
