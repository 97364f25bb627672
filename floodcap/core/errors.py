"""
Error taxonomy for floodcap.

CAP conversion errors are per-feature and never abort a batch.
Query layer errors are raised to the caller.
"""


class CapError(Exception):
    """CAP 변환 오류의 기본 클래스"""


class UnsupportedGeometryType(CapError):
    """Polygon/MultiPolygon 이외의 지오메트리"""

    def __init__(self, geometry_type):
        self.geometry_type = geometry_type
        super().__init__(f"Geometry type '{geometry_type}' not supported")


class UnsupportedInteriorRing(CapError):
    """내부 링(hole)을 가진 폴리곤"""

    def __init__(self, polygon_index: int, ring_count: int):
        self.polygon_index = polygon_index
        self.ring_count = ring_count
        super().__init__(
            f"Polygon {polygon_index} has {ring_count} rings; interior rings are not supported"
        )


class UnmappedSeverityState(CapError):
    """1~4 범위를 벗어난 침수 상태 값"""

    def __init__(self, state):
        self.state = state
        super().__init__(f"State {state} cannot be resolved to a severity")


class InvalidFeature(CapError):
    """피처 구조 자체가 올바르지 않음"""


class InvalidParameterError(ValueError):
    """쿼리 옵션 검증 실패"""


class DatabaseError(Exception):
    """데이터베이스 오류의 기본 클래스"""


class DatabaseConnectionError(DatabaseError):
    """데이터베이스 연결 실패"""


class DatabaseQueryError(DatabaseError):
    """쿼리 실행 실패"""
