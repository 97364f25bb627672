"""
Flood data query service for floodcap.

Queries the PostGIS store for per-area report counts and flooded states,
records flooded state changes, and hands flooded areas to the CAP
transformer. Table names are composed as SQL identifiers; user values are
always bound parameters.
"""

from typing import Any, Dict, List, Optional

from psycopg import sql

from floodcap.core.cap import CapTransformer
from floodcap.core.errors import DatabaseError, InvalidParameterError
from floodcap.core.validation import validate_number_parameter, validate_string_parameter
from floodcap.observability import metrics
from floodcap.observability.logging_setup import get_logger
from floodcap.ports.database import DatabasePort
from floodcap.settings import Settings

# 신고 수와 침수 상태를 영역별로 집계
COUNT_BY_AREA_SQL = """
SELECT 'FeatureCollection' AS type,
    array_to_json(array_agg(f)) AS features
FROM (SELECT 'Feature' AS type,
    ST_AsGeoJSON(lg.the_geom)::json AS geometry,
    row_to_json(
        (SELECT l FROM
            (SELECT lg.pkey,
                lg.area_name AS level_name,
                lg.parent_name AS parent_name,
                lg.counts AS counts,
                lg.state AS state
            ) AS l
        )
    ) AS properties
    FROM (
        SELECT c1.pkey, c1.area_name, c1.parent_name, c1.the_geom, c1.counts, c1.state
        FROM (
            SELECT p1.pkey, p1.area_name, p1.parent_name, p1.the_geom,
                agg_counts.counts,
                flooded.state
            FROM {polygon_layer} AS p1
            LEFT OUTER JOIN (
                SELECT array_to_json(array_agg(counts)) AS counts, pkey
                FROM (
                    SELECT b.pkey, COALESCE(count(a.pkey), 0) AS count, a.source
                    FROM {point_layer} a, {polygon_layer} b
                    WHERE ST_WITHIN(a.the_geom, b.the_geom)
                        AND a.created_at >= to_timestamp(%s)
                        AND a.created_at <= to_timestamp(%s)
                    GROUP BY b.pkey, a.source
                ) AS counts
                GROUP BY pkey
            ) AS agg_counts ON (p1.pkey = agg_counts.pkey)
            LEFT OUTER JOIN (SELECT * FROM rem_status r) AS flooded
                ON (p1.pkey = flooded.rw)
        ) AS c1
        ORDER BY pkey
    ) AS lg
) AS f;
"""

STATES_SQL = """
SELECT 'FeatureCollection' AS type,
    array_to_json(array_agg(f)) AS features
FROM (SELECT 'Feature' AS type,
    ST_AsGeoJSON(lg.the_geom)::json AS geometry,
    row_to_json(
        (SELECT l FROM
            (SELECT area_name AS level_name,
                COALESCE(rs.state, 0) AS state,
                COALESCE(rs.last_updated AT TIME ZONE 'ICT', null) AS last_updated,
                parent_name,
                pkey
            FROM {polygon_layer} AS j
            LEFT JOIN rem_status AS rs ON rs.rw = j.pkey
            WHERE j.pkey = lg.pkey)
        AS l)
    ) AS properties
    FROM {polygon_layer} AS lg
) AS f;
"""

DIMS_SQL = """
SELECT 'FeatureCollection' AS type,
    array_to_json(array_agg(f)) AS features
FROM (SELECT 'Feature' AS type,
    ST_AsGeoJSON(lg.the_geom)::json AS geometry,
    row_to_json(
        (SELECT l FROM
            (SELECT level, district_id AS pkey
            FROM dims_reports AS j
            WHERE district_id = lg.pkey
            ORDER BY created_at DESC
            LIMIT 1)
        AS l)
    ) AS properties
    FROM {polygon_layer} AS lg
) AS f;
"""

SELECT_STATE_SQL = "SELECT rw FROM rem_status WHERE rw = %s;"
UPDATE_STATE_SQL = "UPDATE rem_status SET state = %s, last_updated = now() WHERE rw = %s;"
INSERT_STATE_SQL = "INSERT INTO rem_status (rw, state) VALUES (%s, %s);"
LOG_STATE_SQL = "INSERT INTO rem_status_log (rw, state, username) VALUES (%s, %s, %s);"


def table_identifier(name: str) -> sql.Identifier:
    """"schema.table" 형태도 허용하는 테이블 식별자"""
    return sql.Identifier(*name.split("."))


def _require_layer(value: Any, option: str) -> str:
    if not validate_string_parameter(value):
        raise InvalidParameterError(f"'{option}' option must be supplied")
    return value


class FloodService:
    """침수 상태 조회/변경 서비스"""

    def __init__(self, settings: Settings, database: DatabasePort, *,
                 logger=None, cap: Optional[CapTransformer] = None):
        """
        초기화합니다.

        Args:
            settings: 애플리케이션 설정
            database: DB 쿼리 포트
            logger: loguru 로거
            cap: CAP 변환기 (없으면 설정으로 생성)
        """
        self.settings = settings
        self.database = database
        self.log = logger if logger is not None else get_logger("floodcap.service")
        self.cap = cap or CapTransformer(self.log, settings.cap)

    def polygon_layer(self, level: str) -> str:
        """집계 수준 이름(city, rw 등)을 경계 테이블 이름으로 변환합니다."""
        try:
            return self.settings.pg.aggregate_levels[level]
        except KeyError:
            raise InvalidParameterError(f"Unknown aggregate level '{level}'") from None

    async def get_count_by_area(self, start, end, polygon_layer, point_layer=None,
                                point_layer_uc=None) -> List[Dict[str, Any]]:
        """
        영역별 신고 수와 침수 상태를 조회합니다.

        Args:
            start: 조회 시작 (Unix timestamp)
            end: 조회 종료 (Unix timestamp)
            polygon_layer: 경계 테이블
            point_layer: 확인된 신고 테이블 (기본값: 설정의 tbl_reports)
            point_layer_uc: 미확인 신고 테이블 (기본값: 설정의 tbl_reports_unconfirmed)

        Raises:
            InvalidParameterError: 옵션이 잘못된 경우 (DB 호출 없음)
        """
        if point_layer is None:
            point_layer = self.settings.pg.tbl_reports
        if point_layer_uc is None:
            point_layer_uc = self.settings.pg.tbl_reports_unconfirmed

        if not validate_number_parameter(start, 0):
            raise InvalidParameterError("'start' parameter is invalid")
        if not validate_number_parameter(end, 0):
            raise InvalidParameterError("'end' parameter is invalid")
        _require_layer(polygon_layer, "polygon_layer")
        _require_layer(point_layer_uc, "point_layer_uc")
        _require_layer(point_layer, "point_layer")

        query = sql.SQL(COUNT_BY_AREA_SQL).format(
            polygon_layer=table_identifier(polygon_layer),
            point_layer=table_identifier(point_layer),
        )
        return await self.database.query(query, [start, end])

    async def set_state(self, id, state, username) -> List[Dict[str, Any]]:
        """
        영역의 침수 상태를 설정하고 변경 이력을 기록합니다.

        행이 있으면 UPDATE, 없으면 INSERT 합니다. 이력 기록 실패는
        로그만 남깁니다.

        Raises:
            InvalidParameterError: 옵션이 잘못된 경우
            DatabaseError: 조회/변경 쿼리 실패
        """
        if not validate_number_parameter(id):
            raise InvalidParameterError("'id' option is invalid")
        if not validate_number_parameter(state, 0, 4):
            raise InvalidParameterError("'state' option is invalid")
        if not validate_string_parameter(username):
            raise InvalidParameterError("'username' option must be supplied")

        existing = await self.database.query(SELECT_STATE_SQL, [id])
        try:
            if existing:
                rows = await self.database.query(UPDATE_STATE_SQL, [state, id])
            else:
                rows = await self.database.query(INSERT_STATE_SQL, [id, state])
            metrics.state_changes.labels(state=str(state)).inc()
        finally:
            await self._log_state_change(id, state, username)
        self.log.info(f"침수 상태 변경: rw={id}, state={state}, username={username}")
        return rows

    async def _log_state_change(self, id, state, username) -> None:
        try:
            await self.database.query(LOG_STATE_SQL, [id, state, username])
        except DatabaseError as e:
            self.log.error(f"Error logging state change: {e}")

    async def get_states(self, polygon_layer) -> List[Dict[str, Any]]:
        """경계별 침수 상태(없으면 0)와 마지막 변경 시각을 조회합니다."""
        _require_layer(polygon_layer, "polygon_layer")
        query = sql.SQL(STATES_SQL).format(polygon_layer=table_identifier(polygon_layer))
        return await self.database.query(query, [])

    async def get_dims(self, polygon_layer) -> List[Dict[str, Any]]:
        """경계별 최신 DIMS 보고 수준을 조회합니다."""
        _require_layer(polygon_layer, "polygon_layer")
        query = sql.SQL(DIMS_SQL).format(polygon_layer=table_identifier(polygon_layer))
        return await self.database.query(query, [])

    async def get_flooded_features(self, polygon_layer) -> List[Dict[str, Any]]:
        """침수 상태(state > 0)인 피처만 반환합니다."""
        rows = await self.get_states(polygon_layer)
        if not rows:
            return []
        features = rows[0].get("features") or []
        return [
            f for f in features
            if ((f.get("properties") or {}).get("state") or 0) > 0
        ]

    async def get_flooded_atom_cap(self, polygon_layer) -> str:
        """침수 영역을 CAP alert ATOM 피드 XML로 반환합니다."""
        features = await self.get_flooded_features(polygon_layer)
        self.log.debug(f"{len(features)}개 침수 영역으로 CAP 피드 생성")
        return self.cap.geojson_to_atom_cap(features)
