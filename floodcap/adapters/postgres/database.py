"""
PostgreSQL/PostGIS database adapter for floodcap.

Opens one connection per query (no pooling), retries the connection with
exponential backoff and maps psycopg failures onto the domain errors.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import psycopg
from psycopg.rows import dict_row

from floodcap.common.retry import retry_with_backoff
from floodcap.core.errors import DatabaseConnectionError, DatabaseQueryError
from floodcap.observability import metrics
from floodcap.observability.logging_setup import get_logger
from floodcap.ports.database import QueryText

ConnectFn = Callable[..., Awaitable[psycopg.AsyncConnection]]


def _describe(text: QueryText) -> str:
    return text if isinstance(text, str) else repr(text)


class PostgresDatabase:
    """psycopg 기반 DatabasePort 구현"""

    def __init__(
        self,
        dsn: str,
        *,
        logger=None,
        connect_timeout: int = 10,
        reconnection_attempts: int = 5,
        reconnection_base_delay: float = 1.0,
        reconnection_max_delay: float = 180.0,
        connect: Optional[ConnectFn] = None,
    ):
        """
        초기화합니다.

        Args:
            dsn: PostgreSQL 연결 문자열
            logger: loguru 로거
            connect_timeout: 연결 타임아웃 (초)
            reconnection_attempts: 연결 실패 시 재시도 횟수
            reconnection_base_delay: 첫 재시도 지연 (초)
            reconnection_max_delay: 최대 재시도 지연 (초)
            connect: 연결 팩토리 (테스트용 주입)
        """
        self.dsn = dsn
        self.log = logger if logger is not None else get_logger("floodcap.db")
        self.connect_timeout = connect_timeout
        self.reconnection_attempts = reconnection_attempts
        self.reconnection_base_delay = reconnection_base_delay
        self.reconnection_max_delay = reconnection_max_delay
        self._connect_fn = connect or psycopg.AsyncConnection.connect

    async def _connect(self) -> psycopg.AsyncConnection:
        return await self._connect_fn(
            self.dsn, connect_timeout=self.connect_timeout, row_factory=dict_row
        )

    def _on_retry(self, attempt: int, error: BaseException, delay: float) -> None:
        self.log.warning(
            f"DB 연결 실패 (시도 {attempt}/{self.reconnection_attempts + 1}): {error}. {delay:.1f}초 후 재시도..."
        )

    async def query(self, text: QueryText, values: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """
        쿼리를 실행하고 행 목록을 반환합니다.

        Raises:
            DatabaseConnectionError: 재시도 후에도 연결 실패
            DatabaseQueryError: 쿼리 실행 실패
        """
        self.log.debug(f"dataQuery: text={_describe(text)}, values={list(values)}")

        try:
            conn = await retry_with_backoff(
                self._connect,
                max_retries=self.reconnection_attempts,
                base_delay=self.reconnection_base_delay,
                max_delay=self.reconnection_max_delay,
                retry_on=(psycopg.OperationalError,),
                on_retry=self._on_retry,
            )
        except psycopg.Error as e:
            metrics.db_queries.labels(result="connection_error").inc()
            self.log.error(f"dataQuery: {_describe(text)}, {e}")
            raise DatabaseConnectionError("Database connection error") from e

        try:
            with metrics.db_query_seconds.time():
                # 컨텍스트 종료 시 성공이면 commit, 예외면 rollback 후 close
                async with conn:
                    async with conn.cursor() as cursor:
                        await cursor.execute(text, list(values))
                        rows = await cursor.fetchall() if cursor.description else []
        except psycopg.Error as e:
            metrics.db_queries.labels(result="query_error").inc()
            self.log.error(f"dataQuery: Database query failed, {e}, text={_describe(text)}")
            raise DatabaseQueryError("Database query error") from e

        metrics.db_queries.labels(result="ok").inc()
        self.log.debug(f"dataQuery: {len(rows)} rows returned")
        return [dict(row) for row in rows]
