"""
Database port interface.

This module defines the protocol for executing parameterised queries
against the flood database.
"""

from typing import Any, Dict, List, Protocol, Sequence, Union

from psycopg import sql

QueryText = Union[str, sql.Composable]


class DatabasePort(Protocol):
    """데이터베이스 쿼리 포트 인터페이스"""

    async def query(self, text: QueryText, values: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """
        파라미터화된 쿼리를 실행합니다.

        Args:
            text: SQL 문 (%s 플레이스홀더)
            values: 바인딩할 값

        Returns:
            행 목록 (컬럼명 -> 값)

        Raises:
            DatabaseConnectionError: 연결 실패
            DatabaseQueryError: 쿼리 실패
        """
        ...
