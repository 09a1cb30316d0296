"""
Подключение TradeDesk к PostgreSQL

DatabaseManager создается один раз в main.py и передается репозиториям.
Любая ошибка psycopg2 откатывает транзакцию и превращается в
DatabaseError из core.exceptions.
"""

import psycopg2
from psycopg2.extras import RealDictCursor
from typing import Optional, List, Dict, Any, Tuple
from loguru import logger
from config.settings import DatabaseConfig
from core.exceptions import DatabaseConnectionError, DatabaseQueryError


def _returns_rows(query: str) -> bool:
    """Запрос возвращает строки: чтение или изменение с RETURNING"""
    head = query.lstrip().upper()
    return head.startswith(('SELECT', 'WITH')) or 'RETURNING' in head


class DatabaseManager:
    """Соединение с БД сделок и выполнение запросов репозиториев"""

    def __init__(self, config: Optional[DatabaseConfig] = None):
        self._config = config
        self._connection: Optional[psycopg2.extensions.connection] = None

    def connect(self) -> None:
        """
        Открыть соединение (повторный вызов ничего не делает)

        Raises:
            DatabaseConnectionError: Нет конфигурации или сервер недоступен
        """
        if self.is_connected():
            return
        if not self._config:
            raise DatabaseConnectionError("Не заданы параметры подключения к PostgreSQL")

        target = f"{self._config.user}@{self._config.host}:{self._config.port}/{self._config.database}"
        try:
            self._connection = psycopg2.connect(
                host=self._config.host,
                port=self._config.port,
                dbname=self._config.database,
                user=self._config.user,
                password=self._config.password,
                cursor_factory=RealDictCursor,
            )
        except psycopg2.OperationalError as e:
            logger.error(f"PostgreSQL {target} недоступен: {e}")
            raise DatabaseConnectionError(f"Не удалось подключиться к {target}: {e}") from e

        self._connection.autocommit = False
        logger.info(f"Подключено к PostgreSQL {target}")

    def disconnect(self) -> None:
        if self.is_connected():
            self._connection.close()
            logger.info("Соединение с PostgreSQL закрыто")
        self._connection = None

    def is_connected(self) -> bool:
        return self._connection is not None and not self._connection.closed

    def execute_query(
        self,
        query: str,
        params: Optional[Tuple] = None,
        cursor_factory=None
    ) -> List[Dict[str, Any]]:
        """
        Выполнить запрос и вернуть строки

        SELECT/WITH только читают; INSERT/UPDATE/DELETE с RETURNING
        фиксируются после чтения результата. Запрос без результата
        фиксируется и дает пустой список.

        Raises:
            DatabaseConnectionError: Соединение не открыто
            DatabaseQueryError: PostgreSQL вернул ошибку
        """
        connection = self._require_connection()
        try:
            with connection.cursor(cursor_factory=cursor_factory or RealDictCursor) as cursor:
                cursor.execute(query, params)
                rows = cursor.fetchall() if _returns_rows(query) else []
            connection.commit()
        except psycopg2.Error as e:
            raise self._query_failed(connection, e) from e

        logger.debug(f"Запрос выполнен, строк в ответе: {len(rows)}")
        return rows

    def execute_update(
        self,
        query: str,
        params: Optional[Tuple] = None
    ) -> int:
        """
        Выполнить изменяющий запрос или DDL

        Returns:
            Число затронутых строк (rowcount)
        """
        connection = self._require_connection()
        try:
            with connection.cursor() as cursor:
                cursor.execute(query, params)
                affected = cursor.rowcount
            connection.commit()
        except psycopg2.Error as e:
            raise self._query_failed(connection, e) from e

        logger.debug(f"Изменение зафиксировано, затронуто строк: {affected}")
        return affected

    def _require_connection(self):
        if not self.is_connected():
            raise DatabaseConnectionError("Соединение с PostgreSQL не открыто")
        return self._connection

    @staticmethod
    def _query_failed(connection, error: psycopg2.Error) -> DatabaseQueryError:
        connection.rollback()
        logger.error(f"PostgreSQL отклонил запрос: {error}")
        return DatabaseQueryError(f"Ошибка запроса к БД: {error}")
