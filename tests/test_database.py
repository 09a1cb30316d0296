"""
Тесты для менеджера БД и схемы
"""

from unittest.mock import MagicMock, patch

import psycopg2
import pytest

from config.settings import DatabaseConfig
from core.database import DatabaseManager
from core.exceptions import DatabaseConnectionError, DatabaseError, DatabaseQueryError
from core.schema import ADDITIVE_COLUMNS, INDEXES, TABLES, SchemaManager


@pytest.fixture
def connection():
    conn = MagicMock()
    conn.closed = 0
    return conn


@pytest.fixture
def connected_manager(connection):
    with patch("core.database.psycopg2.connect", return_value=connection):
        manager = DatabaseManager(DatabaseConfig(database="tradedesk_test"))
        manager.connect()
    return manager


def cursor_of(connection):
    return connection.cursor.return_value.__enter__.return_value


class TestDatabaseManager:
    """Тесты для DatabaseManager"""

    def test_connect_failure_wrapped(self):
        with patch("core.database.psycopg2.connect", side_effect=psycopg2.OperationalError("refused")):
            manager = DatabaseManager(DatabaseConfig())
            with pytest.raises(DatabaseConnectionError):
                manager.connect()

    def test_connect_without_config(self):
        with pytest.raises(DatabaseConnectionError):
            DatabaseManager().connect()

    def test_query_without_connection(self):
        with pytest.raises(DatabaseConnectionError):
            DatabaseManager(DatabaseConfig()).execute_query("SELECT 1")

    def test_select_returns_rows(self, connected_manager, connection):
        cursor_of(connection).fetchall.return_value = [{'id': 1}]
        assert connected_manager.execute_query("SELECT id FROM broker_deals") == [{'id': 1}]

    def test_query_without_result_skips_fetch(self, connected_manager, connection):
        rows = connected_manager.execute_query("UPDATE broker_deals SET notes = NULL")
        assert rows == []
        cursor_of(connection).fetchall.assert_not_called()
        connection.commit.assert_called_once()

    def test_connect_is_idempotent(self, connected_manager, connection):
        with patch("core.database.psycopg2.connect") as connect:
            connected_manager.connect()
        connect.assert_not_called()
        assert connected_manager.is_connected()

    def test_returning_commits(self, connected_manager, connection):
        cursor_of(connection).fetchall.return_value = [{'id': 9}]
        rows = connected_manager.execute_query("INSERT INTO shipments (deal_id) VALUES (%s) RETURNING id", (1,))
        assert rows == [{'id': 9}]
        connection.commit.assert_called_once()

    def test_query_error_rolls_back(self, connected_manager, connection):
        cursor_of(connection).execute.side_effect = psycopg2.ProgrammingError("syntax")
        with pytest.raises(DatabaseQueryError) as exc_info:
            connected_manager.execute_query("SELEC 1")
        assert isinstance(exc_info.value, DatabaseError)
        connection.rollback.assert_called_once()

    def test_update_returns_rowcount(self, connected_manager, connection):
        cursor_of(connection).rowcount = 3
        assert connected_manager.execute_update("DELETE FROM shipments WHERE deal_id = %s", (1,)) == 3
        connection.commit.assert_called_once()

    def test_disconnect(self, connected_manager, connection):
        connected_manager.disconnect()
        connection.close.assert_called_once()
        assert not connected_manager.is_connected()


class TestSchemaManager:
    """Тесты для создания схемы"""

    def test_ensure_schema_runs_all_ddl(self, mock_db_manager):
        SchemaManager(mock_db_manager).ensure_schema()

        executed = [call[0][0] for call in mock_db_manager.execute_update.call_args_list]
        assert len(executed) == len(TABLES) + len(ADDITIVE_COLUMNS) + len(INDEXES)
        assert all("IF NOT EXISTS" in statement for statement in executed)

    def test_tables_are_created_before_migrations(self, mock_db_manager):
        SchemaManager(mock_db_manager).ensure_schema()
        executed = [call[0][0] for call in mock_db_manager.execute_update.call_args_list]
        assert "CREATE TABLE IF NOT EXISTS products" in executed[0]
        assert executed[len(TABLES)].startswith("ALTER TABLE")

    def test_money_columns_are_not_rounded(self):
        ddl = dict(TABLES)["broker_deals"]
        assert "total_value DOUBLE PRECISION" in ddl
        assert "commission DOUBLE PRECISION" in ddl
        assert "NUMERIC" not in ddl

    def test_shipments_reference_deals(self):
        assert "REFERENCES broker_deals(id)" in dict(TABLES)["shipments"]
