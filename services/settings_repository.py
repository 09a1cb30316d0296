"""
Репозиторий пользовательских настроек (таблица settings, ключ/значение)
"""

from typing import Dict, Mapping
from loguru import logger
from psycopg2.extras import RealDictCursor
from core.database import DatabaseManager


class SettingsRepository:
    """Чтение и запись настроек приложения"""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    def get_all(self) -> Dict[str, str]:
        """Все сохраненные настройки"""
        rows = self.db_manager.execute_query("SELECT key, value FROM settings", None, RealDictCursor)
        return {row['key']: row['value'] for row in rows} if rows else {}

    def set_many(self, values: Mapping[str, str]) -> None:
        """Сохранение нескольких настроек (insert или update)"""
        query = """
            INSERT INTO settings (key, value, updated_at)
            VALUES (%s, %s, CURRENT_TIMESTAMP)
            ON CONFLICT (key) DO UPDATE
            SET value = EXCLUDED.value, updated_at = CURRENT_TIMESTAMP
        """
        for key, value in values.items():
            self.db_manager.execute_update(query, (key, value))
        logger.debug(f"Сохранено настроек: {len(values)}")
