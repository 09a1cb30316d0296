"""
Скрипт инициализации базы данных TradeDesk: создание таблиц и аддитивные миграции
"""

import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config.settings import config
from core.database import DatabaseManager
from core.exceptions import DatabaseError
from core.schema import SchemaManager
from loguru import logger


def init_database() -> bool:
    """Создает недостающие таблицы, колонки и индексы"""
    db_manager = DatabaseManager(config.database)
    try:
        db_manager.connect()
        logger.info(f"Инициализация схемы в БД {config.database.database}...")
        SchemaManager(db_manager).ensure_schema()
        logger.info("✅ Схема базы данных готова")
        return True
    except DatabaseError as e:
        logger.error(f"❌ Ошибка при инициализации базы данных: {e}")
        return False
    finally:
        db_manager.disconnect()


if __name__ == "__main__":
    sys.exit(0 if init_database() else 1)
