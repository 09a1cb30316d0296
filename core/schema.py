"""
Создание и миграция схемы базы данных TradeDesk

Таблицы создаются при старте приложения, если их нет.
Изменения схемы только аддитивные: новые колонки добавляются через
ADD COLUMN IF NOT EXISTS, существующие данные не трогаются.
"""

from typing import List, Tuple
from loguru import logger
from core.database import DatabaseManager


TABLES: List[Tuple[str, str]] = [
    ("products", """
        CREATE TABLE IF NOT EXISTS products (
            id SERIAL PRIMARY KEY,
            name VARCHAR(255) NOT NULL,
            category VARCHAR(100) DEFAULT 'nuts',
            unit VARCHAR(20) DEFAULT 'kg',
            price DOUBLE PRECISION DEFAULT 0,
            stock DOUBLE PRECISION DEFAULT 0,
            min_stock DOUBLE PRECISION DEFAULT 0,
            notes TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """),
    ("clients", """
        CREATE TABLE IF NOT EXISTS clients (
            id SERIAL PRIMARY KEY,
            name VARCHAR(255) NOT NULL,
            phone VARCHAR(50),
            whatsapp VARCHAR(50),
            email VARCHAR(255),
            city VARCHAR(100),
            notes TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """),
    ("suppliers", """
        CREATE TABLE IF NOT EXISTS suppliers (
            id SERIAL PRIMARY KEY,
            name VARCHAR(255) NOT NULL,
            contact_person VARCHAR(255),
            phone VARCHAR(50),
            email VARCHAR(255),
            country VARCHAR(100),
            notes TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """),
    ("broker_deals", """
        CREATE TABLE IF NOT EXISTS broker_deals (
            id SERIAL PRIMARY KEY,
            client_id INTEGER REFERENCES clients(id) ON DELETE SET NULL,
            supplier_id INTEGER REFERENCES suppliers(id) ON DELETE SET NULL,
            product VARCHAR(255) NOT NULL,
            quantity DOUBLE PRECISION DEFAULT 0,
            price_per_ton DOUBLE PRECISION DEFAULT 0,
            total_value DOUBLE PRECISION DEFAULT 0,
            commission_rate DOUBLE PRECISION DEFAULT 2.5,
            commission DOUBLE PRECISION DEFAULT 0,
            stage VARCHAR(20) DEFAULT 'offer',
            status VARCHAR(20) DEFAULT 'draft',
            offer_date DATE,
            order_date DATE,
            delivery_date DATE,
            payment_date DATE,
            notes TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """),
    ("shipments", """
        CREATE TABLE IF NOT EXISTS shipments (
            id SERIAL PRIMARY KEY,
            deal_id INTEGER REFERENCES broker_deals(id),
            carrier VARCHAR(255),
            container_number VARCHAR(100),
            origin VARCHAR(255),
            destination VARCHAR(255),
            departure_date DATE,
            arrival_date DATE,
            status VARCHAR(20) DEFAULT 'planned',
            notes TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """),
    ("orders", """
        CREATE TABLE IF NOT EXISTS orders (
            id SERIAL PRIMARY KEY,
            client_id INTEGER REFERENCES clients(id) ON DELETE SET NULL,
            order_date DATE DEFAULT CURRENT_DATE,
            total_price DOUBLE PRECISION DEFAULT 0,
            status VARCHAR(20) DEFAULT 'pending',
            notes TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """),
    ("order_items", """
        CREATE TABLE IF NOT EXISTS order_items (
            id SERIAL PRIMARY KEY,
            order_id INTEGER NOT NULL REFERENCES orders(id) ON DELETE CASCADE,
            product_id INTEGER REFERENCES products(id) ON DELETE SET NULL,
            quantity DOUBLE PRECISION DEFAULT 0,
            price DOUBLE PRECISION DEFAULT 0
        )
    """),
    ("email_templates", """
        CREATE TABLE IF NOT EXISTS email_templates (
            id SERIAL PRIMARY KEY,
            name VARCHAR(255) NOT NULL,
            subject TEXT,
            body TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """),
    ("settings", """
        CREATE TABLE IF NOT EXISTS settings (
            key VARCHAR(100) PRIMARY KEY,
            value TEXT,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """),
]

# Колонки, появившиеся после первых версий схемы (таблица, колонка, определение)
ADDITIVE_COLUMNS: List[Tuple[str, str, str]] = [
    ("products", "stock", "DOUBLE PRECISION DEFAULT 0"),
    ("products", "min_stock", "DOUBLE PRECISION DEFAULT 0"),
    ("broker_deals", "client_id", "INTEGER REFERENCES clients(id) ON DELETE SET NULL"),
    ("broker_deals", "supplier_id", "INTEGER REFERENCES suppliers(id) ON DELETE SET NULL"),
    ("broker_deals", "total_value", "DOUBLE PRECISION DEFAULT 0"),
    ("broker_deals", "commission_rate", "DOUBLE PRECISION DEFAULT 2.5"),
    ("broker_deals", "commission", "DOUBLE PRECISION DEFAULT 0"),
    ("broker_deals", "stage", "VARCHAR(20) DEFAULT 'offer'"),
    ("broker_deals", "offer_date", "DATE"),
    ("broker_deals", "order_date", "DATE"),
    ("broker_deals", "delivery_date", "DATE"),
    ("broker_deals", "payment_date", "DATE"),
]

INDEXES: List[str] = [
    "CREATE INDEX IF NOT EXISTS idx_broker_deals_status ON broker_deals(status)",
    "CREATE INDEX IF NOT EXISTS idx_broker_deals_created_at ON broker_deals(created_at)",
    "CREATE INDEX IF NOT EXISTS idx_shipments_deal_id ON shipments(deal_id)",
    "CREATE INDEX IF NOT EXISTS idx_orders_status ON orders(status)",
]


class SchemaManager:
    """Создание таблиц и аддитивные миграции"""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    def ensure_schema(self) -> None:
        """
        Создание всех таблиц, недостающих колонок и индексов

        Raises:
            DatabaseError: Если хранилище недоступно
        """
        logger.info("Проверка и создание таблиц TradeDesk...")

        for table_name, ddl in TABLES:
            self.db_manager.execute_update(ddl)
            logger.debug(f"Таблица {table_name} проверена/создана")

        self.apply_additive_migrations()

        for index_ddl in INDEXES:
            self.db_manager.execute_update(index_ddl)
        logger.debug("Индексы проверены/созданы")

        logger.info("Схема базы данных TradeDesk готова")

    def apply_additive_migrations(self) -> None:
        """Добавление колонок, которых нет в таблицах старых версий"""
        for table_name, column, definition in ADDITIVE_COLUMNS:
            self.db_manager.execute_update(
                f"ALTER TABLE {table_name} ADD COLUMN IF NOT EXISTS {column} {definition}"
            )
        logger.debug(f"Проверено колонок миграции: {len(ADDITIVE_COLUMNS)}")
