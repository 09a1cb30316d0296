"""
Конфигурация приложения TradeDesk

Статические настройки (подключение к БД, каталоги данных, параметры UI)
читаются из переменных окружения один раз при старте приложения.
Пользовательские настройки (язык, валюта) хранятся в БД и доступны через
services.settings_context.SettingsContext.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class DatabaseConfig:
    """Параметры подключения к PostgreSQL"""
    host: str = "localhost"
    port: int = 5432
    database: str = "tradedesk"
    user: str = "postgres"
    password: str = ""


@dataclass
class StorageConfig:
    """Каталоги для файлов приложения (вложения сделок, логи)"""
    data_dir: Path = field(default_factory=lambda: Path.home() / ".tradedesk")
    attachments_subdir: str = "attachments"

    @property
    def attachments_dir(self) -> Path:
        return self.data_dir / self.attachments_subdir

    @property
    def logs_dir(self) -> Path:
        return self.data_dir / "logs"


@dataclass
class UIConfig:
    """Параметры интерфейса"""
    window_title: str = "TradeDesk: сделки, склад и логистика"
    font_family: str = "Arial"
    font_size: int = 14


@dataclass
class Config:
    """Корневая конфигурация приложения"""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    ui: UIConfig = field(default_factory=UIConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Сборка конфигурации из переменных окружения TRADEDESK_*"""
        database = DatabaseConfig(
            host=os.getenv("TRADEDESK_DB_HOST", "localhost"),
            port=int(os.getenv("TRADEDESK_DB_PORT", "5432")),
            database=os.getenv("TRADEDESK_DB_NAME", "tradedesk"),
            user=os.getenv("TRADEDESK_DB_USER", "postgres"),
            password=os.getenv("TRADEDESK_DB_PASSWORD", ""),
        )

        data_dir = os.getenv("TRADEDESK_DATA_DIR")
        storage = StorageConfig(data_dir=Path(data_dir)) if data_dir else StorageConfig()

        ui = UIConfig(
            font_family=os.getenv("TRADEDESK_FONT_FAMILY", "Arial"),
            font_size=int(os.getenv("TRADEDESK_FONT_SIZE", "14")),
        )
        return cls(database=database, storage=storage, ui=ui)


config = Config.from_env()
