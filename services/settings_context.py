"""
Контекст пользовательских настроек

Язык и валюта загружаются из БД при старте и обновляются только явным
вызовом refresh() или после save(). Объект передается потребителям
явно, глобального состояния нет.
"""

from typing import Optional
from loguru import logger
from services.settings_repository import SettingsRepository

DEFAULT_LANGUAGE = "en"
DEFAULT_CURRENCY = "USD"

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "RUB": "₽",
}


class SettingsContext:
    """Кэш пользовательских настроек с явным обновлением"""

    def __init__(self, repository: SettingsRepository):
        self.repository = repository
        self.language = DEFAULT_LANGUAGE
        self.currency = DEFAULT_CURRENCY

    def refresh(self) -> "SettingsContext":
        """Перечитать настройки из БД"""
        stored = self.repository.get_all()
        self.language = stored.get("language") or DEFAULT_LANGUAGE
        self.currency = stored.get("currency") or DEFAULT_CURRENCY
        logger.debug(f"Настройки загружены: language={self.language}, currency={self.currency}")
        return self

    def save(self, language: Optional[str] = None, currency: Optional[str] = None) -> "SettingsContext":
        """Сохранить измененные настройки и перечитать их"""
        values = {}
        if language:
            values["language"] = language
        if currency:
            values["currency"] = currency.upper()
        if values:
            self.repository.set_many(values)
            logger.info(f"Настройки сохранены: {values}")
        return self.refresh()

    def format_money(self, amount: Optional[float]) -> str:
        """Форматирование суммы в текущей валюте без округления значения в данных"""
        symbol = CURRENCY_SYMBOLS.get(self.currency, f"{self.currency} ")
        return f"{symbol}{(amount or 0.0):,.2f}"
