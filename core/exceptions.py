"""
Исключения приложения TradeDesk
"""

from typing import Any, Optional


class TradeDeskError(Exception):
    """Базовое исключение приложения"""


class DatabaseError(TradeDeskError):
    """Хранилище недоступно или запрос завершился ошибкой"""


class DatabaseConnectionError(DatabaseError):
    """Не удалось подключиться к базе данных"""


class DatabaseQueryError(DatabaseError):
    """Ошибка выполнения SQL запроса"""


class ValidationError(TradeDeskError):
    """
    Некорректные входные данные

    Attributes:
        field: Имя поля, не прошедшего проверку
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(TradeDeskError):
    """
    Запись с указанным идентификатором не существует

    Attributes:
        entity: Тип сущности (например, "deal")
        entity_id: Идентификатор, который не удалось найти
    """

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} с ID={entity_id} не найден(а)")
        self.entity = entity
        self.entity_id = entity_id
