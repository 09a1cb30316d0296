"""
Модели данных брокерских сделок
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, List, Dict, Any, Mapping
from datetime import date, datetime
from enum import Enum

from core.exceptions import ValidationError


class DealStage(Enum):
    """Этап сделки в рабочем процессе"""
    OFFER = "offer"
    ORDER = "order"
    SOURCING = "sourcing"
    LOGISTICS = "logistics"
    DELIVERY = "delivery"
    PAYMENT = "payment"
    COMMISSION = "commission"


class DealStatus(Enum):
    """Статус сделки (независим от этапа)"""
    DRAFT = "draft"
    OPEN = "open"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_open(self) -> bool:
        return self not in CLOSED_STATUSES


CLOSED_STATUSES = frozenset({DealStatus.COMPLETED, DealStatus.CANCELLED})

# Этапы, при переходе на которые проставляется дата
STAGE_DATE_FIELDS: Dict[DealStage, str] = {
    DealStage.OFFER: "offer_date",
    DealStage.ORDER: "order_date",
    DealStage.DELIVERY: "delivery_date",
    DealStage.PAYMENT: "payment_date",
}

# Статус по умолчанию при смене этапа без явного статуса
DEFAULT_STATUS_BY_STAGE: Dict[DealStage, DealStatus] = {
    DealStage.OFFER: DealStatus.DRAFT,
    DealStage.ORDER: DealStatus.OPEN,
    DealStage.SOURCING: DealStatus.OPEN,
    DealStage.LOGISTICS: DealStatus.OPEN,
    DealStage.DELIVERY: DealStatus.OPEN,
    DealStage.PAYMENT: DealStatus.COMPLETED,
    DealStage.COMMISSION: DealStatus.COMPLETED,
}

DEFAULT_COMMISSION_RATE = 2.5
DATE_FIELDS = ("offer_date", "order_date", "delivery_date", "payment_date")


def parse_stage(value: Any) -> DealStage:
    """Приведение значения к DealStage, ValidationError при неизвестном этапе"""
    if isinstance(value, DealStage):
        return value
    try:
        return DealStage(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"Неизвестный этап сделки: {value!r}", field="stage") from None


def parse_status(value: Any) -> DealStatus:
    """Приведение значения к DealStatus, ValidationError при неизвестном статусе"""
    if isinstance(value, DealStatus):
        return value
    try:
        return DealStatus(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"Неизвестный статус сделки: {value!r}", field="status") from None


def _parse_date(value: Any, field_name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"Некорректная дата в поле {field_name}: {value!r}", field=field_name) from None


def _parse_number(value: Any, field_name: str, default: float, allow_negative: bool = False) -> float:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise ValidationError(f"Поле {field_name} должно быть числом", field=field_name)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Поле {field_name} должно быть числом: {value!r}", field=field_name) from None
    if number != number:
        raise ValidationError(f"Поле {field_name} не может быть NaN", field=field_name)
    if not allow_negative and number < 0:
        raise ValidationError(f"Поле {field_name} не может быть отрицательным", field=field_name)
    return number


def _parse_optional_id(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Поле {field_name} должно быть целым числом: {value!r}", field=field_name) from None


@dataclass
class DealInput:
    """
    Входные данные для создания или полного обновления сделки

    Все поля проверяются и приводятся к типам при создании объекта,
    поэтому строки из формы и прямой вызов конструктора проходят одну
    и ту же проверку. Производные поля (total_value, commission) здесь
    не задаются.
    """
    product: str
    client_id: Optional[int] = None
    supplier_id: Optional[int] = None
    quantity: float = 0.0
    price_per_ton: float = 0.0
    commission_rate: float = DEFAULT_COMMISSION_RATE
    stage: DealStage = DealStage.OFFER
    status: DealStatus = DealStatus.DRAFT
    offer_date: Optional[date] = None
    order_date: Optional[date] = None
    delivery_date: Optional[date] = None
    payment_date: Optional[date] = None
    notes: Optional[str] = None
    id: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.product, str) or not self.product.strip():
            raise ValidationError("Название продукта обязательно", field="product")
        self.product = self.product.strip()

        self.id = _parse_optional_id(self.id, "id")
        self.client_id = _parse_optional_id(self.client_id, "client_id")
        self.supplier_id = _parse_optional_id(self.supplier_id, "supplier_id")
        self.quantity = _parse_number(self.quantity, "quantity", 0.0)
        self.price_per_ton = _parse_number(self.price_per_ton, "price_per_ton", 0.0)
        self.commission_rate = _parse_number(
            self.commission_rate, "commission_rate", DEFAULT_COMMISSION_RATE, allow_negative=True
        )
        self.stage = parse_stage(self.stage) if self.stage else DealStage.OFFER
        self.status = parse_status(self.status) if self.status else DealStatus.DRAFT
        for field_name in DATE_FIELDS:
            setattr(self, field_name, _parse_date(getattr(self, field_name), field_name))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DealInput":
        """
        Построение DealInput из словаря (форма UI, импорт)

        Raises:
            ValidationError: Если данные некорректны
        """
        return cls(
            id=data.get("id"),
            product=data.get("product") or "",
            client_id=data.get("client_id"),
            supplier_id=data.get("supplier_id"),
            quantity=data.get("quantity"),
            price_per_ton=data.get("price_per_ton"),
            commission_rate=data.get("commission_rate"),
            stage=data.get("stage"),
            status=data.get("status"),
            offer_date=data.get("offer_date"),
            order_date=data.get("order_date"),
            delivery_date=data.get("delivery_date"),
            payment_date=data.get("payment_date"),
            notes=data.get("notes"),
        )

    @property
    def total_value(self) -> float:
        return self.quantity * self.price_per_ton

    @property
    def commission(self) -> float:
        return self.total_value * (self.commission_rate / 100)


@dataclass
class Shipment:
    """Логистическая запись, опционально привязанная к сделке"""
    id: Optional[int]
    deal_id: Optional[int]
    carrier: Optional[str] = None
    container_number: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    departure_date: Optional[date] = None
    arrival_date: Optional[date] = None
    status: str = "planned"
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Shipment":
        """Построение Shipment из формы или строки БД"""
        return cls(
            id=_parse_optional_id(data.get("id"), "id"),
            deal_id=_parse_optional_id(data.get("deal_id"), "deal_id"),
            carrier=data.get("carrier"),
            container_number=data.get("container_number"),
            origin=data.get("origin"),
            destination=data.get("destination"),
            departure_date=_parse_date(data.get("departure_date"), "departure_date"),
            arrival_date=_parse_date(data.get("arrival_date"), "arrival_date"),
            status=data.get("status") or "planned",
            notes=data.get("notes"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Deal:
    """Брокерская сделка между клиентом и поставщиком"""
    id: int
    product: str
    client_id: Optional[int] = None
    supplier_id: Optional[int] = None
    quantity: float = 0.0
    price_per_ton: float = 0.0
    total_value: float = 0.0
    commission_rate: float = DEFAULT_COMMISSION_RATE
    commission: float = 0.0
    stage: DealStage = DealStage.OFFER
    status: DealStatus = DealStatus.DRAFT
    offer_date: Optional[date] = None
    order_date: Optional[date] = None
    delivery_date: Optional[date] = None
    payment_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    client_name: Optional[str] = None
    supplier_name: Optional[str] = None
    shipments: List[Shipment] = field(default_factory=list)

    @property
    def is_open(self) -> bool:
        return self.status.is_open

    @property
    def latest_shipment(self) -> Optional[Shipment]:
        """Последняя по времени создания отгрузка (список хранится от новых к старым)"""
        return self.shipments[0] if self.shipments else None

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация сделки в словарь для UI и шаблонов документов"""
        data = asdict(self)
        data["stage"] = self.stage.value
        data["status"] = self.status.value
        return data
