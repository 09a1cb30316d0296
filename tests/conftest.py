"""
Общие фикстуры тестов: мок менеджера БД и хранилища в памяти
"""

from datetime import date, datetime, timedelta
from typing import Dict, List, Optional
from unittest.mock import Mock

import pytest

from modules.crm.deals.attachment_storage import AttachmentStorage
from modules.crm.deals.deal_service import DealService
from modules.crm.deals.models import Deal, DealInput, DealStage, DealStatus, Shipment, STAGE_DATE_FIELDS

TODAY = date(2026, 10, 18)


class InMemoryDealRepository:
    """Репозиторий сделок в памяти с тем же интерфейсом, что и DealRepository"""

    def __init__(self):
        self.rows: Dict[int, Deal] = {}
        self.client_names: Dict[int, str] = {}
        self.supplier_names: Dict[int, str] = {}
        self._next_id = 1
        self._clock = datetime(2026, 1, 1, 9, 0)

    def _tick(self) -> datetime:
        self._clock += timedelta(minutes=1)
        return self._clock

    def _from_input(self, deal_input: DealInput, deal_id: int, created_at: datetime) -> Deal:
        return Deal(
            id=deal_id,
            product=deal_input.product,
            client_id=deal_input.client_id,
            supplier_id=deal_input.supplier_id,
            quantity=deal_input.quantity,
            price_per_ton=deal_input.price_per_ton,
            total_value=deal_input.total_value,
            commission_rate=deal_input.commission_rate,
            commission=deal_input.commission,
            stage=deal_input.stage,
            status=deal_input.status,
            offer_date=deal_input.offer_date,
            order_date=deal_input.order_date,
            delivery_date=deal_input.delivery_date,
            payment_date=deal_input.payment_date,
            notes=deal_input.notes,
            created_at=created_at,
            updated_at=self._tick(),
        )

    def _with_names(self, deal: Deal) -> Deal:
        copy = Deal(**{**deal.__dict__, "shipments": []})
        copy.client_name = self.client_names.get(deal.client_id)
        copy.supplier_name = self.supplier_names.get(deal.supplier_id)
        return copy

    def create(self, deal_input: DealInput) -> Deal:
        deal = self._from_input(deal_input, self._next_id, self._tick())
        self.rows[deal.id] = deal
        self._next_id += 1
        return self._with_names(deal)

    def update(self, deal_input: DealInput) -> Optional[Deal]:
        existing = self.rows.get(deal_input.id)
        if existing is None:
            return None
        deal = self._from_input(deal_input, existing.id, existing.created_at)
        self.rows[deal.id] = deal
        return self._with_names(deal)

    def update_stage(self, deal_id: int, stage: DealStage, status: DealStatus, stamp: Optional[date] = None):
        deal = self.rows.get(deal_id)
        if deal is None:
            return None
        deal.stage = stage
        deal.status = status
        date_field = STAGE_DATE_FIELDS.get(stage)
        if date_field and stamp is not None:
            setattr(deal, date_field, stamp)
        deal.updated_at = self._tick()
        return self._with_names(deal)

    def delete(self, deal_id: int) -> int:
        return 1 if self.rows.pop(deal_id, None) else 0

    def get_by_id(self, deal_id: int) -> Optional[Deal]:
        deal = self.rows.get(deal_id)
        return self._with_names(deal) if deal else None

    def get_deals(self, search_text: Optional[str] = None) -> List[Deal]:
        deals = [self._with_names(deal) for deal in self.rows.values()]
        if search_text and search_text.strip():
            needle = search_text.strip().lower()
            deals = [
                deal for deal in deals
                if any(needle in (value or "").lower()
                       for value in (deal.product, deal.client_name, deal.supplier_name))
            ]
        return sorted(deals, key=lambda deal: (deal.created_at, deal.id), reverse=True)


class InMemoryShipmentRepository:
    """Репозиторий отгрузок в памяти"""

    def __init__(self):
        self.rows: List[Shipment] = []
        self._next_id = 1

    def create(self, shipment: Shipment) -> Shipment:
        shipment.id = self._next_id
        self._next_id += 1
        self.rows.append(shipment)
        return shipment

    def get_by_deal(self, deal_id: int) -> List[Shipment]:
        return [shipment for shipment in reversed(self.rows) if shipment.deal_id == deal_id]

    def delete_by_deal(self, deal_id: int) -> int:
        before = len(self.rows)
        self.rows = [shipment for shipment in self.rows if shipment.deal_id != deal_id]
        return before - len(self.rows)


@pytest.fixture
def mock_db_manager():
    """Мок менеджера БД"""
    db = Mock()
    db.execute_query = Mock(return_value=[])
    db.execute_update = Mock(return_value=0)
    return db


@pytest.fixture
def deal_repo():
    return InMemoryDealRepository()


@pytest.fixture
def shipment_repo():
    return InMemoryShipmentRepository()


@pytest.fixture
def attachments(tmp_path):
    return AttachmentStorage(tmp_path / "attachments")


@pytest.fixture
def deal_service(deal_repo, shipment_repo, attachments):
    return DealService(deal_repo, shipment_repo, attachments, today=lambda: TODAY)


@pytest.fixture
def today():
    """Дата, которую сервис сделок считает текущей"""
    return TODAY
