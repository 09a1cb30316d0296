"""
Репозиторий для работы с брокерскими сделками в БД
"""

from typing import List, Optional, Any, Dict
from datetime import date
from loguru import logger
from psycopg2.extras import RealDictCursor
from core.database import DatabaseManager
from modules.crm.deals.models import (
    Deal, DealInput, DealStage, DealStatus, CLOSED_STATUSES, DEFAULT_COMMISSION_RATE, STAGE_DATE_FIELDS
)


DEAL_SELECT = """
    SELECT d.id, d.client_id, d.supplier_id, d.product, d.quantity, d.price_per_ton,
           d.total_value, d.commission_rate, d.commission, d.stage, d.status,
           d.offer_date, d.order_date, d.delivery_date, d.payment_date, d.notes,
           d.created_at, d.updated_at,
           c.name AS client_name, s.name AS supplier_name
    FROM broker_deals d
    LEFT JOIN clients c ON c.id = d.client_id
    LEFT JOIN suppliers s ON s.id = d.supplier_id
"""

DEAL_COLUMNS = """
    id, client_id, supplier_id, product, quantity, price_per_ton, total_value,
    commission_rate, commission, stage, status, offer_date, order_date,
    delivery_date, payment_date, notes, created_at, updated_at
"""

CLOSED_STATUS_VALUES = tuple(sorted(status.value for status in CLOSED_STATUSES))


def escape_like(text: str) -> str:
    """Экранирование спецсимволов LIKE, чтобы поиск был буквальным"""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class DealRepository:
    """Репозиторий для работы со сделками"""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    @staticmethod
    def _float(value: Any, default: float = 0.0) -> float:
        return float(value) if value is not None else default

    @staticmethod
    def _parse_stage(value: Any, deal_id: Any) -> DealStage:
        try:
            return DealStage(value)
        except ValueError:
            logger.warning(f"Неизвестный этап '{value}' у сделки ID={deal_id}, используется offer")
            return DealStage.OFFER

    @staticmethod
    def _parse_status(value: Any, deal_id: Any) -> DealStatus:
        try:
            return DealStatus(value)
        except ValueError:
            logger.warning(f"Неизвестный статус '{value}' у сделки ID={deal_id}, считается open")
            return DealStatus.OPEN

    @classmethod
    def row_to_deal(cls, row: Dict[str, Any]) -> Deal:
        """Преобразование строки БД в объект Deal"""
        deal_id = row['id']
        return Deal(
            id=deal_id,
            product=row['product'],
            client_id=row.get('client_id'),
            supplier_id=row.get('supplier_id'),
            quantity=cls._float(row.get('quantity')),
            price_per_ton=cls._float(row.get('price_per_ton')),
            total_value=cls._float(row.get('total_value')),
            commission_rate=cls._float(row.get('commission_rate'), DEFAULT_COMMISSION_RATE),
            commission=cls._float(row.get('commission')),
            stage=cls._parse_stage(row.get('stage'), deal_id),
            status=cls._parse_status(row.get('status'), deal_id),
            offer_date=row.get('offer_date'),
            order_date=row.get('order_date'),
            delivery_date=row.get('delivery_date'),
            payment_date=row.get('payment_date'),
            notes=row.get('notes'),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at'),
            client_name=row.get('client_name'),
            supplier_name=row.get('supplier_name'),
        )

    def create(self, deal: DealInput) -> Deal:
        """
        Вставка новой сделки с производными полями

        Returns:
            Созданная сделка с присвоенным ID
        """
        query = f"""
            INSERT INTO broker_deals (
                client_id, supplier_id, product, quantity, price_per_ton, total_value,
                commission_rate, commission, stage, status,
                offer_date, order_date, delivery_date, payment_date, notes
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {DEAL_COLUMNS}
        """
        logger.debug(f"Создание сделки: product={deal.product}, stage={deal.stage.value}")
        rows = self.db_manager.execute_query(
            query,
            (
                deal.client_id,
                deal.supplier_id,
                deal.product,
                deal.quantity,
                deal.price_per_ton,
                deal.total_value,
                deal.commission_rate,
                deal.commission,
                deal.stage.value,
                deal.status.value,
                deal.offer_date,
                deal.order_date,
                deal.delivery_date,
                deal.payment_date,
                deal.notes,
            ),
            RealDictCursor
        )
        return self.row_to_deal(rows[0])

    def update(self, deal: DealInput) -> Optional[Deal]:
        """
        Полная перезапись сделки, включая все четыре даты этапов

        Returns:
            Обновленная сделка или None, если ID не существует
        """
        query = f"""
            UPDATE broker_deals
            SET client_id = %s, supplier_id = %s, product = %s, quantity = %s,
                price_per_ton = %s, total_value = %s, commission_rate = %s, commission = %s,
                stage = %s, status = %s, offer_date = %s, order_date = %s,
                delivery_date = %s, payment_date = %s, notes = %s,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = %s
            RETURNING {DEAL_COLUMNS}
        """
        rows = self.db_manager.execute_query(
            query,
            (
                deal.client_id,
                deal.supplier_id,
                deal.product,
                deal.quantity,
                deal.price_per_ton,
                deal.total_value,
                deal.commission_rate,
                deal.commission,
                deal.stage.value,
                deal.status.value,
                deal.offer_date,
                deal.order_date,
                deal.delivery_date,
                deal.payment_date,
                deal.notes,
                deal.id,
            ),
            RealDictCursor
        )
        return self.row_to_deal(rows[0]) if rows else None

    def update_stage(
        self,
        deal_id: int,
        stage: DealStage,
        status: DealStatus,
        stamp: Optional[date] = None
    ) -> Optional[Deal]:
        """
        Смена этапа и статуса; для этапов с датой проставляется stamp

        Финансовые поля не меняются.
        """
        date_field = STAGE_DATE_FIELDS.get(stage)
        if date_field and stamp is not None:
            query = f"""
                UPDATE broker_deals
                SET stage = %s, status = %s, {date_field} = %s, updated_at = CURRENT_TIMESTAMP
                WHERE id = %s
                RETURNING {DEAL_COLUMNS}
            """
            params = (stage.value, status.value, stamp, deal_id)
        else:
            query = f"""
                UPDATE broker_deals
                SET stage = %s, status = %s, updated_at = CURRENT_TIMESTAMP
                WHERE id = %s
                RETURNING {DEAL_COLUMNS}
            """
            params = (stage.value, status.value, deal_id)

        rows = self.db_manager.execute_query(query, params, RealDictCursor)
        return self.row_to_deal(rows[0]) if rows else None

    def delete(self, deal_id: int) -> int:
        """Удаление сделки без проверки существования"""
        return self.db_manager.execute_update("DELETE FROM broker_deals WHERE id = %s", (deal_id,))

    def get_by_id(self, deal_id: int) -> Optional[Deal]:
        """Получение сделки с именами клиента и поставщика"""
        rows = self.db_manager.execute_query(
            DEAL_SELECT + " WHERE d.id = %s",
            (deal_id,),
            RealDictCursor
        )
        return self.row_to_deal(rows[0]) if rows else None

    def get_deals(self, search_text: Optional[str] = None) -> List[Deal]:
        """
        Получение всех сделок, новые первыми

        Args:
            search_text: Подстрока для поиска по продукту, клиенту и поставщику
                (без учета регистра)
        """
        if search_text and search_text.strip():
            pattern = f"%{escape_like(search_text.strip())}%"
            query = DEAL_SELECT + """
                WHERE d.product ILIKE %s
                   OR c.name ILIKE %s
                   OR s.name ILIKE %s
                ORDER BY d.created_at DESC, d.id DESC
            """
            params = (pattern, pattern, pattern)
        else:
            query = DEAL_SELECT + " ORDER BY d.created_at DESC, d.id DESC"
            params = None

        results = self.db_manager.execute_query(query, params, RealDictCursor)
        logger.debug(f"Получено сделок: {len(results)}")
        return [self.row_to_deal(row) for row in results]

    def get_open_deals(self, limit: int = 5) -> List[Deal]:
        """Незакрытые сделки (статус не completed/cancelled), новые первыми"""
        query = DEAL_SELECT + """
            WHERE COALESCE(d.status, '') NOT IN %s
            ORDER BY d.created_at DESC, d.id DESC
            LIMIT %s
        """
        results = self.db_manager.execute_query(query, (CLOSED_STATUS_VALUES, limit), RealDictCursor)
        return [self.row_to_deal(row) for row in results]

    def count_open_deals(self) -> int:
        """Количество незакрытых сделок"""
        rows = self.db_manager.execute_query(
            "SELECT COUNT(*) AS count FROM broker_deals WHERE COALESCE(status, '') NOT IN %s",
            (CLOSED_STATUS_VALUES,)
        )
        return int(rows[0].get('count', 0)) if rows else 0
