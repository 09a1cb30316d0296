"""
Репозиторий отгрузок (логистика по сделкам)
"""

from typing import List
from loguru import logger
from psycopg2.extras import RealDictCursor
from core.database import DatabaseManager
from modules.crm.deals.models import Shipment


SHIPMENT_COLUMNS = """
    id, deal_id, carrier, container_number, origin, destination,
    departure_date, arrival_date, status, notes, created_at, updated_at
"""


class ShipmentRepository:
    """Репозиторий для работы с отгрузками"""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    def create(self, shipment: Shipment) -> Shipment:
        """Создание отгрузки"""
        query = f"""
            INSERT INTO shipments (
                deal_id, carrier, container_number, origin, destination,
                departure_date, arrival_date, status, notes
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {SHIPMENT_COLUMNS}
        """
        rows = self.db_manager.execute_query(
            query,
            (
                shipment.deal_id,
                shipment.carrier,
                shipment.container_number,
                shipment.origin,
                shipment.destination,
                shipment.departure_date,
                shipment.arrival_date,
                shipment.status,
                shipment.notes,
            ),
            RealDictCursor
        )
        created = Shipment.from_dict(rows[0])
        logger.info(f"Отгрузка ID={created.id} создана для сделки {created.deal_id}")
        return created

    def get_by_deal(self, deal_id: int) -> List[Shipment]:
        """Отгрузки сделки, последние первыми"""
        rows = self.db_manager.execute_query(
            f"""
            SELECT {SHIPMENT_COLUMNS}
            FROM shipments
            WHERE deal_id = %s
            ORDER BY created_at DESC, id DESC
            """,
            (deal_id,),
            RealDictCursor
        )
        return [Shipment.from_dict(row) for row in rows] if rows else []

    def delete_by_deal(self, deal_id: int) -> int:
        """Удаление всех отгрузок сделки"""
        deleted = self.db_manager.execute_update("DELETE FROM shipments WHERE deal_id = %s", (deal_id,))
        logger.debug(f"Удалено отгрузок сделки {deal_id}: {deleted}")
        return deleted
