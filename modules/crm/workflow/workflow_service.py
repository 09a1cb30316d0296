"""
Сервис сводки рабочего процесса для главной панели

Собирает счетчики и короткие списки по заказам, сделкам, складу,
клиентам и поставщикам. Подзапросы независимы, общая транзакция
не используется: сводка только для отображения.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from loguru import logger
from psycopg2.extras import RealDictCursor

from core.database import DatabaseManager
from modules.crm.deals.deal_repository import DealRepository
from modules.crm.deals.models import Deal

RECENT_LIMIT = 5


@dataclass
class WorkflowSnapshot:
    """Сводка состояния системы (не хранится, строится на каждый запрос)"""
    pending_orders_count: int = 0
    open_deals_count: int = 0
    recent_orders: List[Dict[str, Any]] = field(default_factory=list)
    open_broker_deals: List[Deal] = field(default_factory=list)
    total_products: int = 0
    total_clients: int = 0
    total_suppliers: int = 0
    low_stock_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pending_orders_count": self.pending_orders_count,
            "open_deals_count": self.open_deals_count,
            "recent_orders": [dict(order) for order in self.recent_orders],
            "open_broker_deals": [deal.to_dict() for deal in self.open_broker_deals],
            "total_products": self.total_products,
            "total_clients": self.total_clients,
            "total_suppliers": self.total_suppliers,
            "low_stock_count": self.low_stock_count,
        }


class WorkflowService:
    """Построение сводки для главной панели"""

    def __init__(self, db_manager: DatabaseManager, deal_repo: Optional[DealRepository] = None):
        self.db_manager = db_manager
        self.deal_repo = deal_repo or DealRepository(db_manager)

    def get_snapshot(self) -> WorkflowSnapshot:
        """
        Сборка сводки

        Raises:
            DatabaseError: Хранилище недоступно
        """
        snapshot = WorkflowSnapshot(
            pending_orders_count=self._count(
                "SELECT COUNT(*) AS count FROM orders WHERE status = 'pending'"
            ),
            open_deals_count=self.deal_repo.count_open_deals(),
            recent_orders=self._recent_pending_orders(),
            open_broker_deals=self.deal_repo.get_open_deals(RECENT_LIMIT),
            total_products=self._count("SELECT COUNT(*) AS count FROM products"),
            total_clients=self._count("SELECT COUNT(*) AS count FROM clients"),
            total_suppliers=self._count("SELECT COUNT(*) AS count FROM suppliers"),
            low_stock_count=self._count(
                "SELECT COUNT(*) AS count FROM products WHERE min_stock > 0 AND stock <= min_stock"
            ),
        )
        logger.debug(
            f"Сводка: заказов в ожидании={snapshot.pending_orders_count}, "
            f"открытых сделок={snapshot.open_deals_count}, мало на складе={snapshot.low_stock_count}"
        )
        return snapshot

    def _count(self, query: str) -> int:
        rows = self.db_manager.execute_query(query)
        return int(rows[0].get('count', 0)) if rows else 0

    def _recent_pending_orders(self) -> List[Dict[str, Any]]:
        """Последние заказы в ожидании с именем клиента"""
        rows = self.db_manager.execute_query(
            """
            SELECT o.id, o.client_id, o.order_date, o.total_price, o.status, o.notes,
                   o.created_at, c.name AS client_name
            FROM orders o
            LEFT JOIN clients c ON c.id = o.client_id
            WHERE o.status = 'pending'
            ORDER BY o.order_date DESC, o.id DESC
            LIMIT %s
            """,
            (RECENT_LIMIT,),
            RealDictCursor
        )
        return [dict(row) for row in rows] if rows else []
