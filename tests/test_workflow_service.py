"""
Тесты для сервиса сводки рабочего процесса
"""

from datetime import date, datetime

import pytest

from core.exceptions import DatabaseQueryError
from modules.crm.deals.deal_repository import DealRepository
from modules.crm.workflow import WorkflowService, WorkflowSnapshot

PENDING_COUNT_SQL = "SELECT COUNT(*) AS count FROM orders WHERE status = 'pending'"
OPEN_DEALS_COUNT_SQL = "SELECT COUNT(*) AS count FROM broker_deals WHERE COALESCE(status, '') NOT IN %s"
LOW_STOCK_SQL = "SELECT COUNT(*) AS count FROM products WHERE min_stock > 0 AND stock <= min_stock"
PRODUCTS_SQL = "SELECT COUNT(*) AS count FROM products"
CLIENTS_SQL = "SELECT COUNT(*) AS count FROM clients"
SUPPLIERS_SQL = "SELECT COUNT(*) AS count FROM suppliers"
RECENT_ORDERS_TAIL = (
    "FROM orders o LEFT JOIN clients c ON c.id = o.client_id "
    "WHERE o.status = 'pending' ORDER BY o.order_date DESC, o.id DESC LIMIT %s"
)
OPEN_DEALS_TAIL = (
    "WHERE COALESCE(d.status, '') NOT IN %s ORDER BY d.created_at DESC, d.id DESC LIMIT %s"
)


def normalize(sql):
    return " ".join(sql.split())


def deal_row(deal_id, status, created_at):
    return {
        'id': deal_id, 'client_id': None, 'supplier_id': None, 'product': f'Product {deal_id}',
        'quantity': 1.0, 'price_per_ton': 100.0, 'total_value': 100.0, 'commission_rate': 2.5,
        'commission': 2.5, 'stage': 'order', 'status': status, 'offer_date': None,
        'order_date': None, 'delivery_date': None, 'payment_date': None, 'notes': None,
        'created_at': created_at, 'updated_at': created_at, 'client_name': None, 'supplier_name': None,
    }


class FakeDatabase:
    """
    Имитация БД для сводки

    Отвечает только на запросы с ожидаемыми условиями WHERE; любой
    другой SQL считается ошибкой теста. Все выполненные запросы
    сохраняются в executed.
    """

    def __init__(self, deals, orders, products, clients=0, suppliers=0):
        self.deals = deals
        self.orders = orders
        self.products = products
        self.clients = clients
        self.suppliers = suppliers
        self.executed = []

    def _open_deals(self, closed):
        return [row for row in self.deals if (row['status'] or '') not in closed]

    def _pending_orders(self):
        return [order for order in self.orders if order['status'] == 'pending']

    def execute_query(self, query, params=None, cursor_factory=None):
        sql = normalize(query)
        self.executed.append((sql, params))
        counts = {
            PENDING_COUNT_SQL: lambda: len(self._pending_orders()),
            LOW_STOCK_SQL: lambda: sum(
                1 for p in self.products if p['min_stock'] > 0 and p['stock'] <= p['min_stock']
            ),
            PRODUCTS_SQL: lambda: len(self.products),
            CLIENTS_SQL: lambda: self.clients,
            SUPPLIERS_SQL: lambda: self.suppliers,
        }
        if sql in counts:
            return [{'count': counts[sql]()}]
        if sql == OPEN_DEALS_COUNT_SQL:
            return [{'count': len(self._open_deals(params[0]))}]
        if sql.endswith(OPEN_DEALS_TAIL):
            closed, limit = params
            rows = sorted(self._open_deals(closed), key=lambda r: (r['created_at'], r['id']), reverse=True)
            return rows[:limit]
        if sql.endswith(RECENT_ORDERS_TAIL):
            pending = sorted(self._pending_orders(), key=lambda o: (o['order_date'], o['id']), reverse=True)
            return pending[:params[0]]
        raise AssertionError(f"Неожиданный запрос: {sql}")


@pytest.fixture
def fake_db():
    return FakeDatabase(
        deals=[
            deal_row(1, 'open', datetime(2026, 10, 1)),
            deal_row(2, 'completed', datetime(2026, 10, 2)),
            deal_row(3, None, datetime(2026, 10, 3)),
        ],
        orders=[
            {'id': 1, 'status': 'pending', 'order_date': date(2026, 10, 1), 'client_name': 'A'},
            {'id': 2, 'status': 'shipped', 'order_date': date(2026, 10, 2), 'client_name': 'B'},
            {'id': 3, 'status': 'pending', 'order_date': date(2026, 10, 5), 'client_name': 'C'},
            {'id': 4, 'status': 'cancelled', 'order_date': date(2026, 10, 6), 'client_name': 'D'},
        ],
        products=[
            {'stock': 5, 'min_stock': 10},
            {'stock': 10, 'min_stock': 10},
            {'stock': 0, 'min_stock': 0},
            {'stock': -1, 'min_stock': 0},
            {'stock': 20, 'min_stock': 10},
        ],
        clients=4,
        suppliers=2,
    )


class TestWorkflowService:
    """Тесты для сборки сводки"""

    def test_snapshot_counts(self, fake_db):
        snapshot = WorkflowService(fake_db).get_snapshot()

        assert isinstance(snapshot, WorkflowSnapshot)
        assert snapshot.pending_orders_count == 2
        assert snapshot.open_deals_count == 2
        assert snapshot.total_products == 5
        assert snapshot.total_clients == 4
        assert snapshot.total_suppliers == 2

    def test_low_stock_boundary_and_unset_minimum(self, fake_db):
        """stock == min_stock считается низким, товары без минимума никогда"""
        snapshot = WorkflowService(fake_db).get_snapshot()
        assert snapshot.low_stock_count == 2

    def test_open_deals_exclude_closed_and_newest_first(self, fake_db):
        snapshot = WorkflowService(fake_db).get_snapshot()
        assert [deal.id for deal in snapshot.open_broker_deals] == [3, 1]

    def test_recent_orders_pending_only(self, fake_db):
        snapshot = WorkflowService(fake_db).get_snapshot()
        assert [order['id'] for order in snapshot.recent_orders] == [3, 1]

    def test_recent_lists_capped_at_five(self):
        fake_db = FakeDatabase(
            deals=[deal_row(i, 'open', datetime(2026, 1, i)) for i in range(1, 9)],
            orders=[
                {'id': i, 'status': 'pending', 'order_date': date(2026, 1, i), 'client_name': None}
                for i in range(1, 9)
            ],
            products=[],
        )
        snapshot = WorkflowService(fake_db).get_snapshot()
        assert len(snapshot.open_broker_deals) == 5
        assert len(snapshot.recent_orders) == 5
        assert snapshot.open_deals_count == 8
        assert snapshot.pending_orders_count == 8

    def test_empty_database(self):
        snapshot = WorkflowService(FakeDatabase(deals=[], orders=[], products=[])).get_snapshot()
        assert snapshot.to_dict() == WorkflowSnapshot().to_dict()

    def test_to_dict_serializes_deals(self, fake_db):
        data = WorkflowService(fake_db).get_snapshot().to_dict()
        assert data["open_broker_deals"][0]["status"] == "open"
        assert data["open_broker_deals"][0]["stage"] == "order"

    def test_uses_given_deal_repository(self, mock_db_manager):
        deal_repo = DealRepository(mock_db_manager)
        service = WorkflowService(mock_db_manager, deal_repo)
        assert service.deal_repo is deal_repo

    def test_database_error_propagates(self, mock_db_manager):
        mock_db_manager.execute_query.side_effect = DatabaseQueryError("нет соединения")
        with pytest.raises(DatabaseQueryError):
            WorkflowService(mock_db_manager).get_snapshot()


class TestWorkflowQueries:
    """Условия отбора в подзапросах сводки"""

    @pytest.fixture
    def executed(self, mock_db_manager):
        mock_db_manager.execute_query.side_effect = (
            lambda query, *args: [] if "LIMIT" in query else [{'count': 0}]
        )
        WorkflowService(mock_db_manager).get_snapshot()
        return [
            (normalize(call[0][0]), call[0][1] if len(call[0]) > 1 else None)
            for call in mock_db_manager.execute_query.call_args_list
        ]

    def test_all_sub_queries_issued(self, executed):
        assert len(executed) == 8

    def test_pending_count_filters_pending_status(self, executed):
        assert (PENDING_COUNT_SQL, None) in executed

    def test_low_stock_filter(self, executed):
        assert (LOW_STOCK_SQL, None) in executed

    def test_totals_are_unfiltered(self, executed):
        for sql in (PRODUCTS_SQL, CLIENTS_SQL, SUPPLIERS_SQL):
            assert (sql, None) in executed

    def test_open_deals_count_excludes_closed(self, executed):
        assert (OPEN_DEALS_COUNT_SQL, (("cancelled", "completed"),)) in executed

    def test_recent_orders_query(self, executed):
        recent = [(sql, params) for sql, params in executed if sql.endswith(RECENT_ORDERS_TAIL)]
        assert recent == [(recent[0][0], (5,))]

    def test_open_deals_query(self, executed):
        open_deals = [(sql, params) for sql, params in executed if sql.endswith(OPEN_DEALS_TAIL)]
        assert [params for _, params in open_deals] == [(("cancelled", "completed"), 5)]
