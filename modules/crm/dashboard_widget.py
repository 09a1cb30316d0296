"""
Главная панель TradeDesk

Показывает сводку рабочего процесса: счетчики, заказы в ожидании
и открытые сделки. Данные перечитываются по кнопке "Обновить"
и при каждом показе панели.
"""

from typing import Dict, Optional

from PyQt5.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QGridLayout, QLabel, QFrame,
    QPushButton, QListWidget, QMessageBox
)
from PyQt5.QtCore import pyqtSignal
from loguru import logger

from core.exceptions import TradeDeskError
from modules.crm.deals.deal_card import DealCard
from modules.crm.workflow.workflow_service import WorkflowService, WorkflowSnapshot
from modules.styles.general_styles import (
    apply_button_style, apply_frame_style, apply_label_style
)
from services.settings_context import SettingsContext

COUNTERS = [
    ("pending_orders_count", "Заказы в ожидании"),
    ("open_deals_count", "Открытые сделки"),
    ("low_stock_count", "Мало на складе"),
    ("total_products", "Товары"),
    ("total_clients", "Клиенты"),
    ("total_suppliers", "Поставщики"),
]


class DashboardWidget(QWidget):
    """Главная панель со сводкой"""

    deal_open_requested = pyqtSignal(int)

    def __init__(self, workflow_service: WorkflowService, settings: SettingsContext, parent=None):
        super().__init__(parent)
        self.workflow_service = workflow_service
        self.settings = settings
        self.counter_labels: Dict[str, QLabel] = {}
        self.snapshot: Optional[WorkflowSnapshot] = None
        self.init_ui()

    def init_ui(self):
        """Инициализация интерфейса"""
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(30, 30, 30, 30)
        main_layout.setSpacing(16)

        header_layout = QHBoxLayout()
        header = QLabel("📊 Рабочий процесс")
        apply_label_style(header, 'h1')
        header_layout.addWidget(header)
        header_layout.addStretch()
        refresh_button = QPushButton("🔄 Обновить")
        apply_button_style(refresh_button, 'primary')
        refresh_button.clicked.connect(self.refresh)
        header_layout.addWidget(refresh_button)
        main_layout.addLayout(header_layout)

        counters_layout = QGridLayout()
        counters_layout.setSpacing(12)
        for index, (key, title) in enumerate(COUNTERS):
            card = QFrame()
            apply_frame_style(card, 'card')
            card_layout = QVBoxLayout(card)
            value_label = QLabel("—")
            apply_label_style(value_label, 'counter')
            title_label = QLabel(title)
            apply_label_style(title_label, 'small')
            card_layout.addWidget(value_label)
            card_layout.addWidget(title_label)
            self.counter_labels[key] = value_label
            counters_layout.addWidget(card, index // 3, index % 3)
        main_layout.addLayout(counters_layout)

        lists_layout = QHBoxLayout()

        orders_column = QVBoxLayout()
        orders_title = QLabel("🧾 Заказы в ожидании")
        apply_label_style(orders_title, 'h2')
        orders_column.addWidget(orders_title)
        self.orders_list = QListWidget()
        orders_column.addWidget(self.orders_list)
        lists_layout.addLayout(orders_column)

        deals_column = QVBoxLayout()
        deals_title = QLabel("🤝 Открытые сделки")
        apply_label_style(deals_title, 'h2')
        deals_column.addWidget(deals_title)
        self.deals_container = QVBoxLayout()
        deals_column.addLayout(self.deals_container)
        deals_column.addStretch()
        lists_layout.addLayout(deals_column)

        main_layout.addLayout(lists_layout, stretch=1)

    def showEvent(self, event):
        super().showEvent(event)
        self.refresh()

    def refresh(self):
        """Перечитать сводку и перерисовать панель"""
        try:
            self.snapshot = self.workflow_service.get_snapshot()
        except TradeDeskError as e:
            logger.error(f"Не удалось загрузить сводку: {e}")
            QMessageBox.warning(self, "Ошибка", f"Не удалось загрузить сводку:\n{e}")
            return
        self._render(self.snapshot)

    def _render(self, snapshot: WorkflowSnapshot):
        for key, label in self.counter_labels.items():
            label.setText(str(getattr(snapshot, key)))

        self.orders_list.clear()
        for order in snapshot.recent_orders:
            client = order.get('client_name') or "—"
            total = self.settings.format_money(order.get('total_price'))
            self.orders_list.addItem(f"#{order.get('id')} · {order.get('order_date')} · {client} · {total}")

        while self.deals_container.count():
            item = self.deals_container.takeAt(0)
            if item.widget():
                item.widget().deleteLater()
        for deal in snapshot.open_broker_deals:
            card = DealCard(deal, self.settings)
            card.clicked.connect(self.deal_open_requested.emit)
            self.deals_container.addWidget(card)
