"""
Раздел "Сделки": список, поиск, смена этапа, удаление
"""

from typing import List, Optional

from PyQt5.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QLineEdit, QPushButton,
    QTableWidget, QTableWidgetItem, QComboBox, QMessageBox, QHeaderView,
    QAbstractItemView, QDialog
)
from PyQt5.QtCore import Qt, QTimer
from loguru import logger

from core.exceptions import TradeDeskError, ValidationError
from modules.crm.deals.deal_form_dialog import DealFormDialog
from modules.crm.deals.deal_service import DealService
from modules.crm.deals.models import Deal, DealStage
from modules.styles.general_styles import apply_button_style, apply_label_style, apply_table_style
from services.settings_context import SettingsContext

COLUMNS = [
    "ID", "Продукт", "Клиент", "Поставщик", "Кол-во, т", "Цена/т",
    "Сумма", "Комиссия", "Этап", "Статус", "Создана",
]


class DealsWidget(QWidget):
    """Таблица сделок с действиями над выбранной сделкой"""

    def __init__(self, deal_service: DealService, settings: SettingsContext, parent=None):
        super().__init__(parent)
        self.deal_service = deal_service
        self.settings = settings
        self.deals: List[Deal] = []
        self._search_timer = QTimer(self)
        self._search_timer.setSingleShot(True)
        self._search_timer.setInterval(300)
        self._search_timer.timeout.connect(self.load_deals)
        self.init_ui()

    def init_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(30, 30, 30, 30)

        header = QLabel("🤝 Брокерские сделки")
        apply_label_style(header, 'h1')
        layout.addWidget(header)

        toolbar = QHBoxLayout()
        self.search_edit = QLineEdit()
        self.search_edit.setPlaceholderText("Поиск по продукту, клиенту, поставщику")
        self.search_edit.textChanged.connect(lambda _: self._search_timer.start())
        toolbar.addWidget(self.search_edit, stretch=1)

        new_button = QPushButton("➕ Новая сделка")
        apply_button_style(new_button, 'primary')
        new_button.clicked.connect(self.create_deal)
        toolbar.addWidget(new_button)

        edit_button = QPushButton("✏️ Изменить")
        apply_button_style(edit_button, 'primary')
        edit_button.clicked.connect(self.edit_selected)
        toolbar.addWidget(edit_button)

        self.stage_combo = QComboBox()
        for stage in DealStage:
            self.stage_combo.addItem(stage.value, stage)
        toolbar.addWidget(self.stage_combo)

        stage_button = QPushButton("➡️ Перевести на этап")
        apply_button_style(stage_button, 'primary')
        stage_button.clicked.connect(self.change_stage)
        toolbar.addWidget(stage_button)

        delete_button = QPushButton("🗑 Удалить")
        apply_button_style(delete_button, 'danger')
        delete_button.clicked.connect(self.delete_selected)
        toolbar.addWidget(delete_button)
        layout.addLayout(toolbar)

        self.table = QTableWidget(0, len(COLUMNS))
        self.table.setHorizontalHeaderLabels(COLUMNS)
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.SingleSelection)
        self.table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self.table.doubleClicked.connect(lambda _: self.edit_selected())
        apply_table_style(self.table)
        layout.addWidget(self.table, stretch=1)

    def showEvent(self, event):
        super().showEvent(event)
        self.load_deals()

    def load_deals(self):
        """Перечитать сделки с учетом строки поиска"""
        try:
            self.deals = self.deal_service.list_deals(self.search_edit.text())
        except TradeDeskError as e:
            self._show_error("Не удалось загрузить сделки", e)
            return
        self._render()

    def _render(self):
        self.table.setRowCount(len(self.deals))
        money = self.settings.format_money
        for row, deal in enumerate(self.deals):
            values = [
                str(deal.id),
                deal.product,
                deal.client_name or "—",
                deal.supplier_name or "—",
                f"{deal.quantity:g}",
                money(deal.price_per_ton),
                money(deal.total_value),
                money(deal.commission),
                deal.stage.value,
                deal.status.value,
                deal.created_at.strftime("%Y-%m-%d") if deal.created_at else "",
            ]
            for column, value in enumerate(values):
                item = QTableWidgetItem(value)
                item.setData(Qt.UserRole, deal.id)
                self.table.setItem(row, column, item)

    def select_deal(self, deal_id: int):
        """Выделить строку сделки (переход с главной панели)"""
        self.search_edit.clear()
        self.load_deals()
        for row, deal in enumerate(self.deals):
            if deal.id == deal_id:
                self.table.selectRow(row)
                return

    def _selected_deal(self) -> Optional[Deal]:
        rows = self.table.selectionModel().selectedRows()
        if not rows:
            QMessageBox.information(self, "Сделки", "Выберите сделку в таблице")
            return None
        return self.deals[rows[0].row()]

    def create_deal(self):
        dialog = DealFormDialog(parent=self)
        if dialog.exec_() != QDialog.Accepted:
            return
        try:
            self.deal_service.create_deal(dialog.get_data())
        except TradeDeskError as e:
            self._show_error("Сделка не создана", e)
            return
        self.load_deals()

    def edit_selected(self):
        deal = self._selected_deal()
        if deal is None:
            return
        dialog = DealFormDialog(deal, parent=self)
        if dialog.exec_() != QDialog.Accepted:
            return
        try:
            self.deal_service.update_deal(dialog.get_data())
        except TradeDeskError as e:
            self._show_error("Сделка не сохранена", e)
            return
        self.load_deals()

    def change_stage(self):
        deal = self._selected_deal()
        if deal is None:
            return
        stage = self.stage_combo.currentData()
        try:
            self.deal_service.update_stage(deal.id, stage)
        except TradeDeskError as e:
            self._show_error("Этап не изменен", e)
            return
        self.load_deals()

    def delete_selected(self):
        deal = self._selected_deal()
        if deal is None:
            return
        answer = QMessageBox.question(
            self,
            "Удаление сделки",
            f"Удалить сделку #{deal.id} ({deal.product}) вместе с отгрузками и вложениями?",
        )
        if answer != QMessageBox.Yes:
            return
        try:
            self.deal_service.delete_deal(deal.id)
        except TradeDeskError as e:
            self._show_error("Сделка не удалена", e)
            return
        self.load_deals()

    def _show_error(self, title: str, error: TradeDeskError):
        if isinstance(error, ValidationError):
            logger.warning(f"{title}: {error}")
        else:
            logger.error(f"{title}: {error}")
        QMessageBox.warning(self, title, str(error))
