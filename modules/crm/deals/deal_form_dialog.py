"""
Диалог создания и редактирования сделки
"""

from typing import Any, Dict, Optional

from PyQt5.QtWidgets import (
    QDialog, QFormLayout, QLineEdit, QDoubleSpinBox, QComboBox, QTextEdit,
    QDialogButtonBox, QVBoxLayout, QLabel
)

from modules.crm.deals.models import Deal, DealStage, DealStatus, DEFAULT_COMMISSION_RATE, DATE_FIELDS
from modules.styles.general_styles import apply_label_style

SPIN_DECIMALS = 6


def unrounded_value(shown: float, original: Optional[float], decimals: int) -> float:
    """
    Значение поля для сохранения

    Спинбокс показывает число с ограниченной точностью. Если пользователь
    не менял поле, возвращается исходное значение сделки без округления.
    """
    if original is not None and abs(shown - original) <= 0.5 * 10 ** -decimals:
        return original
    return shown


class DealFormDialog(QDialog):
    """Форма сделки; производные поля показываются только для справки"""

    def __init__(self, deal: Optional[Deal] = None, parent=None):
        super().__init__(parent)
        self.deal = deal
        self.setWindowTitle("Редактирование сделки" if deal else "Новая сделка")
        self.init_ui()
        if deal:
            self._fill(deal)
        self._update_totals()

    def init_ui(self):
        layout = QVBoxLayout(self)
        form = QFormLayout()

        self.product_edit = QLineEdit()
        form.addRow("Продукт *", self.product_edit)

        self.client_id_edit = QLineEdit()
        self.client_id_edit.setPlaceholderText("ID клиента")
        form.addRow("Клиент", self.client_id_edit)

        self.supplier_id_edit = QLineEdit()
        self.supplier_id_edit.setPlaceholderText("ID поставщика")
        form.addRow("Поставщик", self.supplier_id_edit)

        self.quantity_spin = self._spin(SPIN_DECIMALS)
        form.addRow("Количество, т", self.quantity_spin)

        self.price_spin = self._spin(SPIN_DECIMALS)
        form.addRow("Цена за тонну", self.price_spin)

        self.rate_spin = self._spin(SPIN_DECIMALS, minimum=-100)
        self.rate_spin.setValue(DEFAULT_COMMISSION_RATE)
        form.addRow("Комиссия, %", self.rate_spin)

        self.stage_combo = QComboBox()
        for stage in DealStage:
            self.stage_combo.addItem(stage.value, stage)
        form.addRow("Этап", self.stage_combo)

        self.status_combo = QComboBox()
        for status in DealStatus:
            self.status_combo.addItem(status.value, status)
        form.addRow("Статус", self.status_combo)

        self.notes_edit = QTextEdit()
        self.notes_edit.setFixedHeight(80)
        form.addRow("Заметки", self.notes_edit)

        self.totals_label = QLabel()
        apply_label_style(self.totals_label, 'small')
        form.addRow("", self.totals_label)

        layout.addLayout(form)

        for spin in (self.quantity_spin, self.price_spin, self.rate_spin):
            spin.valueChanged.connect(self._update_totals)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    @staticmethod
    def _spin(decimals: int, minimum: float = 0) -> QDoubleSpinBox:
        spin = QDoubleSpinBox()
        spin.setDecimals(decimals)
        spin.setRange(minimum, 1_000_000_000)
        return spin

    def _spin_value(self, spin: QDoubleSpinBox, field_name: str) -> float:
        original = getattr(self.deal, field_name) if self.deal else None
        return unrounded_value(spin.value(), original, spin.decimals())

    def _fill(self, deal: Deal):
        self.product_edit.setText(deal.product)
        self.client_id_edit.setText(str(deal.client_id) if deal.client_id else "")
        self.supplier_id_edit.setText(str(deal.supplier_id) if deal.supplier_id else "")
        self.quantity_spin.setValue(deal.quantity)
        self.price_spin.setValue(deal.price_per_ton)
        self.rate_spin.setValue(deal.commission_rate)
        self.stage_combo.setCurrentIndex(self.stage_combo.findData(deal.stage))
        self.status_combo.setCurrentIndex(self.status_combo.findData(deal.status))
        self.notes_edit.setPlainText(deal.notes or "")

    def _update_totals(self):
        total = self.quantity_spin.value() * self.price_spin.value()
        commission = total * (self.rate_spin.value() / 100)
        self.totals_label.setText(f"Сумма: {total:,.2f} · Комиссия: {commission:,.2f}")

    def get_data(self) -> Dict[str, Any]:
        """Данные формы для DealInput.from_dict; даты этапов передаются как были"""
        data: Dict[str, Any] = {
            "product": self.product_edit.text(),
            "client_id": self.client_id_edit.text().strip() or None,
            "supplier_id": self.supplier_id_edit.text().strip() or None,
            "quantity": self._spin_value(self.quantity_spin, "quantity"),
            "price_per_ton": self._spin_value(self.price_spin, "price_per_ton"),
            "commission_rate": self._spin_value(self.rate_spin, "commission_rate"),
            "stage": self.stage_combo.currentData().value,
            "status": self.status_combo.currentData().value,
            "notes": self.notes_edit.toPlainText() or None,
        }
        if self.deal:
            data["id"] = self.deal.id
            for field_name in DATE_FIELDS:
                data[field_name] = getattr(self.deal, field_name)
        return data
