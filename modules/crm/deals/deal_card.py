"""
Карточка сделки для главной панели
"""

from PyQt5.QtWidgets import QFrame, QVBoxLayout, QLabel
from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtGui import QMouseEvent
from modules.styles.general_styles import apply_label_style, COLORS, SIZES
from modules.crm.deals.models import Deal
from services.settings_context import SettingsContext


class DealCard(QFrame):
    """Карточка открытой сделки"""

    clicked = pyqtSignal(int)

    def __init__(self, deal: Deal, settings: SettingsContext, parent=None):
        super().__init__(parent)
        self.deal = deal
        self.settings = settings
        self.setCursor(Qt.PointingHandCursor)
        self.init_ui()
        self.update_style()

    def init_ui(self):
        """Инициализация интерфейса карточки"""
        layout = QVBoxLayout(self)
        layout.setSpacing(6)
        layout.setContentsMargins(12, 10, 12, 10)

        name_label = QLabel(self.deal.product)
        name_label.setWordWrap(True)
        apply_label_style(name_label, 'normal')
        name_label.setStyleSheet(f"font-weight: bold; color: {COLORS['text_dark']};")
        layout.addWidget(name_label)

        parties = " → ".join(
            name for name in (self.deal.supplier_name, self.deal.client_name) if name
        )
        if parties:
            parties_label = QLabel(parties)
            apply_label_style(parties_label, 'small')
            layout.addWidget(parties_label)

        volume_label = QLabel(
            f"{self.deal.quantity:g} t @ {self.settings.format_money(self.deal.price_per_ton)}/t"
        )
        apply_label_style(volume_label, 'small')
        layout.addWidget(volume_label)

        stage_label = QLabel(f"{self.deal.stage.value} · {self.deal.status.value}")
        apply_label_style(stage_label, 'small')
        stage_label.setStyleSheet(f"color: {COLORS['primary']};")
        layout.addWidget(stage_label)

    def update_style(self):
        """Обновление стиля карточки"""
        self.setStyleSheet(f"""
            QFrame {{
                background: {COLORS['secondary']};
                border: 1px solid {COLORS['border']};
                border-radius: {SIZES['border_radius_normal']}px;
            }}
            QFrame:hover {{
                border: 2px solid {COLORS['primary']};
                background: {COLORS['white']};
            }}
        """)

    def mouseDoubleClickEvent(self, event: QMouseEvent):
        """Двойной клик открывает сделку в разделе сделок"""
        if event.button() == Qt.LeftButton:
            self.clicked.emit(self.deal.id)
            event.accept()
            return
        super().mouseDoubleClickEvent(event)
