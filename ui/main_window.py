from PyQt5.QtWidgets import (
    QMainWindow, QWidget, QHBoxLayout, QVBoxLayout,
    QLabel, QPushButton, QStackedWidget, QFrame, QSizePolicy
)
from PyQt5.QtCore import Qt
from loguru import logger

from modules.crm.dashboard_widget import DashboardWidget
from modules.crm.deals.deal_service import DealService
from modules.crm.deals.deals_widget import DealsWidget
from modules.crm.workflow.workflow_service import WorkflowService
from modules.styles.general_styles import (
    SIZES, apply_button_style, apply_frame_style, apply_label_style
)
from services.settings_context import SettingsContext
from config.settings import config


class MainWindow(QMainWindow):
    """Главное окно: боковая панель разделов и область контента"""

    def __init__(
        self,
        deal_service: DealService,
        workflow_service: WorkflowService,
        settings: SettingsContext
    ):
        super().__init__()
        self.deal_service = deal_service
        self.workflow_service = workflow_service
        self.settings = settings

        self.setWindowTitle(config.ui.window_title)
        self.setMinimumSize(1200, 700)
        self.init_ui()

    def init_ui(self):
        """Инициализация пользовательского интерфейса"""
        central_widget = QWidget()
        main_layout = QHBoxLayout(central_widget)
        main_layout.setSpacing(0)
        main_layout.setContentsMargins(0, 0, 0, 0)

        # ------------- Боковая панель --------------
        sidebar = QFrame()
        sidebar.setFixedWidth(SIZES['sidebar_width'])
        apply_frame_style(sidebar, 'sidebar')

        side_layout = QVBoxLayout(sidebar)
        side_layout.setContentsMargins(16, 30, 16, 20)

        sections_title = QLabel("🗂️ Разделы")
        apply_label_style(sections_title, 'h1')
        side_layout.addWidget(sections_title, alignment=Qt.AlignLeft)
        side_layout.addSpacing(18)

        self.dashboard_widget = DashboardWidget(self.workflow_service, self.settings)
        self.deals_widget = DealsWidget(self.deal_service, self.settings)
        self.dashboard_widget.deal_open_requested.connect(self.open_deal)

        sections = [
            ('Панель 📊', self.dashboard_widget),
            ('Сделки 🤝', self.deals_widget),
        ]

        self.stacked = QStackedWidget()
        self.stacked.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)

        self.buttons = []
        for i, (name, widget) in enumerate(sections):
            btn = QPushButton(name)
            btn.setCheckable(True)
            btn.setAutoExclusive(True)
            btn.clicked.connect(lambda checked, n=i: self.on_section_clicked(n))
            apply_button_style(btn, 'sidebar')

            side_layout.addWidget(btn)
            self.stacked.addWidget(widget)
            self.buttons.append(btn)

        self.buttons[0].setChecked(True)
        side_layout.addStretch()

        main_layout.addWidget(sidebar)
        main_layout.addWidget(self.stacked)
        self.setCentralWidget(central_widget)

    def on_section_clicked(self, index: int):
        """Переключение раздела"""
        self.stacked.setCurrentIndex(index)
        self.buttons[index].setChecked(True)
        logger.debug(f"Открыт раздел #{index}")

    def open_deal(self, deal_id: int):
        """Переход с главной панели к сделке в разделе сделок"""
        self.on_section_clicked(self.stacked.indexOf(self.deals_widget))
        self.deals_widget.select_deal(deal_id)
