import sys

from PyQt5.QtWidgets import QApplication, QMessageBox
from PyQt5.QtCore import Qt
from loguru import logger

from config.settings import config
from core.database import DatabaseManager
from core.exceptions import DatabaseError
from core.schema import SchemaManager
from modules.crm.deals.attachment_storage import AttachmentStorage
from modules.crm.deals.deal_repository import DealRepository
from modules.crm.deals.deal_service import DealService
from modules.crm.deals.shipment_repository import ShipmentRepository
from modules.crm.workflow.workflow_service import WorkflowService
from services.settings_context import SettingsContext
from services.settings_repository import SettingsRepository
from ui.main_window import MainWindow


def configure_logging() -> None:
    """Логи в stderr и в файл с ротацией в каталоге данных"""
    config.storage.logs_dir.mkdir(parents=True, exist_ok=True)
    logger.remove()
    logger.add(sys.stderr, level="INFO")
    logger.add(
        config.storage.logs_dir / "tradedesk_{time:YYYY-MM-DD}.log",
        level="DEBUG",
        rotation="10 MB",
        retention="30 days",
        encoding="utf-8",
    )


if __name__ == "__main__":
    if hasattr(Qt, 'AA_EnableHighDpiScaling'):
        QApplication.setAttribute(Qt.AA_EnableHighDpiScaling, True)
    if hasattr(Qt, 'AA_UseHighDpiPixmaps'):
        QApplication.setAttribute(Qt.AA_UseHighDpiPixmaps, True)

    app = QApplication(sys.argv)
    configure_logging()

    db_manager = DatabaseManager(config.database)
    try:
        db_manager.connect()
        SchemaManager(db_manager).ensure_schema()
        settings = SettingsContext(SettingsRepository(db_manager)).refresh()
    except DatabaseError as e:
        logger.error(f"Не удалось подготовить базу данных: {e}")
        QMessageBox.critical(None, "TradeDesk", f"Нет подключения к базе данных:\n{e}")
        sys.exit(1)

    deal_repo = DealRepository(db_manager)
    deal_service = DealService(
        deal_repo,
        ShipmentRepository(db_manager),
        AttachmentStorage(config.storage.attachments_dir),
    )
    workflow_service = WorkflowService(db_manager, deal_repo)

    win = MainWindow(deal_service, workflow_service, settings)
    win.show()

    exit_code = app.exec_()
    db_manager.disconnect()
    sys.exit(exit_code)
