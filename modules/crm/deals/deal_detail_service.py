"""
Сервис формирования данных карточки сделки
для документов (PDF, письма) и детального окна.
"""

from typing import Any, Dict, Optional

from loguru import logger

from modules.crm.deals.deal_service import DealService
from modules.crm.deals.models import Deal, Shipment
from services.settings_context import SettingsContext


class DealDetailService:
    """Сервис агрегации данных для карточки сделки."""

    def __init__(self, deal_service: DealService, settings: SettingsContext):
        self.deal_service = deal_service
        self.settings = settings

    def build_deal_card(self, deal_id: int) -> Optional[Dict[str, Any]]:
        """
        Формирование снимка сделки для шаблонов документов.

        Содержит поля сделки, имена клиента и поставщика, последнюю
        отгрузку и суммы, отформатированные в валюте из настроек.
        Для несуществующей сделки возвращает None.
        """
        deal = self.deal_service.get_deal(deal_id)
        if deal is None:
            logger.warning(f"Карточка сделки {deal_id} не сформирована: сделка не найдена")
            return None

        return {
            "deal": self._serialize_deal(deal),
            "shipment": self._serialize_shipment(deal.latest_shipment),
            "formatted": {
                "price_per_ton": self.settings.format_money(deal.price_per_ton),
                "total_value": self.settings.format_money(deal.total_value),
                "commission": self.settings.format_money(deal.commission),
            },
            "currency": self.settings.currency,
            "language": self.settings.language,
        }

    @staticmethod
    def _serialize_deal(deal: Deal) -> Dict[str, Any]:
        """Поля сделки, которые читают шаблоны документов."""
        return {
            "id": deal.id,
            "product": deal.product,
            "quantity": deal.quantity,
            "price_per_ton": deal.price_per_ton,
            "total_value": deal.total_value,
            "commission_rate": deal.commission_rate,
            "commission": deal.commission,
            "client_name": deal.client_name,
            "supplier_name": deal.supplier_name,
            "stage": deal.stage.value,
            "status": deal.status.value,
            "notes": deal.notes,
        }

    @staticmethod
    def _serialize_shipment(shipment: Optional[Shipment]) -> Optional[Dict[str, Any]]:
        if shipment is None:
            return None
        return shipment.to_dict()
