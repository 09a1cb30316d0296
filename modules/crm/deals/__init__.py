"""
Модуль брокерских сделок: этапы, комиссия, отгрузки, вложения
"""

from modules.crm.deals.models import (
    DealStage,
    DealStatus,
    DealInput,
    Deal,
    Shipment
)
from modules.crm.deals.deal_repository import DealRepository
from modules.crm.deals.shipment_repository import ShipmentRepository
from modules.crm.deals.attachment_storage import AttachmentStorage
from modules.crm.deals.deal_service import DealService

__all__ = [
    'DealStage',
    'DealStatus',
    'DealInput',
    'Deal',
    'Shipment',
    'DealRepository',
    'ShipmentRepository',
    'AttachmentStorage',
    'DealService',
]
