"""
Сервис жизненного цикла брокерских сделок

Единственное место, где считаются производные поля сделки:
    total_value = quantity * price_per_ton
    commission  = total_value * commission_rate / 100
Округление не применяется. Смена этапа проставляет дату этапа
и не пересчитывает финансовые поля.
"""

from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Union

from loguru import logger

from core.exceptions import NotFoundError, ValidationError
from modules.crm.deals.attachment_storage import Attachment, AttachmentStorage
from modules.crm.deals.deal_repository import DealRepository
from modules.crm.deals.models import (
    DEFAULT_STATUS_BY_STAGE,
    STAGE_DATE_FIELDS,
    Deal,
    DealInput,
    DealStage,
    DealStatus,
    Shipment,
    parse_stage,
    parse_status,
)
from modules.crm.deals.shipment_repository import ShipmentRepository

DealData = Union[DealInput, Mapping[str, Any]]


class DealService:
    """Создание, обновление, смена этапа и удаление сделок"""

    def __init__(
        self,
        deal_repo: DealRepository,
        shipment_repo: ShipmentRepository,
        attachments: AttachmentStorage,
        today: Callable[[], date] = date.today,
    ):
        """
        Args:
            deal_repo: Репозиторий сделок
            shipment_repo: Репозиторий отгрузок
            attachments: Хранилище вложений
            today: Источник текущей даты для отметок этапов
        """
        self.deal_repo = deal_repo
        self.shipment_repo = shipment_repo
        self.attachments = attachments
        self._today = today

    @staticmethod
    def _to_input(data: DealData) -> DealInput:
        if isinstance(data, DealInput):
            return data
        return DealInput.from_dict(data)

    def create_deal(self, data: DealData) -> Deal:
        """
        Создание сделки

        Для этапа offer без указанной даты offer_date ставится текущая дата.
        После вставки создается пустая папка вложений.

        Raises:
            ValidationError: Не указан продукт или некорректные поля
            DatabaseError: Хранилище недоступно
        """
        deal_input = self._to_input(data)
        if deal_input.stage is DealStage.OFFER and deal_input.offer_date is None:
            deal_input = replace(deal_input, offer_date=self._today())

        deal = self.deal_repo.create(deal_input)
        logger.info(
            f"Сделка ID={deal.id} создана: {deal.product}, сумма={deal.total_value}, "
            f"комиссия={deal.commission}"
        )

        try:
            self.attachments.ensure_container(deal.id)
        except OSError as e:
            logger.warning(f"Не удалось создать папку вложений сделки {deal.id}: {e}")

        return deal

    def update_deal(self, data: DealData) -> Deal:
        """
        Полное обновление сделки с пересчетом производных полей

        Все четыре даты этапов перезаписываются переданными значениями.

        Raises:
            ValidationError: Нет ID или некорректные поля
            NotFoundError: Сделка не существует
        """
        deal_input = self._to_input(data)
        if deal_input.id is None:
            raise ValidationError("Для обновления сделки нужен ID", field="id")

        deal = self.deal_repo.update(deal_input)
        if deal is None:
            raise NotFoundError("deal", deal_input.id)

        logger.info(f"Сделка ID={deal.id} обновлена: сумма={deal.total_value}, комиссия={deal.commission}")
        return deal

    def update_stage(
        self,
        deal_id: int,
        stage: Union[DealStage, str],
        status: Optional[Union[DealStatus, str]] = None,
    ) -> Deal:
        """
        Перевод сделки на этап

        Если статус не передан, он берется из DEFAULT_STATUS_BY_STAGE.
        Для этапов offer/order/delivery/payment соответствующая дата
        перезаписывается текущей.

        Raises:
            ValidationError: Неизвестный этап или статус
            NotFoundError: Сделка не существует
        """
        new_stage = parse_stage(stage)
        new_status = parse_status(status) if status else DEFAULT_STATUS_BY_STAGE[new_stage]

        if self.deal_repo.get_by_id(deal_id) is None:
            raise NotFoundError("deal", deal_id)

        stamp = self._today() if new_stage in STAGE_DATE_FIELDS else None
        deal = self.deal_repo.update_stage(deal_id, new_stage, new_status, stamp)
        if deal is None:
            raise NotFoundError("deal", deal_id)

        logger.info(f"Сделка ID={deal_id} переведена на этап {new_stage.value}, статус {new_status.value}")
        return deal

    def delete_deal(self, deal_id: int) -> bool:
        """
        Удаление сделки, ее отгрузок и папки вложений

        Несуществующий ID не считается ошибкой.
        """
        self.shipment_repo.delete_by_deal(deal_id)
        deleted = self.deal_repo.delete(deal_id)
        self.attachments.remove_container(deal_id)

        if deleted:
            logger.info(f"Сделка ID={deal_id} удалена")
        else:
            logger.debug(f"Сделка ID={deal_id} не найдена при удалении")
        return True

    def get_deal(self, deal_id: int) -> Optional[Deal]:
        """Сделка с именами клиента/поставщика и списком отгрузок; None если нет"""
        deal = self.deal_repo.get_by_id(deal_id)
        if deal is None:
            return None
        deal.shipments = self.shipment_repo.get_by_deal(deal_id)
        return deal

    def list_deals(self, query: Optional[str] = None) -> List[Deal]:
        """Все сделки (опционально с поиском без учета регистра), новые первыми"""
        return self.deal_repo.get_deals(query)

    def add_shipment(self, deal_id: int, data: Union[Shipment, Mapping[str, Any]]) -> Shipment:
        """
        Добавление отгрузки к сделке

        Raises:
            NotFoundError: Сделка не существует
        """
        if self.deal_repo.get_by_id(deal_id) is None:
            raise NotFoundError("deal", deal_id)
        shipment = data if isinstance(data, Shipment) else Shipment.from_dict(data)
        shipment.deal_id = deal_id
        return self.shipment_repo.create(shipment)

    def list_attachments(self, deal_id: int) -> List[Attachment]:
        return self.attachments.list_attachments(deal_id)

    def add_attachment(self, deal_id: int, source: Path) -> Attachment:
        return self.attachments.add_attachment(deal_id, source)

    def delete_attachment(self, file_path: Path) -> bool:
        return self.attachments.delete_attachment(file_path)
