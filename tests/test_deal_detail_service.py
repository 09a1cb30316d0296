"""
Тесты для сервиса карточки сделки
"""

from unittest.mock import Mock

import pytest

from modules.crm.deals.deal_detail_service import DealDetailService
from services.settings_context import SettingsContext


@pytest.fixture
def settings():
    repository = Mock()
    repository.get_all.return_value = {"language": "de", "currency": "EUR"}
    return SettingsContext(repository).refresh()


@pytest.fixture
def detail_service(deal_service, settings):
    return DealDetailService(deal_service, settings)


class TestDealDetailService:
    """Тесты для build_deal_card"""

    def test_card_contains_deal_and_latest_shipment(self, detail_service, deal_service, deal_repo):
        deal_repo.client_names[1] = "Fancy Foods LLC"
        deal = deal_service.create_deal({
            "product": "Walnuts",
            "client_id": 1,
            "quantity": 10,
            "price_per_ton": 1200,
            "commission_rate": 3,
        })
        deal_service.add_shipment(deal.id, {"carrier": "Maersk", "container_number": "OLD1"})
        deal_service.add_shipment(deal.id, {"carrier": "Maersk", "container_number": "NEW2"})

        card = detail_service.build_deal_card(deal.id)

        assert card["deal"]["product"] == "Walnuts"
        assert card["deal"]["client_name"] == "Fancy Foods LLC"
        assert card["deal"]["stage"] == "offer"
        assert card["shipment"]["container_number"] == "NEW2"
        assert card["currency"] == "EUR"
        assert card["language"] == "de"

    def test_formatted_amounts_use_currency(self, detail_service, deal_service):
        deal = deal_service.create_deal({
            "product": "Walnuts",
            "quantity": 10,
            "price_per_ton": 1200,
            "commission_rate": 3,
        })
        card = detail_service.build_deal_card(deal.id)
        assert card["formatted"] == {
            "price_per_ton": "€1,200.00",
            "total_value": "€12,000.00",
            "commission": "€360.00",
        }

    def test_card_without_shipment(self, detail_service, deal_service):
        deal = deal_service.create_deal({"product": "Rice"})
        assert detail_service.build_deal_card(deal.id)["shipment"] is None

    def test_missing_deal(self, detail_service):
        assert detail_service.build_deal_card(404) is None
