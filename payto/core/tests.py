"""
Tests para la configuración y el bus de refresco
"""

from decimal import Decimal
import asyncio

from payto.core.config import Settings
from payto.core.events import RefreshBus, COMPANIES_CHANGED, INVOICES_CHANGED


class TestRefreshBus:

    def test_publish_reaches_sync_and_async_subscribers(self):
        bus = RefreshBus()
        received = []

        async def reload_invoices(**payload):
            received.append(("async", payload))

        bus.subscribe(COMPANIES_CHANGED, lambda **payload: received.append(("sync", payload)))
        bus.subscribe(COMPANIES_CHANGED, reload_invoices)

        delivered = asyncio.run(bus.publish(COMPANIES_CHANGED, company_id="c1"))

        assert delivered == 2
        assert received == [("sync", {"company_id": "c1"}), ("async", {"company_id": "c1"})]

    def test_unsubscribe(self):
        bus = RefreshBus()
        received = []
        unsubscribe = bus.subscribe(INVOICES_CHANGED, lambda **payload: received.append(payload))

        unsubscribe()
        unsubscribe()

        assert asyncio.run(bus.publish(INVOICES_CHANGED)) == 0
        assert received == []
        assert bus.subscriber_count(INVOICES_CHANGED) == 0

    def test_failing_subscriber_does_not_stop_others(self):
        bus = RefreshBus()
        received = []

        def broken(**payload):
            raise RuntimeError("boom")

        bus.subscribe(COMPANIES_CHANGED, broken)
        bus.subscribe(COMPANIES_CHANGED, lambda **payload: received.append(payload))

        assert asyncio.run(bus.publish(COMPANIES_CHANGED)) == 1
        assert received == [{}]

    def test_topics_are_independent(self):
        bus = RefreshBus()
        bus.subscribe(COMPANIES_CHANGED, lambda **payload: None)

        assert bus.subscriber_count(COMPANIES_CHANGED) == 1
        assert asyncio.run(bus.publish("unknown.topic")) == 0


class TestSettings:

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.DEFAULT_VAT_RATE == Decimal("21")
        assert settings.DEFAULT_CURRENCY == "ARS"
        assert settings.MAX_PAGES == 100

    def test_string_values_are_parsed(self, monkeypatch):
        monkeypatch.setenv("DEBUG", '"false"')
        monkeypatch.setenv("DEFAULT_VAT_RATE", "10,5")
        monkeypatch.setenv("PAYTO_API_URL", "https://api.payto.com.ar/api/v1/")

        settings = Settings(_env_file=None)

        assert settings.DEBUG is False
        assert settings.DEFAULT_VAT_RATE == Decimal("10.5")
        assert settings.api_base_url == "https://api.payto.com.ar/api/v1"
