import os

# configuration is read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DEFAULT_RATE_METHOD"] = "API"
os.environ["RATE_METHOD_OVERRIDES"] = ""
os.environ.setdefault("LOG_FILE", "./logger/test.log")

import asyncio  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402

from data.partner_defaults import DEFAULT_PARTNER_CONFIGS  # noqa: E402
from modules.rate_card.rate_card_calculator import RateCardCalculator  # noqa: E402
from modules.rate_card.rate_card_store import RateCardStore  # noqa: E402
from modules.serviceability.pincode_service import PincodeDirectory  # noqa: E402
from modules.serviceability.rate_orchestrator import RateOrchestrator  # noqa: E402
from modules.serviceability.serviceability_schema import (  # noqa: E402
    QuoteSource,
    RateQuote,
)
from modules.serviceability.zone_resolver import ZoneResolver  # noqa: E402
from modules.shipment.shipment_repository import InMemoryShipmentRepository  # noqa: E402
from modules.shipment.shipment_schema import (  # noqa: E402
    CarrierBookingResponse,
    LedgerEntry,
    TrackingSnapshot,
)
from modules.shipping_partner.partner_config_store import (  # noqa: E402
    InMemoryPartnerConfigStore,
)
from modules.shipping_partner.partner_registry import PartnerRegistry  # noqa: E402
from modules.shipping_partner.shipping_partner_schema import Carrier  # noqa: E402
from database.db import time_now  # noqa: E402
from utils.jwt_token_handler import UserDataModel  # noqa: E402


PINCODES = {
    "110001": {"city": "New Delhi", "district": "Central Delhi", "state": "Delhi"},
    "110002": {"city": "New Delhi", "district": "Central Delhi", "state": "Delhi"},
    "110085": {"city": "Delhi", "district": "North West Delhi", "state": "Delhi"},
    "400001": {"city": "Mumbai", "district": "Mumbai", "state": "Maharashtra"},
    "411001": {"city": "Pune", "district": "Pune", "state": "Maharashtra"},
    "560001": {"city": "Bangalore", "district": "Bangalore", "state": "Karnataka"},
    "600001": {"city": "Chennai", "district": "Chennai", "state": "Tamil Nadu"},
    "302001": {"city": "Jaipur", "district": "Jaipur", "state": "Rajasthan"},
    "781001": {"city": "Guwahati", "district": "Kamrup", "state": "Assam"},
    "180001": {"city": "Jammu", "district": "Jammu", "state": "Jammu & Kashmir"},
}


class StubAdapter:
    """Duck-typed carrier adapter recording every call it receives."""

    supports_b2b = False

    def __init__(
        self,
        carrier: Carrier,
        total=None,
        error: Exception = None,
        b2b_total=None,
        delay: float = 0,
        book_response: CarrierBookingResponse = None,
        book_error: Exception = None,
        snapshot: TrackingSnapshot = None,
    ):
        self.carrier = carrier
        self.total = total
        self.error = error
        self.b2b_total = b2b_total
        self.delay = delay
        self.book_response = book_response
        self.book_error = book_error
        self.snapshot = snapshot
        self.quote_calls = 0
        self.b2b_calls = 0
        self.book_calls = 0
        self.track_calls = 0

    def _quote(self, total, source, package, zone, config):
        return RateQuote(
            carrier=self.carrier,
            carrier_name=config.name,
            service_type=package.service_type,
            zone=zone,
            total=Decimal(str(total)),
            estimated_days=config.estimated_days,
            chargeable_weight=package.chargeable_weight,
            source=source,
        )

    async def quote(self, package, route, zone, config):
        self.quote_calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.total is None:
            return None
        return self._quote(self.total, QuoteSource.API, package, zone, config)

    async def quote_b2b(self, package, route, zone, config):
        self.b2b_calls += 1
        if self.b2b_total is None:
            return None
        return self._quote(self.b2b_total, QuoteSource.B2B_API, package, zone, config)

    async def book(self, shipment, config):
        self.book_calls += 1
        if self.book_error is not None:
            raise self.book_error
        if self.book_response is not None:
            return self.book_response
        awb = "AWB{}".format(self.book_calls)
        return CarrierBookingResponse(
            success=True, awb=awb, tracking_url=config.tracking_link(awb)
        )

    async def track(self, reference, config=None):
        self.track_calls += 1
        return self.snapshot


class FakeLedger:
    def __init__(self, balances=None, fail_debit: bool = False):
        self.balances = {k: Decimal(str(v)) for k, v in (balances or {}).items()}
        self.debits = []
        self.fail_debit = fail_debit

    def check_balance(self, actor_id):
        return self.balances.get(actor_id, Decimal("0"))

    def debit(self, actor_id, amount, reason, reference=None):
        if self.fail_debit:
            raise RuntimeError("ledger unavailable")
        closing = self.check_balance(actor_id) - Decimal(str(amount))
        self.balances[actor_id] = closing
        entry = LedgerEntry(
            actor_id=actor_id,
            amount=Decimal(str(amount)),
            reason=reason,
            reference=reference,
            closing_balance=closing,
            created_at=time_now(),
        )
        self.debits.append(entry)
        return entry


class RecordingPublisher:
    def __init__(self):
        self.events = []

    def publish(self, name, **payload):
        self.events.append((name, payload))

    def names(self):
        return [name for name, _ in self.events]


@pytest.fixture
def pincode_directory():
    return PincodeDirectory(PINCODES)


@pytest.fixture
def zone_resolver(pincode_directory):
    return ZoneResolver(pincode_directory)


@pytest.fixture
def rate_card_store():
    return RateCardStore.from_defaults()


@pytest.fixture
def calculator(rate_card_store):
    return RateCardCalculator(rate_card_store)


@pytest.fixture
def partner_store():
    return InMemoryPartnerConfigStore(list(DEFAULT_PARTNER_CONFIGS.values()))


@pytest.fixture
def registry(partner_store):
    return PartnerRegistry(partner_store)


@pytest.fixture
def principal():
    return UserDataModel(id=1, client_id=7, email="ops@example.com")


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def repository():
    return InMemoryShipmentRepository()


@pytest.fixture
def make_orchestrator(registry, calculator, zone_resolver):
    def build(adapters, **kwargs):
        kwargs.setdefault("default_method", "API")
        kwargs.setdefault("method_overrides", {})
        return RateOrchestrator(
            registry=registry,
            adapters=adapters,
            calculator=calculator,
            zone_resolver=zone_resolver,
            **kwargs,
        )

    return build


@pytest.fixture
def db_session():
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool

    import models  # noqa: F401
    from database.db import DBBase

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    DBBase.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()
        DBBase.metadata.drop_all(engine)
        engine.dispose()
