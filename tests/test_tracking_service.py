import http
from datetime import datetime, timedelta
from decimal import Decimal

import pytz
import pytest

from modules.shipment.shipment_schema import (
    BookingType,
    ShipmentRecord,
    ShipmentStatus,
    TrackingEvent,
    TrackingSnapshot,
)
from modules.shipment.tracking_service import TrackingService, merge_events
from modules.shipping_partner.shipping_partner_schema import Carrier
from utils.events import ORDER_STATUS_CHANGED, SHIPMENT_DELIVERED

from tests.conftest import StubAdapter


T0 = datetime(2024, 3, 1, 9, 0, tzinfo=pytz.utc)


def event(hours, status, shipment_status=None):
    return TrackingEvent(
        status=status,
        shipment_status=shipment_status,
        timestamp=T0 + timedelta(hours=hours),
        location="Gurgaon Hub",
    )


PICKED = event(0, "pickup completed", ShipmentStatus.IN_TRANSIT)
TRANSIT = event(6, "in transit", ShipmentStatus.IN_TRANSIT)
OUT = event(20, "out for delivery", ShipmentStatus.IN_TRANSIT)
DELIVERED = event(26, "delivered", ShipmentStatus.DELIVERED)
RTO = event(30, "RTO in transit", ShipmentStatus.EXCEPTION)


def shipment(**kwargs):
    values = dict(
        order_id="ORD-1",
        client_id=7,
        carrier=Carrier.DELHIVERY,
        reference="AWB1",
        booking_type=BookingType.AUTOMATED,
        amount_charged=Decimal("136"),
    )
    values.update(kwargs)
    return ShipmentRecord(**values)


def snapshot(events, status=None, sub_status=None, success=True):
    return TrackingSnapshot(
        success=success,
        carrier=Carrier.DELHIVERY,
        reference="AWB1",
        status=status,
        sub_status=sub_status,
        events=events,
    )


@pytest.fixture
def service(registry, repository, publisher):
    return TrackingService(registry, {}, repository, publisher)


def test_merge_is_idempotent_and_newest_first():
    merged, fresh = merge_events([TRANSIT], [PICKED, TRANSIT, OUT])

    assert merged == [OUT, TRANSIT, PICKED]
    assert fresh == [PICKED, OUT]

    again, fresh_again = merge_events(merged, [OUT, PICKED])
    assert again == merged
    assert fresh_again == []


def test_sync_appends_only_new_events(service, repository, publisher):
    record = shipment(events=[PICKED])
    result = service.sync(record, snapshot([PICKED, TRANSIT], ShipmentStatus.IN_TRANSIT, "in transit"))

    assert result.new_events == 1
    assert result.status_changed
    assert result.shipment.events == [TRANSIT, PICKED]
    assert result.shipment.sub_status == "in transit"
    assert repository.order_status[(7, "ORD-1")] == "in transit"
    assert publisher.names() == [ORDER_STATUS_CHANGED]


def test_repeated_sync_changes_nothing(service, repository, publisher):
    first = service.sync(shipment(), snapshot([PICKED, TRANSIT], ShipmentStatus.IN_TRANSIT))
    publisher.events.clear()
    repository.order_status.clear()

    second = service.sync(first.shipment, snapshot([PICKED, TRANSIT], ShipmentStatus.IN_TRANSIT))

    assert second.new_events == 0
    assert not second.status_changed
    assert second.shipment.events == first.shipment.events
    assert publisher.events == []
    assert repository.order_status == {}


def test_delivery_recorded_once_with_event_time(service, publisher):
    record = shipment(status=ShipmentStatus.IN_TRANSIT, events=[OUT, TRANSIT])

    first = service.sync(record, snapshot([DELIVERED, OUT], ShipmentStatus.DELIVERED, "delivered"))
    assert first.delivered_now
    assert first.shipment.delivered_at == DELIVERED.timestamp
    assert first.shipment.status == ShipmentStatus.DELIVERED

    second = service.sync(first.shipment, snapshot([DELIVERED, OUT], ShipmentStatus.DELIVERED))
    assert not second.delivered_now
    assert second.shipment.delivered_at == DELIVERED.timestamp

    assert publisher.names().count(SHIPMENT_DELIVERED) == 1
    assert publisher.names().count(ORDER_STATUS_CHANGED) == 1


def test_delivered_without_event_uses_sync_time(service):
    result = service.sync(
        shipment(status=ShipmentStatus.IN_TRANSIT), snapshot([], ShipmentStatus.DELIVERED)
    )

    assert result.delivered_now
    assert result.shipment.delivered_at is not None


@pytest.mark.parametrize("terminal", [ShipmentStatus.DELIVERED, ShipmentStatus.RETURNED])
def test_terminal_status_is_final(service, publisher, terminal):
    record = shipment(status=terminal, sub_status="done", delivered_at=DELIVERED.timestamp)

    result = service.sync(record, snapshot([RTO], ShipmentStatus.EXCEPTION, "RTO in transit"))

    assert result.shipment.status == terminal
    assert result.shipment.sub_status == "done"
    assert not result.status_changed
    # the event is still kept in history
    assert result.new_events == 1
    assert publisher.events == []


def test_status_falls_back_to_latest_mapped_event(service):
    unmapped = event(8, "bag scanned")
    result = service.sync(shipment(), snapshot([unmapped, TRANSIT]))

    assert result.shipment.status == ShipmentStatus.IN_TRANSIT


async def test_refresh_syncs_stored_shipment(registry, repository, publisher):
    repository.shipments[(Carrier.DELHIVERY, "AWB1")] = shipment()
    adapter = StubAdapter(
        Carrier.DELHIVERY,
        snapshot=snapshot([PICKED, TRANSIT], ShipmentStatus.IN_TRANSIT, "in transit"),
    )
    service = TrackingService(registry, {Carrier.DELHIVERY: adapter}, repository, publisher)

    response = await service.refresh("AWB1", "Delhivery")

    assert response.status_code == http.HTTPStatus.OK
    assert response.data.status == ShipmentStatus.IN_TRANSIT
    assert repository.shipments[(Carrier.DELHIVERY, "AWB1")].status == ShipmentStatus.IN_TRANSIT
    assert len(repository.shipments[(Carrier.DELHIVERY, "AWB1")].events) == 2
    assert repository.commits == 1


async def test_refresh_failure_asks_for_manual_check(registry, repository, publisher):
    failed = TrackingSnapshot(
        success=False,
        carrier=Carrier.DELHIVERY,
        reference="AWB1",
        manual_check_required=True,
        message="tracking unavailable",
    )
    adapter = StubAdapter(Carrier.DELHIVERY, snapshot=failed)
    service = TrackingService(registry, {Carrier.DELHIVERY: adapter}, repository, publisher)

    response = await service.refresh("AWB1", "delhivery")

    assert response.status_code == http.HTTPStatus.OK
    assert response.message == "Manual tracking check required"
    assert response.data.manual_check_required
    assert repository.commits == 0


async def test_refresh_unknown_carrier(service):
    response = await service.refresh("AWB1", "pigeon post")
    assert response.status_code == http.HTTPStatus.BAD_REQUEST
