from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from logger import logger

# models
from models import Order, Shipment, Shipment_Tracking

# schema
from modules.serviceability.serviceability_schema import RateQuote
from modules.shipping_partner.shipping_partner_schema import Carrier
from .shipment_schema import (
    BookingResult,
    BookingType,
    ShipmentRecord,
    ShipmentStatus,
    TrackingEvent,
)

from utils.datetime import as_utc


class ShipmentRepository:
    """Shipments, their tracking history and the owning order's shipping status."""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def to_record(row: Shipment) -> ShipmentRecord:
        return ShipmentRecord(
            id=row.id,
            order_id=row.order.order_id if row.order is not None else str(row.order_id),
            client_id=row.client_id,
            carrier=Carrier(row.carrier),
            reference=row.reference,
            booking_type=BookingType(row.booking_type),
            status=ShipmentStatus(row.status),
            sub_status=row.sub_status,
            tracking_url=row.tracking_url,
            amount_charged=Decimal(str(row.amount_charged or 0)),
            events=[
                TrackingEvent(
                    status=event.status,
                    shipment_status=ShipmentStatus(event.shipment_status)
                    if event.shipment_status
                    else None,
                    location=event.location,
                    timestamp=as_utc(event.event_datetime),
                    description=event.description,
                )
                for event in row.tracking_events
            ],
            estimated_delivery=as_utc(row.estimated_delivery),
            delivered_at=as_utc(row.delivered_at),
        )

    def _order(self, client_id: int, order_id: str) -> Order:
        order = (
            self.db.query(Order)
            .filter(
                Order.client_id == client_id,
                Order.order_id == order_id,
                Order.is_deleted.is_(False),
            )
            .first()
        )
        if order is None:
            order = Order(client_id=client_id, order_id=order_id)
            self.db.add(order)
            self.db.flush()
        return order

    def record_booking(
        self, client_id: int, result: BookingResult, quote: RateQuote
    ) -> ShipmentRecord:
        order = self._order(client_id, result.order_id)

        shipment = Shipment(
            order_id=order.id,
            client_id=client_id,
            carrier=result.carrier.value,
            reference=result.reference,
            booking_type=result.booking_type.value,
            status=ShipmentStatus.BOOKED.value,
            tracking_url=result.tracking_url,
            amount_charged=result.amount_charged,
            quote_source=quote.source.value,
            manual_instructions=result.instructions,
            estimated_delivery=result.estimated_delivery,
        )

        order.status = ShipmentStatus.BOOKED.value
        order.courier_partner = result.carrier.value
        order.awb_number = result.awb
        order.booking_type = result.booking_type.value

        self.db.add(order)
        self.db.add(shipment)
        self.db.flush()
        self.db.refresh(shipment)

        return self.to_record(shipment)

    def get_by_reference(self, carrier: Carrier, reference: str) -> Optional[ShipmentRecord]:
        row = (
            self.db.query(Shipment)
            .filter(
                Shipment.carrier == carrier.value,
                Shipment.reference == reference,
                Shipment.is_deleted.is_(False),
            )
            .first()
        )
        return self.to_record(row) if row is not None else None

    def save_sync(
        self, record: ShipmentRecord, new_events: List[TrackingEvent], delivered_now: bool
    ) -> ShipmentRecord:
        shipment = self.db.query(Shipment).filter(Shipment.id == record.id).first()
        if shipment is None:
            logger.error(msg="shipment {} vanished before sync".format(record.reference))
            return record

        shipment.status = record.status.value
        shipment.sub_status = record.sub_status
        shipment.delivered_at = record.delivered_at

        for event in new_events:
            self.db.add(
                Shipment_Tracking(
                    shipment_id=shipment.id,
                    status=event.status,
                    shipment_status=event.shipment_status.value
                    if event.shipment_status
                    else None,
                    description=event.description,
                    location=event.location,
                    event_datetime=event.timestamp,
                )
            )

        order = shipment.order
        if order is not None:
            order.status = record.status.value
            order.sub_status = record.sub_status
            if delivered_now:
                order.delivered_date = record.delivered_at
            self.db.add(order)

        self.db.add(shipment)
        self.db.flush()
        # rows were added by shipment_id, reload the collection on next read
        self.db.expire(shipment, ["tracking_events"])

        return record

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()


class InMemoryShipmentRepository:
    """Same contract as ShipmentRepository, held in dicts."""

    def __init__(self):
        self.shipments: Dict[Tuple[Carrier, str], ShipmentRecord] = {}
        self.order_status: Dict[Tuple[int, str], str] = {}
        self.commits = 0
        self.rollbacks = 0
        self._next_id = 1

    def record_booking(
        self, client_id: int, result: BookingResult, quote: RateQuote
    ) -> ShipmentRecord:
        record = ShipmentRecord(
            id=self._next_id,
            order_id=result.order_id,
            client_id=client_id,
            carrier=result.carrier,
            reference=result.reference,
            booking_type=result.booking_type,
            tracking_url=result.tracking_url,
            amount_charged=result.amount_charged,
            estimated_delivery=result.estimated_delivery,
        )
        self._next_id += 1
        self.shipments[(record.carrier, record.reference)] = record
        self.order_status[(client_id, result.order_id)] = ShipmentStatus.BOOKED.value
        return record

    def get_by_reference(self, carrier: Carrier, reference: str) -> Optional[ShipmentRecord]:
        return self.shipments.get((carrier, reference))

    def save_sync(
        self, record: ShipmentRecord, new_events: List[TrackingEvent], delivered_now: bool
    ) -> ShipmentRecord:
        self.shipments[(record.carrier, record.reference)] = record
        self.order_status[(record.client_id, record.order_id)] = record.status.value
        return record

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1
