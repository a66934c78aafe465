import http
from typing import List, Optional
from psycopg2 import DatabaseError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from context_manager.context import context_user_data
from database.db import time_now
from logger import logger

# schema
from schema.base import GenericResponseModel
from modules.shipping_partner.shipping_partner_schema import Carrier
from .shipment_schema import (
    ShipmentRecord,
    ShipmentStatus,
    SyncResult,
    TERMINAL_STATUSES,
    TrackingEvent,
    TrackingSnapshot,
)

# service
from modules.shipping_partner.shipping_partner_service import (
    carrier_adapters,
    partner_registry,
)
from .shipment_repository import ShipmentRepository

from utils.events import ORDER_STATUS_CHANGED, SHIPMENT_DELIVERED, event_publisher


def merge_events(existing: List[TrackingEvent], incoming: List[TrackingEvent]):
    """Returns (merged history newest first, events that were not already present)."""
    seen = {event.key for event in existing}
    fresh = []
    for event in incoming:
        if event.key in seen:
            continue
        seen.add(event.key)
        fresh.append(event)

    merged = sorted(existing + fresh, key=lambda e: e.timestamp, reverse=True)
    return merged, fresh


def latest_status(snapshot: TrackingSnapshot, history: List[TrackingEvent]) -> Optional[ShipmentStatus]:
    if snapshot.status is not None:
        return snapshot.status
    for event in history:
        if event.shipment_status is not None:
            return event.shipment_status
    return None


class TrackingService:
    """Merges carrier tracking snapshots into stored shipments."""

    def __init__(self, registry, adapters, repository, publisher=event_publisher):
        self.registry = registry
        self.adapters = adapters
        self.repository = repository
        self.publisher = publisher

    @classmethod
    def for_session(cls, db: Session) -> "TrackingService":
        return cls(
            registry=partner_registry,
            adapters=carrier_adapters,
            repository=ShipmentRepository(db),
        )

    def sync(self, shipment: ShipmentRecord, snapshot: TrackingSnapshot) -> SyncResult:
        history, fresh = merge_events(shipment.events, snapshot.events)

        old_status = shipment.status
        new_status = latest_status(snapshot, history) or old_status

        # delivered and returned are final
        if old_status in TERMINAL_STATUSES:
            new_status = old_status

        sub_status = shipment.sub_status
        if old_status not in TERMINAL_STATUSES and snapshot.sub_status:
            sub_status = snapshot.sub_status

        delivered_now = (
            new_status == ShipmentStatus.DELIVERED and shipment.delivered_at is None
        )
        delivered_at = shipment.delivered_at
        if delivered_now:
            delivered_events = [
                e for e in history if e.shipment_status == ShipmentStatus.DELIVERED
            ]
            delivered_at = (
                min(e.timestamp for e in delivered_events)
                if delivered_events
                else time_now()
            )

        updated = shipment.model_copy(
            update={
                "events": history,
                "status": new_status,
                "sub_status": sub_status,
                "delivered_at": delivered_at,
            }
        )
        status_changed = new_status != old_status

        if fresh or status_changed or delivered_now:
            self.repository.save_sync(updated, fresh, delivered_now)

        if status_changed:
            self.publisher.publish(
                ORDER_STATUS_CHANGED,
                client_id=shipment.client_id,
                order_id=shipment.order_id,
                status=new_status.value,
            )

        if delivered_now:
            logger.info(
                msg="shipment {} delivered at {}".format(shipment.reference, delivered_at)
            )
            self.publisher.publish(
                SHIPMENT_DELIVERED,
                client_id=shipment.client_id,
                order_id=shipment.order_id,
                carrier=shipment.carrier.value,
                reference=shipment.reference,
                delivered_at=delivered_at.isoformat(),
            )

        return SyncResult(
            shipment=updated,
            new_events=len(fresh),
            status_changed=status_changed,
            delivered_now=delivered_now,
        )

    async def refresh(self, reference: str, carrier_name: str) -> GenericResponseModel:
        try:
            carrier = Carrier.parse(carrier_name)
            config = self.registry.resolve(carrier) if carrier is not None else None
            adapter = self.adapters.get(carrier) if carrier is not None else None

            if config is None or adapter is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message="Unknown shipping partner",
                )

            snapshot = await adapter.track(reference, config)

            if not snapshot.success:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.OK,
                    status=True,
                    data=snapshot,
                    message="Manual tracking check required",
                )

            shipment = self.repository.get_by_reference(carrier, reference)
            if shipment is not None:
                try:
                    result = self.sync(shipment, snapshot)
                    self.repository.commit()
                except Exception:
                    self.repository.rollback()
                    raise

                logger.info(
                    extra=context_user_data.get(),
                    msg="synced {}: {} new events, status {}".format(
                        reference, result.new_events, result.shipment.status.value
                    ),
                )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                data=snapshot,
                message="successful",
            )

        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Error syncing tracking: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Some error occurred while tracking, please try again",
            )

        except Exception as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Unhandled error tracking shipment: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Some error occurred while tracking, please try again",
            )
