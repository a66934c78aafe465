from collections import defaultdict
from datetime import datetime
from typing import Any, Callable, Dict, List

from pydantic import BaseModel, Field

from database.db import time_now
from logger import logger


SHIPMENT_BOOKED = "shipment.booked"
SHIPMENT_MANUAL_REQUIRED = "shipment.manual_required"
SHIPMENT_DELIVERED = "shipment.delivered"
ORDER_STATUS_CHANGED = "order.status_changed"


class DomainEvent(BaseModel):
    name: str
    payload: Dict[str, Any] = {}
    occurred_at: datetime = Field(default_factory=time_now)


class EventPublisher:
    """
    In-process publisher for domain events.

    Handlers run synchronously in subscription order. A failing handler is logged
    and does not stop the others, delivery (email/SMS) belongs to subscribers.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Callable[[DomainEvent], None]]] = defaultdict(
            list
        )

    def subscribe(self, name: str, handler: Callable[[DomainEvent], None]):
        self._handlers[name].append(handler)

    def publish(self, name: str, **payload) -> DomainEvent:
        event = DomainEvent(name=name, payload=payload)
        logger.info(msg="event {}: {}".format(name, payload))

        for handler in self._handlers.get(name, []):
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    msg="event handler for {} failed: {}".format(name, str(e))
                )

        return event


event_publisher = EventPublisher()
