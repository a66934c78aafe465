from enum import Enum
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from modules.serviceability.serviceability_schema import (
    PINCODE_PATTERN,
    Package,
    RateQuote,
)
from modules.shipping_partner.shipping_partner_schema import Carrier


class ShipmentStatus(str, Enum):
    BOOKED = "booked"
    IN_TRANSIT = "in transit"
    DELIVERED = "delivered"
    EXCEPTION = "exception"
    RETURNED = "returned"


TERMINAL_STATUSES = (ShipmentStatus.DELIVERED, ShipmentStatus.RETURNED)


class BookingType(str, Enum):
    AUTOMATED = "AUTOMATED"
    MANUAL_REQUIRED = "MANUAL_REQUIRED"


class Address(BaseModel):
    name: str
    phone: str
    address_line: str
    city: str
    state: str
    pincode: str = Field(pattern=PINCODE_PATTERN)
    email: Optional[str] = None


class ShipmentPayload(BaseModel):
    order_id: str
    pickup: Address
    delivery: Address
    package: Package
    product_description: str = "General goods"
    quantity: int = Field(default=1, ge=1)
    invoice_number: Optional[str] = None


class BookingRequestModel(BaseModel):
    selected_quote: RateQuote
    shipment: ShipmentPayload


# what an adapter hands back from book(); never raised past the adapter
class CarrierBookingResponse(BaseModel):
    success: bool
    awb: Optional[str] = None
    tracking_url: Optional[str] = None
    message: Optional[str] = None
    raw: Any = None


class LedgerEntry(BaseModel):
    actor_id: int
    amount: Decimal
    reason: str
    reference: Optional[str] = None
    closing_balance: Decimal
    created_at: datetime


class BookingResult(BaseModel):
    success: bool = True
    booking_type: BookingType
    carrier: Carrier
    order_id: str
    awb: Optional[str] = None
    tracking_url: Optional[str] = None
    manual_reference: Optional[str] = None
    instructions: Optional[Dict[str, str]] = None
    estimated_delivery: datetime
    amount_charged: Decimal
    ledger_entry: Optional[LedgerEntry] = None

    @property
    def reference(self) -> str:
        return self.awb or self.manual_reference


class TrackingEvent(BaseModel):
    status: str
    shipment_status: Optional[ShipmentStatus] = None
    location: Optional[str] = None
    timestamp: datetime
    description: Optional[str] = None

    @property
    def key(self):
        return (self.timestamp, self.status)


class TrackingSnapshot(BaseModel):
    success: bool
    carrier: Carrier
    reference: str
    status: Optional[ShipmentStatus] = None
    sub_status: Optional[str] = None
    courier_status: Optional[str] = None
    events: List[TrackingEvent] = []
    manual_check_required: bool = False
    instructions: Optional[Dict[str, str]] = None
    message: Optional[str] = None


class TrackingRequestModel(BaseModel):
    reference: str = Field(min_length=1)
    carrier: str


class ShipmentRecord(BaseModel):
    """A shipment as the tracking synchronizer sees it."""

    id: Optional[int] = None
    order_id: str
    client_id: int
    carrier: Carrier
    reference: str
    booking_type: BookingType
    status: ShipmentStatus = ShipmentStatus.BOOKED
    sub_status: Optional[str] = None
    tracking_url: Optional[str] = None
    amount_charged: Decimal = Decimal("0")
    events: List[TrackingEvent] = []
    estimated_delivery: Optional[datetime] = None
    delivered_at: Optional[datetime] = None


class SyncResult(BaseModel):
    shipment: ShipmentRecord
    new_events: int
    status_changed: bool
    delivered_now: bool
