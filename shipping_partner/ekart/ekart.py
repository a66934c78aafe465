from typing import Optional, Tuple

import httpx

from config import (
    CARRIER_HTTP_TIMEOUT,
    EKART_BASE_URL,
    EKART_CLIENT_ID,
    EKART_PASSWORD,
    EKART_TOKEN_EXPIRY_BUFFER,
    EKART_USERNAME,
)

# schema
from modules.serviceability.serviceability_schema import RateQuote, ServiceType
from modules.shipment.shipment_schema import (
    CarrierBookingResponse,
    TrackingEvent,
    TrackingSnapshot,
)
from modules.shipping_partner.shipping_partner_schema import Carrier

# data
from .status_mapping import status_mapping

from shipping_partner.base import CarrierAdapter, status_of
from utils.datetime import parse_datetime
from utils.exceptions import CarrierError


class Ekart(CarrierAdapter):
    """Quotes from the partner tariff; booking and tracking use a cached access token."""

    carrier = Carrier.EKART
    status_mapping = status_mapping

    def __init__(
        self,
        client: httpx.AsyncClient = None,
        timeout: float = CARRIER_HTTP_TIMEOUT,
        base_url: str = EKART_BASE_URL,
        client_id: str = EKART_CLIENT_ID,
        username: str = EKART_USERNAME,
        password: str = EKART_PASSWORD,
        expiry_buffer: int = EKART_TOKEN_EXPIRY_BUFFER,
    ):
        super().__init__(client=client, timeout=timeout)
        self.base_url = base_url.rstrip("/")
        self.client_id = client_id
        self.username = username
        self.password = password
        self.expiry_buffer = expiry_buffer

    async def acquire_token(self) -> Tuple[str, float]:
        response = await self.request(
            "POST",
            self.base_url + "/integrations/v2/auth/token/" + self.client_id,
            json={"username": self.username, "password": self.password},
        )
        data = response.json()
        expires_in = float(data.get("expires_in") or 0)
        return data.get("access_token"), expires_in - self.expiry_buffer

    async def _quote(self, package, route, zone, config) -> Optional[RateQuote]:
        return self.local_quote(package, zone, config)

    async def _book(self, shipment, config) -> CarrierBookingResponse:
        package = shipment.package

        body = {
            "order_number": shipment.order_id,
            "payment_mode": "COD" if package.is_cod else "Prepaid",
            "cod_amount": package.declared_value if package.is_cod else 0,
            "total_amount": package.declared_value,
            "weight": int(round(package.weight * 1000)),
            "length": package.length,
            "width": package.breadth,
            "height": package.height,
            "products_desc": shipment.product_description,
            "quantity": shipment.quantity,
            "category_of_goods": "General",
            "service_type": "EXPRESS"
            if package.service_type == ServiceType.EXPRESS
            else "SURFACE",
            "consignee_name": shipment.delivery.name,
            "consignee_phone": shipment.delivery.phone,
            "drop_location": {
                "address": shipment.delivery.address_line,
                "city": shipment.delivery.city,
                "state": shipment.delivery.state,
                "pin": shipment.delivery.pincode,
            },
            "pickup_location": {
                "name": shipment.pickup.name,
                "address": shipment.pickup.address_line,
                "city": shipment.pickup.city,
                "state": shipment.pickup.state,
                "pin": shipment.pickup.pincode,
                "phone": shipment.pickup.phone,
            },
        }

        response = await self.authorized_request(
            "PUT", self.base_url + "/api/v1/package/create", json=body
        )
        data = response.json()

        tracking_id = data.get("tracking_id")
        if not data.get("status") or not tracking_id:
            return CarrierBookingResponse(
                success=False, message=data.get("remark") or "booking rejected", raw=data
            )

        return CarrierBookingResponse(
            success=True,
            awb=tracking_id,
            tracking_url=config.tracking_link(tracking_id),
            message=data.get("remark") or "Shipment created",
            raw=data,
        )

    async def _track(self, reference, config) -> TrackingSnapshot:
        response = await self.authorized_request(
            "GET", self.base_url + "/api/v1/track/" + reference
        )
        data = response.json()

        tracking_data = data.get(reference) or data
        history = tracking_data.get("history") or []
        if not history:
            raise CarrierError(self.carrier, "no tracking history")

        events = []
        for entry in history:
            mapped = self.map_status(entry.get("status"))
            events.append(
                TrackingEvent(
                    status=mapped["sub_status"] if mapped else str(entry.get("status")),
                    shipment_status=status_of(mapped),
                    location=entry.get("hub_name") or entry.get("city"),
                    timestamp=parse_datetime(entry["event_date"]),
                    description=entry.get("public_description"),
                )
            )

        events.sort(key=lambda e: e.timestamp, reverse=True)
        latest = max(history, key=lambda entry: parse_datetime(entry["event_date"]))
        mapped = self.map_status(latest.get("status"))

        return TrackingSnapshot(
            success=True,
            carrier=self.carrier,
            reference=reference,
            status=status_of(mapped),
            sub_status=mapped["sub_status"] if mapped else None,
            courier_status=latest.get("status"),
            events=events,
        )
