from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

import httpx

from config import (
    CARRIER_HTTP_TIMEOUT,
    XPRESSBEES_BASE_URL,
    XPRESSBEES_EMAIL,
    XPRESSBEES_PASSWORD,
    XPRESSBEES_TOKEN_TTL,
)

# schema
from modules.serviceability.serviceability_schema import (
    QuoteSource,
    RateBreakdown,
    RateQuote,
    ServiceType,
)
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


class Xpressbees(CarrierAdapter):

    carrier = Carrier.XPRESSBEES
    status_mapping = status_mapping

    def __init__(
        self,
        client: httpx.AsyncClient = None,
        timeout: float = CARRIER_HTTP_TIMEOUT,
        base_url: str = XPRESSBEES_BASE_URL,
        email: str = XPRESSBEES_EMAIL,
        password: str = XPRESSBEES_PASSWORD,
        token_ttl: int = XPRESSBEES_TOKEN_TTL,
    ):
        super().__init__(client=client, timeout=timeout)
        self.base_url = base_url.rstrip("/")
        self.email = email
        self.password = password
        self.token_ttl = token_ttl

    async def acquire_token(self) -> Tuple[str, float]:
        response = await self.request(
            "POST",
            self.base_url + "/api/users/login",
            json={"email": self.email, "password": self.password},
        )
        data = response.json()

        if not data.get("status"):
            raise CarrierError(self.carrier, data.get("message") or "login rejected")

        return data.get("data"), self.token_ttl

    # ----- quote -----

    async def _quote(self, package, route, zone, config) -> Optional[RateQuote]:
        payload = {
            "origin": route.origin_pincode,
            "destination": route.destination_pincode,
            "payment_type": "cod" if package.is_cod else "prepaid",
            "order_amount": package.declared_value,
            "weight": int(round(package.chargeable_weight * 1000)),
            "length": package.length,
            "breadth": package.breadth,
            "height": package.height,
        }

        response = await self.authorized_request(
            "POST", self.base_url + "/api/courier/serviceability", json=payload
        )
        data = response.json()

        services = data.get("data") or []
        if not data.get("status") or not services:
            raise CarrierError(self.carrier, data.get("message") or "route not serviceable")

        if package.service_type == ServiceType.EXPRESS:
            air = [s for s in services if "air" in str(s.get("name", "")).lower()]
            services = air or services

        service = min(services, key=lambda s: Decimal(str(s.get("total_charges") or 0)))

        total = Decimal(str(service["total_charges"]))
        freight = Decimal(str(service.get("freight_charges") or 0))
        cod_charge = Decimal(str(service.get("cod_charges") or 0))

        return RateQuote(
            carrier=self.carrier,
            carrier_name=config.name,
            service_type=package.service_type,
            mode=config.default_mode,
            zone=zone,
            total=total.quantize(Decimal("1"), rounding=ROUND_HALF_UP),
            breakdown=RateBreakdown(
                base=freight,
                cod_charge=cod_charge,
                service_charge=max(Decimal("0"), total - freight - cod_charge),
            ),
            estimated_days=config.estimated_days,
            chargeable_weight=package.chargeable_weight,
            source=QuoteSource.API,
        )

    # ----- book -----

    async def _book(self, shipment, config) -> CarrierBookingResponse:
        package = shipment.package

        payload = {
            "order_number": shipment.order_id,
            "payment_type": "cod" if package.is_cod else "prepaid",
            "order_amount": package.declared_value,
            "collectable_amount": package.declared_value if package.is_cod else 0,
            "package_weight": int(round(package.weight * 1000)),
            "package_length": package.length,
            "package_breadth": package.breadth,
            "package_height": package.height,
            "request_auto_pickup": "yes",
            "consignee": {
                "name": shipment.delivery.name,
                "address": shipment.delivery.address_line,
                "city": shipment.delivery.city,
                "state": shipment.delivery.state,
                "pincode": shipment.delivery.pincode,
                "phone": shipment.delivery.phone,
            },
            "pickup": {
                "warehouse_name": shipment.pickup.name,
                "name": shipment.pickup.name,
                "address": shipment.pickup.address_line,
                "city": shipment.pickup.city,
                "state": shipment.pickup.state,
                "pincode": shipment.pickup.pincode,
                "phone": shipment.pickup.phone,
            },
            "order_items": [
                {
                    "name": shipment.product_description,
                    "qty": str(shipment.quantity),
                    "price": package.declared_value,
                }
            ],
        }

        response = await self.authorized_request(
            "POST", self.base_url + "/api/shipments2", json=payload
        )
        data = response.json()

        result = data.get("data") or {}
        awb = result.get("awb_number")

        if not data.get("status") or not awb:
            return CarrierBookingResponse(
                success=False,
                message=data.get("message") or "booking rejected",
                raw=data,
            )

        return CarrierBookingResponse(
            success=True,
            awb=str(awb),
            tracking_url=config.tracking_link(str(awb)),
            message="Shipment created",
            raw=data,
        )

    # ----- track -----

    async def _track(self, reference, config) -> TrackingSnapshot:
        response = await self.authorized_request(
            "GET", self.base_url + "/api/shipments2/track/" + reference
        )
        data = response.json()

        result = data.get("data")
        if not data.get("status") or not result:
            raise CarrierError(self.carrier, data.get("message") or "no tracking data")

        events = []
        for entry in result.get("history") or []:
            mapped = self.map_status(entry.get("status_code"))
            events.append(
                TrackingEvent(
                    status=mapped["sub_status"] if mapped else str(entry.get("status_code")),
                    shipment_status=status_of(mapped),
                    location=entry.get("location"),
                    timestamp=parse_datetime(entry["event_time"]),
                    description=entry.get("message"),
                )
            )

        mapped = self.map_status(result.get("status"))

        return TrackingSnapshot(
            success=True,
            carrier=self.carrier,
            reference=reference,
            status=status_of(mapped),
            sub_status=mapped["sub_status"] if mapped else None,
            courier_status=result.get("status"),
            events=sorted(events, key=lambda e: e.timestamp, reverse=True),
        )
