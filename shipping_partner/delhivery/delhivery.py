import asyncio
import json
from collections import deque
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, List, Optional

import httpx

from config import (
    CARRIER_HTTP_TIMEOUT,
    DELHIVERY_API_TOKEN,
    DELHIVERY_BASE_URL,
    DELHIVERY_CLIENT_NAME,
    DELHIVERY_WAYBILL_BATCH_MAX,
)
from logger import logger

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
from .delhivery_b2b import DelhiveryB2B

from shipping_partner.base import CarrierAdapter, status_of
from utils.datetime import parse_datetime
from utils.exceptions import CarrierError


MIN_WAYBILL_FETCH = 1000


class WaybillPool:
    """
    Pre-fetched Delhivery waybills. Refills with max(2 x needed, 1000) numbers,
    capped at the carrier's batch limit, whenever it cannot serve a request.
    """

    def __init__(self, batch_max: int = DELHIVERY_WAYBILL_BATCH_MAX):
        self.batch_max = batch_max
        self._waybills = deque()
        self._lock = asyncio.Lock()

    def __len__(self):
        return len(self._waybills)

    async def take(self, fetch: Callable, count: int = 1) -> List[str]:
        async with self._lock:
            if len(self._waybills) < count:
                wanted = min(max(count * 2, MIN_WAYBILL_FETCH), self.batch_max)
                known = set(self._waybills)
                fresh = await fetch(wanted)
                self._waybills.extend(w for w in fresh if w and w not in known)
                logger.info(msg="delhivery waybill pool refilled to {}".format(len(self._waybills)))

            if len(self._waybills) < count:
                raise CarrierError(Carrier.DELHIVERY, "waybill pool exhausted")

            return [self._waybills.popleft() for _ in range(count)]

    def give_back(self, waybill: str):
        self._waybills.appendleft(waybill)


class Delhivery(CarrierAdapter):

    carrier = Carrier.DELHIVERY
    status_mapping = status_mapping
    supports_b2b = True

    def __init__(
        self,
        client: httpx.AsyncClient = None,
        timeout: float = CARRIER_HTTP_TIMEOUT,
        base_url: str = DELHIVERY_BASE_URL,
        token: str = DELHIVERY_API_TOKEN,
        client_name: str = DELHIVERY_CLIENT_NAME,
        waybill_pool: WaybillPool = None,
        b2b: DelhiveryB2B = None,
    ):
        super().__init__(client=client, timeout=timeout)
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.client_name = client_name
        self.waybill_pool = waybill_pool or WaybillPool()
        self.b2b = b2b or DelhiveryB2B(client=client, timeout=timeout)

    # API URL'S
    @property
    def rates_url(self):
        return self.base_url + "/api/kinko/v1/invoice/charges/.json"

    @property
    def waybill_url(self):
        return self.base_url + "/waybill/api/bulk/json/"

    @property
    def create_order_url(self):
        return self.base_url + "/api/cmu/create.json"

    @property
    def track_order_url(self):
        return self.base_url + "/api/v1/packages/json/"

    def headers(self, content_type="application/json"):
        return {
            "Authorization": "Token " + self.token,
            "Content-Type": content_type,
            "Accept": "application/json",
        }

    # ----- quote -----

    async def _quote(self, package, route, zone, config) -> Optional[RateQuote]:
        params = {
            "md": "E" if package.service_type == ServiceType.EXPRESS else "S",
            "ss": "Delivered",
            "o_pin": route.origin_pincode,
            "d_pin": route.destination_pincode,
            "cgm": int(round(package.chargeable_weight * 1000)),
            "pt": "COD" if package.is_cod else "Pre-paid",
            "cod": package.declared_value if package.is_cod else 0,
        }

        response = await self.request(
            "GET", self.rates_url, params=params, headers=self.headers()
        )
        data = response.json()

        charges = data[0] if isinstance(data, list) and data else data
        if not isinstance(charges, dict) or charges.get("total_amount") is None:
            raise CarrierError(self.carrier, "no charges in rate response")

        total = Decimal(str(charges["total_amount"]))
        base = Decimal(str(charges.get("charge_DL") or 0))
        cod_charge = Decimal(str(charges.get("charge_COD") or 0))
        fuel = Decimal(str(charges.get("charge_FSC") or 0))
        service = max(Decimal("0"), total - base - cod_charge - fuel)

        return RateQuote(
            carrier=self.carrier,
            carrier_name=config.name,
            service_type=package.service_type,
            mode=config.default_mode,
            zone=zone,
            total=total.quantize(Decimal("1"), rounding=ROUND_HALF_UP),
            breakdown=RateBreakdown(
                base=base, service_charge=service, cod_charge=cod_charge, fuel_surcharge=fuel
            ),
            estimated_days=config.estimated_days,
            chargeable_weight=package.chargeable_weight,
            source=QuoteSource.API,
        )

    async def quote_b2b(self, package, route, zone, config) -> Optional[RateQuote]:
        return await self.b2b.quote(package, route, zone, config)

    # ----- book -----

    async def fetch_waybills(self, count: int) -> List[str]:
        response = await self.request(
            "GET",
            self.waybill_url,
            params={"cl": self.client_name, "count": count},
            headers=self.headers(),
        )
        data = response.json()

        if isinstance(data, str):
            return [w.strip() for w in data.split(",") if w.strip()]
        if isinstance(data, list):
            return [str(w) for w in data]
        raise CarrierError(self.carrier, "unexpected waybill response")

    async def _book(self, shipment, config) -> CarrierBookingResponse:
        (waybill,) = await self.waybill_pool.take(self.fetch_waybills, 1)

        package = shipment.package
        consignee = shipment.delivery
        pickup = shipment.pickup

        body = {
            "shipments": [
                {
                    "waybill": waybill,
                    "name": consignee.name,
                    "add": consignee.address_line,
                    "pin": consignee.pincode,
                    "city": consignee.city,
                    "state": consignee.state,
                    "country": "India",
                    "phone": consignee.phone,
                    "order": shipment.order_id,
                    "payment_mode": "COD" if package.is_cod else "Prepaid",
                    "cod_amount": package.declared_value if package.is_cod else 0,
                    "total_amount": package.declared_value,
                    "products_desc": shipment.product_description,
                    "quantity": str(shipment.quantity),
                    "weight": int(round(package.weight * 1000)),
                    "shipment_length": package.length,
                    "shipment_width": package.breadth,
                    "shipment_height": package.height,
                    "shipping_mode": "Express"
                    if package.service_type == ServiceType.EXPRESS
                    else "Surface",
                    "return_pin": pickup.pincode,
                    "return_city": pickup.city,
                    "return_state": pickup.state,
                    "return_add": pickup.address_line,
                    "return_phone": pickup.phone,
                }
            ],
            "pickup_location": {"name": pickup.name},
        }

        response = await self.request(
            "POST",
            self.create_order_url,
            content="format=json&data=" + json.dumps(body),
            headers=self.headers("application/x-www-form-urlencoded"),
        )
        data = response.json()

        packages = data.get("packages") or []
        first = packages[0] if packages else {}

        if "success" not in str(first.get("status", "")).lower():
            self.waybill_pool.give_back(waybill)
            remarks = first.get("remarks") or data.get("rmk") or "booking rejected"
            if isinstance(remarks, list):
                remarks = ", ".join(str(r) for r in remarks)
            return CarrierBookingResponse(success=False, message=str(remarks), raw=data)

        awb = first.get("waybill") or waybill
        return CarrierBookingResponse(
            success=True,
            awb=awb,
            tracking_url=config.tracking_link(awb),
            message="Shipment created",
            raw=data,
        )

    # ----- track -----

    async def _track(self, reference, config) -> TrackingSnapshot:
        response = await self.request(
            "GET",
            self.track_order_url,
            params={"waybill": reference},
            headers=self.headers(),
        )
        data = response.json()

        shipments = data.get("ShipmentData") or []
        if not shipments:
            raise CarrierError(self.carrier, data.get("Error") or "no shipment data")

        shipment = shipments[0]["Shipment"]

        events = []
        for scan in shipment.get("Scans") or []:
            detail = scan.get("ScanDetail", scan)
            mapped = self.map_status(detail.get("Scan"), detail.get("ScanType"))
            events.append(
                TrackingEvent(
                    status=mapped["sub_status"] if mapped else str(detail.get("Scan")),
                    shipment_status=status_of(mapped),
                    location=detail.get("ScannedLocation"),
                    timestamp=parse_datetime(detail["ScanDateTime"]),
                    description=detail.get("Instructions"),
                )
            )

        current = shipment.get("Status") or {}
        mapped = self.map_status(current.get("Status"), current.get("StatusType"))

        return TrackingSnapshot(
            success=True,
            carrier=self.carrier,
            reference=reference,
            status=status_of(mapped),
            sub_status=mapped["sub_status"] if mapped else None,
            courier_status=current.get("Status"),
            events=sorted(events, key=lambda e: e.timestamp, reverse=True),
        )
