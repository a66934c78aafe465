from typing import Optional

import httpx

from config import (
    CARRIER_HTTP_TIMEOUT,
    DTDC_API_KEY,
    DTDC_BASE_URL,
    DTDC_CUSTOMER_CODE,
    DTDC_TRACKING_TOKEN,
    DTDC_TRACKING_URL,
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


class Dtdc(CarrierAdapter):

    carrier = Carrier.DTDC
    status_mapping = status_mapping

    def __init__(
        self,
        client: httpx.AsyncClient = None,
        timeout: float = CARRIER_HTTP_TIMEOUT,
        base_url: str = DTDC_BASE_URL,
        api_key: str = DTDC_API_KEY,
        customer_code: str = DTDC_CUSTOMER_CODE,
        tracking_url: str = DTDC_TRACKING_URL,
        tracking_token: str = DTDC_TRACKING_TOKEN,
    ):
        super().__init__(client=client, timeout=timeout)
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.customer_code = customer_code
        self.tracking_url = tracking_url
        self.tracking_token = tracking_token

    async def _quote(self, package, route, zone, config) -> Optional[RateQuote]:
        return self.local_quote(package, zone, config)

    async def _book(self, shipment, config) -> CarrierBookingResponse:
        package = shipment.package

        consignment = {
            "customer_code": self.customer_code,
            "service_type_id": "PRIORITY"
            if package.service_type == ServiceType.EXPRESS
            else "B2C SMART EXPRESS",
            "load_type": "NON-DOCUMENT",
            "description": shipment.product_description,
            "dimension_unit": "cm",
            "length": package.length,
            "width": package.breadth,
            "height": package.height,
            "weight_unit": "kg",
            "weight": package.weight,
            "declared_value": package.declared_value,
            "num_pieces": shipment.quantity,
            "customer_reference_number": shipment.order_id,
            "cod_collection_mode": "cash" if package.is_cod else "",
            "cod_amount": package.declared_value if package.is_cod else "",
            "commodity_id": "99",
            "origin_details": {
                "name": shipment.pickup.name,
                "phone": shipment.pickup.phone,
                "address_line_1": shipment.pickup.address_line,
                "pincode": shipment.pickup.pincode,
                "city": shipment.pickup.city,
                "state": shipment.pickup.state,
            },
            "destination_details": {
                "name": shipment.delivery.name,
                "phone": shipment.delivery.phone,
                "address_line_1": shipment.delivery.address_line,
                "pincode": shipment.delivery.pincode,
                "city": shipment.delivery.city,
                "state": shipment.delivery.state,
            },
        }

        response = await self.request(
            "POST",
            self.base_url + "/api/customer/integration/consignment/softdata",
            headers={"api-key": self.api_key, "Content-Type": "application/json"},
            json={"consignments": [consignment]},
        )
        data = response.json() or {}

        results = data.get("data") or []
        result = results[0] if results else {}
        reference_number = result.get("reference_number")

        if not result.get("success") or not reference_number:
            return CarrierBookingResponse(
                success=False,
                message=result.get("message") or data.get("message") or "consignment rejected",
                raw=data,
            )

        return CarrierBookingResponse(
            success=True,
            awb=reference_number,
            tracking_url=config.tracking_link(reference_number),
            message="Consignment created",
            raw=data,
        )

    async def _track(self, reference, config) -> TrackingSnapshot:
        response = await self.request(
            "POST",
            self.tracking_url,
            headers={
                "X-Access-Token": self.tracking_token,
                "Content-Type": "application/json",
            },
            json={"trkType": "cnno", "strcnno": reference, "addtnlDtl": "Y"},
        )
        data = response.json() or {}

        if data.get("status") == "FAILED":
            raise CarrierError(self.carrier, "tracking failed for " + reference)

        tracking_data = data.get("trackDetails") or []
        if not tracking_data:
            raise CarrierError(self.carrier, "no track details for " + reference)

        events = []
        for activity in tracking_data:
            mapped = self.map_status(activity.get("strCode"))
            events.append(
                TrackingEvent(
                    status=mapped["sub_status"] if mapped else str(activity.get("strAction")),
                    shipment_status=status_of(mapped),
                    location=activity.get("strOrigin"),
                    timestamp=parse_datetime(
                        "{} {}".format(
                            activity.get("strActionDate", ""),
                            activity.get("strActionTime") or "0000",
                        )
                    ),
                    description=activity.get("sTrRemarks") or activity.get("strAction"),
                )
            )

        events.sort(key=lambda e: e.timestamp, reverse=True)

        # details arrive oldest first
        courier_status = tracking_data[-1].get("strCode", "")
        mapped = self.map_status(courier_status)

        return TrackingSnapshot(
            success=True,
            carrier=self.carrier,
            reference=reference,
            status=status_of(mapped),
            sub_status=mapped["sub_status"] if mapped else None,
            courier_status=courier_status,
            events=events,
        )
