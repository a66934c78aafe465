from typing import Optional

import httpx

from config import (
    BLUEDART_BASE_URL,
    BLUEDART_CUSTOMER_CODE,
    BLUEDART_LICENCE_KEY,
    BLUEDART_LOGIN_ID,
    CARRIER_HTTP_TIMEOUT,
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
from .status_mapping import scan_type_fallback, status_mapping

from shipping_partner.base import CarrierAdapter, status_of
from utils.datetime import parse_datetime
from utils.exceptions import CarrierError


class Bluedart(CarrierAdapter):
    """Quotes from the partner tariff; waybill and tracking calls carry the licence key."""

    carrier = Carrier.BLUEDART
    status_mapping = status_mapping

    def __init__(
        self,
        client: httpx.AsyncClient = None,
        timeout: float = CARRIER_HTTP_TIMEOUT,
        base_url: str = BLUEDART_BASE_URL,
        login_id: str = BLUEDART_LOGIN_ID,
        licence_key: str = BLUEDART_LICENCE_KEY,
        customer_code: str = BLUEDART_CUSTOMER_CODE,
    ):
        super().__init__(client=client, timeout=timeout)
        self.base_url = base_url.rstrip("/")
        self.login_id = login_id
        self.licence_key = licence_key
        self.customer_code = customer_code

    def profile(self) -> dict:
        return {
            "LoginID": self.login_id,
            "LicenceKey": self.licence_key,
            "Api_type": "S",
        }

    def map_scan(self, scan_type: str, scan_code: str) -> Optional[dict]:
        mapped = self.map_status(str(scan_code).strip(), scan_type=scan_type)
        return mapped or scan_type_fallback.get(scan_type)

    async def _quote(self, package, route, zone, config) -> Optional[RateQuote]:
        return self.local_quote(package, zone, config)

    async def _book(self, shipment, config) -> CarrierBookingResponse:
        package = shipment.package

        body = {
            "Request": {
                "Consignee": {
                    "ConsigneeName": shipment.delivery.name,
                    "ConsigneeAddress1": shipment.delivery.address_line,
                    "ConsigneePincode": shipment.delivery.pincode,
                    "ConsigneeMobile": shipment.delivery.phone,
                },
                "Shipper": {
                    "CustomerCode": self.customer_code,
                    "CustomerName": shipment.pickup.name,
                    "CustomerAddress1": shipment.pickup.address_line,
                    "CustomerPincode": shipment.pickup.pincode,
                    "CustomerMobile": shipment.pickup.phone,
                    "OriginArea": shipment.pickup.city[:3].upper(),
                },
                "Services": {
                    "ProductCode": "A",
                    "SubProductCode": "C" if package.is_cod else "P",
                    "ProductType": 1,
                    "PieceCount": shipment.quantity,
                    "ActualWeight": package.weight,
                    "DeclaredValue": package.declared_value,
                    "CollectableAmount": package.declared_value if package.is_cod else 0,
                    "CreditReferenceNo": shipment.order_id,
                    "InvoiceNo": shipment.invoice_number or shipment.order_id,
                    "ItemDescription": shipment.product_description,
                    "Dimensions": [
                        {
                            "Length": package.length,
                            "Breadth": package.breadth,
                            "Height": package.height,
                            "Count": 1,
                        }
                    ],
                    "PDFOutputNotRequired": True,
                    "RegisterPickup": package.service_type == ServiceType.EXPRESS,
                },
            },
            "Profile": self.profile(),
        }

        response = await self.request(
            "POST", self.base_url + "/waybill/v1/GenerateWayBill", json=body
        )
        result = (response.json() or {}).get("GenerateWayBillResult") or {}

        awb = result.get("AWBNo")
        if result.get("IsError") or not awb:
            statuses = result.get("Status") or []
            message = "; ".join(
                str(s.get("StatusInformation")) for s in statuses if s.get("StatusInformation")
            )
            return CarrierBookingResponse(
                success=False, message=message or "waybill not generated", raw=result
            )

        return CarrierBookingResponse(
            success=True,
            awb=str(awb),
            tracking_url=config.tracking_link(str(awb)),
            message="Waybill generated",
            raw=result,
        )

    async def _track(self, reference, config) -> TrackingSnapshot:
        params = {
            "handler": "tnt",
            "loginid": self.login_id,
            "numbers": reference,
            "format": "json",
            "lickey": self.licence_key,
            "scan": 1,
            "action": "custawbquery",
            "verno": 1,
            "awb": "awb",
        }
        response = await self.request(
            "GET", self.base_url + "/tracking/v1/shipment", params=params
        )
        data = response.json() or {}

        shipments = (data.get("ShipmentData") or {}).get("Shipment") or []
        scans = shipments[0].get("Scans") if shipments else None
        if not scans:
            raise CarrierError(self.carrier, "no scans for " + reference)

        events = []
        for activity in scans:
            sd = activity.get("ScanDetail") or {}
            mapped = self.map_scan(sd.get("ScanType"), sd.get("ScanCode"))
            events.append(
                TrackingEvent(
                    status=mapped["sub_status"] if mapped else str(sd.get("Scan")),
                    shipment_status=status_of(mapped),
                    location=sd.get("ScannedLocation"),
                    timestamp=parse_datetime(
                        "{} {}".format(
                            str(sd.get("ScanDate", "")).strip(),
                            str(sd.get("ScanTime") or "00:00").strip(),
                        )
                    ),
                    description=sd.get("Scan"),
                )
            )

        events.sort(key=lambda e: e.timestamp, reverse=True)
        latest = scans[0].get("ScanDetail") or {}
        mapped = self.map_scan(latest.get("ScanType"), latest.get("ScanCode"))

        return TrackingSnapshot(
            success=True,
            carrier=self.carrier,
            reference=reference,
            status=status_of(mapped),
            sub_status=mapped["sub_status"] if mapped else None,
            courier_status="{}-{}".format(latest.get("ScanType"), latest.get("ScanCode")),
            events=events,
        )
