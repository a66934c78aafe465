import json
from datetime import datetime
from decimal import Decimal

import httpx
import pytest
import pytz

from data.partner_defaults import DEFAULT_PARTNER_CONFIGS
from modules.serviceability.serviceability_schema import (
    Package,
    PaymentMode,
    QuoteSource,
    Route,
    Zone,
)
from modules.shipment.shipment_schema import Address, ShipmentPayload, ShipmentStatus
from modules.shipping_partner.shipping_partner_schema import Carrier
from shipping_partner.bluedart.bluedart import Bluedart
from shipping_partner.delhivery.delhivery import Delhivery, WaybillPool
from shipping_partner.delhivery.delhivery_b2b import DelhiveryB2B
from shipping_partner.dtdc.dtdc import Dtdc
from shipping_partner.ekart.ekart import Ekart
from shipping_partner.xpressbees.xpressbees import Xpressbees
from utils.exceptions import CarrierError


ROUTE = Route(origin_pincode="110001", destination_pincode="400001")

SHIPMENT = ShipmentPayload(
    order_id="ORD-9",
    pickup=Address(
        name="Warehouse",
        phone="9999999999",
        address_line="12 Connaught Place",
        city="New Delhi",
        state="Delhi",
        pincode="110001",
    ),
    delivery=Address(
        name="Asha",
        phone="8888888888",
        address_line="4 Marine Drive",
        city="Mumbai",
        state="Maharashtra",
        pincode="400001",
    ),
    package=Package(weight=1.5, declared_value=1200, payment_mode=PaymentMode.COD),
)


def mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class Recorder:
    """Routes requests by path and keeps every request seen."""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for path, respond in self.routes.items():
            if request.url.path.endswith(path):
                return respond(request)
        return httpx.Response(404, json={"message": "no route"})

    def count(self, path):
        return sum(1 for r in self.requests if r.url.path.endswith(path))


def xpressbees_serviceability(request):
    return httpx.Response(
        200,
        json={
            "status": True,
            "data": [
                {"name": "Surface 0.5kg", "total_charges": 98.4, "freight_charges": 60, "cod_charges": 30},
                {"name": "Air 0.5kg", "total_charges": 140, "freight_charges": 100, "cod_charges": 30},
            ],
        },
    )


def xpressbees_login(request):
    return httpx.Response(200, json={"status": True, "data": "token-1"})


# ----- xpressbees -----


async def test_xpressbees_token_is_reused():
    recorder = Recorder(
        {
            "/api/users/login": xpressbees_login,
            "/api/courier/serviceability": xpressbees_serviceability,
        }
    )
    adapter = Xpressbees(client=mock_client(recorder), base_url="https://xb.test")
    config = DEFAULT_PARTNER_CONFIGS[Carrier.XPRESSBEES]

    first = await adapter.quote(Package(weight=1.5), ROUTE, Zone.REST_OF_INDIA, config)
    second = await adapter.quote(Package(weight=1.5), ROUTE, Zone.REST_OF_INDIA, config)

    assert first.total == Decimal("98")
    assert first.source == QuoteSource.API
    assert second.total == first.total
    assert recorder.count("/api/users/login") == 1
    assert recorder.requests[1].headers["Authorization"] == "Bearer token-1"


async def test_xpressbees_rejected_token_is_reacquired_once():
    calls = {"quote": 0}

    def serviceability(request):
        calls["quote"] += 1
        if calls["quote"] == 1:
            return httpx.Response(401, json={"message": "expired"})
        return xpressbees_serviceability(request)

    recorder = Recorder(
        {"/api/users/login": xpressbees_login, "/api/courier/serviceability": serviceability}
    )
    adapter = Xpressbees(client=mock_client(recorder), base_url="https://xb.test")

    quote = await adapter.quote(
        Package(weight=1), ROUTE, Zone.REST_OF_INDIA, DEFAULT_PARTNER_CONFIGS[Carrier.XPRESSBEES]
    )

    assert quote is not None
    assert recorder.count("/api/users/login") == 2
    assert calls["quote"] == 2


async def test_quote_server_error_returns_none():
    recorder = Recorder(
        {
            "/api/users/login": xpressbees_login,
            "/api/courier/serviceability": lambda r: httpx.Response(500, text="oops"),
        }
    )
    adapter = Xpressbees(client=mock_client(recorder), base_url="https://xb.test")

    quote = await adapter.quote(
        Package(weight=1), ROUTE, Zone.REST_OF_INDIA, DEFAULT_PARTNER_CONFIGS[Carrier.XPRESSBEES]
    )

    assert quote is None


async def test_xpressbees_express_prefers_air_service():
    recorder = Recorder(
        {
            "/api/users/login": xpressbees_login,
            "/api/courier/serviceability": xpressbees_serviceability,
        }
    )
    adapter = Xpressbees(client=mock_client(recorder), base_url="https://xb.test")

    quote = await adapter.quote(
        Package(weight=1, service_type="express"),
        ROUTE,
        Zone.REST_OF_INDIA,
        DEFAULT_PARTNER_CONFIGS[Carrier.XPRESSBEES],
    )

    assert quote.total == Decimal("140")


async def test_xpressbees_booking_success():
    def shipments(request):
        assert request.headers["Authorization"] == "Bearer token-1"
        body = json.loads(request.content)
        assert body["payment_type"] == "cod"
        assert body["package_weight"] == 1500
        return httpx.Response(
            200, json={"status": True, "data": {"awb_number": 14231234567890}}
        )

    recorder = Recorder({"/api/users/login": xpressbees_login, "/api/shipments2": shipments})
    adapter = Xpressbees(client=mock_client(recorder), base_url="https://xb.test")

    response = await adapter.book(SHIPMENT, DEFAULT_PARTNER_CONFIGS[Carrier.XPRESSBEES])

    assert response.success
    assert response.awb == "14231234567890"
    assert response.tracking_url.endswith("awbNo=14231234567890")


async def test_xpressbees_booking_without_awb_is_rejected():
    recorder = Recorder(
        {
            "/api/users/login": xpressbees_login,
            "/api/shipments2": lambda r: httpx.Response(
                200, json={"status": False, "message": "Duplicate order id"}
            ),
        }
    )
    adapter = Xpressbees(client=mock_client(recorder), base_url="https://xb.test")

    response = await adapter.book(SHIPMENT, DEFAULT_PARTNER_CONFIGS[Carrier.XPRESSBEES])

    assert not response.success
    assert response.awb is None
    assert response.message == "Duplicate order id"


# ----- delhivery -----


async def test_waybill_pool_refills_in_batches():
    fetches = []

    async def fetch(count):
        fetches.append(count)
        start = len(fetches) * 100
        return [str(start + i) for i in range(count)]

    pool = WaybillPool(batch_max=5)

    taken = [(await pool.take(fetch))[0] for _ in range(5)]
    assert fetches == [5]
    assert taken == ["100", "101", "102", "103", "104"]
    assert len(pool) == 0

    await pool.take(fetch)
    assert fetches == [5, 5]


async def test_waybill_pool_exhausted_raises():
    async def fetch(count):
        return []

    with pytest.raises(CarrierError):
        await WaybillPool(batch_max=5).take(fetch)


async def test_delhivery_booking_returns_waybill_on_rejection():
    def create(request):
        return httpx.Response(
            200, json={"packages": [{"status": "Fail", "remarks": ["Pincode not serviceable"]}]}
        )

    recorder = Recorder(
        {
            "/waybill/api/bulk/json/": lambda r: httpx.Response(200, json="W1,W2"),
            "/api/cmu/create.json": create,
        }
    )
    pool = WaybillPool(batch_max=2)
    adapter = Delhivery(client=mock_client(recorder), base_url="https://dl.test", waybill_pool=pool)

    response = await adapter.book(SHIPMENT, DEFAULT_PARTNER_CONFIGS[Carrier.DELHIVERY])

    assert not response.success
    assert response.message == "Pincode not serviceable"
    assert len(pool) == 2


async def test_delhivery_booking_success():
    def create(request):
        body = request.content.decode()
        assert body.startswith("format=json&data=")
        data = json.loads(body[len("format=json&data="):])
        assert data["shipments"][0]["payment_mode"] == "COD"
        return httpx.Response(
            200, json={"packages": [{"status": "Success", "waybill": data["shipments"][0]["waybill"]}]}
        )

    recorder = Recorder(
        {
            "/waybill/api/bulk/json/": lambda r: httpx.Response(200, json="W1,W2"),
            "/api/cmu/create.json": create,
        }
    )
    adapter = Delhivery(
        client=mock_client(recorder), base_url="https://dl.test", waybill_pool=WaybillPool(batch_max=2)
    )

    response = await adapter.book(SHIPMENT, DEFAULT_PARTNER_CONFIGS[Carrier.DELHIVERY])

    assert response.success
    assert response.awb == "W1"
    assert response.tracking_url == "https://www.delhivery.com/track/package/W1"


async def test_delhivery_tracking_parse():
    payload = {
        "ShipmentData": [
            {
                "Shipment": {
                    "Status": {"Status": "Delivered", "StatusType": "DL"},
                    "Scans": [
                        {
                            "ScanDetail": {
                                "Scan": "Manifested",
                                "ScanType": "UD",
                                "ScannedLocation": "Delhi Hub",
                                "ScanDateTime": "2024-03-01T10:00:00",
                            }
                        },
                        {
                            "ScanDetail": {
                                "Scan": "Delivered",
                                "ScanType": "DL",
                                "ScannedLocation": "Mumbai",
                                "ScanDateTime": "2024-03-03T15:30:00",
                            }
                        },
                    ],
                }
            }
        ]
    }
    recorder = Recorder({"/api/v1/packages/json/": lambda r: httpx.Response(200, json=payload)})
    adapter = Delhivery(client=mock_client(recorder), base_url="https://dl.test")

    snapshot = await adapter.track("W1", DEFAULT_PARTNER_CONFIGS[Carrier.DELHIVERY])

    assert snapshot.success
    assert snapshot.status == ShipmentStatus.DELIVERED
    assert [e.status for e in snapshot.events] == ["delivered", "booked"]
    # carrier times are IST
    assert snapshot.events[0].timestamp == datetime(2024, 3, 3, 10, 0, tzinfo=pytz.utc)
    assert recorder.requests[0].url.params["waybill"] == "W1"


async def test_delhivery_b2b_freight_estimate():
    recorder = Recorder(
        {
            "/login": lambda r: httpx.Response(200, json={"jwt": "b2b-token"}),
            "/freight_estimator": lambda r: httpx.Response(
                200,
                json={
                    "data": {
                        "total": 412.4,
                        "tat": 6,
                        "price_breakup": {"base_freight_charge": 300, "fuel_surcharge": 45},
                    }
                },
            ),
        }
    )
    b2b = DelhiveryB2B(client=mock_client(recorder), base_url="https://b2b.test")

    quote = await b2b.quote(
        Package(weight=20), ROUTE, Zone.REST_OF_INDIA, DEFAULT_PARTNER_CONFIGS[Carrier.DELHIVERY]
    )

    assert quote.source == QuoteSource.B2B_API
    assert quote.total == Decimal("412")
    assert quote.estimated_days == 6
    assert recorder.requests[1].headers["Authorization"] == "Bearer b2b-token"


# ----- ekart -----


async def test_ekart_tracking_failure_asks_for_manual_check():
    recorder = Recorder(
        {
            "/auth/token/client-1": lambda r: httpx.Response(
                200, json={"access_token": "ek", "expires_in": 3600}
            ),
            "/api/v1/track/EK1": lambda r: httpx.Response(200, json={"EK1": {"history": []}}),
        }
    )
    adapter = Ekart(client=mock_client(recorder), base_url="https://ek.test", client_id="client-1")

    snapshot = await adapter.track("EK1", DEFAULT_PARTNER_CONFIGS[Carrier.EKART])

    assert not snapshot.success
    assert snapshot.manual_check_required
    assert snapshot.instructions["step1"].startswith("Check the shipment on the Ekart website")
    assert snapshot.message == "no tracking history"


async def test_ekart_local_quote():
    config = DEFAULT_PARTNER_CONFIGS[Carrier.EKART]
    adapter = Ekart(client=mock_client(Recorder({})))

    quote = await adapter.quote(
        Package(weight=1, payment_mode=PaymentMode.COD), ROUTE, Zone.REST_OF_INDIA, config
    )

    # 42 base + 30 COD + 8% fuel on base
    assert quote.total == Decimal("75")


async def test_ekart_booking_success():
    def create(request):
        assert request.method == "PUT"
        assert request.headers["Authorization"].endswith("ek")
        body = json.loads(request.content)
        assert body["payment_mode"] == "COD"
        assert body["cod_amount"] == 1200
        return httpx.Response(
            200, json={"status": True, "tracking_id": "EK500", "remark": "Order Created"}
        )

    recorder = Recorder(
        {
            "/auth/token/client-1": lambda r: httpx.Response(
                200, json={"access_token": "ek", "expires_in": 3600}
            ),
            "/api/v1/package/create": create,
        }
    )
    adapter = Ekart(client=mock_client(recorder), base_url="https://ek.test", client_id="client-1")

    response = await adapter.book(SHIPMENT, DEFAULT_PARTNER_CONFIGS[Carrier.EKART])

    assert response.success
    assert response.awb == "EK500"
    assert response.tracking_url == "https://app.elite.ekartlogistics.in/track/EK500"
    assert response.message == "Order Created"


async def test_ekart_booking_without_tracking_id_is_rejected():
    recorder = Recorder(
        {
            "/auth/token/client-1": lambda r: httpx.Response(
                200, json={"access_token": "ek", "expires_in": 3600}
            ),
            "/api/v1/package/create": lambda r: httpx.Response(
                200, json={"status": True, "remark": "pincode not serviceable"}
            ),
        }
    )
    adapter = Ekart(client=mock_client(recorder), base_url="https://ek.test", client_id="client-1")

    response = await adapter.book(SHIPMENT, DEFAULT_PARTNER_CONFIGS[Carrier.EKART])

    assert not response.success
    assert response.awb is None
    assert response.message == "pincode not serviceable"


# ----- bluedart -----


async def test_bluedart_local_quote():
    adapter = Bluedart(client=mock_client(Recorder({})))

    quote = await adapter.quote(
        Package(weight=2), ROUTE, Zone.REST_OF_INDIA, DEFAULT_PARTNER_CONFIGS[Carrier.BLUEDART]
    )

    # 55 base + 25 per kg above 1 kg + 12% fuel on base
    assert quote.total == Decimal("87")
    assert quote.breakdown.fuel_surcharge == Decimal("6.60")


async def test_bluedart_tracking_parse():
    payload = {
        "ShipmentData": {
            "Shipment": [
                {
                    "Scans": [
                        {
                            "ScanDetail": {
                                "Scan": "SHIPMENT DELIVERED",
                                "ScanCode": "000",
                                "ScanType": "DL",
                                "ScanDate": "05-Mar-2024",
                                "ScanTime": "14:30",
                                "ScannedLocation": "MUMBAI",
                            }
                        },
                        {
                            "ScanDetail": {
                                "Scan": "SHIPMENT PICKED UP",
                                "ScanCode": "015",
                                "ScanType": "PU",
                                "ScanDate": "03-Mar-2024",
                                "ScanTime": "11:00",
                                "ScannedLocation": "DELHI",
                            }
                        },
                    ]
                }
            ]
        }
    }
    recorder = Recorder({"/tracking/v1/shipment": lambda r: httpx.Response(200, json=payload)})
    adapter = Bluedart(client=mock_client(recorder), base_url="https://bd.test")

    snapshot = await adapter.track("BD1", DEFAULT_PARTNER_CONFIGS[Carrier.BLUEDART])

    assert snapshot.status == ShipmentStatus.DELIVERED
    assert snapshot.courier_status == "DL-000"
    assert snapshot.events[0].timestamp == datetime(2024, 3, 5, 9, 0, tzinfo=pytz.utc)
    assert snapshot.events[1].status == "pickup completed"


async def test_bluedart_booking_success():
    def waybill(request):
        body = json.loads(request.content)
        assert body["Profile"]["LicenceKey"] == "lic"
        assert body["Request"]["Services"]["SubProductCode"] == "C"
        return httpx.Response(
            200, json={"GenerateWayBillResult": {"AWBNo": "BD777", "IsError": False}}
        )

    recorder = Recorder({"/waybill/v1/GenerateWayBill": waybill})
    adapter = Bluedart(client=mock_client(recorder), base_url="https://bd.test", licence_key="lic")

    response = await adapter.book(SHIPMENT, DEFAULT_PARTNER_CONFIGS[Carrier.BLUEDART])

    assert response.success
    assert response.awb == "BD777"
    assert response.tracking_url.endswith("trackNo=BD777")
    assert response.message == "Waybill generated"


async def test_bluedart_booking_error_is_rejected():
    result = {
        "AWBNo": "",
        "IsError": True,
        "Status": [
            {"StatusCode": "InvalidPincode", "StatusInformation": "Invalid consignee pincode"},
            {"StatusCode": "Other", "StatusInformation": None},
        ],
    }
    recorder = Recorder(
        {
            "/waybill/v1/GenerateWayBill": lambda r: httpx.Response(
                200, json={"GenerateWayBillResult": result}
            )
        }
    )
    adapter = Bluedart(client=mock_client(recorder), base_url="https://bd.test")

    response = await adapter.book(SHIPMENT, DEFAULT_PARTNER_CONFIGS[Carrier.BLUEDART])

    assert not response.success
    assert response.awb is None
    assert response.message == "Invalid consignee pincode"


# ----- dtdc -----


async def test_dtdc_booking_parse():
    def softdata(request):
        assert request.headers["api-key"] == "dtdc-key"
        return httpx.Response(
            200, json={"status": "OK", "data": [{"success": True, "reference_number": "D1234"}]}
        )

    recorder = Recorder({"/consignment/softdata": softdata})
    adapter = Dtdc(client=mock_client(recorder), base_url="https://dtdc.test", api_key="dtdc-key")

    response = await adapter.book(SHIPMENT, DEFAULT_PARTNER_CONFIGS[Carrier.DTDC])

    assert response.success
    assert response.awb == "D1234"
    assert response.tracking_url.endswith("strCnno=D1234")


async def test_dtdc_tracking_uses_last_detail():
    payload = {
        "status": "SUCCESS",
        "trackDetails": [
            {"strCode": "BKD", "strAction": "Booked", "strOrigin": "DELHI",
             "strActionDate": "01032024", "strActionTime": "0930"},
            {"strCode": "DLV", "strAction": "Delivered", "strOrigin": "MUMBAI",
             "strActionDate": "04032024", "strActionTime": "1615"},
        ],
    }
    recorder = Recorder({"/getTrackDetails": lambda r: httpx.Response(200, json=payload)})
    adapter = Dtdc(
        client=mock_client(recorder),
        tracking_url="https://track.test/getTrackDetails",
        tracking_token="t",
    )

    snapshot = await adapter.track("D1234", DEFAULT_PARTNER_CONFIGS[Carrier.DTDC])

    assert snapshot.status == ShipmentStatus.DELIVERED
    assert snapshot.courier_status == "DLV"
    assert snapshot.events[0].timestamp == datetime(2024, 3, 4, 10, 45, tzinfo=pytz.utc)


async def test_dtdc_failed_tracking_is_contained():
    recorder = Recorder(
        {"/getTrackDetails": lambda r: httpx.Response(200, json={"status": "FAILED"})}
    )
    adapter = Dtdc(client=mock_client(recorder), tracking_url="https://track.test/getTrackDetails")

    snapshot = await adapter.track("D1234", DEFAULT_PARTNER_CONFIGS[Carrier.DTDC])

    assert snapshot.manual_check_required
    assert snapshot.status is None
