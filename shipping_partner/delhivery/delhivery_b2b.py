from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

import httpx

from config import (
    CARRIER_HTTP_TIMEOUT,
    DELHIVERY_B2B_BASE_URL,
    DELHIVERY_B2B_PASSWORD,
    DELHIVERY_B2B_USERNAME,
)
from logger import logger

# schema
from modules.serviceability.serviceability_schema import (
    QuoteSource,
    RateBreakdown,
    RateQuote,
)
from modules.shipping_partner.shipping_partner_schema import Carrier

from shipping_partner.base import CarrierClient, describe_error
from utils.exceptions import CarrierError


# JWT from the B2B login is valid for 24 hours
B2B_TOKEN_TTL = 24 * 60 * 60
TOKEN_REFRESH_BUFFER = 5 * 60


class DelhiveryB2B(CarrierClient):
    """Delhivery bulk/enterprise freight estimation, with its own JWT login."""

    carrier = Carrier.DELHIVERY

    def __init__(
        self,
        client: httpx.AsyncClient = None,
        timeout: float = CARRIER_HTTP_TIMEOUT,
        base_url: str = DELHIVERY_B2B_BASE_URL,
        username: str = DELHIVERY_B2B_USERNAME,
        password: str = DELHIVERY_B2B_PASSWORD,
    ):
        super().__init__(client=client, timeout=timeout)
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.password = password

    async def acquire_token(self) -> Tuple[str, float]:
        response = await self.request(
            "POST",
            self.base_url + "/login",
            json={"username": self.username, "password": self.password},
        )
        data = response.json()
        token = data.get("jwt") or (data.get("data") or {}).get("jwt")
        return token, B2B_TOKEN_TTL - TOKEN_REFRESH_BUFFER

    async def quote(self, package, route, zone, config) -> Optional[RateQuote]:
        try:
            return await self._freight_estimate(package, route, zone, config)
        except Exception as e:
            logger.error(msg="delhivery B2B estimate failed: {}".format(describe_error(self.carrier, e)))
            return None

    async def _freight_estimate(self, package, route, zone, config) -> RateQuote:
        payload = {
            "dimensions": [
                {
                    "length_cm": package.length,
                    "width_cm": package.breadth,
                    "height_cm": package.height,
                    "box_count": 1,
                }
            ],
            "weight_g": int(round(package.chargeable_weight * 1000)),
            "cheque_payment": False,
            "source_pin": route.origin_pincode,
            "consignee_pin": route.destination_pincode,
            "payment_mode": "cod" if package.is_cod else "prepaid",
            "inv_amount": package.declared_value,
            "freight_mode": "fop",
        }

        response = await self.authorized_request(
            "POST", self.base_url + "/freight_estimator", json=payload
        )
        data = (response.json() or {}).get("data") or {}

        if data.get("total") is None:
            raise CarrierError(self.carrier, "no total in freight estimate")

        breakup = data.get("price_breakup") or {}
        total = Decimal(str(data["total"]))
        base = Decimal(str(breakup.get("base_freight_charge") or 0))
        fuel = Decimal(str(breakup.get("fuel_surcharge") or 0))
        cod_charge = Decimal(str(breakup.get("cod_charge") or 0))

        return RateQuote(
            carrier=self.carrier,
            carrier_name=config.name + " B2B",
            service_type=package.service_type,
            mode=config.default_mode,
            zone=zone,
            total=total.quantize(Decimal("1"), rounding=ROUND_HALF_UP),
            breakdown=RateBreakdown(
                base=base,
                cod_charge=cod_charge,
                fuel_surcharge=fuel,
                service_charge=max(Decimal("0"), total - base - fuel - cod_charge),
            ),
            estimated_days=int(data.get("tat") or config.estimated_days),
            chargeable_weight=package.chargeable_weight,
            source=QuoteSource.B2B_API,
        )
