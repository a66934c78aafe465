"""
Carrier adapter contract.

Every carrier integration exposes quote / book / track with the same shapes.
Subclasses implement the underscored hooks; the public methods contain every
transport and parsing failure so nothing raw reaches the orchestrators:

- quote failure -> None
- book failure  -> CarrierBookingResponse(success=False, message=...)
- track failure -> TrackingSnapshot(manual_check_required=True, instructions=...)
"""

import asyncio
import time
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

import httpx
from httpx import ConnectError, HTTPStatusError, RequestError

from config import CARRIER_HTTP_TIMEOUT
from logger import logger

# schema
from modules.serviceability.serviceability_schema import (
    Package,
    QuoteSource,
    RateBreakdown,
    RateQuote,
    Route,
    ServiceType,
    Zone,
)
from modules.shipment.shipment_schema import (
    CarrierBookingResponse,
    ShipmentPayload,
    ShipmentStatus,
    TrackingSnapshot,
)
from modules.shipping_partner.shipping_partner_schema import Carrier, PartnerConfig

from utils.exceptions import CarrierAuthError, CarrierError


class TokenState:
    """Bearer token owned by one client instance, refreshed under its lock."""

    def __init__(self):
        self.token: Optional[str] = None
        self.expires_at: float = 0.0
        self.lock = asyncio.Lock()

    def is_valid(self) -> bool:
        return bool(self.token) and time.monotonic() < self.expires_at

    def set(self, token: str, ttl_seconds: float):
        self.token = token
        self.expires_at = time.monotonic() + max(0.0, ttl_seconds)

    def clear(self):
        self.token = None
        self.expires_at = 0.0


class CarrierClient:
    """HTTP plumbing shared by adapters: injectable client, timeouts and token handling."""

    carrier: Carrier = None

    def __init__(self, client: httpx.AsyncClient = None, timeout: float = CARRIER_HTTP_TIMEOUT):
        self._client = client
        self.timeout = timeout
        self.token_state = TokenState()

    @asynccontextmanager
    async def http(self):
        if self._client is not None:
            yield self._client
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                yield client

    async def send(self, method: str, url: str, **kwargs) -> httpx.Response:
        async with self.http() as client:
            return await client.request(method, url, **kwargs)

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        response = await self.send(method, url, **kwargs)
        response.raise_for_status()
        return response

    # token flow, used by carriers with session auth

    async def acquire_token(self) -> Tuple[str, float]:
        """Return (token, seconds until it should be refreshed)."""
        raise NotImplementedError

    def auth_headers(self, token: str) -> dict:
        return {"Authorization": "Bearer " + token}

    async def get_token(self, stale: str = None) -> str:
        async with self.token_state.lock:
            # another request may already have replaced the rejected token
            if stale is not None and self.token_state.token == stale:
                self.token_state.clear()

            if self.token_state.is_valid():
                return self.token_state.token

            token, ttl = await self.acquire_token()
            if not token:
                raise CarrierAuthError(self.carrier, "empty token in login response")

            self.token_state.set(token, ttl)
            logger.info(msg="{} token acquired".format(self.carrier.value))
            return token

    async def authorized_request(self, method: str, url: str, headers: dict = None, **kwargs):
        token = await self.get_token()
        response = await self.send(
            method, url, headers={**(headers or {}), **self.auth_headers(token)}, **kwargs
        )

        if response.status_code == 401:
            logger.info(msg="{} token rejected, re-acquiring".format(self.carrier.value))
            token = await self.get_token(stale=token)
            response = await self.send(
                method, url, headers={**(headers or {}), **self.auth_headers(token)}, **kwargs
            )

        response.raise_for_status()
        return response


def describe_error(carrier: Carrier, e: Exception) -> str:
    name = carrier.display_name
    if isinstance(e, httpx.TimeoutException):
        return "The request to {} timed out".format(name)
    if isinstance(e, ConnectError):
        return "Unable to connect to the {} API".format(name)
    if isinstance(e, HTTPStatusError):
        return "{} returned HTTP {}".format(name, e.response.status_code)
    if isinstance(e, RequestError):
        return "Request to {} failed: {}".format(name, str(e))
    if isinstance(e, CarrierError):
        return e.message
    return "Unexpected {} error: {}".format(name, str(e))


class CarrierAdapter(CarrierClient, ABC):
    status_mapping: dict = {}
    supports_b2b = False

    # ----- public contract -----

    async def quote(
        self, package: Package, route: Route, zone: Zone, config: PartnerConfig
    ) -> Optional[RateQuote]:
        try:
            return await self._quote(package, route, zone, config)
        except Exception as e:
            logger.error(msg="{} quote failed: {}".format(self.carrier.value, describe_error(self.carrier, e)))
            return None

    async def quote_b2b(
        self, package: Package, route: Route, zone: Zone, config: PartnerConfig
    ) -> Optional[RateQuote]:
        return None

    async def book(self, shipment: ShipmentPayload, config: PartnerConfig) -> CarrierBookingResponse:
        try:
            return await self._book(shipment, config)
        except Exception as e:
            message = describe_error(self.carrier, e)
            logger.error(msg="{} booking failed: {}".format(self.carrier.value, message))
            return CarrierBookingResponse(success=False, message=message)

    async def track(self, reference: str, config: PartnerConfig = None) -> TrackingSnapshot:
        try:
            return await self._track(reference, config)
        except Exception as e:
            message = describe_error(self.carrier, e)
            logger.error(msg="{} tracking failed for {}: {}".format(self.carrier.value, reference, message))
            return self.manual_check_snapshot(reference, message, config)

    # ----- carrier hooks -----

    @abstractmethod
    async def _quote(self, package, route, zone, config) -> Optional[RateQuote]:
        pass

    @abstractmethod
    async def _book(self, shipment, config) -> CarrierBookingResponse:
        pass

    @abstractmethod
    async def _track(self, reference, config) -> TrackingSnapshot:
        pass

    # ----- helpers -----

    def local_quote(self, package: Package, zone: Zone, config: PartnerConfig) -> RateQuote:
        """Quote from the partner's own tariff: base, per-kg above 1 kg, express, COD and fuel on base."""
        tariff = config.tariff
        weight = Decimal(str(package.chargeable_weight))

        base = tariff.base_rate
        weight_charge = max(Decimal("0"), weight - 1) * tariff.weight_rate
        service_charge = (
            tariff.express_charge
            if package.service_type == ServiceType.EXPRESS
            else Decimal("0")
        )
        cod_charge = tariff.cod_charge if package.is_cod else Decimal("0")
        fuel_surcharge = base * tariff.fuel_surcharge_percent / Decimal("100")

        total = base + weight_charge + service_charge + cod_charge + fuel_surcharge

        return RateQuote(
            carrier=self.carrier,
            carrier_name=config.name,
            service_type=package.service_type,
            mode=config.default_mode,
            zone=zone,
            total=total.quantize(Decimal("1"), rounding=ROUND_HALF_UP),
            breakdown=RateBreakdown(
                base=base,
                weight_charge=weight_charge.quantize(Decimal("0.01")),
                service_charge=service_charge,
                cod_charge=cod_charge,
                fuel_surcharge=fuel_surcharge.quantize(Decimal("0.01")),
            ),
            estimated_days=config.estimated_days,
            chargeable_weight=package.chargeable_weight,
            source=QuoteSource.API,
        )

    def map_status(self, raw, scan_type: str = "FORWARD") -> Optional[dict]:
        table = self.status_mapping.get(scan_type) or {}
        if raw in table:
            return table[raw]
        lowered = {str(key).lower(): value for key, value in table.items()}
        return lowered.get(str(raw).strip().lower())

    def manual_check_snapshot(self, reference: str, reason: str, config: PartnerConfig = None) -> TrackingSnapshot:
        name = config.name if config else self.carrier.display_name
        link = config.tracking_link(reference) if config else None
        return TrackingSnapshot(
            success=False,
            carrier=self.carrier,
            reference=reference,
            manual_check_required=True,
            message=reason,
            instructions={
                "step1": "Check the shipment on the {} website{}".format(
                    name, ": " + link if link else ""
                ),
                "step2": "Contact {} customer service with reference {}".format(name, reference),
                "step3": "Update the shipment status manually once confirmed",
                "error_reason": reason,
            },
        )


def status_of(mapped: Optional[dict]) -> Optional[ShipmentStatus]:
    if not mapped:
        return None
    return ShipmentStatus(mapped["status"])
