import asyncio
from typing import Dict, List, Optional

from config import (
    DEFAULT_RATE_METHOD,
    QUOTE_FANOUT_DEADLINE,
    RATE_METHOD_OVERRIDES,
)
from logger import logger

# schema
from modules.rate_card.rate_card_calculator import RateCardCalculator
from modules.shipping_partner.partner_registry import PartnerRegistry
from modules.shipping_partner.shipping_partner_schema import (
    ApiType,
    CalculationMethod,
    Carrier,
    PartnerConfig,
    ServiceMode,
)
from .serviceability_schema import Package, RateQuote, Route, ServiceType, Zone
from .zone_resolver import ZoneResolver


class RateOrchestrator:
    """
    Fans a quote request out to every eligible partner at once and returns the
    surviving quotes, cheapest first. A partner that fails, raises or misses
    the fan-out deadline is left out of the result; it never fails the batch.
    """

    def __init__(
        self,
        registry: PartnerRegistry,
        adapters: Dict[Carrier, object],
        calculator: RateCardCalculator,
        zone_resolver: ZoneResolver,
        deadline: float = QUOTE_FANOUT_DEADLINE,
        default_method: str = DEFAULT_RATE_METHOD,
        method_overrides: dict = None,
    ):
        self.registry = registry
        self.adapters = adapters
        self.calculator = calculator
        self.zone_resolver = zone_resolver
        self.deadline = deadline
        self.default_method = default_method
        self.method_overrides = (
            RATE_METHOD_OVERRIDES if method_overrides is None else method_overrides
        )

    def partner_set(self, package: Package, partners: Optional[List[str]] = None) -> List[Carrier]:
        if partners:
            carriers = []
            for name in partners:
                carrier = Carrier.parse(name)
                if carrier is None:
                    logger.info(msg="skipping unknown partner {}".format(name))
                    continue
                carriers.append(carrier)
            return list(dict.fromkeys(carriers))

        return self.registry.eligible_carriers(package)

    def method_for(self, config: PartnerConfig) -> CalculationMethod:
        override = self.method_overrides.get(config.carrier.value)
        if override in CalculationMethod._value2member_map_:
            return CalculationMethod(override)

        if (
            config.calculation_method == CalculationMethod.DATABASE
            or self.default_method == CalculationMethod.DATABASE.value
        ):
            return CalculationMethod.DATABASE

        return CalculationMethod.API

    def mode_for(self, config: PartnerConfig, package: Package) -> Optional[ServiceMode]:
        modes = self.calculator.store.modes_for(config.carrier)
        if not modes:
            return None

        if package.service_type == ServiceType.EXPRESS and ServiceMode.AIR in modes:
            return ServiceMode.AIR

        if config.default_mode in modes:
            return config.default_mode

        return modes[0]

    def database_quote(self, config: PartnerConfig, package: Package, zone: Zone) -> Optional[RateQuote]:
        mode = self.mode_for(config, package)
        if mode is None:
            logger.info(msg="no rate card mode for {}".format(config.carrier.value))
            return None

        quote = self.calculator.price_for(
            config.carrier,
            mode,
            zone,
            package.chargeable_weight,
            package.is_cod,
            service_type=package.service_type,
            estimated_days=config.estimated_days,
        )
        if quote is not None:
            quote = quote.model_copy(update={"carrier_name": config.name})
        return quote

    async def quote_partner(
        self, carrier: Carrier, package: Package, route: Route, zone: Zone
    ) -> Optional[RateQuote]:
        config = self.registry.resolve(carrier)
        if config is None or not config.is_active:
            return None

        if not config.weight_limits.admits(package.chargeable_weight):
            logger.info(
                msg="{} does not admit {} kg".format(carrier.value, package.chargeable_weight)
            )
            return None

        adapter = self.adapters.get(carrier)
        method = self.method_for(config)

        if method == CalculationMethod.API and adapter is not None:
            if config.api_type == ApiType.B2B and adapter.supports_b2b:
                quote = await adapter.quote_b2b(package, route, zone, config)
                if quote is not None:
                    return quote
                logger.info(msg="{} B2B estimate failed, trying B2C".format(carrier.value))

            quote = await adapter.quote(package, route, zone, config)
            if quote is not None:
                return quote

            logger.info(msg="{} API quote failed, falling back to rate card".format(carrier.value))

        return self.database_quote(config, package, zone)

    async def _safe_quote(self, carrier, package, route, zone) -> Optional[RateQuote]:
        try:
            return await self.quote_partner(carrier, package, route, zone)
        except Exception as e:
            logger.error(msg="quote for {} failed: {}".format(carrier.value, str(e)))
            return None

    async def quote_all(
        self, package: Package, route: Route, partners: Optional[List[str]] = None
    ) -> List[RateQuote]:
        zone = self.zone_resolver.resolve(route)
        carriers = self.partner_set(package, partners)

        logger.info(
            msg="quoting {} -> {} ({}) across {}".format(
                route.origin_pincode,
                route.destination_pincode,
                zone.value,
                ", ".join(c.value for c in carriers),
            )
        )

        if not carriers:
            return []

        tasks = [
            asyncio.ensure_future(self._safe_quote(carrier, package, route, zone))
            for carrier in carriers
        ]
        done, pending = await asyncio.wait(tasks, timeout=self.deadline)

        for task in pending:
            task.cancel()
        if pending:
            logger.info(msg="{} partner quotes missed the deadline".format(len(pending)))
            await asyncio.gather(*pending, return_exceptions=True)

        quotes = [
            task.result()
            for task in tasks
            if task in done and not task.cancelled() and task.result() is not None
        ]
        return sorted(quotes, key=lambda quote: quote.total)
