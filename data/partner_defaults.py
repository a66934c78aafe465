"""
Partner Defaults

Minimal configuration per known carrier, used when the configuration store
has no active entry for it. FALLBACK_CARRIERS is the partner set quoted when
no stored partner admits a package.
"""

from decimal import Decimal

from modules.shipping_partner.shipping_partner_schema import (
    Carrier,
    PartnerConfig,
    PartnerTariff,
    ServiceMode,
    WeightLimits,
)


DEFAULT_PARTNER_CONFIGS = {
    Carrier.DELHIVERY: PartnerConfig(
        carrier=Carrier.DELHIVERY,
        name="Delhivery",
        service_types=["standard", "express"],
        weight_limits=WeightLimits(min=0.1, max=50),
        default_mode=ServiceMode.SURFACE,
        estimated_days=4,
        tracking_url="https://www.delhivery.com/track/package/{awb}",
        is_default=True,
    ),
    Carrier.XPRESSBEES: PartnerConfig(
        carrier=Carrier.XPRESSBEES,
        name="Xpressbees",
        service_types=["standard", "express"],
        weight_limits=WeightLimits(min=0.1, max=30),
        default_mode=ServiceMode.AIR,
        estimated_days=3,
        tariff=PartnerTariff(
            base_rate=Decimal("40"),
            weight_rate=Decimal("18"),
            cod_charge=Decimal("30"),
            fuel_surcharge_percent=Decimal("10"),
            express_charge=Decimal("20"),
        ),
        tracking_url="https://www.xpressbees.com/shipment/tracking?awbNo={awb}",
        is_default=True,
    ),
    Carrier.EKART: PartnerConfig(
        carrier=Carrier.EKART,
        name="Ekart",
        service_types=["standard", "express"],
        weight_limits=WeightLimits(min=0.001, max=30),
        default_mode=ServiceMode.AIR,
        estimated_days=4,
        tariff=PartnerTariff(
            base_rate=Decimal("42"),
            weight_rate=Decimal("20"),
            cod_charge=Decimal("30"),
            fuel_surcharge_percent=Decimal("8"),
            express_charge=Decimal("25"),
        ),
        tracking_url="https://app.elite.ekartlogistics.in/track/{awb}",
        is_default=True,
    ),
    Carrier.BLUEDART: PartnerConfig(
        carrier=Carrier.BLUEDART,
        name="BlueDart",
        service_types=["standard", "express"],
        weight_limits=WeightLimits(min=0.1, max=50),
        default_mode=ServiceMode.AIR,
        estimated_days=3,
        tariff=PartnerTariff(
            base_rate=Decimal("55"),
            weight_rate=Decimal("25"),
            cod_charge=Decimal("50"),
            fuel_surcharge_percent=Decimal("12"),
            express_charge=Decimal("30"),
        ),
        tracking_url="https://www.bluedart.com/web/guest/trackdartresult?trackFor=0&trackNo={awb}",
        is_default=True,
    ),
    Carrier.DTDC: PartnerConfig(
        carrier=Carrier.DTDC,
        name="DTDC",
        service_types=["standard", "express"],
        weight_limits=WeightLimits(min=0.1, max=50),
        default_mode=ServiceMode.SURFACE,
        estimated_days=5,
        tariff=PartnerTariff(
            base_rate=Decimal("45"),
            weight_rate=Decimal("18"),
            cod_charge=Decimal("27"),
            fuel_surcharge_percent=Decimal("0"),
            express_charge=Decimal("15"),
        ),
        tracking_url="https://www.dtdc.in/tracking.asp?strCnno={awb}",
        is_default=True,
    ),
}

FALLBACK_CARRIERS = [
    Carrier.DELHIVERY,
    Carrier.XPRESSBEES,
    Carrier.EKART,
    Carrier.BLUEDART,
    Carrier.DTDC,
]
