import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from logger import logger

# schema
from modules.serviceability.serviceability_schema import (
    QuoteSource,
    RateBreakdown,
    RateQuote,
    ServiceType,
    Zone,
)
from modules.shipping_partner.shipping_partner_schema import Carrier, ServiceMode
from .rate_card_schema import ADDITIONAL_WEIGHT_BRACKET
from .rate_card_store import RateCardStore


PAISE = Decimal("0.01")
RUPEE = Decimal("1")


class RateCardCalculator:
    """
    Prices a shipment from the rate card store. Pure given the store contents:
    identical inputs always give an identical quote.
    """

    def __init__(self, store: RateCardStore, default_transit_days: int = 5):
        self.store = store
        self.default_transit_days = default_transit_days

    def price_for(
        self,
        carrier: Carrier,
        mode: ServiceMode,
        zone: Zone,
        chargeable_weight: float,
        is_cod: bool,
        service_type: ServiceType = ServiceType.STANDARD,
        estimated_days: Optional[int] = None,
    ) -> Optional[RateQuote]:
        entry = self.store.get(carrier, mode, zone)
        if entry is None:
            logger.info(
                msg="no rate card for {}/{}/{}".format(carrier.value, mode.value, zone.value)
            )
            return None

        weight = Decimal(str(chargeable_weight))
        index = entry.slab_index(weight)

        base = entry.base[index]
        extra = max(Decimal("0"), weight - entry.slabs[index])
        units = math.ceil(extra / ADDITIONAL_WEIGHT_BRACKET)
        weight_charge = units * entry.additional[index]

        running_total = base + weight_charge

        cod_charge = Decimal("0")
        if is_cod:
            # percentage applies to the pre-COD total, not to base alone
            cod_charge = entry.cod_flat + entry.cod_percent / Decimal("100") * running_total

        total = (running_total + cod_charge).quantize(RUPEE, rounding=ROUND_HALF_UP)

        return RateQuote(
            carrier=carrier,
            carrier_name=carrier.display_name,
            service_type=service_type,
            mode=mode,
            zone=zone,
            total=total,
            breakdown=RateBreakdown(
                base=base.quantize(PAISE),
                weight_charge=weight_charge.quantize(PAISE),
                cod_charge=cod_charge.quantize(PAISE, rounding=ROUND_HALF_UP),
            ),
            estimated_days=estimated_days or self.default_transit_days,
            chargeable_weight=float(weight),
            source=QuoteSource.DATABASE,
        )
