from decimal import Decimal
from pydantic import BaseModel, ConfigDict, model_validator
from typing import List

from modules.serviceability.serviceability_schema import Zone
from modules.shipping_partner.shipping_partner_schema import Carrier, ServiceMode


# billing unit for weight above the matched slab, kg
ADDITIONAL_WEIGHT_BRACKET = Decimal("0.5")


class RateCardEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    carrier: Carrier
    mode: ServiceMode
    zone: Zone
    slabs: List[Decimal]
    base: List[Decimal]
    additional: List[Decimal]
    cod_flat: Decimal = Decimal("0")
    cod_percent: Decimal = Decimal("0")

    @model_validator(mode="after")
    def check_slabs(self):
        if not self.slabs:
            raise ValueError("rate card needs at least one slab")
        if len(self.base) != len(self.slabs) or len(self.additional) != len(self.slabs):
            raise ValueError("base and additional rates must match the slab count")
        if any(b <= a for a, b in zip(self.slabs, self.slabs[1:])):
            raise ValueError("slabs must be strictly increasing")
        return self

    def slab_index(self, weight: Decimal) -> int:
        for index, slab in enumerate(self.slabs):
            if weight <= slab:
                return index
        return len(self.slabs) - 1
