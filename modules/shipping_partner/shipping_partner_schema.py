import re
from enum import Enum
from decimal import Decimal
from pydantic import BaseModel
from typing import List, Optional


class Carrier(str, Enum):
    DELHIVERY = "delhivery"
    XPRESSBEES = "xpressbees"
    EKART = "ekart"
    BLUEDART = "bluedart"
    DTDC = "dtdc"

    @classmethod
    def parse(cls, name) -> Optional["Carrier"]:
        """
        Resolve a carrier display name or slug ("Blue Dart", "Bluedart air",
        "XpressBees", "delhivery") to the enum. Returns None for unknown carriers.
        """
        if isinstance(name, Carrier):
            return name
        if not name:
            return None

        key = re.sub(r"[^a-z0-9]", "", str(name).lower())
        key = CARRIER_ALIASES.get(key, key)

        for carrier in cls:
            if key.startswith(carrier.value):
                return carrier
        return None

    @property
    def display_name(self) -> str:
        return CARRIER_DISPLAY_NAMES[self]


CARRIER_ALIASES = {
    "xb": "xpressbees",
    "xbees": "xpressbees",
    "ekartlogistics": "ekart",
    "flipkartekart": "ekart",
}

CARRIER_DISPLAY_NAMES = {
    Carrier.DELHIVERY: "Delhivery",
    Carrier.XPRESSBEES: "Xpressbees",
    Carrier.EKART: "Ekart",
    Carrier.BLUEDART: "BlueDart",
    Carrier.DTDC: "DTDC",
}


class CalculationMethod(str, Enum):
    API = "API"
    DATABASE = "DATABASE"


class ApiType(str, Enum):
    B2C = "B2C"
    B2B = "B2B"


class ServiceMode(str, Enum):
    SURFACE = "surface"
    AIR = "air"


class WeightLimits(BaseModel):
    min: float = 0.0
    max: float = 50.0

    def admits(self, weight: float) -> bool:
        return self.min <= weight <= self.max


class DimensionLimits(BaseModel):
    max_length: Optional[float] = None
    max_breadth: Optional[float] = None
    max_height: Optional[float] = None


# local tariff used by carriers that quote without calling their API
class PartnerTariff(BaseModel):
    base_rate: Decimal = Decimal("50")
    weight_rate: Decimal = Decimal("20")
    cod_charge: Decimal = Decimal("30")
    fuel_surcharge_percent: Decimal = Decimal("10")
    express_charge: Decimal = Decimal("0")


class PartnerConfig(BaseModel):
    carrier: Carrier
    name: str
    is_active: bool = True
    service_types: List[str] = ["standard"]
    weight_limits: WeightLimits = WeightLimits()
    dimension_limits: DimensionLimits = DimensionLimits()
    calculation_method: CalculationMethod = CalculationMethod.API
    api_type: ApiType = ApiType.B2C
    credentials_ref: Optional[str] = None
    default_mode: ServiceMode = ServiceMode.SURFACE
    estimated_days: int = 5
    tariff: PartnerTariff = PartnerTariff()
    tracking_url: Optional[str] = None
    is_default: bool = False

    def tracking_link(self, awb: str) -> Optional[str]:
        if not self.tracking_url or not awb:
            return None
        return self.tracking_url.format(awb=awb)


class PartnerConfigUpdateModel(BaseModel):
    is_active: Optional[bool] = None
    service_types: Optional[List[str]] = None
    weight_limits: Optional[WeightLimits] = None
    dimension_limits: Optional[DimensionLimits] = None
    calculation_method: Optional[CalculationMethod] = None
    api_type: Optional[ApiType] = None
    credentials_ref: Optional[str] = None
    default_mode: Optional[ServiceMode] = None
    estimated_days: Optional[int] = None
    tariff: Optional[PartnerTariff] = None
    tracking_url: Optional[str] = None
