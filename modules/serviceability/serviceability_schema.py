from enum import Enum
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

from modules.shipping_partner.shipping_partner_schema import Carrier, ServiceMode


PINCODE_PATTERN = r"^\d{6}$"

VOLUMETRIC_DIVISOR = 5000


class Zone(str, Enum):
    WITHIN_CITY = "WITHIN_CITY"
    WITHIN_STATE = "WITHIN_STATE"
    METRO_TO_METRO = "METRO_TO_METRO"
    REST_OF_INDIA = "REST_OF_INDIA"
    SPECIAL_ZONE = "SPECIAL_ZONE"

    # letter codes used on contract rate sheets
    @property
    def code(self) -> str:
        return {
            Zone.WITHIN_CITY: "A",
            Zone.WITHIN_STATE: "B",
            Zone.METRO_TO_METRO: "C",
            Zone.REST_OF_INDIA: "D",
            Zone.SPECIAL_ZONE: "E",
        }[self]


class PaymentMode(str, Enum):
    PREPAID = "prepaid"
    COD = "COD"


class ServiceType(str, Enum):
    STANDARD = "standard"
    EXPRESS = "express"


class QuoteSource(str, Enum):
    API = "API"
    DATABASE = "DATABASE"
    B2B_API = "B2B_API"


class PincodeDetails(BaseModel):
    pincode: str
    city: str
    state: str
    district: Optional[str] = None


class Package(BaseModel):
    weight: float = Field(gt=0, description="actual weight in kg")
    length: float = Field(default=0, ge=0)
    breadth: float = Field(default=0, ge=0)
    height: float = Field(default=0, ge=0)
    declared_value: float = Field(default=0, ge=0)
    payment_mode: PaymentMode = PaymentMode.PREPAID
    service_type: ServiceType = ServiceType.STANDARD

    @property
    def volumetric_weight(self) -> float:
        return self.length * self.breadth * self.height / VOLUMETRIC_DIVISOR

    @property
    def chargeable_weight(self) -> float:
        return max(self.weight, self.volumetric_weight)

    @property
    def is_cod(self) -> bool:
        return self.payment_mode == PaymentMode.COD


class Route(BaseModel):
    model_config = ConfigDict(frozen=True)

    origin_pincode: str = Field(pattern=PINCODE_PATTERN)
    destination_pincode: str = Field(pattern=PINCODE_PATTERN)


class RateBreakdown(BaseModel):
    base: Decimal = Decimal("0")
    weight_charge: Decimal = Decimal("0")
    service_charge: Decimal = Decimal("0")
    cod_charge: Decimal = Decimal("0")
    fuel_surcharge: Decimal = Decimal("0")


class RateQuote(BaseModel):
    carrier: Carrier
    carrier_name: str
    service_type: ServiceType = ServiceType.STANDARD
    mode: Optional[ServiceMode] = None
    zone: Optional[Zone] = None
    total: Decimal
    breakdown: RateBreakdown = RateBreakdown()
    estimated_days: int
    chargeable_weight: float
    source: QuoteSource


class RateQuoteRequestModel(BaseModel):
    weight: float = Field(gt=0)
    length: float = Field(default=0, ge=0)
    breadth: float = Field(default=0, ge=0)
    height: float = Field(default=0, ge=0)
    declared_value: float = Field(default=0, ge=0)
    payment_mode: PaymentMode = PaymentMode.PREPAID
    pickup_pincode: str = Field(pattern=PINCODE_PATTERN)
    delivery_pincode: str = Field(pattern=PINCODE_PATTERN)
    service_type: ServiceType = ServiceType.STANDARD
    partners: Optional[List[str]] = None

    def to_package(self) -> Package:
        return Package(
            weight=self.weight,
            length=self.length,
            breadth=self.breadth,
            height=self.height,
            declared_value=self.declared_value,
            payment_mode=self.payment_mode,
            service_type=self.service_type,
        )

    def to_route(self) -> Route:
        return Route(
            origin_pincode=self.pickup_pincode,
            destination_pincode=self.delivery_pincode,
        )


class ZoneResponseModel(BaseModel):
    origin_pincode: str
    destination_pincode: str
    zone: Zone
    zone_code: str
