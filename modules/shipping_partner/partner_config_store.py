from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from context_manager.context import get_db_session

# models
from models import Shipping_Partner

# schema
from .shipping_partner_schema import (
    ApiType,
    CalculationMethod,
    Carrier,
    DimensionLimits,
    PartnerConfig,
    PartnerConfigUpdateModel,
    PartnerTariff,
    ServiceMode,
    WeightLimits,
)


class InMemoryPartnerConfigStore:
    """Partner configuration documents keyed by carrier, for local runs and tests."""

    def __init__(self, configs: List[PartnerConfig] = None):
        self._configs: Dict[Carrier, PartnerConfig] = {
            config.carrier: config for config in configs or []
        }
        self.reads = 0

    def find_active(self, carrier: Carrier) -> Optional[PartnerConfig]:
        self.reads += 1
        config = self._configs.get(carrier)
        if config is None or not config.is_active:
            return None
        return config

    def list_active(self) -> List[PartnerConfig]:
        return [config for config in self._configs.values() if config.is_active]

    def save(self, config: PartnerConfig) -> PartnerConfig:
        self._configs[config.carrier] = config
        return config


class PartnerConfigStore:
    """Partner configuration documents stored in the shipping_partner table."""

    def __init__(self, db: Session = None):
        self.db = db

    # request session unless one was given explicitly
    @property
    def session(self) -> Session:
        return self.db or get_db_session()

    @staticmethod
    def to_config(row: Shipping_Partner) -> Optional[PartnerConfig]:
        carrier = Carrier.parse(row.slug) or Carrier.parse(row.name)
        if carrier is None:
            return None

        tariff = {key: Decimal(str(value)) for key, value in (row.tariff or {}).items()}

        return PartnerConfig(
            carrier=carrier,
            name=row.name,
            is_active=row.is_active,
            service_types=row.service_types or ["standard"],
            weight_limits=WeightLimits(
                min=float(row.min_weight or 0), max=float(row.max_weight or 0)
            ),
            dimension_limits=DimensionLimits(**(row.dimension_limits or {})),
            calculation_method=CalculationMethod(
                (row.calculation_method or CalculationMethod.API.value).upper()
            ),
            api_type=ApiType((row.api_type or ApiType.B2C.value).upper()),
            credentials_ref=row.credentials_ref,
            default_mode=ServiceMode((row.mode or ServiceMode.SURFACE.value).lower()),
            estimated_days=row.estimated_days or 5,
            tariff=PartnerTariff(**tariff),
            tracking_url=row.tracking_url,
        )

    def find_active(self, carrier: Carrier) -> Optional[PartnerConfig]:
        row = Shipping_Partner.find_active_by_name(self.session, carrier.value)
        if row is None:
            row = Shipping_Partner.find_active_by_name(self.session, carrier.display_name)
        return self.to_config(row) if row is not None else None

    def list_active(self) -> List[PartnerConfig]:
        rows = (
            self.session.query(Shipping_Partner)
            .filter(
                Shipping_Partner.is_active.is_(True),
                Shipping_Partner.is_deleted.is_(False),
            )
            .all()
        )
        configs = [self.to_config(row) for row in rows]
        return [config for config in configs if config is not None]

    def update(self, carrier: Carrier, changes: PartnerConfigUpdateModel) -> Optional[PartnerConfig]:
        row = (
            self.session.query(Shipping_Partner)
            .filter(
                Shipping_Partner.slug == carrier.value,
                Shipping_Partner.is_deleted.is_(False),
            )
            .first()
        )
        if row is None:
            row = Shipping_Partner(name=carrier.display_name, slug=carrier.value)

        values = changes.model_dump(exclude_unset=True, mode="json")

        if "weight_limits" in values:
            limits = values.pop("weight_limits")
            row.min_weight = limits["min"]
            row.max_weight = limits["max"]
        if "default_mode" in values:
            row.mode = values.pop("default_mode")

        for key, value in values.items():
            setattr(row, key, value)

        self.session.add(row)
        self.session.flush()

        return self.to_config(row)
