from sqlalchemy import Column, String, Numeric, JSON, UniqueConstraint

from database import DBBaseClass, DBBase


class Rate_Card(DBBase, DBBaseClass):

    __tablename__ = "rate_card"

    carrier = Column(String(50), nullable=False)
    mode = Column(String(20), nullable=False)
    zone = Column(String(20), nullable=False)

    # parallel lists, one value per weight slab
    slabs = Column(JSON, nullable=False)
    base_rates = Column(JSON, nullable=False)
    additional_rates = Column(JSON, nullable=False)

    cod_flat = Column(Numeric(10, 2), nullable=False, default=0)
    cod_percent = Column(Numeric(6, 3), nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("carrier", "mode", "zone", name="uq_rate_card_carrier_mode_zone"),
    )
