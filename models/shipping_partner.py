from sqlalchemy import Column, String, Boolean, Integer, Numeric, JSON, func

from database import DBBaseClass, DBBase


class Shipping_Partner(DBBase, DBBaseClass):
    """Partner configuration document, one row per carrier."""

    __tablename__ = "shipping_partner"

    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    is_active = Column(Boolean, nullable=False, default=True)

    service_types = Column(JSON, nullable=False, default=["standard"])

    min_weight = Column(Numeric(10, 3), nullable=False, default=0)
    max_weight = Column(Numeric(10, 3), nullable=False, default=50)
    dimension_limits = Column(JSON, nullable=False, default={})

    # API | DATABASE
    calculation_method = Column(String(20), nullable=False, default="API")
    # B2C | B2B
    api_type = Column(String(10), nullable=False, default="B2C")
    credentials_ref = Column(String(255), nullable=True)

    mode = Column(String(20), nullable=True)
    estimated_days = Column(Integer, nullable=True)
    tariff = Column(JSON, nullable=False, default={})
    tracking_url = Column(String(255), nullable=True)

    @classmethod
    def find_active_by_name(cls, db, name: str):
        key = name.strip().lower()
        return (
            db.query(cls)
            .filter(
                (func.lower(cls.slug) == key) | (func.lower(cls.name) == key),
                cls.is_active.is_(True),
                cls.is_deleted.is_(False),
            )
            .first()
        )
