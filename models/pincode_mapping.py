from sqlalchemy import Column, String, Integer, Index

from database import DBBaseClass, DBBase


class Pincode_Mapping(DBBase, DBBaseClass):

    __tablename__ = "pincode_mapping"

    pincode = Column(Integer, nullable=False, unique=True)
    # city, district and state are stored in lowercase for case-insensitive comparisons
    city = Column(String(50), nullable=False)
    district = Column(String(100), nullable=True)
    state = Column(String(50), nullable=False)

    # covering index so lookups by pincode are index-only scans
    __table_args__ = (
        Index(
            "ix_pincode_mapping_pincode_city_state",
            "pincode",
            "city",
            "district",
            "state",
        ),
    )
