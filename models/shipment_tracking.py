"""
Shipment Tracking Model
One row per carrier tracking event of a shipment.
"""

from sqlalchemy import Column, String, Integer, ForeignKey, TIMESTAMP, Index
from sqlalchemy.orm import relationship

from database import DBBaseClass, DBBase


class Shipment_Tracking(DBBase, DBBaseClass):

    __tablename__ = "shipment_tracking"

    shipment_id = Column(
        Integer,
        ForeignKey("shipment.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    status = Column(String(100), nullable=False)
    # normalized status the carrier event maps to, when it maps to one
    shipment_status = Column(String(30), nullable=True)
    description = Column(String(500), nullable=True)
    location = Column(String(255), nullable=True)
    event_datetime = Column(TIMESTAMP(timezone=True), nullable=False)

    shipment = relationship("Shipment", back_populates="tracking_events", lazy="noload")

    __table_args__ = (
        Index("ix_shipment_tracking_shipment_dt", "shipment_id", "event_datetime"),
        # same shipment + status + event_datetime = duplicate
        Index(
            "ix_shipment_tracking_dedup",
            "shipment_id",
            "status",
            "event_datetime",
            unique=True,
        ),
    )
