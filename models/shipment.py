from sqlalchemy import Column, String, Integer, ForeignKey, Numeric, TIMESTAMP, JSON, Index
from sqlalchemy.orm import relationship

from database import DBBaseClass, DBBase


class Shipment(DBBase, DBBaseClass):
    """
    One carrier booking for an order. Rows are never deleted, only moved
    through statuses by booking and tracking sync.
    """

    __tablename__ = "shipment"

    order_id = Column(
        Integer, ForeignKey("order.id", ondelete="CASCADE"), nullable=False, index=True
    )
    client_id = Column(Integer, nullable=False)

    carrier = Column(String(50), nullable=False)
    # carrier AWB, or the manual reference while a booking is MANUAL_REQUIRED
    reference = Column(String(100), nullable=False)
    booking_type = Column(String(30), nullable=False)
    status = Column(String(30), nullable=False, default="booked")
    sub_status = Column(String(100), nullable=True)

    tracking_url = Column(String(500), nullable=True)
    amount_charged = Column(Numeric(20, 3), nullable=False, default=0)
    quote_source = Column(String(20), nullable=True)
    manual_instructions = Column(JSON, nullable=True)

    estimated_delivery = Column(TIMESTAMP(timezone=True), nullable=True)
    delivered_at = Column(TIMESTAMP(timezone=True), nullable=True)

    order = relationship("Order", back_populates="shipments", lazy="joined")
    tracking_events = relationship(
        "Shipment_Tracking",
        back_populates="shipment",
        lazy="selectin",
        order_by="desc(Shipment_Tracking.event_datetime)",
    )

    __table_args__ = (Index("ix_shipment_carrier_reference", "carrier", "reference"),)
