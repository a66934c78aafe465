"""
Order Model

Only the fields this service reads or cascades into: identity, owner and the
shipping status mirrored from its shipment. Consignee, product and billing
columns live with the order management service.
"""

from sqlalchemy import Column, String, Integer, TIMESTAMP, Index
from sqlalchemy.orm import relationship

from database import DBBaseClass, DBBase


class Order(DBBase, DBBaseClass):

    __tablename__ = "order"

    order_id = Column(String(255), nullable=False)
    client_id = Column(Integer, nullable=False)

    # new -> booked -> in transit -> delivered | exception | returned
    status = Column(String(50), nullable=False, default="new")
    sub_status = Column(String(100), nullable=True)

    courier_partner = Column(String(50), nullable=True)
    awb_number = Column(String(100), nullable=True)
    booking_type = Column(String(30), nullable=True)
    delivered_date = Column(TIMESTAMP(timezone=True), nullable=True)

    shipments = relationship("Shipment", back_populates="order", lazy="noload")

    __table_args__ = (
        Index("ix_order_client_order_id", "client_id", "order_id", unique=True),
    )
