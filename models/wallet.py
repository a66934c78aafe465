from sqlalchemy import Column, Integer, Numeric

from database import DBBaseClass, DBBase


class Wallet(DBBase, DBBaseClass):
    __tablename__ = "wallet"

    amount = Column(Numeric(20, 3), nullable=False, default=0.0)
    client_id = Column(Integer, nullable=False, unique=True, index=True)
