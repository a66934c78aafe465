from sqlalchemy import Column, Integer, ForeignKey, Numeric, String, TIMESTAMP

from database import DBBaseClass, DBBase


class Wallet_Logs(DBBase, DBBaseClass):
    __tablename__ = "wallet_logs"

    datetime = Column(TIMESTAMP(timezone=True), nullable=False)
    transaction_type = Column(String(20), nullable=False)

    credit = Column(Numeric(20, 3), nullable=True)
    debit = Column(Numeric(20, 3), nullable=True)
    # closing balance, computed when the row is written
    wallet_balance_amount = Column(Numeric(20, 3), nullable=False)

    reference = Column(String(255), nullable=True)
    description = Column(String(255), nullable=True)

    client_id = Column(Integer, nullable=False, index=True)
    wallet_id = Column(Integer, ForeignKey("wallet.id"), nullable=False)
