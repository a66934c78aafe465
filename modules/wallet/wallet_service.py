import http
from decimal import Decimal
from psycopg2 import DatabaseError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from context_manager.context import context_user_data, get_db_session
from database.db import time_now
from logger import logger

# models
from models import Wallet, Wallet_Logs

# schema
from schema.base import GenericResponseModel
from modules.shipment.shipment_schema import LedgerEntry
from .wallet_schema import WalletResponseModel

from utils.exceptions import LedgerError


class WalletLedger:
    """
    Balance reads and debits against the wallet table. Every debit writes a
    wallet_logs row carrying the closing balance computed at write time.
    """

    def __init__(self, db: Session):
        self.db = db

    def check_balance(self, actor_id: int) -> Decimal:
        wallet = (
            self.db.query(Wallet)
            .filter(Wallet.client_id == actor_id, Wallet.is_deleted.is_(False))
            .first()
        )
        if wallet is None:
            return Decimal("0")
        return Decimal(str(wallet.amount))

    def debit(self, actor_id: int, amount: Decimal, reason: str, reference: str = None) -> LedgerEntry:
        # row lock keeps the closing balance consistent across concurrent debits
        wallet = (
            self.db.query(Wallet)
            .filter(Wallet.client_id == actor_id, Wallet.is_deleted.is_(False))
            .with_for_update()
            .first()
        )
        if wallet is None:
            raise LedgerError("wallet not found for client {}".format(actor_id))

        amount = Decimal(str(amount))
        closing_balance = Decimal(str(wallet.amount)) - amount
        wallet.amount = closing_balance

        created_at = time_now()
        log = Wallet_Logs(
            datetime=created_at,
            transaction_type="Freight",
            debit=amount,
            wallet_balance_amount=closing_balance,
            reference=reference,
            description=reason,
            client_id=actor_id,
            wallet_id=wallet.id,
        )

        self.db.add(wallet)
        self.db.add(log)
        self.db.flush()

        logger.info(
            msg="debited {} from client {} for {}, closing balance {}".format(
                amount, actor_id, reference, closing_balance
            )
        )

        return LedgerEntry(
            actor_id=actor_id,
            amount=amount,
            reason=reason,
            reference=reference,
            closing_balance=closing_balance,
            created_at=created_at,
        )


class WalletService:

    @staticmethod
    def get_balance():

        try:
            client_id = context_user_data.get().client_id

            db = get_db_session()

            wallet = db.query(Wallet).filter(Wallet.client_id == client_id).first()
            if wallet is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message="Wallet not found",
                )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                data=WalletResponseModel(client_id=client_id, amount=wallet.amount),
                message="successful",
            )

        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Error fetching balance: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Unable to get balance",
            )

        except Exception as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Unhandled error: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Unable to get balance",
            )
