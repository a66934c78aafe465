from decimal import Decimal

import pytest

from models import Wallet, Wallet_Logs
from modules.wallet.wallet_service import WalletLedger
from utils.exceptions import LedgerError


@pytest.fixture
def ledger(db_session):
    db_session.add(Wallet(client_id=7, amount=Decimal("500")))
    db_session.flush()
    return WalletLedger(db_session)


def test_balance_of_known_and_unknown_client(ledger):
    assert ledger.check_balance(7) == Decimal("500")
    assert ledger.check_balance(99) == Decimal("0")


def test_debit_writes_log_with_closing_balance(ledger, db_session):
    entry = ledger.debit(7, Decimal("136"), reason="Shipping charge for order ORD-1", reference="AWB1")

    assert entry.closing_balance == Decimal("364")
    assert ledger.check_balance(7) == Decimal("364")

    logs = db_session.query(Wallet_Logs).all()
    assert len(logs) == 1
    assert Decimal(str(logs[0].debit)) == Decimal("136")
    assert Decimal(str(logs[0].wallet_balance_amount)) == Decimal("364")
    assert logs[0].reference == "AWB1"
    assert logs[0].transaction_type == "Freight"


def test_consecutive_debits_chain_closing_balances(ledger, db_session):
    ledger.debit(7, Decimal("100"), reason="first")
    second = ledger.debit(7, Decimal("150"), reason="second")

    assert second.closing_balance == Decimal("250")
    balances = sorted(
        Decimal(str(log.wallet_balance_amount)) for log in db_session.query(Wallet_Logs).all()
    )
    assert balances == [Decimal("250"), Decimal("400")]


def test_debit_without_wallet_raises(ledger):
    with pytest.raises(LedgerError):
        ledger.debit(99, Decimal("10"), reason="nothing to debit")


def test_rollback_discards_debit(ledger, db_session):
    db_session.commit()
    ledger.debit(7, Decimal("50"), reason="rolled back")
    db_session.rollback()

    assert ledger.check_balance(7) == Decimal("500")
    assert db_session.query(Wallet_Logs).count() == 0
