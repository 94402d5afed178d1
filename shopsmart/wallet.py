from decimal import Decimal
import logging
from typing import Iterable, Optional

from shopsmart.currency import MAX_AMOUNT, format_currency, to_amount
from shopsmart.errors import InvalidAmount
from shopsmart.models import LineItem, Transaction, TransactionKind, User
from shopsmart.security import check_pin_format, hash_secret
from shopsmart.store import StateStore

logger = logging.getLogger(__name__)


def fund_wallet(store: StateStore, amount) -> Transaction:
    user = store.require_user()
    value = to_amount(amount)
    if value <= 0:
        raise InvalidAmount()
    if user.wallet_balance + value > MAX_AMOUNT:
        raise InvalidAmount(f"Wallet balance cannot exceed {format_currency(MAX_AMOUNT)}")

    txn = record_transaction(store, user.email, TransactionKind.FUND, value)
    user.wallet_balance = user.wallet_balance + value
    store.commit()
    logger.info("Funded wallet of %s with %s", user.email, value)
    return txn


def set_pin(store: StateStore, new_pin: str) -> User:
    """First-set or reset; the old PIN is not required."""
    user = store.require_user()
    check_pin_format(new_pin)
    user.pin_hash = hash_secret(new_pin)
    store.commit()
    logger.info("PIN set for %s", user.email)
    return user


def record_transaction(
    store: StateStore,
    owner_email: str,
    kind: TransactionKind,
    amount: Decimal,
    line_items: Optional[Iterable[LineItem]] = None,
) -> Transaction:
    """Append to the owner's ledger. Does not commit; callers do."""
    ledger = store.state.transactions.setdefault(owner_email, [])
    timestamp = store.clock()
    # keep the ledger chronological even if the clock steps backwards
    if ledger and timestamp < ledger[-1].timestamp:
        timestamp = ledger[-1].timestamp
    txn = Transaction(
        id=store.new_id("tx"),
        owner_email=owner_email,
        kind=kind,
        amount=amount,
        timestamp=timestamp,
        line_items=list(line_items) if line_items is not None else None,
    )
    ledger.append(txn)
    return txn


def list_transactions(store: StateStore, email: str) -> list[Transaction]:
    return [t.model_copy(deep=True) for t in store.state.transactions.get(email, [])]


def format_transaction(txn: Transaction) -> str:
    return f"{txn.timestamp.isoformat()} | {txn.kind.value} | {format_currency(txn.amount)}"
