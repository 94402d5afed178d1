"""
Checkout state machine.

    Idle -> AwaitingPaymentMethod -> WalletPinCheck | DirectSettle -> Committed | Aborted

A session either commits everything (debit, ledger entry, cleared cart)
or aborts with a reason code and leaves cart, balance and ledger as they
were. The total is recomputed from the live cart at the moment of debit.
"""

from decimal import Decimal
from enum import Enum
import logging
from typing import Optional

from pydantic import BaseModel

from shopsmart.cart import compute_total
from shopsmart.errors import (
    EmptyCart,
    InsufficientFunds,
    InvalidInput,
    InvalidPinEntered,
    NotLoggedIn,
    PinNotSet,
    ShopError,
)
from shopsmart.models import LineItem, PaymentMethod, Transaction, TransactionKind, User
from shopsmart.security import verify_secret
from shopsmart.store import StateStore
from shopsmart.wallet import record_transaction

logger = logging.getLogger(__name__)


class CheckoutState(str, Enum):
    IDLE = "idle"
    AWAITING_PAYMENT_METHOD = "awaiting_payment_method"
    WALLET_PIN_CHECK = "wallet_pin_check"
    DIRECT_SETTLE = "direct_settle"
    COMMITTED = "committed"
    ABORTED = "aborted"


class CheckoutResult(BaseModel):
    state: CheckoutState
    method: PaymentMethod
    message: str
    reason: Optional[str] = None      # error code when aborted
    detour: Optional[str] = None      # view the caller should offer, e.g. "settings"
    amount: Optional[Decimal] = None
    transaction: Optional[Transaction] = None
    durable: bool = True

    @property
    def committed(self) -> bool:
        return self.state == CheckoutState.COMMITTED


class CheckoutSession:
    def __init__(self, store: StateStore) -> None:
        self.store = store
        self.state = CheckoutState.IDLE
        self.result: Optional[CheckoutResult] = None

    def begin(self) -> "CheckoutSession":
        if self.state != CheckoutState.IDLE:
            raise InvalidInput(f"Checkout already {self.state.value}")
        if not self.store.state.cart:
            raise EmptyCart()
        self.state = CheckoutState.AWAITING_PAYMENT_METHOD
        return self

    def pay(self, method: PaymentMethod | str, pin: Optional[str] = None) -> CheckoutResult:
        if self.state != CheckoutState.AWAITING_PAYMENT_METHOD:
            raise InvalidInput("Checkout is not awaiting a payment method")
        try:
            method = PaymentMethod(method)
        except ValueError:
            raise InvalidInput(f"Unknown payment method '{method}'")

        user = self.store.current_user()
        if user is None:
            return self._abort(method, NotLoggedIn("Please login to checkout"))
        if not self.store.state.cart:
            return self._abort(method, EmptyCart())

        if method == PaymentMethod.WALLET:
            return self._pay_from_wallet(user, pin)
        self.state = CheckoutState.DIRECT_SETTLE
        return self._settle(user, method, TransactionKind(method.value), compute_total(self.store))

    def _pay_from_wallet(self, user: User, pin: Optional[str]) -> CheckoutResult:
        self.state = CheckoutState.WALLET_PIN_CHECK
        method = PaymentMethod.WALLET
        if not user.has_pin:
            return self._abort(method, PinNotSet(), detour="settings")
        if not verify_secret(pin, user.pin_hash):
            return self._abort(method, InvalidPinEntered())

        total = compute_total(self.store)
        if user.wallet_balance < total:
            return self._abort(method, InsufficientFunds())
        return self._settle(user, method, TransactionKind.PURCHASE, total, debit=True)

    def _settle(
        self,
        user: User,
        method: PaymentMethod,
        kind: TransactionKind,
        total: Decimal,
        debit: bool = False,
    ) -> CheckoutResult:
        state = self.store.state
        snapshot = [LineItem(product_id=c.product_id, quantity=c.quantity) for c in state.cart]
        txn = record_transaction(self.store, user.email, kind, total, snapshot)
        if debit:
            user.wallet_balance = user.wallet_balance - total
        state.cart = []
        durable = self.store.commit()

        self.state = CheckoutState.COMMITTED
        logger.info("Checkout committed for %s via %s: %s", user.email, method.value, total)
        message = "Payment successful. Thank you!" if debit else "Payment simulated. Order placed."
        self.result = CheckoutResult(
            state=self.state,
            method=method,
            message=message,
            amount=total,
            transaction=txn.model_copy(deep=True),
            durable=durable,
        )
        return self.result

    def _abort(self, method: PaymentMethod, error: ShopError, detour: Optional[str] = None) -> CheckoutResult:
        self.state = CheckoutState.ABORTED
        logger.info("Checkout aborted (%s)", error.code)
        self.result = CheckoutResult(
            state=self.state,
            method=method,
            message=str(error),
            reason=error.code,
            detour=detour,
        )
        return self.result


def checkout(store: StateStore, method: PaymentMethod | str, pin: Optional[str] = None) -> CheckoutResult:
    """Run a whole checkout. Raises EmptyCart if there is nothing to buy."""
    return CheckoutSession(store).begin().pay(method, pin)
