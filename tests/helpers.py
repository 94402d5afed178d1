from datetime import datetime, timedelta, timezone
from decimal import Decimal

from shopsmart.persistence import MemoryKeyValueStore
from shopsmart.security import hash_secret
from shopsmart.store import StateStore

EMAIL = "ada@example.com"


class StepClock:
    """Deterministic clock: each call is one minute after the previous one."""

    def __init__(self, start=datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        current = self.now
        self.now += timedelta(minutes=1)
        return current


def make_store(adapter=None) -> StateStore:
    return StateStore.open(adapter or MemoryKeyValueStore(), clock=StepClock())


def login_shopper(store: StateStore, balance="0", pin=None):
    user = store.register("Ada", EMAIL, "secret")
    user.wallet_balance = Decimal(balance)
    if pin is not None:
        user.pin_hash = hash_secret(pin)
    store.commit()
    return user
