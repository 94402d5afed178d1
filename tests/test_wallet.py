"""
Unit tests for wallet funding, PIN setup and the transaction ledger.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from helpers import EMAIL
from shopsmart.errors import InvalidAmount, InvalidPin, NotLoggedIn
from shopsmart.models import TransactionKind
from shopsmart.security import verify_secret
from shopsmart.wallet import (
    format_transaction,
    fund_wallet,
    list_transactions,
    record_transaction,
    set_pin,
)


class TestFundWallet:
    def test_fund_500(self, store, shopper):
        txn = fund_wallet(store, 500)
        assert shopper.wallet_balance == Decimal("1500")
        ledger = list_transactions(store, EMAIL)
        assert len(ledger) == 1
        assert ledger[0].id == txn.id
        assert ledger[0].kind == TransactionKind.FUND
        assert ledger[0].amount == Decimal("500")
        assert ledger[0].line_items is None

    @pytest.mark.parametrize("amount", [0, -5, "0", "-1.50", "abc", "", None, True, "nan", "inf", "1e30", "1e16"])
    def test_invalid_amount_leaves_state_unchanged(self, store, shopper, amount):
        with pytest.raises(InvalidAmount):
            fund_wallet(store, amount)
        assert shopper.wallet_balance == Decimal("1000")
        assert list_transactions(store, EMAIL) == []

    def test_balance_cap(self, store, shopper):
        fund_wallet(store, "999999999999000")
        with pytest.raises(InvalidAmount):
            fund_wallet(store, "1000000")
        assert shopper.wallet_balance == Decimal("1000000000000000")
        assert len(list_transactions(store, EMAIL)) == 1

    def test_numeric_string_accepted(self, store, shopper):
        fund_wallet(store, "250.50")
        assert shopper.wallet_balance == Decimal("1250.50")

    def test_fund_requires_login(self, store):
        with pytest.raises(NotLoggedIn):
            fund_wallet(store, 100)

    def test_fund_is_persisted(self, store, shopper, adapter):
        fund_wallet(store, 40)
        assert adapter.load("users")[EMAIL]["wallet_balance"] == "1040.00"
        assert adapter.load("transactions")[EMAIL][0]["kind"] == "fund"


class TestSetPin:
    @pytest.mark.parametrize("pin", ["1234", "00000", "987654"])
    def test_valid_pin(self, store, shopper, pin):
        set_pin(store, pin)
        assert verify_secret(pin, shopper.pin_hash)

    @pytest.mark.parametrize("pin", ["123", "1234567", "12a4", "", "12 34", "١٢٣٤"])
    def test_invalid_pin_rejected(self, store, shopper, pin):
        before = shopper.pin_hash
        with pytest.raises(InvalidPin):
            set_pin(store, pin)
        assert shopper.pin_hash == before

    def test_reset_does_not_need_old_pin(self, store, shopper):
        set_pin(store, "5555")
        assert verify_secret("5555", shopper.pin_hash)
        assert not verify_secret("1234", shopper.pin_hash)

    def test_pin_is_not_stored_in_clear(self, store, shopper, adapter):
        set_pin(store, "4321")
        stored = adapter.load("users")[EMAIL]
        assert "4321" not in stored.values()
        assert verify_secret("4321", stored["pin_hash"])


class TestLedger:
    def test_unknown_email_has_empty_ledger(self, store):
        assert list_transactions(store, "nobody@example.com") == []

    def test_entries_keep_call_order(self, store, shopper):
        fund_wallet(store, 10)
        fund_wallet(store, 20)
        fund_wallet(store, 30)
        ledger = list_transactions(store, EMAIL)
        assert [t.amount for t in ledger] == [Decimal("10"), Decimal("20"), Decimal("30")]
        assert ledger[0].timestamp <= ledger[1].timestamp <= ledger[2].timestamp

    def test_timestamps_never_go_backwards(self, store, shopper):
        times = iter([
            datetime(2026, 3, 1, tzinfo=timezone.utc),
            datetime(2026, 2, 1, tzinfo=timezone.utc),
        ])
        store.clock = lambda: next(times)
        first = record_transaction(store, EMAIL, TransactionKind.CARD, Decimal("1"))
        second = record_transaction(store, EMAIL, TransactionKind.BANK, Decimal("2"))
        assert second.timestamp == first.timestamp

    def test_listing_returns_copies(self, store, shopper):
        fund_wallet(store, 10)
        list_transactions(store, EMAIL)[0].amount = Decimal("999")
        assert list_transactions(store, EMAIL)[0].amount == Decimal("10")

    def test_format_transaction(self, store, shopper):
        txn = fund_wallet(store, 4000)
        assert format_transaction(txn) == "2026-01-01T12:00:00+00:00 | fund | ₦4,000.00"
