from decimal import Decimal, InvalidOperation

from shopsmart.errors import InvalidAmount

SYMBOL = "₦"
_TWO_DP = Decimal("0.01")

# Largest amount or balance accepted; keeps every sum well inside 28 significant digits.
MAX_AMOUNT = Decimal("1000000000000000.00")


def to_amount(value) -> Decimal:
    """Coerce user input to a 2 dp Decimal. Raises InvalidAmount if not a finite number."""
    if isinstance(value, bool) or value is None:
        raise InvalidAmount()
    try:
        amount = Decimal(str(value).strip())
        if not amount.is_finite() or abs(amount) > MAX_AMOUNT:
            raise InvalidAmount()
        return amount.quantize(_TWO_DP)
    except (InvalidOperation, ValueError):
        raise InvalidAmount()


def format_currency(amount: Decimal) -> str:
    return f"{SYMBOL}{Decimal(amount).quantize(_TWO_DP):,}"
