"""Salted hash-and-compare for passwords and wallet PINs.

Secrets are never stored; only ``"<salt>$<sha256 hex>"`` digests are.
"""

import hashlib
import hmac
import re
import secrets

from shopsmart.errors import InvalidPin

_PIN_RE = re.compile(r"[0-9]{4,6}")


def hash_secret(secret: str) -> str:
    salt = secrets.token_hex(8)
    return f"{salt}${_digest(salt, secret)}"


def verify_secret(secret: str | None, stored: str | None) -> bool:
    if not secret or not stored or "$" not in stored:
        return False
    salt, expected = stored.split("$", 1)
    return hmac.compare_digest(_digest(salt, secret), expected)


def _digest(salt: str, secret: str) -> str:
    return hashlib.sha256(f"{salt}:{secret}".encode("utf-8")).hexdigest()


def check_pin_format(pin: str) -> str:
    """Return the PIN if it is 4 to 6 decimal digits, else raise InvalidPin."""
    if not isinstance(pin, str) or not _PIN_RE.fullmatch(pin):
        raise InvalidPin()
    return pin
