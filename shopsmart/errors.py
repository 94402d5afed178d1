class ShopError(ValueError):
    """Base class for every rejected storefront operation."""

    code = "shop_error"
    message = "Operation failed"
    status_code = 400

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class InvalidInput(ShopError):
    code = "invalid_input"
    message = "Please complete all required fields"


class DuplicateUser(ShopError):
    code = "duplicate_user"
    message = "A user with this email already exists"
    status_code = 409


class NotFound(ShopError):
    code = "not_found"
    message = "Not found"
    status_code = 404


class InvalidCredentials(ShopError):
    code = "invalid_credentials"
    message = "Invalid credentials"
    status_code = 401


class NotLoggedIn(ShopError):
    code = "not_logged_in"
    message = "Please login first"
    status_code = 401


class Forbidden(ShopError):
    code = "forbidden"
    message = "You do not own this item"
    status_code = 403


class UnknownProduct(ShopError):
    code = "unknown_product"
    message = "Product not found"
    status_code = 404


class InvalidAmount(ShopError):
    code = "invalid_amount"
    message = "Invalid amount"


class InvalidPin(ShopError):
    code = "invalid_pin"
    message = "PIN must be 4-6 digits"


class EmptyCart(ShopError):
    code = "empty_cart"
    message = "Cart empty"
    status_code = 409


class PinNotSet(ShopError):
    code = "pin_not_set"
    message = "PIN required for wallet payments. Set one in settings"
    status_code = 409


class InvalidPinEntered(ShopError):
    code = "invalid_pin_entered"
    message = "Invalid PIN"
    status_code = 403


class InsufficientFunds(ShopError):
    code = "insufficient_funds"
    message = "Insufficient funds"
    status_code = 402


class PersistenceFailure(ShopError):
    code = "persistence_failure"
    message = "Changes could not be saved"
    status_code = 500


def error_for_code(code: str) -> type[ShopError]:
    for cls in _ALL:
        if cls.code == code:
            return cls
    return ShopError


_ALL = (
    InvalidInput, DuplicateUser, NotFound, InvalidCredentials, NotLoggedIn,
    Forbidden, UnknownProduct, InvalidAmount, InvalidPin, EmptyCart,
    PinNotSet, InvalidPinEntered, InsufficientFunds, PersistenceFailure,
)
