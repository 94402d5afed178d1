import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from pydantic import TypeAdapter, ValidationError

from shopsmart.errors import (
    DuplicateUser,
    Forbidden,
    InvalidCredentials,
    InvalidInput,
    NotFound,
    NotLoggedIn,
    PersistenceFailure,
)
from shopsmart.models import ApplicationState, CartLine, Product, Role, Transaction, User, Vendor
from shopsmart.persistence import KeyValueStore
from shopsmart.security import check_pin_format, hash_secret, verify_secret
from shopsmart.seed import seed_products, seed_vendors

logger = logging.getLogger(__name__)

# persisted key -> ApplicationState field
DOCUMENTS: dict[str, str] = {
    "users": "users",
    "current": "current_user_email",
    "products": "products",
    "vendors": "vendors",
    "cart": "cart",
    "likes": "likes",
    "transactions": "transactions",
}

Observer = Callable[[ApplicationState], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


_DOCUMENT_TYPES = {
    "users": (dict[str, User], dict),
    "current": (Optional[str], lambda: None),
    "products": (list[Product], seed_products),
    "vendors": (list[Vendor], seed_vendors),
    "cart": (list[CartLine], list),
    "likes": (list[str], list),
    "transactions": (dict[str, list[Transaction]], dict),
}


def _load_document(adapter: KeyValueStore, key: str):
    """Validate one stored document; a missing or invalid one yields its seed/default."""
    schema, default = _DOCUMENT_TYPES[key]
    raw = adapter.load(key)
    if raw is None:
        return default()
    try:
        return TypeAdapter(schema).validate_python(raw)
    except ValidationError as exc:
        logger.warning("Ignoring invalid %s document (%d errors)", key, exc.error_count())
        return default()


def load_state(adapter: KeyValueStore) -> ApplicationState:
    """Build the aggregate from stored documents, seeding whatever is absent or invalid."""
    documents = {key: _load_document(adapter, key) for key in DOCUMENTS}
    state = ApplicationState(
        users=documents["users"],
        current_user_email=documents["current"],
        products=documents["products"],
        vendors=documents["vendors"],
        cart=documents["cart"],
        likes=list(dict.fromkeys(documents["likes"])),
        transactions=documents["transactions"],
    )
    if state.current_user_email is not None and state.current_user_email not in state.users:
        logger.warning("Dropping unknown current user %s", state.current_user_email)
        state.current_user_email = None
    return state


class StateStore:
    """
    Sole owner of the ApplicationState.

    Engines in cart/wallet/checkout mutate ``state`` and then call
    :meth:`commit`; everything else reads through :meth:`get_state`.
    """

    def __init__(
        self,
        adapter: KeyValueStore,
        state: Optional[ApplicationState] = None,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[str], str] = _new_id,
    ) -> None:
        self.adapter = adapter
        self.state = state if state is not None else ApplicationState()
        self.clock = clock
        self.new_id = id_factory
        self.last_persistence_failure: Optional[PersistenceFailure] = None
        self._observers: list[Observer] = []

    @classmethod
    def open(cls, adapter: KeyValueStore, **kwargs) -> "StateStore":
        return cls(adapter, load_state(adapter), **kwargs)

    # ── snapshots & persistence ──────────────────────────────────────────────

    def get_state(self) -> ApplicationState:
        return self.state.model_copy(deep=True)

    def commit(self) -> bool:
        """Persist the whole aggregate and notify observers.

        A failed write is logged and remembered but never rolls back the
        in-memory state.
        """
        dumped = self.state.model_dump(mode="json")
        failed = []
        for key, field in DOCUMENTS.items():
            value = dumped[field]
            ok = self.adapter.remove(key) if value is None else self.adapter.save(key, value)
            if not ok:
                failed.append(key)

        if failed:
            self.last_persistence_failure = PersistenceFailure(
                f"Changes could not be saved: {', '.join(failed)}"
            )
            logger.error("Persistence failed for %s", failed)
        else:
            self.last_persistence_failure = None

        if self._observers:
            snapshot = self.get_state()
            for observer in list(self._observers):
                try:
                    observer(snapshot)
                except Exception:
                    logger.exception("State observer %r failed", observer)
        return not failed

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    # ── auth ─────────────────────────────────────────────────────────────────

    def current_user(self) -> Optional[User]:
        return self.state.current_user

    def require_user(self) -> User:
        user = self.state.current_user
        if user is None:
            raise NotLoggedIn()
        return user

    def register(self, name: str, email: str, password: str, role: Role | str = Role.CUSTOMER) -> User:
        name = (name or "").strip()
        email = (email or "").strip().lower()
        if not name or not email or not password:
            raise InvalidInput()
        try:
            role = Role(role)
        except ValueError:
            raise InvalidInput(f"Unknown role '{role}'")
        if email in self.state.users:
            raise DuplicateUser()

        user = User(email=email, display_name=name, password_hash=hash_secret(password), role=role)
        if role == Role.VENDOR:
            vendor = Vendor(
                id=self.new_id("v"),
                display_name=f"{name}'s Shop",
                category="Other",
                contact_email=email,
            )
            self.state.vendors.append(vendor)
            user.vendor_id = vendor.id

        self.state.users[email] = user
        self.state.current_user_email = email
        self.commit()
        logger.info("Registered %s user %s", role.value, email)
        return user

    def login(self, email: str, password: str) -> User:
        email = (email or "").strip().lower()
        if not email or not password:
            raise InvalidInput("Enter credentials")
        user = self.state.users.get(email)
        if user is None:
            raise NotFound(f"No user registered as '{email}'")
        if not verify_secret(password, user.password_hash):
            logger.info("Rejected login for %s", email)
            raise InvalidCredentials()
        self.state.current_user_email = email
        self.commit()
        logger.info("Logged in %s", email)
        return user

    def logout(self) -> None:
        self.state.current_user_email = None
        self.commit()

    # ── profile ──────────────────────────────────────────────────────────────

    def update_profile(
        self,
        display_name: Optional[str] = None,
        avatar: Optional[str] = None,
        pin: Optional[str] = None,
    ) -> User:
        """Apply the supplied settings together; blank values are left unchanged."""
        user = self.require_user()
        display_name = (display_name or "").strip()
        pin = (pin or "").strip()
        if pin:
            check_pin_format(pin)

        if display_name:
            user.display_name = display_name
        if avatar:
            user.avatar = avatar
        if pin:
            user.pin_hash = hash_secret(pin)
        self.commit()
        logger.info("Updated profile for %s", user.email)
        return user

    # ── vendors & catalog ────────────────────────────────────────────────────

    def register_vendor(self, name: str, category: str = "Other") -> Vendor:
        name = (name or "").strip()
        if not name:
            raise InvalidInput("Enter vendor name")
        user = self.state.current_user
        vendor = Vendor(
            id=self.new_id("v"),
            display_name=name,
            category=category or "Other",
            contact_email=user.email if user else "demo",
        )
        self.state.vendors.append(vendor)
        if user is not None and user.role != Role.VENDOR:
            user.role = Role.VENDOR
            user.vendor_id = vendor.id
        self.commit()
        logger.info("Registered vendor %s (%s)", vendor.display_name, vendor.id)
        return vendor

    def list_products(self, category: Optional[str] = None, vendor_id: Optional[str] = None) -> list[Product]:
        products = self.state.products
        if category and category != "All":
            products = [p for p in products if p.category == category]
        if vendor_id:
            products = [p for p in products if p.vendor_id == vendor_id]
        return [p.model_copy() for p in products]

    def delete_product(self, product_id: str) -> None:
        user = self.require_user()
        product = self.state.find_product(product_id)
        if product is None:
            raise NotFound(f"Product '{product_id}' not found")
        if user.vendor_id is None or product.vendor_id != user.vendor_id:
            raise Forbidden()

        self.state.products = [p for p in self.state.products if p.id != product_id]
        self.state.cart = [c for c in self.state.cart if c.product_id != product_id]
        self.state.likes = [pid for pid in self.state.likes if pid != product_id]
        self.commit()
        logger.info("Vendor %s deleted product %s", user.vendor_id, product_id)
