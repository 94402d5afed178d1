from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from shopsmart import cart, wallet
from shopsmart.checkout import CheckoutSession
from shopsmart.config import Settings
from shopsmart.errors import ShopError, error_for_code
from shopsmart.logging_config import configure_logging
from shopsmart.models import PaymentMethod, Role
from shopsmart.persistence import JsonFileStore, KeyValueStore
from shopsmart.store import StateStore

_SECRETS = {"password_hash", "pin_hash"}


# ── Request bodies ───────────────────────────────────────────────────────────

class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str
    role: Role = Role.CUSTOMER


class LoginRequest(BaseModel):
    email: str
    password: str


class ProfileRequest(BaseModel):
    display_name: Optional[str] = None
    avatar: Optional[str] = None
    pin: Optional[str] = None


class VendorRequest(BaseModel):
    name: str
    category: str = "Other"


class FundRequest(BaseModel):
    amount: Decimal | str


class CheckoutRequest(BaseModel):
    method: PaymentMethod
    pin: Optional[str] = None


def _public_user(user) -> dict:
    data = user.model_dump(mode="json", exclude=_SECRETS)
    data["has_pin"] = user.has_pin
    return data


def get_store(request: Request) -> StateStore:
    return request.app.state.store


def create_app(settings: Optional[Settings] = None, adapter: Optional[KeyValueStore] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if adapter is None:
            configure_logging(settings.log_dir, settings.log_level)
        app.state.store = StateStore.open(adapter or JsonFileStore(settings.data_dir))
        yield

    app = FastAPI(
        title="ShopSmart",
        version="1.0.0",
        description="Demo storefront: catalog, cart, PIN-protected wallet and ledger",
        lifespan=lifespan,
    )

    @app.exception_handler(ShopError)
    async def shop_error_handler(request: Request, exc: ShopError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.code, "detail": str(exc)})

    # ── State & auth ─────────────────────────────────────────────────────────

    @app.get("/api/v1/state", summary="Read-only snapshot of the application state")
    def read_state(store: StateStore = Depends(get_store)):
        snapshot = store.get_state()
        data = snapshot.model_dump(mode="json", exclude={"users"})
        data["users"] = {email: _public_user(u) for email, u in snapshot.users.items()}
        return data

    @app.post("/api/v1/auth/register", status_code=201, summary="Register and log in")
    def register(body: RegisterRequest, store: StateStore = Depends(get_store)):
        user = store.register(body.name, body.email, body.password, body.role)
        return _public_user(user)

    @app.post("/api/v1/auth/login")
    def login(body: LoginRequest, store: StateStore = Depends(get_store)):
        return _public_user(store.login(body.email, body.password))

    @app.post("/api/v1/auth/logout")
    def logout(store: StateStore = Depends(get_store)):
        store.logout()
        return {"status": "logged_out"}

    @app.put("/api/v1/profile", summary="Update display name, avatar and/or PIN")
    def update_profile(body: ProfileRequest, store: StateStore = Depends(get_store)):
        user = store.update_profile(body.display_name, body.avatar, body.pin)
        return _public_user(user)

    # ── Catalog & vendors ────────────────────────────────────────────────────

    @app.get("/api/v1/products")
    def list_products(
        category: Optional[str] = Query(default=None),
        vendor_id: Optional[str] = Query(default=None),
        store: StateStore = Depends(get_store),
    ):
        products = store.list_products(category=category, vendor_id=vendor_id)
        return {"products": [p.model_dump(mode="json") for p in products]}

    @app.delete("/api/v1/products/{product_id}", summary="Delete one of your own products")
    def delete_product(product_id: str, store: StateStore = Depends(get_store)):
        store.delete_product(product_id)
        return {"status": "deleted", "product_id": product_id}

    @app.get("/api/v1/vendors")
    def list_vendors(store: StateStore = Depends(get_store)):
        return {"vendors": [v.model_dump(mode="json") for v in store.get_state().vendors]}

    @app.post("/api/v1/vendors", status_code=201)
    def register_vendor(body: VendorRequest, store: StateStore = Depends(get_store)):
        return store.register_vendor(body.name, body.category).model_dump(mode="json")

    # ── Cart & likes ─────────────────────────────────────────────────────────

    @app.get("/api/v1/cart")
    def read_cart(store: StateStore = Depends(get_store)):
        return cart.cart_view(store).model_dump(mode="json")

    @app.post("/api/v1/cart/{product_id}", summary="Add one unit of a product")
    def add_to_cart(product_id: str, store: StateStore = Depends(get_store)):
        cart.add_to_cart(store, product_id)
        return cart.cart_view(store).model_dump(mode="json")

    @app.post("/api/v1/cart/{product_id}/increment")
    def increment_line(product_id: str, store: StateStore = Depends(get_store)):
        cart.increment_line(store, product_id)
        return cart.cart_view(store).model_dump(mode="json")

    @app.post("/api/v1/cart/{product_id}/decrement")
    def decrement_line(product_id: str, store: StateStore = Depends(get_store)):
        cart.decrement_line(store, product_id)
        return cart.cart_view(store).model_dump(mode="json")

    @app.delete("/api/v1/cart/{product_id}")
    def remove_line(product_id: str, store: StateStore = Depends(get_store)):
        cart.remove_line(store, product_id)
        return cart.cart_view(store).model_dump(mode="json")

    @app.delete("/api/v1/cart")
    def clear_cart(store: StateStore = Depends(get_store)):
        cart.clear_cart(store)
        return cart.cart_view(store).model_dump(mode="json")

    @app.post("/api/v1/likes/{product_id}")
    def toggle_like(product_id: str, store: StateStore = Depends(get_store)):
        liked = cart.toggle_like(store, product_id)
        return {"product_id": product_id, "liked": liked}

    @app.get("/api/v1/likes")
    def liked_products(store: StateStore = Depends(get_store)):
        return {"products": [p.model_dump(mode="json") for p in cart.liked_products(store)]}

    # ── Wallet, ledger & checkout ────────────────────────────────────────────

    @app.post("/api/v1/wallet/fund")
    def fund_wallet(body: FundRequest, store: StateStore = Depends(get_store)):
        txn = wallet.fund_wallet(store, body.amount)
        return {
            "balance": str(store.require_user().wallet_balance),
            "transaction": txn.model_dump(mode="json"),
        }

    @app.get("/api/v1/transactions")
    def list_transactions(store: StateStore = Depends(get_store)):
        user = store.require_user()
        txns = wallet.list_transactions(store, user.email)
        return {
            "transactions": [t.model_dump(mode="json") for t in txns],
            "lines": [wallet.format_transaction(t) for t in txns],
        }

    @app.post("/api/v1/checkout")
    def checkout(body: CheckoutRequest, store: StateStore = Depends(get_store)):
        result = CheckoutSession(store).begin().pay(body.method, body.pin)
        payload = result.model_dump(mode="json")
        if result.committed:
            return payload
        return JSONResponse(status_code=error_for_code(result.reason).status_code, content=payload)

    return app


app = create_app()
