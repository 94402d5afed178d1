from pydantic import BaseModel, ConfigDict, Field
from enum import Enum
from datetime import datetime
from decimal import Decimal
from typing import Optional


class Role(str, Enum):
    CUSTOMER = "customer"
    VENDOR = "vendor"


class TransactionKind(str, Enum):
    PURCHASE = "purchase"
    FUND = "fund"
    CARD = "card"
    BANK = "bank"


class PaymentMethod(str, Enum):
    WALLET = "wallet"
    CARD = "card"
    BANK = "bank"


class User(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    email: str
    display_name: str
    password_hash: str
    role: Role = Role.CUSTOMER
    wallet_balance: Decimal = Field(default=Decimal("0"), ge=0)
    pin_hash: Optional[str] = None
    avatar: Optional[str] = None  # opaque data-URL blob
    vendor_id: Optional[str] = None

    @property
    def has_pin(self) -> bool:
        return self.pin_hash is not None


class Vendor(BaseModel):
    id: str
    display_name: str
    category: str
    contact_email: str


class Product(BaseModel):
    id: str
    vendor_id: str
    display_name: str
    category: str
    price: Decimal = Field(ge=0)
    description: str = ""
    image_ref: str = ""


class CartLine(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    product_id: str
    quantity: int = Field(default=1, ge=1)


class LineItem(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)


class Transaction(BaseModel):
    id: str
    owner_email: str
    kind: TransactionKind
    amount: Decimal = Field(ge=0)
    timestamp: datetime
    line_items: Optional[list[LineItem]] = None


class ApplicationState(BaseModel):
    users: dict[str, User] = Field(default_factory=dict)
    current_user_email: Optional[str] = None
    products: list[Product] = Field(default_factory=list)
    vendors: list[Vendor] = Field(default_factory=list)
    cart: list[CartLine] = Field(default_factory=list)
    likes: list[str] = Field(default_factory=list)  # set semantics, insertion ordered
    transactions: dict[str, list[Transaction]] = Field(default_factory=dict)

    def find_product(self, product_id: str) -> Optional[Product]:
        return next((p for p in self.products if p.id == product_id), None)

    def find_line(self, product_id: str) -> Optional[CartLine]:
        return next((c for c in self.cart if c.product_id == product_id), None)

    @property
    def current_user(self) -> Optional[User]:
        if self.current_user_email is None:
            return None
        return self.users.get(self.current_user_email)


# ── Read models ──────────────────────────────────────────────────────────────

class CartLineView(BaseModel):
    product: Product
    quantity: int
    subtotal: Decimal


class CartView(BaseModel):
    lines: list[CartLineView]
    item_count: int
    total: Decimal
