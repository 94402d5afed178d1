from decimal import Decimal
import logging

from shopsmart.errors import UnknownProduct
from shopsmart.models import CartLine, CartLineView, CartView, Product
from shopsmart.store import StateStore

logger = logging.getLogger(__name__)

_ZERO = Decimal("0.00")


# ── mutations ────────────────────────────────────────────────────────────────

def add_to_cart(store: StateStore, product_id: str) -> CartLine:
    state = store.state
    if state.find_product(product_id) is None:
        raise UnknownProduct(f"Product '{product_id}' not found")

    line = state.find_line(product_id)
    if line is not None:
        line.quantity += 1
    else:
        line = CartLine(product_id=product_id, quantity=1)
        state.cart.append(line)
    store.commit()
    logger.info("Added %s to cart (qty %d)", product_id, line.quantity)
    return line.model_copy()


def increment_line(store: StateStore, product_id: str) -> bool:
    """Bump an existing line by one. Returns False when there is no such line."""
    line = store.state.find_line(product_id)
    if line is None:
        return False
    line.quantity += 1
    store.commit()
    return True


def decrement_line(store: StateStore, product_id: str) -> bool:
    """Drop a line by one, removing it instead of reaching zero."""
    state = store.state
    line = state.find_line(product_id)
    if line is None:
        return False
    if line.quantity > 1:
        line.quantity -= 1
    else:
        state.cart = [c for c in state.cart if c.product_id != product_id]
    store.commit()
    return True


def remove_line(store: StateStore, product_id: str) -> None:
    state = store.state
    state.cart = [c for c in state.cart if c.product_id != product_id]
    store.commit()


def clear_cart(store: StateStore) -> None:
    store.state.cart = []
    store.commit()
    logger.info("Cleared cart")


def toggle_like(store: StateStore, product_id: str) -> bool:
    """Flip membership in the like set. Returns True if the product is now liked."""
    state = store.state
    liked = product_id not in state.likes
    if liked:
        state.likes.append(product_id)
    else:
        state.likes = [pid for pid in state.likes if pid != product_id]
    store.commit()
    return liked


# ── reads ────────────────────────────────────────────────────────────────────

def compute_total(store: StateStore) -> Decimal:
    """Sum price * quantity over lines whose product still exists."""
    state = store.state
    total = _ZERO
    for line in state.cart:
        product = state.find_product(line.product_id)
        if product is None:
            continue
        total += product.price * line.quantity
    return total.quantize(_ZERO)


def item_count(store: StateStore) -> int:
    return sum(line.quantity for line in store.state.cart)


def cart_view(store: StateStore) -> CartView:
    state = store.state
    lines = []
    for line in state.cart:
        product = state.find_product(line.product_id)
        if product is None:
            logger.debug("Skipping dangling cart line %s", line.product_id)
            continue
        lines.append(CartLineView(
            product=product.model_copy(),
            quantity=line.quantity,
            subtotal=(product.price * line.quantity).quantize(_ZERO),
        ))
    return CartView(lines=lines, item_count=item_count(store), total=compute_total(store))


def liked_products(store: StateStore) -> list[Product]:
    state = store.state
    products = (state.find_product(pid) for pid in state.likes)
    return [p.model_copy() for p in products if p is not None]
