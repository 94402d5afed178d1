"""
Static bootstrap catalog.

Substituted for the ``products`` and ``vendors`` documents when they have
never been written.
"""

from decimal import Decimal

from shopsmart.models import Product, Vendor


def _img(seed: str) -> str:
    return f"https://picsum.photos/seed/{seed}/400/300"


SAMPLE_VENDORS = [
    Vendor(id="v1", display_name="FreshGoods", category="Food", contact_email="fresh@store.demo"),
    Vendor(id="v2", display_name="Stride Co", category="Shoes", contact_email="stride@store.demo"),
    Vendor(id="v3", display_name="UrbanWear", category="Clothes", contact_email="urban@store.demo"),
]

SAMPLE_PRODUCTS = [
    Product(id="p1", vendor_id="v1", display_name="Fresh Bread", category="Food",
            price=Decimal("300"), description="Homemade bread", image_ref=_img("bread")),
    Product(id="p2", vendor_id="v2", display_name="Running Shoes", category="Shoes",
            price=Decimal("4500"), description="Comfortable running shoes", image_ref=_img("shoes")),
    Product(id="p3", vendor_id="v3", display_name="Blue Shirt", category="Clothes",
            price=Decimal("2500"), description="Smart casual shirt", image_ref=_img("shirt")),
    Product(id="p4", vendor_id="v2", display_name="Leather Bag", category="Bags",
            price=Decimal("5200"), description="Stylish leather bag", image_ref=_img("bag")),
    Product(id="p5", vendor_id="v1", display_name="Spice Pack", category="Food",
            price=Decimal("800"), description="Assorted spices", image_ref=_img("spice")),
    Product(id="p6", vendor_id="v3", display_name="Canvas Sneakers", category="Shoes",
            price=Decimal("3800"), description="Casual sneakers", image_ref=_img("sneak")),
]

CATEGORIES = ["Food", "Shoes", "Clothes", "Bags", "Other"]


def seed_products() -> list[Product]:
    return [p.model_copy() for p in SAMPLE_PRODUCTS]


def seed_vendors() -> list[Vendor]:
    return [v.model_copy() for v in SAMPLE_VENDORS]
