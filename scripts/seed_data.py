"""
Initialise a data directory for the demo.

Produces:
  - the 6-product / 3-vendor seed catalog
  - a customer account  demo@store.demo  / demo   (PIN 1234, balance 10 000)
  - a vendor account    vendor@store.demo / demo  owning a new shop
  - empty cart, likes and ledgers (the demo customer has one fund entry)

Usage:  python -m scripts.seed_data [DATA_DIR]
"""

import logging
import sys

from shopsmart.config import Settings
from shopsmart.models import Role
from shopsmart.persistence import JsonFileStore, KeyValueStore
from shopsmart.store import DOCUMENTS, StateStore
from shopsmart.wallet import fund_wallet, set_pin

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "demo"
DEMO_PIN = "1234"


def seed(adapter: KeyValueStore) -> StateStore:
    for key in DOCUMENTS:
        adapter.remove(key)
    store = StateStore.open(adapter)

    store.register("Vendor Demo", "vendor@store.demo", DEMO_PASSWORD, Role.VENDOR)
    store.register("Demo Shopper", "demo@store.demo", DEMO_PASSWORD, Role.CUSTOMER)
    set_pin(store, DEMO_PIN)
    fund_wallet(store, 10_000)
    store.logout()
    return store


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    data_dir = sys.argv[1] if len(sys.argv) > 1 else Settings.from_env().data_dir
    result = seed(JsonFileStore(data_dir))
    print(f"Seeded {data_dir}: {len(result.state.users)} users, "
          f"{len(result.state.products)} products, {len(result.state.vendors)} vendors")
