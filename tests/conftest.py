import pytest

from helpers import login_shopper, make_store
from shopsmart.persistence import MemoryKeyValueStore


@pytest.fixture
def adapter():
    return MemoryKeyValueStore()


@pytest.fixture
def store(adapter):
    return make_store(adapter)


@pytest.fixture
def shopper(store):
    return login_shopper(store, balance="1000", pin="1234")
