"""ShopSmart demo storefront core.

State lives in :mod:`shopsmart.store`; the cart, wallet and checkout
operations in :mod:`shopsmart.cart`, :mod:`shopsmart.wallet` and
:mod:`shopsmart.checkout` all take a :class:`~shopsmart.store.StateStore`.
"""
