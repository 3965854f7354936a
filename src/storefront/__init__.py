"""Storefront commerce state engine.

Persisted cart, wishlist, session and address-book state with variant
resolution and order pricing for the Kalakari marketplace client.
"""
