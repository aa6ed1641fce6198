"""
Grocery storefront client - cart, catalog, checkout and back-office tooling
over an external REST backend.
"""

__version__ = "0.1.0"
