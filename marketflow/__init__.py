"""In-memory storefront core: cart store and mock resource services."""

__version__ = "0.1.0"
