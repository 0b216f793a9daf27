"""MARKETBASE

Bootstraps the record-storage backend of a small marketplace (shops, products,
affiliates and sales) on top of a generic record store: it seeds the
administrator principal, reconciles the collection schema and computes sale
commissions when sales are created.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
