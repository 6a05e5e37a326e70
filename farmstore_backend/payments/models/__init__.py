# payments/models/__init__.py

from .transaction import Transaction

__all__ = ["Transaction"]
