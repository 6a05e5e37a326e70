"""
PATH: customers/models/__init__.py

Customers models export surface.
"""

from .address import CustomerAddress
from .customer import Customer, CustomerManager

__all__ = [
    "Customer",
    "CustomerManager",
    "CustomerAddress",
]
