"""Service layer: business rules on top of the Database handle."""

from privfinos.services.accounts import AccountsService
from privfinos.services.categories import CategoriesService
from privfinos.services.transactions import TransactionsService

__all__ = [
    "AccountsService",
    "CategoriesService",
    "TransactionsService",
]
