"""
PrivFinOS - Personal Finance Bookkeeping

A small REST API for personal bookkeeping backed by a single SQLite database:
- Categories (income/expense, with optional parent category)
- Accounts (checking, savings, credit cards, ...) with balance totals
- Transactions (income, expenses, transfers between accounts)

License: MIT
"""

__version__ = "1.0.0"
API_NAME = "PrivFinOS API"
