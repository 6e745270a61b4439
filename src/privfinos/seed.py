"""
PrivFinOS - Seed Data

Populates an empty database with a default set of categories and accounts:
- 6 income categories
- 10 expense categories, three of them with subcategories
  (Housing 4, Transportation 5, Food & Dining 4)
- 4 USD accounts (checking, savings, credit card, cash)

Optionally generates realistic fake transactions over the last 120 days with
Faker, for demos and UI work:
- Expenses drawn from per-category templates
- Monthly salary deposits
- Transfers from checking to savings

Everything goes through the service layer, so seed data obeys the same rules
as data created over the API.
"""

import random
from datetime import timedelta
from decimal import Decimal

from faker import Faker

from privfinos.db import utcnow
from privfinos.logger import get_logger
from privfinos.schemas import AccountCreate, CategoryCreate, TransactionCreate
from privfinos.services import AccountsService, CategoriesService, TransactionsService

log = get_logger(__name__)

HISTORY_DAYS = 120

INCOME_CATEGORIES = [
    {"name": "Salary", "color": "#10b981", "icon": "💼"},
    {"name": "Freelance", "color": "#3b82f6", "icon": "💻"},
    {"name": "Investment", "color": "#8b5cf6", "icon": "📈"},
    {"name": "Business", "color": "#f59e0b", "icon": "🏢"},
    {"name": "Gift", "color": "#ec4899", "icon": "🎁"},
    {"name": "Other Income", "color": "#6366f1", "icon": "💰"},
]

EXPENSE_CATEGORIES = [
    {"name": "Housing", "color": "#ef4444", "icon": "🏠"},
    {"name": "Transportation", "color": "#f97316", "icon": "🚗"},
    {"name": "Food & Dining", "color": "#84cc16", "icon": "🍽️"},
    {"name": "Utilities", "color": "#06b6d4", "icon": "⚡"},
    {"name": "Healthcare", "color": "#ef4444", "icon": "🏥"},
    {"name": "Entertainment", "color": "#ec4899", "icon": "🎬"},
    {"name": "Shopping", "color": "#a855f7", "icon": "🛍️"},
    {"name": "Education", "color": "#3b82f6", "icon": "📚"},
    {"name": "Personal Care", "color": "#8b5cf6", "icon": "💆"},
    {"name": "Other Expense", "color": "#64748b", "icon": "📦"},
]

# Subcategories inherit the parent's color
SUBCATEGORIES = {
    "Housing": ["Rent/Mortgage", "Property Tax", "Home Insurance", "Repairs & Maintenance"],
    "Transportation": ["Gas/Fuel", "Car Payment", "Car Insurance", "Public Transit", "Parking"],
    "Food & Dining": ["Groceries", "Restaurants", "Coffee Shops", "Delivery"],
}

ACCOUNTS = [
    {"name": "Checking Account", "type": "CHECKING", "balance": "5000.00", "color": "#3b82f6", "icon": "🏦"},
    {"name": "Savings Account", "type": "SAVINGS", "balance": "10000.00", "color": "#10b981", "icon": "💰"},
    {
        "name": "Credit Card",
        "type": "CREDIT_CARD",
        "balance": "-500.00",
        "color": "#ef4444",
        "icon": "💳",
        "notes": "Main credit card for rewards",
    },
    {"name": "Cash", "type": "CASH", "balance": "200.00", "color": "#84cc16", "icon": "💵"},
]

# (category, min, max) for generated expenses
EXPENSE_TEMPLATES = [
    ("Groceries", 40, 120),
    ("Restaurants", 12, 65),
    ("Coffee Shops", 4, 12),
    ("Gas/Fuel", 35, 55),
    ("Utilities", 60, 150),
    ("Shopping", 25, 200),
    ("Entertainment", 20, 80),
    ("Healthcare", 15, 150),
]


def seed_categories(categories):
    """Create the default category tree. Returns {name: Category}."""
    created = {}

    for sort_order, fields in enumerate(INCOME_CATEGORIES, start=1):
        created[fields["name"]] = categories.create(
            CategoryCreate(type="INCOME", sort_order=sort_order, **fields)
        )
    print(f"[SEED] Created {len(INCOME_CATEGORIES)} income categories")

    for sort_order, fields in enumerate(EXPENSE_CATEGORIES, start=1):
        created[fields["name"]] = categories.create(
            CategoryCreate(type="EXPENSE", sort_order=sort_order, **fields)
        )
    print(f"[SEED] Created {len(EXPENSE_CATEGORIES)} expense categories")

    for parent_name, names in SUBCATEGORIES.items():
        parent = created[parent_name]
        for sort_order, name in enumerate(names, start=1):
            created[name] = categories.create(CategoryCreate(
                name=name,
                type="EXPENSE",
                color=parent.color,
                parent_id=parent.id,
                sort_order=sort_order,
            ))
        print(f"[SEED] Created {len(names)} {parent_name} subcategories")

    return created


def seed_accounts(accounts):
    """Create the default accounts. Returns {type: Account}."""
    created = {}
    for sort_order, fields in enumerate(ACCOUNTS, start=1):
        account = accounts.create(AccountCreate(currency="USD", sort_order=sort_order, **fields))
        created[account.type] = account
    print(f"[SEED] Created {len(created)} accounts")
    return created


def generate_transactions(transactions, categories, accounts, count, seed=None):
    """
    Generate `count` fake transactions spread over the last HISTORY_DAYS days.

    Roughly 80% are expenses (checking or credit card), 10% salary income
    into checking and 10% transfers from checking to savings.
    """
    fake = Faker()
    rng = random.Random(seed)
    if seed is not None:
        fake.seed_instance(seed)

    end = utcnow()
    start = end - timedelta(days=HISTORY_DAYS)
    checking, savings = accounts["CHECKING"], accounts["SAVINGS"]
    credit_card = accounts["CREDIT_CARD"]

    for _ in range(count):
        date = fake.date_time_between(start_date=start, end_date=end, tzinfo=end.tzinfo)
        roll = rng.random()

        if roll < 0.1:
            data = TransactionCreate(
                account_id=checking.id,
                category_id=categories["Salary"].id,
                type="INCOME",
                amount=Decimal("2100.00"),
                description=f"Paycheck - {fake.company()}",
                date=date,
            )
        elif roll < 0.2:
            data = TransactionCreate(
                account_id=checking.id,
                to_account_id=savings.id,
                type="TRANSFER",
                amount=Decimal(rng.randint(200, 500)),
                description="Monthly Savings",
                date=date,
            )
        else:
            name, low, high = rng.choice(EXPENSE_TEMPLATES)
            account = checking if rng.random() < 0.8 else credit_card
            data = TransactionCreate(
                account_id=account.id,
                category_id=categories[name].id,
                type="EXPENSE",
                amount=Decimal(str(round(rng.uniform(low, high), 2))),
                description=fake.company(),
                date=date,
                tags=[name.lower()],
            )
        transactions.create(data)

    print(f"[SEED] Generated {count} transactions from {start.date()} to {end.date()}")
    return count


def seed_database(db, transactions=0, seed=None):
    """
    Seed the default categories and accounts, plus optional demo transactions.

    Args:
        db (Database): Open database with the schema created
        transactions (int): Number of fake transactions to generate
        seed (int): Random seed for reproducible demo data

    Returns:
        dict: Counts of what was created
    """
    print("[SEED] Starting database seed...")
    categories = seed_categories(CategoriesService(db))
    accounts = seed_accounts(AccountsService(db))

    generated = 0
    if transactions > 0:
        generated = generate_transactions(TransactionsService(db), categories, accounts, transactions, seed)

    summary = {
        "income_categories": len(INCOME_CATEGORIES),
        "expense_categories": len(EXPENSE_CATEGORIES),
        "subcategories": sum(len(names) for names in SUBCATEGORIES.values()),
        "accounts": len(accounts),
        "transactions": generated,
    }
    log.info("database_seeded", **summary)
    print("[SEED] Database seeding completed successfully!")
    return summary
