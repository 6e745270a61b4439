"""
PrivFinOS - Request/Response Schemas

Pydantic models for every entity:
- Row models (Category, Account, Transaction) as returned by the services
- Create/Update schemas validating request bodies
- Query schemas validating query strings

All models use camelCase aliases on the wire (parentId, sortOrder, ...) and
snake_case attributes in Python.

Update schemas make every field optional. Nullable columns accept an explicit
null to clear them; required columns may be omitted but never set to null.
"""

import json
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, List, Literal, Optional
from uuid import UUID

from pydantic import AfterValidator, AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"

# numeric(15, 2)
MAX_MONEY = Decimal("9999999999999.99")


# =============================================================================
# ENUMS
# =============================================================================

class CategoryType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class AccountType(str, Enum):
    CHECKING = "CHECKING"
    SAVINGS = "SAVINGS"
    CREDIT_CARD = "CREDIT_CARD"
    INVESTMENT = "INVESTMENT"
    CASH = "CASH"
    LOAN = "LOAN"
    OTHER = "OTHER"


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"


# =============================================================================
# FIELD TYPES
# =============================================================================

def _canonical_uuid(value):
    try:
        return str(UUID(value))
    except ValueError:
        raise ValueError("Invalid UUID") from None


_url_adapter = TypeAdapter(AnyUrl)


def _check_url(value):
    _url_adapter.validate_python(value)
    return value


UuidStr = Annotated[str, AfterValidator(_canonical_uuid)]
UrlStr = Annotated[str, AfterValidator(_check_url)]
Money = Annotated[Decimal, Field(ge=-MAX_MONEY, le=MAX_MONEY)]
Color = Annotated[str, Field(pattern=COLOR_PATTERN)]
Icon = Annotated[str, Field(max_length=50)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_json(self):
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# CATEGORY SCHEMAS
# =============================================================================

class Category(CamelModel):
    id: str
    name: str
    type: CategoryType
    color: Optional[str] = None
    icon: Optional[str] = None
    parent_id: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row):
        return cls.model_validate(dict(row))


class CategoryCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    type: CategoryType
    color: Optional[Color] = None
    icon: Optional[Icon] = None
    parent_id: Optional[UuidStr] = None
    sort_order: int = 0
    is_active: bool = True


class CategoryUpdate(CamelModel):
    name: str = Field(default=None, min_length=1, max_length=100)
    type: CategoryType = None
    color: Optional[Color] = None
    icon: Optional[Icon] = None
    parent_id: Optional[UuidStr] = None
    sort_order: int = None
    is_active: bool = None


class CategoryQuery(CamelModel):
    """parentId=null (or empty) selects root categories; omit it for no filter."""

    type: Optional[CategoryType] = None
    is_active: Optional[bool] = None
    parent_id: Optional[UuidStr] = None

    @field_validator("parent_id", mode="before")
    @classmethod
    def null_means_root(cls, value):
        if value in ("", "null"):
            return None
        return value

    @property
    def filters_parent(self):
        return "parent_id" in self.model_fields_set


# =============================================================================
# ACCOUNT SCHEMAS
# =============================================================================

class Account(CamelModel):
    id: str
    name: str
    type: AccountType
    balance: Decimal = Decimal("0.00")
    currency: str = "CAD"
    color: Optional[str] = None
    icon: Optional[str] = None
    is_active: bool = True
    notes: Optional[str] = None
    sort_order: int = 0
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row):
        return cls.model_validate(dict(row))


class AccountCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    type: AccountType
    balance: Money = Decimal("0")
    currency: str = Field(default="USD", min_length=3, max_length=3)
    color: Optional[Color] = None
    icon: Optional[Icon] = None
    is_active: bool = True
    notes: Optional[str] = Field(default=None, max_length=500)
    sort_order: int = 0


class AccountUpdate(CamelModel):
    name: str = Field(default=None, min_length=1, max_length=100)
    type: AccountType = None
    balance: Money = None
    currency: str = Field(default=None, min_length=3, max_length=3)
    color: Optional[Color] = None
    icon: Optional[Icon] = None
    is_active: bool = None
    notes: Optional[str] = Field(default=None, max_length=500)
    sort_order: int = None


class AccountQuery(CamelModel):
    type: Optional[AccountType] = None
    is_active: Optional[bool] = None


class AccountBalance(CamelModel):
    account_id: str
    balance: float
    currency: str


class TotalBalance(CamelModel):
    total: float
    currency: str
    account_count: int


# =============================================================================
# TRANSACTION SCHEMAS
# =============================================================================

class Transaction(CamelModel):
    id: str
    account_id: str
    category_id: Optional[str] = None
    type: TransactionType
    amount: Decimal
    description: str
    notes: Optional[str] = None
    date: datetime
    to_account_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    receipt_url: Optional[str] = None
    is_reconciled: bool = False
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row):
        data = dict(row)
        data["tags"] = json.loads(data.get("tags") or "[]")
        return cls.model_validate(data)


class TransactionCreate(CamelModel):
    account_id: UuidStr
    category_id: Optional[UuidStr] = None
    type: TransactionType
    amount: Money
    description: str = Field(min_length=1, max_length=200)
    notes: Optional[str] = Field(default=None, max_length=1000)
    date: datetime
    to_account_id: Optional[UuidStr] = None
    tags: List[str] = Field(default_factory=list)
    receipt_url: Optional[UrlStr] = None
    is_reconciled: bool = False


class TransactionUpdate(CamelModel):
    account_id: UuidStr = None
    category_id: Optional[UuidStr] = None
    type: TransactionType = None
    amount: Money = None
    description: str = Field(default=None, min_length=1, max_length=200)
    notes: Optional[str] = Field(default=None, max_length=1000)
    date: datetime = None
    to_account_id: Optional[UuidStr] = None
    tags: List[str] = None
    receipt_url: Optional[UrlStr] = None
    is_reconciled: bool = None


class TransactionQuery(CamelModel):
    account_id: Optional[UuidStr] = None
    category_id: Optional[UuidStr] = None
    type: Optional[TransactionType] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    search: Optional[str] = None
    limit: int = Field(default=50, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


# =============================================================================
# SHARED
# =============================================================================

class IdParam(CamelModel):
    id: UuidStr


class DeleteResult(CamelModel):
    success: bool = True
    message: str


class HealthCheck(CamelModel):
    status: Literal["ok", "error"]
    timestamp: str
    version: Optional[str] = None
