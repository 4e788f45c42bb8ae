"""
Request and Response Schemas

Every request body and query string has its own explicit schema.
Payloads are validated here, before they reach any domain logic.

Field names are camelCase on the wire and snake_case in Python.
"""

from datetime import date as Date, datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from spendwise.models.user import (
    CalendarDate,
    SpendingRecord,
    TagKind,
    normalize_tag,
)


class ApiModel(BaseModel):
    """Base for everything that crosses the HTTP boundary."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# USER REQUESTS
# =============================================================================

class SignupRequest(ApiModel):
    """Registration payload."""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class LoginRequest(ApiModel):
    """Login payload."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class BudgetUpdateRequest(ApiModel):
    """
    Absolute budget update.

    Any JSON value is accepted; the budget ledger decides whether it is
    a well-formed non-negative number.
    """

    current_budget: Any


# =============================================================================
# SPENDING REQUESTS
# =============================================================================

class SpendingRecordInput(ApiModel):
    """
    Payload for creating or editing a spending record.

    Edits are full replacements: optional tags that are left out
    are cleared on the stored record.
    """

    date: CalendarDate
    product: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    primary_tag: Optional[str] = Field(default=None, max_length=50)
    secondary_tag: Optional[str] = Field(default=None, max_length=50)

    @field_validator('primary_tag', 'secondary_tag')
    @classmethod
    def uppercase_tags(cls, v: Optional[str]) -> Optional[str]:
        return normalize_tag(v)


class DateRangeQuery(ApiModel):
    """Inclusive calendar-day range for listing records."""

    start_date: CalendarDate
    end_date: CalendarDate

    @model_validator(mode='after')
    def validate_order(self) -> 'DateRangeQuery':
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self


# =============================================================================
# RESPONSES
# =============================================================================

class MessageResponse(ApiModel):
    message: str


class SignupResponse(ApiModel):
    message: str
    user_id: UUID


class TokenResponse(ApiModel):
    """Issued session token."""
    message: str
    token: str
    user_id: UUID


class BudgetResponse(ApiModel):
    current_budget: float


class BudgetUpdateResponse(ApiModel):
    message: str
    current_budget: float


class JoinDateResponse(ApiModel):
    join_date: datetime


class SpendingRecordResponse(ApiModel):
    """A spending record as rendered to clients."""
    id: UUID
    date: Date
    product: str
    price: float
    primary_tag: Optional[str] = None
    secondary_tag: Optional[str] = None

    @classmethod
    def from_record(cls, record: SpendingRecord) -> 'SpendingRecordResponse':
        return cls(
            id=record.id,
            date=record.date,
            product=record.product,
            price=float(record.price),
            primary_tag=record.primary_tag,
            secondary_tag=record.secondary_tag,
        )


class SpendingMutationResponse(ApiModel):
    message: str
    spending: SpendingRecordResponse


class SpendingListResponse(ApiModel):
    spending_records: list[SpendingRecordResponse]

    @classmethod
    def from_records(cls, records: list[SpendingRecord]) -> 'SpendingListResponse':
        return cls(
            spending_records=[SpendingRecordResponse.from_record(r) for r in records]
        )


class SpendingSummary(ApiModel):
    """Spending totals grouped by one of the tag kinds."""
    group_by: TagKind
    record_count: int = Field(ge=0)
    total_spent: float
    current_budget: float
    breakdown: dict[str, float] = Field(default_factory=dict)


class FieldIssue(ApiModel):
    """A single field-level validation problem."""
    field: str
    message: str


class ErrorResponse(ApiModel):
    """Body of every error response."""
    error: str
    message: str
    errors: list[FieldIssue] = Field(default_factory=list)
