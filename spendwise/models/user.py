"""
Core Data Models for SpendWise

These models define the strict schemas for the user document and the
spending records embedded in it. They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and logging

DESIGN DECISION: A user owns its spending records outright.
Records are embedded in the user document so the budget and the
records it was computed from always travel (and are written) together.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
)


UNTAGGED = "UNTAGGED"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_calendar_date(value: Any) -> Any:
    """
    Reduce ISO datetimes to their calendar date.

    Plain ISO dates pass through untouched. Aware datetimes are converted
    to UTC first so "2024-03-01T23:30:00-02:00" lands on 2 March.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and "T" in value:
        try:
            dt = datetime.fromisoformat(value.strip())
        except ValueError:
            return value
    else:
        return value

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.date()


def normalize_tag(value: Optional[str]) -> Optional[str]:
    """Upper-case a category label; empty labels are rejected."""
    if value is None:
        return None
    tag = value.strip()
    if not tag:
        raise ValueError("Tag cannot be empty")
    return tag.upper()


CalendarDate = Annotated[date, BeforeValidator(to_calendar_date)]


# =============================================================================
# ENUMS
# =============================================================================

class TagKind(str, Enum):
    """Which of the two category labels a query is about."""
    PRIMARY = "primary"
    SECONDARY = "secondary"


# =============================================================================
# SPENDING RECORD
# =============================================================================

class SpendingRecord(BaseModel):
    """
    A single dated expenditure owned by exactly one user.

    Created only through the spending manager, which debits the
    owner's budget by `price` in the same write.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Record ID, unique within the owner's collection"
    )
    date: CalendarDate = Field(
        ...,
        description="Calendar date of the expenditure"
    )
    product: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What was bought"
    )
    price: Decimal = Field(
        ...,
        gt=0,
        max_digits=14,
        decimal_places=2,
        description="Amount spent"
    )
    primary_tag: Optional[str] = Field(
        default=None,
        max_length=50,
        description="Main category label (upper-cased)"
    )
    secondary_tag: Optional[str] = Field(
        default=None,
        max_length=50,
        description="Secondary category label (upper-cased)"
    )

    @field_validator('primary_tag', 'secondary_tag')
    @classmethod
    def uppercase_tags(cls, v: Optional[str]) -> Optional[str]:
        return normalize_tag(v)

    def tag(self, kind: TagKind) -> Optional[str]:
        """Return the label of the given kind."""
        if kind == TagKind.PRIMARY:
            return self.primary_tag
        return self.secondary_tag


# =============================================================================
# USER
# =============================================================================

class User(BaseModel):
    """
    A registered user and everything they own.

    CRITICAL: `current_budget` is never negative at rest.
    The spending manager rejects any mutation that would break this.
    It is NOT reconciled against the spending history: setting the
    budget directly is allowed to drift from the sum of prices.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique user ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )
    email: str = Field(
        ...,
        min_length=3,
        max_length=254,
        description="Login email (unique, lower-cased)"
    )
    password_hash: str = Field(
        ...,
        repr=False,
        description="bcrypt hash, never exposed"
    )
    active_token: Optional[str] = Field(
        default=None,
        repr=False,
        description="Most recently issued session token"
    )
    current_budget: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        max_digits=14,
        decimal_places=2,
        description="Remaining budget"
    )
    spending: list[SpendingRecord] = Field(default_factory=list)
    join_date: datetime = Field(
        default_factory=utcnow,
        description="When the user signed up (UTC)"
    )

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    def find_record(self, record_id: UUID) -> Optional[SpendingRecord]:
        """Look up one of this user's records by ID."""
        for record in self.spending:
            if record.id == record_id:
                return record
        return None
