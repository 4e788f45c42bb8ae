"""
Data Models Package

This package contains all Pydantic models used in SpendWise.
All data flowing through the system must conform to these schemas.
"""

from spendwise.models.user import (
    UNTAGGED,
    SpendingRecord,
    TagKind,
    User,
)
from spendwise.models.schemas import (
    BudgetResponse,
    BudgetUpdateRequest,
    BudgetUpdateResponse,
    DateRangeQuery,
    ErrorResponse,
    FieldIssue,
    JoinDateResponse,
    LoginRequest,
    MessageResponse,
    SignupRequest,
    SignupResponse,
    SpendingListResponse,
    SpendingMutationResponse,
    SpendingRecordInput,
    SpendingRecordResponse,
    SpendingSummary,
    TokenResponse,
)
from spendwise.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Domain models
    "UNTAGGED",
    "SpendingRecord",
    "TagKind",
    "User",
    # Request/response schemas
    "BudgetResponse",
    "BudgetUpdateRequest",
    "BudgetUpdateResponse",
    "DateRangeQuery",
    "ErrorResponse",
    "FieldIssue",
    "JoinDateResponse",
    "LoginRequest",
    "MessageResponse",
    "SignupRequest",
    "SignupResponse",
    "SpendingListResponse",
    "SpendingMutationResponse",
    "SpendingRecordInput",
    "SpendingRecordResponse",
    "SpendingSummary",
    "TokenResponse",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
