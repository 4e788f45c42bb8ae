"""
Spending routes.

Fixed paths (/range, /primary-tag, ...) are declared before the
/{record_id} routes.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from spendwise.api.dependencies import get_components, get_correlation_id, get_current_user
from spendwise.models.schemas import (
    DateRangeQuery,
    MessageResponse,
    SpendingListResponse,
    SpendingMutationResponse,
    SpendingRecordInput,
    SpendingRecordResponse,
    SpendingSummary,
)
from spendwise.models.user import TagKind, User
from spendwise.orchestrator import AppComponents


router = APIRouter(prefix="/spending", tags=["spending"])


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=SpendingMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create spending record",
    description="Record an expenditure and debit its price from the budget.",
)
async def create_spending(
    payload: SpendingRecordInput,
    user: User = Depends(get_current_user),
    components: AppComponents = Depends(get_components),
    correlation_id: UUID = Depends(get_correlation_id),
) -> SpendingMutationResponse:
    """Create a record; fails with InsufficientBudget if the price exceeds the budget."""
    record = await components.spending.create(user, payload, correlation_id=correlation_id)
    return SpendingMutationResponse(
        message="Spending record created successfully.",
        spending=SpendingRecordResponse.from_record(record),
    )


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=SpendingListResponse,
    summary="List spending records",
)
async def list_spending(
    user: User = Depends(get_current_user),
    components: AppComponents = Depends(get_components),
) -> SpendingListResponse:
    """All of the caller's records, in the order they were added."""
    return SpendingListResponse.from_records(components.spending.list_all(user))


# PUBLIC_INTERFACE
@router.get(
    "/range",
    response_model=SpendingListResponse,
    summary="List spending records by date range",
    description="Both the start and the end day are included in full.",
)
async def list_spending_by_range(
    start_date: str = Query(..., alias="startDate", description="First day, YYYY-MM-DD"),
    end_date: str = Query(..., alias="endDate", description="Last day, YYYY-MM-DD"),
    user: User = Depends(get_current_user),
    components: AppComponents = Depends(get_components),
    correlation_id: UUID = Depends(get_correlation_id),
) -> SpendingListResponse:
    """Records dated between startDate and endDate."""
    try:
        window = DateRangeQuery.model_validate({"startDate": start_date, "endDate": end_date})
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False)) from e
    records = await components.spending.list_by_range(
        user,
        window.start_date,
        window.end_date,
        correlation_id=correlation_id,
    )
    return SpendingListResponse.from_records(records)


# PUBLIC_INTERFACE
@router.get(
    "/primary-tag",
    response_model=SpendingListResponse,
    summary="List spending records by primary tag",
)
async def list_spending_by_primary_tag(
    primary_tag: str = Query(..., alias="primaryTag"),
    user: User = Depends(get_current_user),
    components: AppComponents = Depends(get_components),
    correlation_id: UUID = Depends(get_correlation_id),
) -> SpendingListResponse:
    """Records whose primary tag matches, case-insensitively."""
    records = await components.spending.list_by_tag(
        user,
        TagKind.PRIMARY,
        primary_tag,
        correlation_id=correlation_id,
    )
    return SpendingListResponse.from_records(records)


# PUBLIC_INTERFACE
@router.get(
    "/secondary-tag",
    response_model=SpendingListResponse,
    summary="List spending records by secondary tag",
)
async def list_spending_by_secondary_tag(
    secondary_tag: str = Query(..., alias="secondaryTag"),
    user: User = Depends(get_current_user),
    components: AppComponents = Depends(get_components),
    correlation_id: UUID = Depends(get_correlation_id),
) -> SpendingListResponse:
    """Records whose secondary tag matches, case-insensitively."""
    records = await components.spending.list_by_tag(
        user,
        TagKind.SECONDARY,
        secondary_tag,
        correlation_id=correlation_id,
    )
    return SpendingListResponse.from_records(records)


# PUBLIC_INTERFACE
@router.get(
    "/summary",
    response_model=SpendingSummary,
    summary="Spending summary",
    description="Total spent per tag, with the remaining budget.",
)
async def spending_summary(
    group_by: TagKind = Query(TagKind.PRIMARY, alias="groupBy"),
    user: User = Depends(get_current_user),
    components: AppComponents = Depends(get_components),
    correlation_id: UUID = Depends(get_correlation_id),
) -> SpendingSummary:
    """Group the caller's spending by primary or secondary tag."""
    return await components.spending.summarize(user, group_by, correlation_id=correlation_id)


# PUBLIC_INTERFACE
@router.put(
    "/{record_id}",
    response_model=SpendingMutationResponse,
    summary="Edit spending record",
    description="Replace a record. The budget moves by the price difference.",
)
async def edit_spending(
    record_id: UUID,
    payload: SpendingRecordInput,
    user: User = Depends(get_current_user),
    components: AppComponents = Depends(get_components),
    correlation_id: UUID = Depends(get_correlation_id),
) -> SpendingMutationResponse:
    """Edit one of the caller's records."""
    record = await components.spending.edit(
        user,
        record_id,
        payload,
        correlation_id=correlation_id,
    )
    return SpendingMutationResponse(
        message="Spending record updated successfully.",
        spending=SpendingRecordResponse.from_record(record),
    )


# PUBLIC_INTERFACE
@router.delete(
    "/{record_id}",
    response_model=MessageResponse,
    summary="Delete spending record",
    description="Remove a record and give its price back to the budget.",
)
async def delete_spending(
    record_id: UUID,
    user: User = Depends(get_current_user),
    components: AppComponents = Depends(get_components),
    correlation_id: UUID = Depends(get_correlation_id),
) -> MessageResponse:
    """Delete one of the caller's records."""
    await components.spending.delete(user, record_id, correlation_id=correlation_id)
    return MessageResponse(message="Spending record deleted successfully.")
