"""User routes: signup, login, budget and join date."""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from spendwise.api.dependencies import get_components, get_correlation_id, get_current_user
from spendwise.models.schemas import (
    BudgetResponse,
    BudgetUpdateRequest,
    BudgetUpdateResponse,
    JoinDateResponse,
    LoginRequest,
    SignupRequest,
    SignupResponse,
    TokenResponse,
)
from spendwise.models.user import User
from spendwise.orchestrator import AppComponents


router = APIRouter(prefix="/user", tags=["user"])


# PUBLIC_INTERFACE
@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create an account with a zero budget.",
)
async def signup(
    payload: SignupRequest,
    components: AppComponents = Depends(get_components),
    correlation_id: UUID = Depends(get_correlation_id),
) -> SignupResponse:
    """Register a new user."""
    user = await components.credentials.register(
        name=payload.name,
        email=payload.email,
        password=payload.password,
        correlation_id=correlation_id,
    )
    return SignupResponse(message="User created successfully.", user_id=user.id)


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login",
    description="Verify email and password and issue a session token valid for one day.",
)
async def login(
    payload: LoginRequest,
    components: AppComponents = Depends(get_components),
    correlation_id: UUID = Depends(get_correlation_id),
) -> TokenResponse:
    """Exchange credentials for a token."""
    token, user = await components.credentials.login(
        email=payload.email,
        password=payload.password,
        correlation_id=correlation_id,
    )
    return TokenResponse(message="Login successful.", token=token, user_id=user.id)


# PUBLIC_INTERFACE
@router.put(
    "/budget",
    response_model=BudgetUpdateResponse,
    summary="Set budget",
    description="Overwrite the current budget with an absolute value. Existing records are not re-applied.",
)
async def update_budget(
    payload: BudgetUpdateRequest,
    user: User = Depends(get_current_user),
    components: AppComponents = Depends(get_components),
    correlation_id: UUID = Depends(get_correlation_id),
) -> BudgetUpdateResponse:
    """Set the budget to the given value."""
    stored = await components.spending.update_budget(
        user,
        payload.current_budget,
        correlation_id=correlation_id,
    )
    return BudgetUpdateResponse(
        message="Budget updated successfully.",
        current_budget=float(stored.current_budget),
    )


# PUBLIC_INTERFACE
@router.get(
    "/budget/current",
    response_model=BudgetResponse,
    summary="Current budget",
)
async def current_budget(user: User = Depends(get_current_user)) -> BudgetResponse:
    """Return the remaining budget."""
    return BudgetResponse(current_budget=float(user.current_budget))


# PUBLIC_INTERFACE
@router.get(
    "/joinDate",
    response_model=JoinDateResponse,
    summary="Join date",
)
async def join_date(user: User = Depends(get_current_user)) -> JoinDateResponse:
    """Return when the user signed up."""
    return JoinDateResponse(join_date=user.join_date)
