"""HTTP routers."""

from spendwise.api.routes.spending import router as spending_router
from spendwise.api.routes.user import router as user_router

__all__ = ["spending_router", "user_router"]
