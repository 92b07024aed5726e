"""API routers package."""
from app.api.ward_approvals import router as ward_approvals_router
from app.api.approvals import router as approvals_router
from app.api.activity import router as activity_router
from app.api.transactions import router as transactions_router
from app.api.swaps import router as swaps_router
from app.api.wards import router as wards_router
from app.api.internal import router as internal_router

__all__ = [
    "ward_approvals_router",
    "approvals_router",
    "activity_router",
    "transactions_router",
    "swaps_router",
    "wards_router",
    "internal_router",
]
