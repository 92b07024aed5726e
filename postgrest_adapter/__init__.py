"""PostgREST store adapter - async table client for Supabase's REST API."""

from .auth import ServiceRoleAuth
from .client import PostgRESTClient
from .config import PostgRESTSettings
from .exceptions import (
    FilterSyntaxError,
    PostgRESTAuthError,
    PostgRESTConflictError,
    PostgRESTError,
    PostgRESTNetworkError,
    PostgRESTNotFoundError,
    PostgRESTRateLimitError,
    PostgRESTServerError,
    PostgRESTValidationError,
)
from .filters import (
    Filter,
    Order,
    and_,
    eq,
    gte,
    in_,
    is_null,
    parse_filters,
    parse_order,
)

__version__ = "0.1.0"

__all__ = [
    # Main classes
    "PostgRESTClient",
    "PostgRESTSettings",
    "ServiceRoleAuth",
    # Exceptions
    "PostgRESTError",
    "PostgRESTAuthError",
    "PostgRESTNotFoundError",
    "PostgRESTValidationError",
    "PostgRESTConflictError",
    "PostgRESTRateLimitError",
    "PostgRESTServerError",
    "PostgRESTNetworkError",
    "FilterSyntaxError",
    # Filter grammar
    "Filter",
    "Order",
    "parse_filters",
    "parse_order",
    "eq",
    "gte",
    "in_",
    "is_null",
    "and_",
]
