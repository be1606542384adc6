# storefront/client/__init__.py
from storefront.client.gateway import ApiClient, ApiError, TokenStore
from storefront.client.local_history import LocalHistory
from storefront.client.optimistic_cart import AsyncCartAPI, OperationResult, OptimisticCart

__all__ = [
    "ApiClient",
    "ApiError",
    "AsyncCartAPI",
    "LocalHistory",
    "OperationResult",
    "OptimisticCart",
    "TokenStore",
]
