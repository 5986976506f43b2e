"""shopsync - pull and push Shopify store resources as local files."""

from .api import ShopifyClient
from .auth import Credentials, resolve_credentials
from .exceptions import (
    ShopifyAPIError,
    ShopifyAuthenticationError,
    ShopifyConfigError,
    ShopifyInvalidResponseError,
    ShopifyNetworkError,
    ShopifyNotFoundError,
    ShopifyPermissionError,
    ShopifyRateLimitError,
    SyncError,
    ThemeNotFoundError,
)

__all__ = [
    "ShopifyClient",
    "Credentials",
    "resolve_credentials",
    "ShopifyAPIError",
    "ShopifyAuthenticationError",
    "ShopifyConfigError",
    "ShopifyInvalidResponseError",
    "ShopifyNetworkError",
    "ShopifyNotFoundError",
    "ShopifyPermissionError",
    "ShopifyRateLimitError",
    "SyncError",
    "ThemeNotFoundError",
]
