"""Exception hierarchy for shopsync."""

from typing import Optional


class ShopifyAPIError(Exception):
    """Base exception for all shopsync errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ShopifyConfigError(ShopifyAPIError):
    """Missing credentials or a required option."""


class ShopifyAuthenticationError(ShopifyAPIError):
    """Invalid access token or store domain (HTTP 401)."""


class ShopifyPermissionError(ShopifyAPIError):
    """The access token lacks a required scope (HTTP 403)."""


class ShopifyNotFoundError(ShopifyAPIError):
    """The requested resource does not exist (HTTP 404)."""


class ThemeNotFoundError(ShopifyNotFoundError):
    """No theme matches the requested name or role."""


class ShopifyRateLimitError(ShopifyAPIError):
    """The store rejected the request because of rate limiting (HTTP 429)."""


class ShopifyNetworkError(ShopifyAPIError):
    """Connection, DNS or timeout failure."""


class ShopifyInvalidResponseError(ShopifyAPIError):
    """The server answered with something that is not the expected JSON."""


class SyncError(ShopifyAPIError):
    """Batch-level failure that aborts a pull or push before any mutation."""
