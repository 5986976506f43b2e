"""API client for the Shopify Admin REST API."""

from __future__ import annotations

import logging
import random
import time
from typing import Any

import httpx

from .auth import Credentials
from .config import config
from .exceptions import (
    ShopifyAPIError,
    ShopifyAuthenticationError,
    ShopifyInvalidResponseError,
    ShopifyNetworkError,
    ShopifyNotFoundError,
    ShopifyPermissionError,
    ShopifyRateLimitError,
)

logger = logging.getLogger(__name__)

# Largest page size the REST API accepts
PAGE_LIMIT = 250

SCOPE_HINTS = {
    "themes": "read_themes and write_themes",
    "pages": "read_online_store_pages and write_online_store_pages",
    "collections": "read_products and write_products",
    "redirects": "read_online_store_navigation and write_online_store_navigation",
}


class ShopifyClient:
    """Client for interacting with the Shopify Admin REST API."""

    def __init__(
        self,
        credentials: Credentials,
        api_version: str | None = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        timeout: float | None = None,
    ):
        """Initialize Shopify API client.

        Args:
            credentials: Store domain and access token
            api_version: Admin API version (uses config if not provided)
            max_retries: Maximum number of retries for rate limited requests
            retry_delay: Initial delay between retries in seconds
            timeout: Request timeout in seconds (uses config if not provided)
        """
        self.credentials = credentials
        self.api_version = api_version or config.api_version
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout if timeout is not None else config.timeout
        self._client: httpx.Client | None = None

    @property
    def base_url(self) -> str:
        """Versioned Admin API base URL for the store."""
        return f"https://{self.credentials.site}/admin/api/{self.api_version}"

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                headers={
                    "X-Shopify-Access-Token": self.credentials.access_token,
                    "Accept": "application/json",
                },
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
            )
        return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def __enter__(self) -> ShopifyClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def _calculate_retry_delay(self, attempt: int) -> float:
        """Calculate delay before next retry using exponential backoff.

        Args:
            attempt: Current attempt number (0-based)

        Returns:
            Delay in seconds
        """
        base_delay = self.retry_delay * (2**attempt)
        # +/- 25% jitter
        jitter = base_delay * 0.25 * (2 * random.random() - 1)
        return base_delay + jitter

    @staticmethod
    def _error_detail(response: httpx.Response) -> str | None:
        """Extract the server's error message from a response body, if any."""
        try:
            if not response.content:
                return None
            data = response.json()
        except ValueError:
            text = response.text.strip()
            return text[:200] or None
        if isinstance(data, dict):
            errors = data.get("errors") or data.get("error") or data.get("message")
            if errors:
                return str(errors)
        return None

    def _handle_http_error(
        self, response: httpx.Response, resource_type: str | None, context: str | None
    ) -> ShopifyAPIError:
        """Translate an HTTP error response into a shopsync exception.

        Args:
            response: Failed response
            resource_type: Resource name used to suggest missing scopes
            context: Short description of the operation ("delete page about")

        Returns:
            Exception to raise
        """
        status_code = response.status_code
        prefix = f"Failed to {context}: " if context else ""

        if status_code == 401:
            return ShopifyAuthenticationError(
                f"{prefix}Unauthorized - invalid access token or store domain. "
                "Verify your credentials.",
                status_code=status_code,
            )
        if status_code == 403:
            hint = SCOPE_HINTS.get(resource_type or "")
            scope_hint = f". Ensure your app has {hint} scopes" if hint else ""
            return ShopifyPermissionError(
                f"{prefix}Forbidden - missing required permissions{scope_hint}",
                status_code=status_code,
            )
        if status_code == 404:
            return ShopifyNotFoundError(
                f"{prefix}Resource not found (404)", status_code=status_code
            )
        if status_code == 429:
            return ShopifyRateLimitError(
                f"{prefix}Rate limit exceeded (429)", status_code=status_code
            )

        error_msg = f"{prefix}API request failed ({status_code})"
        detail = self._error_detail(response)
        if detail:
            error_msg = f"{error_msg}: {detail}"
        return ShopifyAPIError(error_msg, status_code=status_code)

    def _send(
        self,
        method: str,
        url: str,
        resource_type: str | None = None,
        context: str | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request, retrying only when rate limited.

        Transient failures other than 429 are raised immediately; the sync
        engine's retry policy decides whether to run the whole unit again.

        Raises:
            ShopifyAPIError: If the request fails
        """
        client = self._get_client()

        for attempt in range(self.max_retries + 1):
            try:
                response = client.request(method, url, **kwargs)
            except httpx.RequestError as e:
                raise ShopifyNetworkError(f"Network error: {e}") from e

            if response.is_success:
                return response

            error = self._handle_http_error(response, resource_type, context)
            if isinstance(error, ShopifyRateLimitError) and attempt < self.max_retries:
                retry_after = response.headers.get("Retry-After", "")
                try:
                    delay = float(retry_after)
                except ValueError:
                    delay = self._calculate_retry_delay(attempt)
                logger.debug(
                    "Rate limited on %s %s, retrying in %.1fs", method, url, delay
                )
                time.sleep(delay)
                continue
            raise error

        # Unreachable: the final attempt either returns or raises
        raise ShopifyAPIError("Request failed after all retry attempts")

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        """Decode a JSON response body ({} for an empty body)."""
        if not response.content:
            return {}
        content_type = response.headers.get("Content-Type", "")
        if "application/json" not in content_type:
            if "text/html" in content_type:
                raise ShopifyAuthenticationError(
                    "Invalid store domain - server returned HTML instead of JSON"
                )
            raise ShopifyInvalidResponseError(
                f"Unexpected response type: {content_type}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise ShopifyInvalidResponseError(
                "Invalid JSON response from server"
            ) from e

    def _request(
        self,
        method: str,
        endpoint: str,
        resource_type: str | None = None,
        context: str | None = None,
        **kwargs: Any,
    ) -> Any:
        """Make an API request and return the decoded JSON body.

        Args:
            method: HTTP method
            endpoint: Endpoint path relative to the versioned base URL
            resource_type: Resource name for permission hints
            context: Operation description for error messages
            **kwargs: Additional arguments passed to httpx

        Returns:
            Response JSON data
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        response = self._send(method, url, resource_type, context, **kwargs)
        return self._decode(response)

    def get(self, endpoint: str, **kwargs: Any) -> Any:
        return self._request("GET", endpoint, **kwargs)

    def post(self, endpoint: str, **kwargs: Any) -> Any:
        return self._request("POST", endpoint, **kwargs)

    def put(self, endpoint: str, **kwargs: Any) -> Any:
        return self._request("PUT", endpoint, **kwargs)

    def delete(self, endpoint: str, **kwargs: Any) -> Any:
        return self._request("DELETE", endpoint, **kwargs)

    def get_paginated(
        self,
        endpoint: str,
        key: str,
        params: dict[str, Any] | None = None,
        resource_type: str | None = None,
        context: str | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch every page of a list endpoint by following ``Link`` headers.

        Args:
            endpoint: List endpoint (e.g., "pages.json")
            key: Top-level key holding the items (e.g., "pages")
            params: Query parameters for the first page
            resource_type: Resource name for permission hints
            context: Operation description for error messages

        Returns:
            All items in listing order
        """
        query = {"limit": PAGE_LIMIT}
        query.update(params or {})
        url: str | None = f"{self.base_url}/{endpoint.lstrip('/')}"
        items: list[dict[str, Any]] = []
        page = 0

        while url:
            page += 1
            response = self._send(
                "GET", url, resource_type, context, params=query if page == 1 else None
            )
            data = self._decode(response)
            batch = data.get(key, []) if isinstance(data, dict) else []
            items.extend(batch)
            logger.debug("Fetched page %d of %s (%d items)", page, key, len(batch))
            url = response.links.get("next", {}).get("url")

        return items

    # =========================
    # Shop information
    # =========================

    def get_shop(self) -> dict[str, Any]:
        """Return the shop record, used to validate credentials."""
        data = self.get("shop.json", context="fetch shop information")
        shop: dict[str, Any] = data.get("shop", {})
        return shop

    def get_access_scopes(self) -> list[str]:
        """Return the access scopes granted to the token."""
        url = f"https://{self.credentials.site}/admin/oauth/access_scopes.json"
        data = self._decode(self._send("GET", url, context="fetch access scopes"))
        return [scope["handle"] for scope in data.get("access_scopes", [])]
