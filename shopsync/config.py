"""Configuration for shopsync.

Values come from environment variables with sensible defaults. Only the
command boundary (CLI and credential resolution) reads this module; the sync
engine receives everything it needs as explicit arguments.
"""

import os
from typing import Optional

DEFAULT_API_VERSION = "2023-10"
DEFAULT_TIMEOUT = 30.0

SITE_ENV_VAR = "SHOPIFY_STORE_DOMAIN"
ACCESS_TOKEN_ENV_VAR = "SHOPIFY_ACCESS_TOKEN"
API_VERSION_ENV_VAR = "SHOPSYNC_API_VERSION"


class Config:
    """Runtime configuration resolved from the environment."""

    # Retry settings for one unit of work (download, upload or delete)
    retry_max_attempts: int = 3
    retry_base_delay: float = 1.0
    retry_max_delay: float = 10.0

    def __init__(self, environ: Optional[dict[str, str]] = None):
        """Initialize configuration.

        Args:
            environ: Mapping to read variables from (defaults to os.environ)
        """
        self._environ = environ if environ is not None else os.environ

    @property
    def site(self) -> Optional[str]:
        """Store domain from SHOPIFY_STORE_DOMAIN."""
        return self._environ.get(SITE_ENV_VAR) or None

    @property
    def access_token(self) -> Optional[str]:
        """Admin API access token from SHOPIFY_ACCESS_TOKEN."""
        return self._environ.get(ACCESS_TOKEN_ENV_VAR) or None

    @property
    def api_version(self) -> str:
        """Admin REST API version."""
        return self._environ.get(API_VERSION_ENV_VAR) or DEFAULT_API_VERSION

    @property
    def timeout(self) -> float:
        """HTTP request timeout in seconds."""
        value = self._environ.get("SHOPSYNC_TIMEOUT")
        if value:
            try:
                return float(value)
            except ValueError:
                pass
        return DEFAULT_TIMEOUT

    def is_configured(self) -> bool:
        """Check whether both credentials are available from the environment."""
        return bool(self.site and self.access_token)


config = Config()
