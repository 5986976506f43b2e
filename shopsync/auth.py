"""Credential resolution for the Shopify Admin API."""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .config import ACCESS_TOKEN_ENV_VAR, SITE_ENV_VAR, Config
from .exceptions import ShopifyConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credentials:
    """Store domain and access token used for every API call."""

    site: str
    """Store domain (e.g., mystore.myshopify.com)"""

    access_token: str
    """Admin API access token (starts with shpat_)"""


def normalize_site(site: str) -> str:
    """Strip scheme and trailing slashes from a store domain.

    Examples:
        >>> normalize_site("https://mystore.myshopify.com/")
        'mystore.myshopify.com'
    """
    site = site.strip()
    for prefix in ("https://", "http://"):
        if site.lower().startswith(prefix):
            site = site[len(prefix) :]
    return site.rstrip("/")


def resolve_credentials(
    site: Optional[str] = None,
    access_token: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Credentials:
    """Resolve credentials from explicit options first, environment second.

    Args:
        site: Store domain given on the command line
        access_token: Access token given on the command line
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Resolved credentials

    Raises:
        ShopifyConfigError: If either value cannot be found
    """
    env_config = Config(dict(environ) if environ is not None else None)

    if site and access_token:
        logger.debug("Using credentials from command line options")
    resolved_site = site or env_config.site
    resolved_token = access_token or env_config.access_token

    if not resolved_site or not resolved_token:
        missing = []
        if not resolved_site:
            missing.append("store domain")
        if not resolved_token:
            missing.append("access token")
        raise ShopifyConfigError(
            f"Missing {' and '.join(missing)}. Provide credentials either:\n"
            f"  1. As options: --site <shop>.myshopify.com --access-token <token>\n"
            f"  2. As environment variables: {SITE_ENV_VAR} and "
            f"{ACCESS_TOKEN_ENV_VAR}"
        )

    return Credentials(site=normalize_site(resolved_site), access_token=resolved_token)


def validate_required_options(options: Mapping[str, Any], required: list[str]) -> None:
    """Raise if any required option is missing or empty.

    Args:
        options: Option values keyed by name
        required: Names that must be present

    Raises:
        ShopifyConfigError: Naming every missing option
    """
    missing = [name for name in required if not options.get(name)]
    if missing:
        flags = ", ".join(f"--{name.replace('_', '-')}" for name in missing)
        raise ShopifyConfigError(f"Missing required option(s): {flags}")
