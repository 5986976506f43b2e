"""Resource adapters: type-specific knowledge plugged into the sync engine."""

from .base import Resource, ResourceAdapter
from .collections import CollectionsAdapter
from .metafields import MetafieldsAdapter
from .pages import PagesAdapter
from .products import ProductsAdapter
from .redirects import RedirectsAdapter, redirect_handle
from .themes import ThemeAssetsAdapter, list_themes, resolve_theme
from .webhooks import WebhooksAdapter, webhook_handle

# Flat resource types selectable by name; themes need a theme selector
ADAPTERS: dict[str, type[ResourceAdapter]] = {
    "pages": PagesAdapter,
    "collections": CollectionsAdapter,
    "products": ProductsAdapter,
    "redirects": RedirectsAdapter,
    "webhooks": WebhooksAdapter,
    "metafields": MetafieldsAdapter,
}

__all__ = [
    "ADAPTERS",
    "Resource",
    "ResourceAdapter",
    "PagesAdapter",
    "CollectionsAdapter",
    "ProductsAdapter",
    "RedirectsAdapter",
    "WebhooksAdapter",
    "MetafieldsAdapter",
    "ThemeAssetsAdapter",
    "list_themes",
    "redirect_handle",
    "resolve_theme",
    "webhook_handle",
]
