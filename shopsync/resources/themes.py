"""Theme assets, stored as a directory tree per theme."""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Optional

from ..api import ShopifyClient
from ..auth import Credentials
from ..exceptions import ShopifyConfigError, ShopifyNotFoundError, ThemeNotFoundError
from ..utils import THEME_DIRECTORIES, format_size, is_binary_file
from .base import Resource, ResourceAdapter

if TYPE_CHECKING:
    from ..sync.scanner import LocalFile

logger = logging.getLogger(__name__)

PUBLISHED_FOLDER = "published"
PUBLISHED_ROLES = ("main", "published")


def list_themes(client: ShopifyClient) -> list[dict[str, Any]]:
    """Return every theme of the store."""
    data = client.get("themes.json", resource_type="themes", context="fetch themes list")
    themes: list[dict[str, Any]] = data.get("themes", [])
    return themes


def resolve_theme(
    themes: list[dict[str, Any]], name: Optional[str], published: bool = False
) -> dict[str, Any]:
    """Pick the target theme by name or by its published role.

    Args:
        themes: Themes as listed by the store
        name: Theme name, matched case-insensitively
        published: Select the live theme instead of matching by name

    Returns:
        The matching theme

    Raises:
        ShopifyConfigError: If neither a name nor ``published`` is given
        ThemeNotFoundError: If no theme matches; the message lists the
            available themes
    """
    if published:
        for theme in themes:
            if theme.get("role") in PUBLISHED_ROLES:
                return theme
        available = ", ".join(f'"{t.get("name")}" (role: {t.get("role")})' for t in themes)
        raise ThemeNotFoundError(
            f"No published theme found. Available themes: {available}"
        )

    if not name:
        raise ShopifyConfigError("Theme name is required when --published is not used")

    for theme in themes:
        if str(theme.get("name", "")).lower() == name.lower():
            return theme
    available = ", ".join(f'"{t.get("name")}"' for t in themes)
    raise ThemeNotFoundError(f'Theme "{name}" not found. Available themes: {available}')


class ThemeAssetsAdapter(ResourceAdapter):
    """Sync the assets of one theme as files below the theme folder.

    The asset key (``templates/index.json``) is the handle and the relative
    path of the local file. Assets carry no metadata sidecar.
    """

    resource_name = "themes"
    file_extension = ""
    recursive = True
    subdirectories = THEME_DIRECTORIES

    def __init__(
        self,
        theme_name: Optional[str] = None,
        published: bool = False,
        client_factory: Callable[[Credentials], ShopifyClient] = ShopifyClient,
    ):
        """Initialize the adapter.

        Args:
            theme_name: Name of the theme to sync
            published: Sync the published theme instead of ``theme_name``
            client_factory: Builds an API client for a set of credentials
        """
        super().__init__(client_factory)
        self.theme_name = theme_name
        self.published = published
        self.theme: Optional[dict[str, Any]] = None

    def prepare(self, credentials: Credentials) -> None:
        self._resolve(credentials)

    def _resolve(self, credentials: Credentials) -> dict[str, Any]:
        themes = list_themes(self.client(credentials))
        theme = resolve_theme(themes, self.theme_name, self.published)
        logger.debug('Resolved theme "%s" (ID: %s)', theme.get("name"), theme.get("id"))
        self.theme = theme
        return theme

    @property
    def folder_name(self) -> str:
        """Local folder of the theme: its name, or ``published``."""
        if self.published:
            return PUBLISHED_FOLDER
        if self.theme is not None:
            return str(self.theme["name"])
        return self.theme_name or ""

    @property
    def display_name(self) -> str:
        return "Assets"

    def local_path(self, root: Path) -> Path:
        return root / self.resource_name / self.folder_name

    def _theme_id(self, credentials: Credentials) -> Any:
        theme = self.theme if self.theme is not None else self._resolve(credentials)
        return theme["id"]

    def is_synced_key(self, key: str) -> bool:
        """Whether an asset key lies in a folder the local scan also reads."""
        parts = key.split("/")
        return len(parts) >= 2 and parts[0] in (self.subdirectories or ())

    def list_remote(self, credentials: Credentials) -> list[Resource]:
        """List the theme's assets below the known theme folders.

        Uses the same folder rule as the local scan, so both sides of a
        plan see the same set of keys.
        """
        theme_id = self._theme_id(credentials)
        data = self.client(credentials).get(
            f"themes/{theme_id}/assets.json",
            resource_type="themes",
            context=f"fetch assets for theme (ID: {theme_id})",
        )
        assets: list[Resource] = []
        for asset in data.get("assets", []):
            if self.is_synced_key(str(asset["key"])):
                assets.append(asset)
            else:
                logger.debug("Skipping asset %s: not in a theme folder", asset["key"])
        return assets

    def handle_of(self, resource: Resource) -> str:
        return str(resource["key"])

    def extract_metadata(self, resource: Resource) -> Optional[dict[str, Any]]:
        return None

    def resource_file_path(self, directory: Path, resource: Resource) -> Path:
        return directory / self.handle_of(resource)

    def download_one(
        self, credentials: Credentials, resource: Resource, directory: Path
    ) -> Path:
        """Fetch one asset and write it below ``directory``.

        Text assets come back as ``value``, binary ones as a base64
        ``attachment``.
        """
        theme_id = self._theme_id(credentials)
        key = self.handle_of(resource)
        try:
            data = self.client(credentials).get(
                f"themes/{theme_id}/assets.json",
                params={"asset[key]": key},
                resource_type="themes",
                context=f"download theme asset '{key}'",
            )
        except ShopifyNotFoundError as e:
            raise ShopifyNotFoundError(
                f"Failed to download theme asset '{key}': Asset not found in theme "
                f"(ID: {theme_id}). The asset may have been deleted.",
                status_code=e.status_code,
            ) from e

        asset = data.get("asset", {})
        file_path = self.resource_file_path(directory, resource)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        if asset.get("attachment"):
            content = base64.b64decode(asset["attachment"])
            file_path.write_bytes(content)
            logger.debug("Wrote %s (%s)", key, format_size(len(content)))
        else:
            file_path.write_text(asset.get("value") or "", encoding="utf-8")
        return file_path

    def upload_one(self, credentials: Credentials, local_file: LocalFile) -> Any:
        theme_id = self._theme_id(credentials)
        asset: dict[str, Any] = {"key": local_file.handle}
        if is_binary_file(local_file.file_path):
            asset["attachment"] = base64.b64encode(
                local_file.file_path.read_bytes()
            ).decode("ascii")
        else:
            asset["value"] = local_file.file_path.read_text(encoding="utf-8")

        return self.client(credentials).put(
            f"themes/{theme_id}/assets.json",
            json={"asset": asset},
            resource_type="themes",
            context=f"upload theme asset '{local_file.handle}'",
        )

    def delete_one(self, credentials: Credentials, resource: Resource) -> None:
        theme_id = self._theme_id(credentials)
        key = self.handle_of(resource)
        self.client(credentials).delete(
            f"themes/{theme_id}/assets.json",
            params={"asset[key]": key},
            resource_type="themes",
            context=f"delete theme asset '{key}'",
        )
