"""Resource adapter interface consumed by the sync engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Optional

from ..api import ShopifyClient
from ..auth import Credentials

if TYPE_CHECKING:
    from ..sync.scanner import LocalFile

Resource = dict[str, Any]


class ResourceAdapter(ABC):
    """Type-specific knowledge for one kind of store resource.

    The sync engine holds a reference to this interface only. Adapters
    supply listing, serialization and endpoint details; everything about
    planning, retries and failure isolation stays in the engine.
    """

    resource_name: str = ""
    """Lowercase noun used for the output subdirectory and log text"""

    file_extension: str = ""
    """Suffix of local files for this type"""

    recursive: bool = False
    """Whether local files live in a directory tree (theme assets)"""

    subdirectories: Optional[tuple[str, ...]] = None
    """Allowed top-level folders for recursive layouts"""

    def __init__(
        self,
        client_factory: Callable[[Credentials], ShopifyClient] = ShopifyClient,
    ):
        """Initialize the adapter.

        Args:
            client_factory: Builds an API client for a set of credentials
        """
        self._client_factory = client_factory
        self._clients: dict[Credentials, ShopifyClient] = {}
        self._remote_ids: Optional[dict[str, int]] = None

    def client(self, credentials: Credentials) -> ShopifyClient:
        """Return the (cached) API client for the given credentials."""
        if credentials not in self._clients:
            self._clients[credentials] = self._client_factory(credentials)
        return self._clients[credentials]

    def close(self) -> None:
        """Close every API client this adapter opened."""
        for client in self._clients.values():
            client.close()
        self._clients.clear()

    def prepare(self, credentials: Credentials) -> None:
        """Resolve batch-level targets before planning (no-op by default)."""

    @property
    def display_name(self) -> str:
        """Capitalized resource name for summaries ("Pages")."""
        return self.resource_name[:1].upper() + self.resource_name[1:]

    def local_path(self, root: Path) -> Path:
        """Directory holding this resource type below ``root``."""
        return root / self.resource_name

    def resource_file_path(self, directory: Path, resource: Resource) -> Path:
        """Path of the content file for a remote resource."""
        return directory / f"{self.handle_of(resource)}{self.file_extension}"

    def display_key(self, handle: str) -> str:
        """Name shown for an item in plans and progress lines."""
        return f"{handle}{self.file_extension}"

    def remember_remote(self, resources: list[Resource]) -> None:
        """Record ``handle -> id`` of the listed resources for later upserts."""
        self._remote_ids = {
            self.handle_of(resource): resource["id"]
            for resource in resources
            if resource.get("id") is not None
        }

    def remote_id(self, local_file: LocalFile) -> Optional[int]:
        """Remote id to update for a local file, or None to create it.

        Once the remote side has been listed, only listed ids count, so a
        stale sidecar id never turns a create into a failing update.
        """
        if self._remote_ids is not None:
            return self._remote_ids.get(local_file.handle)
        if local_file.metadata and local_file.metadata.get("id"):
            return int(local_file.metadata["id"])
        return None

    @abstractmethod
    def list_remote(self, credentials: Credentials) -> list[Resource]:
        """Return every remote resource of this type, in listing order."""

    @abstractmethod
    def handle_of(self, resource: Resource) -> str:
        """Return the resource's stable, unique handle."""

    @abstractmethod
    def extract_metadata(self, resource: Resource) -> Optional[dict[str, Any]]:
        """Return the sidecar record for a resource, or None for no sidecar."""

    @abstractmethod
    def download_one(
        self, credentials: Credentials, resource: Resource, directory: Path
    ) -> Path:
        """Write one resource's content below ``directory``; return the path."""

    @abstractmethod
    def upload_one(self, credentials: Credentials, local_file: LocalFile) -> Any:
        """Create or update the remote resource matching ``local_file.handle``."""

    @abstractmethod
    def delete_one(self, credentials: Credentials, resource: Resource) -> None:
        """Delete a remote resource.

        A ShopifyNotFoundError raised here means the resource is already
        gone; the engine counts it as a successful delete.
        """
