"""Single units of sync work, each safe to retry."""

import logging
from pathlib import Path
from typing import Any

from ..auth import Credentials
from ..exceptions import ShopifyNotFoundError
from ..resources.base import Resource, ResourceAdapter
from .scanner import LocalFile, metadata_path, write_metadata

logger = logging.getLogger(__name__)


class SyncOperations:
    """Unified download/upload/delete operations over a resource adapter."""

    def __init__(self, adapter: ResourceAdapter):
        """Initialize sync operations.

        Args:
            adapter: Resource adapter for the synced type
        """
        self.adapter = adapter

    def download(
        self, credentials: Credentials, resource: Resource, directory: Path
    ) -> Path:
        """Download one resource and persist its metadata sidecar.

        Args:
            credentials: Store credentials
            resource: Remote resource to download
            directory: Local resource directory

        Returns:
            Path of the written content file
        """
        file_path = self.adapter.download_one(credentials, resource, directory)
        metadata = self.adapter.extract_metadata(resource)
        if metadata is not None:
            write_metadata(file_path, metadata)
        return file_path

    def upload(self, credentials: Credentials, local_file: LocalFile) -> Any:
        """Create or update the remote resource for a local file."""
        return self.adapter.upload_one(credentials, local_file)

    def delete_remote(self, credentials: Credentials, resource: Resource) -> bool:
        """Delete a remote resource.

        Returns:
            True if it was deleted, False if it was already absent
        """
        try:
            self.adapter.delete_one(credentials, resource)
        except ShopifyNotFoundError:
            logger.debug(
                "%s %s already absent remotely",
                self.adapter.resource_name,
                self.adapter.handle_of(resource),
            )
            return False
        return True

    def delete_local(self, local_file: LocalFile) -> None:
        """Delete a local resource file and its sidecar, if present."""
        local_file.file_path.unlink(missing_ok=True)
        metadata_path(local_file.file_path).unlink(missing_ok=True)
