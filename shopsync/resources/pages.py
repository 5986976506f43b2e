"""Online store pages, stored as HTML bodies."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from ..auth import Credentials
from .base import Resource, ResourceAdapter

if TYPE_CHECKING:
    from ..sync.scanner import LocalFile

logger = logging.getLogger(__name__)


class PagesAdapter(ResourceAdapter):
    """Sync pages as ``<handle>.html`` with title and flags in the sidecar."""

    resource_name = "pages"
    file_extension = ".html"

    def list_remote(self, credentials: Credentials) -> list[Resource]:
        pages = self.client(credentials).get_paginated(
            "pages.json", "pages", resource_type="pages", context="fetch pages"
        )
        self.remember_remote(pages)
        return pages

    def handle_of(self, resource: Resource) -> str:
        return str(resource["handle"])

    def extract_metadata(self, resource: Resource) -> Optional[dict[str, Any]]:
        return {
            "id": resource.get("id"),
            "title": resource.get("title"),
            "handle": resource.get("handle"),
            "author": resource.get("author"),
            "published": resource.get("published_at") is not None,
            "template_suffix": resource.get("template_suffix"),
        }

    def download_one(
        self, credentials: Credentials, resource: Resource, directory: Path
    ) -> Path:
        file_path = self.resource_file_path(directory, resource)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(resource.get("body_html") or "", encoding="utf-8")
        return file_path

    def upload_one(self, credentials: Credentials, local_file: LocalFile) -> Any:
        """Create or update a page from its HTML file.

        Without a sidecar the title defaults to the handle and the page is
        published.
        """
        metadata = local_file.metadata or {}
        page: dict[str, Any] = {
            "handle": local_file.handle,
            "title": metadata.get("title") or local_file.handle,
            "body_html": local_file.file_path.read_text(encoding="utf-8"),
            "published": metadata.get("published", True),
        }
        for key in ("author", "template_suffix"):
            if metadata.get(key):
                page[key] = metadata[key]

        client = self.client(credentials)
        page_id = self.remote_id(local_file)
        if page_id:
            logger.debug("Updating page %s (%s)", local_file.handle, page_id)
            return client.put(
                f"pages/{page_id}.json",
                json={"page": {"id": page_id, **page}},
                resource_type="pages",
                context=f"update page {local_file.handle}",
            )
        logger.debug("Creating page %s", local_file.handle)
        return client.post(
            "pages.json",
            json={"page": page},
            resource_type="pages",
            context=f"create page {local_file.handle}",
        )

    def delete_one(self, credentials: Credentials, resource: Resource) -> None:
        self.client(credentials).delete(
            f"pages/{resource['id']}.json",
            resource_type="pages",
            context=f"delete page {self.handle_of(resource)}",
        )
