"""URL redirects, stored as small JSON documents."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from ..auth import Credentials
from .base import Resource, ResourceAdapter

if TYPE_CHECKING:
    from ..sync.scanner import LocalFile


def redirect_handle(path: str) -> str:
    """Turn a redirect path into a file-safe handle.

    Examples:
        >>> redirect_handle("/old/about-us")
        'old-about-us'
        >>> redirect_handle("/")
        'root'
    """
    return path.lstrip("/").replace("/", "-") or "root"


class RedirectsAdapter(ResourceAdapter):
    """Sync redirects as ``<handle>.json`` holding the target URL."""

    resource_name = "redirects"
    file_extension = ".json"

    def list_remote(self, credentials: Credentials) -> list[Resource]:
        redirects = self.client(credentials).get_paginated(
            "redirects.json",
            "redirects",
            resource_type="redirects",
            context="fetch redirects",
        )
        self.remember_remote(redirects)
        return redirects

    def handle_of(self, resource: Resource) -> str:
        return redirect_handle(resource["path"])

    def extract_metadata(self, resource: Resource) -> Optional[dict[str, Any]]:
        return {"id": resource.get("id"), "path": resource.get("path")}

    def download_one(
        self, credentials: Credentials, resource: Resource, directory: Path
    ) -> Path:
        file_path = self.resource_file_path(directory, resource)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(
            json.dumps({"target": resource.get("target")}, indent=2), encoding="utf-8"
        )
        return file_path

    def upload_one(self, credentials: Credentials, local_file: LocalFile) -> Any:
        """Create or update a redirect.

        The handle cannot be turned back into a path reliably, so the
        sidecar's path wins; without one, ``/<handle>`` is used.
        """
        content = json.loads(local_file.file_path.read_text(encoding="utf-8"))
        metadata = local_file.metadata or {}
        redirect: dict[str, Any] = {"target": content["target"]}
        if metadata.get("path"):
            redirect["path"] = metadata["path"]

        client = self.client(credentials)
        redirect_id = self.remote_id(local_file)
        if redirect_id:
            return client.put(
                f"redirects/{redirect_id}.json",
                json={"redirect": {"id": redirect_id, **redirect}},
                resource_type="redirects",
                context=f"update redirect {local_file.handle}",
            )
        redirect.setdefault(
            "path", "/" if local_file.handle == "root" else f"/{local_file.handle}"
        )
        return client.post(
            "redirects.json",
            json={"redirect": redirect},
            resource_type="redirects",
            context=f"create redirect {local_file.handle}",
        )

    def delete_one(self, credentials: Credentials, resource: Resource) -> None:
        self.client(credentials).delete(
            f"redirects/{resource['id']}.json",
            resource_type="redirects",
            context=f"delete redirect {resource.get('path')}",
        )
