"""Custom and smart collections, stored as JSON documents."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from ..auth import Credentials
from .base import Resource, ResourceAdapter

if TYPE_CHECKING:
    from ..sync.scanner import LocalFile

logger = logging.getLogger(__name__)

CUSTOM = "custom"
SMART = "smart"

# collection_type -> (endpoint, payload key)
ENDPOINTS = {
    CUSTOM: ("custom_collections", "custom_collection"),
    SMART: ("smart_collections", "smart_collection"),
}


class CollectionsAdapter(ResourceAdapter):
    """Sync collections as ``<handle>.json``.

    Custom and smart collections share one namespace of handles. Each
    listed resource is tagged with ``collection_type`` so that updates and
    deletes go to the right endpoint.
    """

    resource_name = "collections"
    file_extension = ".json"

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._remote_types: dict[str, str] = {}

    def list_remote(self, credentials: Credentials) -> list[Resource]:
        client = self.client(credentials)
        collections: list[Resource] = []
        for collection_type, (endpoint, _) in ENDPOINTS.items():
            for item in client.get_paginated(
                f"{endpoint}.json",
                endpoint,
                resource_type="collections",
                context=f"fetch {collection_type} collections",
            ):
                collections.append({**item, "collection_type": collection_type})

        self.remember_remote(collections)
        self._remote_types = {
            self.handle_of(c): c["collection_type"] for c in collections
        }
        return collections

    def handle_of(self, resource: Resource) -> str:
        return str(resource["handle"])

    def extract_metadata(self, resource: Resource) -> Optional[dict[str, Any]]:
        return {
            "id": resource.get("id"),
            "title": resource.get("title"),
            "handle": resource.get("handle"),
            "collection_type": resource.get("collection_type", CUSTOM),
            "published_at": resource.get("published_at"),
            "sort_order": resource.get("sort_order"),
            "template_suffix": resource.get("template_suffix"),
            "published_scope": resource.get("published_scope"),
        }

    def download_one(
        self, credentials: Credentials, resource: Resource, directory: Path
    ) -> Path:
        data: dict[str, Any] = {
            "title": resource.get("title"),
            "body_html": resource.get("body_html") or "",
            "sort_order": resource.get("sort_order") or "alpha-asc",
            "template_suffix": resource.get("template_suffix"),
        }
        if resource.get("collection_type") == SMART and resource.get("rules"):
            data["rules"] = resource["rules"]
            data["disjunctive"] = resource.get("disjunctive", False)

        file_path = self.resource_file_path(directory, resource)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return file_path

    def _collection_type(self, local_file: LocalFile) -> str:
        if local_file.handle in self._remote_types:
            return self._remote_types[local_file.handle]
        metadata = local_file.metadata or {}
        return SMART if metadata.get("collection_type") == SMART else CUSTOM

    def upload_one(self, credentials: Credentials, local_file: LocalFile) -> Any:
        """Create or update a collection.

        Files without a known remote id become new custom collections,
        unless their sidecar marks them as smart.
        """
        data = json.loads(local_file.file_path.read_text(encoding="utf-8"))
        collection_type = self._collection_type(local_file)
        endpoint, key = ENDPOINTS[collection_type]

        payload: dict[str, Any] = {
            "handle": local_file.handle,
            "title": data.get("title") or local_file.handle,
            "body_html": data.get("body_html", ""),
            "sort_order": data.get("sort_order"),
            "template_suffix": data.get("template_suffix"),
        }
        if collection_type == SMART and data.get("rules"):
            payload["rules"] = data["rules"]
            payload["disjunctive"] = data.get("disjunctive", False)

        client = self.client(credentials)
        collection_id = self.remote_id(local_file)
        if collection_id:
            return client.put(
                f"{endpoint}/{collection_id}.json",
                json={key: {"id": collection_id, **payload}},
                resource_type="collections",
                context=f"update collection {local_file.handle}",
            )
        logger.debug("Creating %s collection %s", collection_type, local_file.handle)
        return client.post(
            f"{endpoint}.json",
            json={key: payload},
            resource_type="collections",
            context=f"create collection {local_file.handle}",
        )

    def delete_one(self, credentials: Credentials, resource: Resource) -> None:
        endpoint, _ = ENDPOINTS[resource.get("collection_type", CUSTOM)]
        self.client(credentials).delete(
            f"{endpoint}/{resource['id']}.json",
            resource_type="collections",
            context=f"delete collection {self.handle_of(resource)}",
        )
