"""Metafields, one JSON document per owner and key."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from ..auth import Credentials
from .base import Resource, ResourceAdapter

if TYPE_CHECKING:
    from ..sync.scanner import LocalFile


class MetafieldsAdapter(ResourceAdapter):
    """Sync metafields as ``<owner_resource>_<owner_id>_<key>.json``.

    The file holds namespace, key, value, type and an optional description.
    The sidecar keeps the id and the owner, which the file name alone does
    not carry reliably back to the store.
    """

    resource_name = "metafields"
    file_extension = ".json"

    def list_remote(self, credentials: Credentials) -> list[Resource]:
        metafields = self.client(credentials).get_paginated(
            "metafields.json",
            "metafields",
            resource_type="metafields",
            context="fetch metafields",
        )
        self.remember_remote(metafields)
        return metafields

    def handle_of(self, resource: Resource) -> str:
        return f"{resource['owner_resource']}_{resource['owner_id']}_{resource['key']}"

    def extract_metadata(self, resource: Resource) -> Optional[dict[str, Any]]:
        return {
            "owner_resource": resource.get("owner_resource"),
            "owner_id": resource.get("owner_id"),
            "id": resource.get("id"),
        }

    def download_one(
        self, credentials: Credentials, resource: Resource, directory: Path
    ) -> Path:
        metafield = {
            "namespace": resource.get("namespace"),
            "key": resource.get("key"),
            "value": resource.get("value"),
            "type": resource.get("type"),
        }
        if resource.get("description"):
            metafield["description"] = resource["description"]

        file_path = self.resource_file_path(directory, resource)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(json.dumps(metafield, indent=2), encoding="utf-8")
        return file_path

    def upload_one(self, credentials: Credentials, local_file: LocalFile) -> Any:
        content = json.loads(local_file.file_path.read_text(encoding="utf-8"))
        metafield: dict[str, Any] = {
            key: content.get(key) for key in ("namespace", "key", "value", "type")
        }
        if content.get("description"):
            metafield["description"] = content["description"]
        metadata = local_file.metadata or {}
        for key in ("owner_resource", "owner_id"):
            if metadata.get(key) is not None:
                metafield[key] = metadata[key]

        client = self.client(credentials)
        metafield_id = self.remote_id(local_file)
        if metafield_id:
            return client.put(
                f"metafields/{metafield_id}.json",
                json={"metafield": {"id": metafield_id, **metafield}},
                resource_type="metafields",
                context=f"update metafield {local_file.handle}",
            )
        return client.post(
            "metafields.json",
            json={"metafield": metafield},
            resource_type="metafields",
            context=f"create metafield {local_file.handle}",
        )

    def delete_one(self, credentials: Credentials, resource: Resource) -> None:
        self.client(credentials).delete(
            f"metafields/{resource['id']}.json",
            resource_type="metafields",
            context=f"delete metafield {self.handle_of(resource)}",
        )
