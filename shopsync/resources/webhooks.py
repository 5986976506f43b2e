"""Webhook subscriptions, one JSON document per topic."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from ..auth import Credentials
from .base import Resource, ResourceAdapter

if TYPE_CHECKING:
    from ..sync.scanner import LocalFile

# Optional list fields, written only when non-empty
LIST_FIELDS = ("fields", "metafield_namespaces", "private_metafield_namespaces")


def webhook_handle(topic: str) -> str:
    """Turn a webhook topic into a file-safe handle.

    Examples:
        >>> webhook_handle("orders/create")
        'orders-create'
    """
    return topic.replace("/", "-")


class WebhooksAdapter(ResourceAdapter):
    """Sync webhooks as ``<topic>.json`` holding address, topic and format."""

    resource_name = "webhooks"
    file_extension = ".json"

    def list_remote(self, credentials: Credentials) -> list[Resource]:
        webhooks = self.client(credentials).get_paginated(
            "webhooks.json",
            "webhooks",
            resource_type="webhooks",
            context="fetch webhooks",
        )
        self.remember_remote(webhooks)
        return webhooks

    def handle_of(self, resource: Resource) -> str:
        return webhook_handle(resource["topic"])

    def extract_metadata(self, resource: Resource) -> Optional[dict[str, Any]]:
        return {"id": resource.get("id"), "topic": resource.get("topic")}

    def download_one(
        self, credentials: Credentials, resource: Resource, directory: Path
    ) -> Path:
        webhook = {
            "address": resource.get("address"),
            "topic": resource.get("topic"),
            "format": resource.get("format"),
        }
        for key in LIST_FIELDS:
            if resource.get(key):
                webhook[key] = resource[key]

        file_path = self.resource_file_path(directory, resource)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(json.dumps(webhook, indent=2), encoding="utf-8")
        return file_path

    def upload_one(self, credentials: Credentials, local_file: LocalFile) -> Any:
        content = json.loads(local_file.file_path.read_text(encoding="utf-8"))
        webhook: dict[str, Any] = {
            "address": content["address"],
            "topic": content["topic"],
            "format": content.get("format") or "json",
        }
        for key in LIST_FIELDS:
            if content.get(key):
                webhook[key] = content[key]

        client = self.client(credentials)
        webhook_id = self.remote_id(local_file)
        if webhook_id:
            return client.put(
                f"webhooks/{webhook_id}.json",
                json={"webhook": {"id": webhook_id, **webhook}},
                resource_type="webhooks",
                context=f"update webhook {local_file.handle}",
            )
        return client.post(
            "webhooks.json",
            json={"webhook": webhook},
            resource_type="webhooks",
            context=f"create webhook {local_file.handle}",
        )

    def delete_one(self, credentials: Credentials, resource: Resource) -> None:
        self.client(credentials).delete(
            f"webhooks/{resource['id']}.json",
            resource_type="webhooks",
            context=f"delete webhook {resource.get('topic')}",
        )
