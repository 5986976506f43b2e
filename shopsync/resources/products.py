"""Products, stored as JSON documents with variants, options and images."""

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

# Product fields written to the content file
CONTENT_FIELDS = (
    "title",
    "body_html",
    "vendor",
    "product_type",
    "tags",
    "variants",
    "options",
    "images",
)

# Sidecar fields copied back into the payload on upload
PUBLISHING_FIELDS = ("template_suffix", "published_at", "status", "published_scope")


class ProductsAdapter(ResourceAdapter):
    """Sync products as ``<handle>.json``; publishing state lives in the sidecar."""

    resource_name = "products"
    file_extension = ".json"

    def list_remote(self, credentials: Credentials) -> list[Resource]:
        products = self.client(credentials).get_paginated(
            "products.json",
            "products",
            resource_type="products",
            context="fetch products list",
        )
        self.remember_remote(products)
        return products

    def handle_of(self, resource: Resource) -> str:
        return str(resource["handle"])

    def extract_metadata(self, resource: Resource) -> Optional[dict[str, Any]]:
        return {
            key: resource.get(key)
            for key in (
                "id",
                "title",
                "handle",
                "vendor",
                "product_type",
                "created_at",
                "updated_at",
                "published_at",
                "template_suffix",
                "status",
                "published_scope",
                "tags",
            )
        }

    def download_one(
        self, credentials: Credentials, resource: Resource, directory: Path
    ) -> Path:
        product = {key: resource.get(key) for key in CONTENT_FIELDS}
        product["body_html"] = product["body_html"] or ""

        file_path = self.resource_file_path(directory, resource)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(json.dumps(product, indent=2), encoding="utf-8")
        return file_path

    def upload_one(self, credentials: Credentials, local_file: LocalFile) -> Any:
        """Create or update a product from its JSON file.

        The handle always comes from the file name. Publishing fields from
        the sidecar are sent when they are set.
        """
        product: dict[str, Any] = json.loads(
            local_file.file_path.read_text(encoding="utf-8")
        )
        product["handle"] = local_file.handle
        metadata = local_file.metadata or {}
        for key in PUBLISHING_FIELDS:
            if metadata.get(key) is not None:
                product[key] = metadata[key]

        client = self.client(credentials)
        product_id = self.remote_id(local_file)
        if product_id:
            logger.debug("Updating product %s (%s)", local_file.handle, product_id)
            return client.put(
                f"products/{product_id}.json",
                json={"product": {"id": product_id, **product}},
                resource_type="products",
                context=f"update product {local_file.handle}",
            )
        logger.debug("Creating product %s", local_file.handle)
        return client.post(
            "products.json",
            json={"product": product},
            resource_type="products",
            context=f"create product {local_file.handle}",
        )

    def delete_one(self, credentials: Credentials, resource: Resource) -> None:
        self.client(credentials).delete(
            f"products/{resource['id']}.json",
            resource_type="products",
            context=f"delete product {self.handle_of(resource)}",
        )
