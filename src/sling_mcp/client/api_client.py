"""Sling API client implementation - structural operations.

Every operation here is one POST of reserved ``:``-prefixed parameters:

    copy_value("a", "/content/b")  ->  POST {base}/a
                                       :dest=/content/b&:operation=copy&:replace=true
"""

import json
from typing import Any

import httpx

from ..models import NodeAction
from .api_client_core import SlingClientCore


class SlingClient(SlingClientCore):
    """Sling API client with copy, move, delete, import and reorder operations."""

    async def copy_value(self, path: str, destination: str, overwrite: bool = True) -> httpx.Response:
        """Copy a node. The destination must not exist yet.

        Args:
            path: The node to copy
            destination: Path of the new copy
            overwrite: Replace an existing node at the destination (default True)
        """
        return await self.post_action(
            path, NodeAction(operation="copy", dest=destination, replace=overwrite)
        )

    async def copy_values(self, paths: list[str], destination: str, overwrite: bool = True) -> httpx.Response:
        """Copy several nodes under ``destination``, which must already exist."""
        return await self.post_action(
            self.path,
            NodeAction(operation="copy", apply_to=paths, dest=destination, replace=overwrite),
        )

    async def move_value(self, path: str, destination: str, overwrite: bool = True) -> httpx.Response:
        """Move a node. The destination must not exist yet.

        Args:
            path: The node to move
            destination: New path of the node
            overwrite: Replace an existing node at the destination (default True)
        """
        return await self.post_action(
            path, NodeAction(operation="move", dest=destination, replace=overwrite)
        )

    async def move_values(self, paths: list[str], destination: str, overwrite: bool = True) -> httpx.Response:
        """Move several nodes under ``destination``, which must already exist."""
        return await self.post_action(
            self.path,
            NodeAction(operation="move", apply_to=paths, dest=destination, replace=overwrite),
        )

    async def delete_value(self, path: str) -> httpx.Response:
        """Delete a node and its subtree."""
        return await self.post_action(path, NodeAction(operation="delete"))

    async def delete_values(self, paths: list[str]) -> httpx.Response:
        return await self.post_action(self.path, NodeAction(operation="delete", apply_to=paths))

    async def import_values(
        self,
        path: str,
        content: str | dict[str, Any],
        overwrite_nodes: bool | None = None,
        overwrite_properties: bool | None = None,
        content_type: str = "json",
    ) -> httpx.Response:
        """Import a serialized subtree below ``path``.

        Args:
            path: Parent node receiving the content
            content: Serialized content; dicts are JSON-encoded
            overwrite_nodes: Sent as :replace when given
            overwrite_properties: Sent as :replaceProperties when given
            content_type: Format of ``content`` (json, jar, zip, jcr.xml, xml)
        """
        if not isinstance(content, str):
            content = json.dumps(content)
        return await self.post_action(
            path,
            NodeAction(
                operation="import",
                content=content,
                content_type=content_type,
                replace=overwrite_nodes,
                replace_properties=overwrite_properties,
            ),
        )

    async def order_node_first(self, path: str) -> httpx.Response:
        """Move a node in front of its siblings."""
        return await self.post_action(path, NodeAction(order="first"))

    async def order_node_last(self, path: str) -> httpx.Response:
        """Move a node after its siblings."""
        return await self.post_action(path, NodeAction(order="last"))

    async def order_node_before(self, path: str, sibling: str) -> httpx.Response:
        return await self.post_action(path, NodeAction(order=f"before {sibling}"))

    async def order_node_after(self, path: str, sibling: str) -> httpx.Response:
        return await self.post_action(path, NodeAction(order=f"after {sibling}"))

    async def order_node_at(self, path: str, position: int) -> httpx.Response:
        """Place a node at a zero-based position among its siblings."""
        return await self.post_action(path, NodeAction(order=position))
