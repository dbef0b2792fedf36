"""Sling MCP server implementation using FastMCP."""

import logging
from contextlib import asynccontextmanager
from typing import Any, Literal

import httpx
from fastmcp import FastMCP

from .client import SlingClient
from .config import ServerConfig, setup_logging
from .tree import SlingNode

logger = logging.getLogger(__name__)

# Global client instance
_client: SlingClient | None = None


def get_client() -> SlingClient:
    """Get the global Sling client instance."""
    if _client is None:
        raise RuntimeError("Sling client not initialized. Server not started properly.")
    return _client


def node_result(response: httpx.Response, path: str, node: SlingNode | None) -> dict[str, Any]:
    """Shape a read outcome for a tool response."""
    return {
        "status": response.status_code,
        "success": node is not None,
        "path": node.path if node is not None else path,
        "node": node.to_document() if node is not None else None,
    }


def action_result(response: httpx.Response, path: str) -> dict[str, Any]:
    """Shape a write outcome for a tool response."""
    return {
        "status": response.status_code,
        "success": response.is_success,
        "path": path,
    }


@asynccontextmanager
async def lifespan(_app: FastMCP):  # type: ignore[no-untyped-def]
    """Manage server lifecycle."""
    global _client

    logger.info("Starting Sling MCP server")

    config = ServerConfig()  # type: ignore[call-arg]
    api_config = config.get_api_config()
    _client = SlingClient(api_config)

    logger.info(f"Sling client initialized with base URL: {api_config.base_url}, base path: {_client.path!r}")

    yield

    logger.info("Shutting down Sling MCP server")
    if _client:
        await _client.close()
        _client = None


mcp = FastMCP(
    "Sling MCP Server",
    instructions="MCP server for reading and editing a Sling content repository",
    lifespan=lifespan,
)


@mcp.tool(name="sling_get_node", description="Fetch a repository node with its whole subtree")
async def get_node(path: str = "") -> dict:
    """Fetch a node.

    Args:
        path: Relative (to the base path) or absolute repository path

    Returns:
        status, success, path and the node as a nested document (None if absent)
    """
    client = get_client()
    response, node = await client.fetch_node(path)
    return node_result(response, path or client.path, node)


@mcp.tool(
    name="sling_find_nodes_by_property",
    description="Find every node under the base path that has a property (optionally with a value)",
)
async def find_nodes_by_property(name: str, value: str | None = None) -> dict:
    client = get_client()
    response, nodes = await client.find_nodes_by_property(name, value)
    return {
        "status": response.status_code,
        "success": nodes is not None,
        "paths": [node.path for node in nodes] if nodes is not None else None,
    }


def write_result(
    writes: list[httpx.Response], response: httpx.Response, path: str, node: SlingNode | None
) -> dict[str, Any]:
    """Shape a write-then-read outcome; any rejected write fails the result."""
    result = node_result(response, path, node)
    failed = [w for w in writes if not w.is_success]
    result["write_status"] = failed[0].status_code if failed else writes[-1].status_code
    result["success"] = result["success"] and not failed
    return result


@mcp.tool(name="sling_create_or_update_node", description="Create or update a node and return it as stored")
async def create_or_update_node(path: str, properties: dict[str, Any]) -> dict:
    """Create or update a node.

    Args:
        path: Relative or absolute repository path
        properties: Strings, numbers, booleans or lists of one of those;
            nested objects are saved as child nodes with their own POST

    Returns:
        The node re-read from the repository after the writes, with the
        status of the first rejected write (or the last write) as write_status
    """
    client = get_client()
    writes = await client.save_tree(path, properties)
    response, node = await client.fetch_node(path)
    return write_result(writes, response, path, node)


@mcp.tool(name="sling_copy", description="Copy a node to a destination path")
async def copy_node(path: str, destination: str, overwrite: bool = True) -> dict:
    client = get_client()
    response = await client.copy_value(path, destination, overwrite)
    return action_result(response, path)


@mcp.tool(name="sling_move", description="Move a node to a destination path")
async def move_node(path: str, destination: str, overwrite: bool = True) -> dict:
    client = get_client()
    response = await client.move_value(path, destination, overwrite)
    return action_result(response, path)


@mcp.tool(name="sling_delete", description="Delete a node and its subtree")
async def delete_node(path: str) -> dict:
    client = get_client()
    response = await client.delete_value(path)
    return action_result(response, path)


@mcp.tool(name="sling_import", description="Import JSON content below a node")
async def import_content(
    path: str,
    content: dict[str, Any],
    overwrite_nodes: bool | None = None,
    overwrite_properties: bool | None = None,
) -> dict:
    client = get_client()
    response = await client.import_values(path, content, overwrite_nodes, overwrite_properties)
    return action_result(response, path)


@mcp.tool(name="sling_order", description="Reorder a node among its siblings")
async def order_node(
    path: str,
    position: Literal["first", "last", "before", "after", "at"],
    sibling: str | None = None,
    index: int | None = None,
) -> dict:
    """Reorder a node.

    Args:
        path: The node to reorder
        position: first, last, before/after (needs sibling) or at (needs index)
        sibling: Sibling name for before/after
        index: Zero-based position for at
    """
    client = get_client()
    if position == "first":
        response = await client.order_node_first(path)
    elif position == "last":
        response = await client.order_node_last(path)
    elif position in ("before", "after"):
        if not sibling:
            raise ValueError(f"position={position!r} requires a sibling")
        if position == "before":
            response = await client.order_node_before(path, sibling)
        else:
            response = await client.order_node_after(path, sibling)
    else:
        if index is None:
            raise ValueError("position='at' requires an index")
        response = await client.order_node_at(path, index)
    return action_result(response, path)


def main() -> None:
    setup_logging(ServerConfig().log_level)  # type: ignore[call-arg]
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
