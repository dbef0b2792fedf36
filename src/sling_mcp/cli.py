"""sling-mcp command line.

Small command set over SlingClient; every command prints one JSON object on
stdout and exits 1 when the repository reports failure.

Examples:

  sling-mcp --base-url http://localhost:8080 --path /content/site get page
  sling-mcp --path /content/site set page title=Hello tags=a tags=b
  sling-mcp --path /content/site copy page /content/archive/page
  sling-mcp --path /content/site order page before intro
  sling-mcp serve
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Awaitable, Callable, Optional

from .client import SlingClient
from .config import ServerConfig, setup_logging
from .models import SlingError

Command = Callable[[SlingClient, argparse.Namespace], Awaitable[dict[str, Any]]]


def parse_assignments(assignments: list[str]) -> dict[str, Any]:
    """``["title=Hi", "tags=a", "tags=b"]`` -> ``{"title": "Hi", "tags": ["a", "b"]}``."""
    document: dict[str, Any] = {}
    for item in assignments:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise ValueError(f"Expected name=value, got {item!r}")
        if name in document:
            existing = document[name]
            document[name] = (existing if isinstance(existing, list) else [existing]) + [value]
        else:
            document[name] = value
    return document


def _make_client(args: argparse.Namespace) -> SlingClient:
    config = ServerConfig()  # type: ignore[call-arg]
    if args.base_url:
        config.base_url = args.base_url
    return SlingClient(config.get_api_config(), path=args.path)


def _action_output(response: Any) -> dict[str, Any]:
    return {"status": response.status_code, "success": response.is_success}


async def cmd_get(client: SlingClient, args: argparse.Namespace) -> dict[str, Any]:
    response, node = await client.fetch_node(args.target)
    return {
        "status": response.status_code,
        "success": node is not None,
        "node": node.to_document() if node is not None else None,
    }


async def cmd_find(client: SlingClient, args: argparse.Namespace) -> dict[str, Any]:
    response, nodes = await client.find_nodes_by_property(args.name, args.value)
    return {
        "status": response.status_code,
        "success": nodes is not None,
        "paths": [n.path for n in nodes] if nodes is not None else None,
    }


async def cmd_set(client: SlingClient, args: argparse.Namespace) -> dict[str, Any]:
    writes = await client.save_tree(args.target, parse_assignments(args.assignments))
    response, node = await client.fetch_node(args.target)
    return {
        "status": response.status_code,
        "write_status": writes[-1].status_code,
        "success": writes[-1].is_success and node is not None,
        "node": node.to_document() if node is not None else None,
    }


async def cmd_copy(client: SlingClient, args: argparse.Namespace) -> dict[str, Any]:
    return _action_output(await client.copy_value(args.source, args.destination, not args.no_overwrite))


async def cmd_move(client: SlingClient, args: argparse.Namespace) -> dict[str, Any]:
    return _action_output(await client.move_value(args.source, args.destination, not args.no_overwrite))


async def cmd_delete(client: SlingClient, args: argparse.Namespace) -> dict[str, Any]:
    if len(args.targets) == 1:
        return _action_output(await client.delete_value(args.targets[0]))
    return _action_output(await client.delete_values(args.targets))


async def cmd_order(client: SlingClient, args: argparse.Namespace) -> dict[str, Any]:
    where = args.position
    if where == "first":
        response = await client.order_node_first(args.target)
    elif where == "last":
        response = await client.order_node_last(args.target)
    elif where in ("before", "after"):
        if not args.sibling:
            raise ValueError(f"'{where}' needs a sibling name")
        if where == "before":
            response = await client.order_node_before(args.target, args.sibling)
        else:
            response = await client.order_node_after(args.target, args.sibling)
    elif where.isdigit():
        response = await client.order_node_at(args.target, int(where))
    else:
        raise ValueError(f"Unknown position {where!r}")
    return _action_output(response)


def run_command(args: argparse.Namespace, command: Command) -> int:
    async def _go() -> dict[str, Any]:
        client = _make_client(args)
        async with client:
            return await command(client, args)

    result = asyncio.run(_go())
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0 if result.get("success") else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sling-mcp",
        description="Read and edit a Sling content repository.",
    )
    parser.add_argument("--base-url", help="Repository origin (default: SLING_BASE_URL or http://localhost:8080)")
    parser.add_argument("--path", help="Base path relative paths resolve against")
    parser.add_argument("--log-level", default=None, help="Logging level (default: SLING_LOG_LEVEL or INFO)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_get = subparsers.add_parser("get", help="Fetch a node and its subtree")
    p_get.add_argument("target", nargs="?", default="", help="Node path (default: base path)")
    p_get.set_defaults(func=cmd_get)

    p_find = subparsers.add_parser("find", help="Find nodes under the base path carrying a property")
    p_find.add_argument("name", help="Property name")
    p_find.add_argument("value", nargs="?", default=None, help="Property value to match")
    p_find.set_defaults(func=cmd_find)

    p_set = subparsers.add_parser("set", help="Create or update a node's properties")
    p_set.add_argument("target", help="Node path")
    p_set.add_argument("assignments", nargs="+", help="name=value pairs; repeat a name for a multi-value property")
    p_set.set_defaults(func=cmd_set)

    for name, func, verb in (("copy", cmd_copy, "Copy"), ("move", cmd_move, "Move")):
        p = subparsers.add_parser(name, help=f"{verb} a node to a new path")
        p.add_argument("source", help="Node path")
        p.add_argument("destination", help="Destination path (must not exist)")
        p.add_argument("--no-overwrite", action="store_true", help="Send :replace=false")
        p.set_defaults(func=func)

    p_del = subparsers.add_parser("delete", help="Delete one or more nodes")
    p_del.add_argument("targets", nargs="+", help="Node paths")
    p_del.set_defaults(func=cmd_delete)

    p_order = subparsers.add_parser("order", help="Reorder a node among its siblings")
    p_order.add_argument("target", help="Node path")
    p_order.add_argument("position", help="first, last, before, after, or a zero-based index")
    p_order.add_argument("sibling", nargs="?", default=None, help="Sibling name for before/after")
    p_order.set_defaults(func=cmd_order)

    p_serve = subparsers.add_parser("serve", help="Run the MCP server over stdio")
    p_serve.set_defaults(func=None)

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level or ServerConfig().log_level)  # type: ignore[call-arg]

    if args.command == "serve":
        from .server import mcp

        mcp.run(transport="stdio")
        return

    try:
        code = run_command(args, args.func)
    except ValueError as e:
        parser.error(str(e))
    except SlingError as e:
        print(json.dumps({"success": False, "error": str(e)}, indent=2))
        code = 1
    sys.exit(code)


if __name__ == "__main__":  # pragma: no cover
    main()
