"""Sling API client - Core read/write primitives."""

import sys
from datetime import datetime
from typing import Any

import httpx
from pydantic import ValidationError

from ..models import (
    APIConfiguration,
    MalformedResponseError,
    NetworkError,
    NodeAction,
    TimeoutError,
)
from ..paths import current_path_from_location, resolve, strip_trailing_slash
from ..tree import SlingNode, encode_component

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Recursive JSON dump of a subtree.
INFINITY_SELECTOR = ".infinity.json"

# Read statuses that mean "there is no node to give back".
NO_NODE_STATUSES = frozenset({404, 412, 500})


def log_event(message: str, component: str = "CLIENT") -> None:
    """Log an event to stderr with timestamp and consistent formatting."""
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    print(f"[{timestamp}] [{component}] {message}", file=sys.stderr, flush=True)


def _log(message: str, component: str = "CLIENT") -> None:
    log_event(message, component)


class _ClientLogger:
    """Lightweight logger that delegates to _log / log_event.

    Methods accept arbitrary *args/**kwargs for compatibility with
    logging.Logger call sites, but only the first message argument is used.
    """

    def __init__(self, component: str = "CLIENT") -> None:
        self._component = component

    def info(self, msg: object, *args: object, **kwargs: object) -> None:
        _log(str(msg), self._component)

    def warning(self, msg: object, *args: object, **kwargs: object) -> None:
        _log(f"WARNING: {msg}", self._component)

    def error(self, msg: object, *args: object, **kwargs: object) -> None:
        _log(f"ERROR: {msg}", self._component)

    def debug(self, msg: object, *args: object, **kwargs: object) -> None:
        _log(f"DEBUG: {msg}", self._component)


def _encode_action_value(value: Any) -> str:
    # Slashes stay literal so paths read naturally on the wire.
    return encode_component(value).replace("%2F", "/")


class SlingClientCore:
    """Core Sling API client - fetch, save and generic POST actions."""

    def __init__(
        self,
        config: APIConfiguration,
        path: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the Sling API client.

        Args:
            config: Connection settings
            path: Base path for relative operations, resolved against the
                path of ``config.location``
            transport: Optional httpx transport replacing the network
        """
        self.config = config
        self.base_url = config.base_url
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        self.path = current_path_from_location(config.location)
        if path:
            self.path = self._make_path(path)

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Accept": "application/json"},
                timeout=httpx.Timeout(self.config.timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "SlingClientCore":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    def get_path(self) -> str:
        """Base path used to resolve relative paths."""
        return self.path

    def set_path(self, path: str) -> None:
        """Change the base path. Relative values resolve against the current one."""
        self.path = self._make_path(path)

    def _make_path(self, path: str) -> str:
        return resolve(self.path, path)

    async def _send(self, operation: str, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Issue one request, mapping transport failures to client exceptions."""
        try:
            return await self.client.request(method, url, **kwargs)
        except httpx.TimeoutException as err:
            _ClientLogger().warning(f"Timeout on {operation} {method} {url}: {err}")
            raise TimeoutError(operation) from err
        except httpx.TransportError as err:
            _ClientLogger().warning(f"Transport error on {operation} {method} {url}: {err}")
            raise NetworkError(f"{operation} failed: {err}") from err

    @staticmethod
    def _parse_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as err:
            # JSONDecodeError and UnicodeDecodeError both land here.
            raise MalformedResponseError(str(response.request.url), "Invalid JSON response") from err

    def _node_from_response(self, absolute_path: str, response: httpx.Response) -> SlingNode:
        data = self._parse_json(response)
        if not isinstance(data, dict):
            raise MalformedResponseError(
                str(response.request.url), f"Expected a JSON object, got {type(data).__name__}"
            )
        try:
            return SlingNode(absolute_path, data)
        except ValidationError as err:
            raise MalformedResponseError(str(response.request.url), f"Unsupported property value: {err}") from err

    async def fetch_node(self, path: str = "") -> tuple[httpx.Response, SlingNode | None]:
        """Fetch the node at ``path`` (relative or absolute) with its whole subtree.

        Args:
            path: Relative or absolute repository path

        Returns:
            (response, node). node is None when the repository answered
            without one (404, 412, 500 or any other non-200 status).

        Raises:
            MalformedResponseError: the body was not a JSON object
            NetworkError: the request never got an HTTP answer
        """
        logger = _ClientLogger()
        absolute_path = strip_trailing_slash(self._make_path(path))

        response = await self._send("fetch_node", "GET", absolute_path + INFINITY_SELECTOR)

        if response.status_code == 200:
            return response, self._node_from_response(absolute_path, response)

        if response.status_code == 300:
            # Result-set limit reached: body lists the pages to fetch instead.
            pages = self._parse_json(response)
            if not isinstance(pages, list) or not pages:
                raise MalformedResponseError(
                    str(response.request.url), "Expected a non-empty list of result pages"
                )
            logger.debug(f"fetch_node {absolute_path}: result limit reached, following {pages[0]}")
            page = await self._send("fetch_node", "GET", str(pages[0]))
            if page.status_code == 200:
                return page, self._node_from_response(absolute_path, page)
            logger.warning(f"fetch_node {absolute_path}: result page {pages[0]} returned {page.status_code}")
            return page, None

        if response.status_code in NO_NODE_STATUSES:
            logger.info(f"fetch_node {absolute_path}: no node ({response.status_code})")
        else:
            logger.warning(f"fetch_node {absolute_path}: unexpected status {response.status_code}")
        return response, None

    async def fetch_current_node(self) -> tuple[httpx.Response, SlingNode | None]:
        """Fetch the node at the base path."""
        return await self.fetch_node("")

    async def find_nodes_by_property(
        self, name: str, value: Any = None
    ) -> tuple[httpx.Response, list[SlingNode] | None]:
        """Collect every node under the base path carrying a property.

        The subtree is fetched once; matching happens in memory, root first,
        then descendants in document order.

        Returns:
            (response, nodes). nodes is None when the fetch produced no node.
        """
        response, root = await self.fetch_current_node()
        if root is None:
            return response, None
        return response, [node for node in root.walk() if node.has_property(name, value)]

    async def _post_form(self, operation: str, url: str, body: str) -> httpx.Response:
        logger = _ClientLogger()
        response = await self._send(
            operation,
            "POST",
            url,
            content=body.encode("utf-8"),
            headers={"Content-Type": FORM_CONTENT_TYPE},
        )
        if not response.is_success:
            logger.warning(f"{operation} POST {url} failed with status {response.status_code}")
        return response

    async def save_node(self, node: SlingNode) -> httpx.Response:
        """POST a node's own properties to its current path."""
        return await self._post_form("save_node", node.path, node.serialize_for_mutation())

    async def create_or_update_node(
        self, path: str, document: dict[str, Any]
    ) -> tuple[httpx.Response, SlingNode | None]:
        """Create or update the node at ``path`` and return it as re-fetched.

        The POST answer is not used as the result; the node is read back
        from the repository afterwards.
        """
        absolute_path = self._make_path(path)
        node = SlingNode(absolute_path, document)
        await self.save_node(node)
        return await self.fetch_node(absolute_path)

    async def save_tree(self, path: str, values: dict[str, Any]) -> list[httpx.Response]:
        """Save typed values and nested child nodes, one POST per node.

        Nodes are written root first, then descendants in document order.
        Writing stops at the first non-2xx answer, which is the last entry
        of the returned list.
        """
        root = SlingNode.from_values(self._make_path(path), values)
        responses: list[httpx.Response] = []
        for node in root.walk():
            response = await self.save_node(node)
            responses.append(response)
            if not response.is_success:
                break
        return responses

    def make_action_payload(self, actions: NodeAction | dict[str, Any]) -> str:
        """Encode reserved-keyword parameters as a ``:key=value`` form body.

        ``dest`` and ``applyTo`` entries are resolved against the base path.
        """
        if not isinstance(actions, NodeAction):
            actions = NodeAction.model_validate(actions)

        pairs: list[str] = []

        def push(key: str, value: Any) -> None:
            if value is not None:
                pairs.append(f":{key}={_encode_action_value(value)}")

        push("order", actions.order)
        push("dest", self._make_path(actions.dest) if actions.dest is not None else None)
        push("operation", actions.operation)
        push("nameHint", actions.name_hint)
        push("checkin", actions.checkin)
        push("content", actions.content)
        push("contentType", actions.content_type)
        push("replace", actions.replace)
        push("replaceProperties", actions.replace_properties)
        for target in actions.apply_to or []:
            push("applyTo", self._make_path(target))

        return "&".join(pairs)

    async def post_action(self, path: str, actions: NodeAction | dict[str, Any]) -> httpx.Response:
        """POST reserved-keyword parameters to ``path``.

        Args:
            path: Relative or absolute path the action applies to
            actions: NodeAction, or a dict keyed by protocol names
                (operation, dest, replace, replaceProperties, content,
                contentType, nameHint, checkin, order, applyTo)

        Returns:
            The repository's response; non-2xx answers are returned, not raised.
        """
        return await self._post_form("post_action", self._make_path(path), self.make_action_payload(actions))
