"""Path arithmetic for repository locations.

Pure string functions, no I/O. A path is absolute when it starts with ``/``.
"""

from urllib.parse import urlsplit


def resolve(base_path: str | None, fragment: str) -> str:
    """Resolve ``fragment`` against ``base_path``.

    - No base: the fragment is returned unchanged.
    - Absolute fragment: returned unchanged, the base is ignored.
    - Otherwise the two are joined with exactly one ``/``.
    """
    if not base_path:
        return fragment
    if fragment.startswith("/"):
        return fragment
    if base_path.endswith("/"):
        return base_path + fragment
    if not fragment:
        return base_path
    return base_path + "/" + fragment


def strip_trailing_slash(path: str) -> str:
    """Remove a single trailing slash (repeated slashes are not collapsed)."""
    if path.endswith("/"):
        return path[:-1]
    return path


def current_path_from_location(location: str | None) -> str:
    """Turn a page location into a repository path.

    Accepts a full URL or a bare path; the result is the URL path cut at the
    first ``.html``. ``/content/site/page.html/suffix`` gives
    ``/content/site/page``.
    """
    if not location:
        return ""
    path = urlsplit(location).path
    index = path.find(".html")
    if index >= 0:
        path = path[:index]
    return path


def node_name(path: str) -> str:
    return path.split("/")[-1]
