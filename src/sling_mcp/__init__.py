"""Client library for Sling-style content repositories."""

from .client import SlingClient, SlingClientCore
from .models import (
    APIConfiguration,
    MalformedResponseError,
    NetworkError,
    NodeAction,
    SlingError,
    TimeoutError,
)
from .paths import current_path_from_location, resolve, strip_trailing_slash
from .tree import RESERVED_PROPERTIES, SlingNode, SlingProperty

__version__ = "0.1.0"

__all__ = [
    "APIConfiguration",
    "MalformedResponseError",
    "NetworkError",
    "NodeAction",
    "RESERVED_PROPERTIES",
    "SlingClient",
    "SlingClientCore",
    "SlingError",
    "SlingNode",
    "SlingProperty",
    "TimeoutError",
    "current_path_from_location",
    "resolve",
    "strip_trailing_slash",
]
