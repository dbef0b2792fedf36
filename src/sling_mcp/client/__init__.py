"""Sling repository client."""

from .api_client import SlingClient
from .api_client_core import SlingClientCore, log_event

__all__ = ["SlingClient", "SlingClientCore", "log_event"]
