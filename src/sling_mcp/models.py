"""Sling client models: configuration, action payloads and exceptions."""

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Scalar values a property may carry, and the homogeneous multi-value form.
Scalar = Union[str, int, float, bool]
PropertyValue = Union[Scalar, list[Scalar]]


class APIConfiguration(BaseModel):
    """Connection settings for a Sling repository."""

    base_url: str = Field(
        default="http://localhost:8080",
        description="Origin of the repository server",
    )
    location: str = Field(
        default="",
        description="Page path or URL the client acts on; its path (cut at '.html') is the default base path",
    )
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")

    @field_validator("base_url")
    @classmethod
    def strip_base_url(cls, v: str) -> str:
        return v.rstrip("/")


class NodeAction(BaseModel):
    """Reserved-keyword parameters of a Sling POST.

    Field aliases are the protocol's own key names, so a plain dict such as
    ``{"operation": "copy", "replaceProperties": True}`` validates directly.
    Unset fields are left out of the wire payload.
    """

    model_config = ConfigDict(populate_by_name=True)

    order: str | int | None = None
    dest: str | None = None
    operation: str | None = None
    name_hint: str | None = Field(default=None, alias="nameHint")
    checkin: bool | None = None
    content: str | None = None
    content_type: str | None = Field(default=None, alias="contentType")
    replace: bool | None = None
    replace_properties: bool | None = Field(default=None, alias="replaceProperties")
    apply_to: list[str] | None = Field(default=None, alias="applyTo")

    @field_validator("apply_to", mode="before")
    @classmethod
    def wrap_single_path(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [v]
        return v


class SlingError(Exception):
    """Base exception for Sling client failures."""


class NetworkError(SlingError):
    """Transport-level failure: the request never produced an HTTP status."""


class TimeoutError(NetworkError):
    """Request timed out."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Request timed out during {operation}")


class MalformedResponseError(SlingError):
    """Response body claimed to be JSON but did not parse or had the wrong shape."""

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__(f"{message} ({url})")
