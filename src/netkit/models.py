"""Canonical Pydantic models shared across all netkit modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Request models** -- the declarative side of an API call:
    :class:`HTTPMethod`, :class:`EncodingKind`, the body strategies
    (:class:`Plain`, :class:`RawData`, :class:`EncodedParameters`,
    :class:`CompositeData`, :class:`MultipartUpload`), :class:`Endpoint`
    and the builder output :class:`BuiltRequest`.

**Configuration models** -- resolved by :mod:`netkit.config`:
    :class:`ProviderConfig`, :class:`OutputConfig` and :class:`GlobalConfig`.

Request models are frozen: an endpoint is constructed per call, consumed
once by :func:`~netkit.builder.build_request`, and never mutated.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Literal, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field


# --- Request Models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods an :class:`Endpoint` may use. Values are wire names."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    HEAD = "HEAD"


class EncodingKind(str, enum.Enum):
    """How an :class:`EncodedParameters` mapping is serialised.

    ``URL_DEFAULT`` picks the destination from the method: GET, HEAD and
    DELETE put the parameters in the query string, every other method sends
    them as a form-encoded body. The other kinds always use one destination.
    See :mod:`netkit.encoding` for the nested-key convention.
    """

    URL_DEFAULT = "url"
    URL_QUERY = "query"
    FORM_BODY = "form"
    JSON_BODY = "json"


class Plain(BaseModel):
    """A request with no body."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["plain"] = "plain"


class RawData(BaseModel):
    """A request whose body is exactly ``data``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["data"] = "data"
    data: bytes


class EncodedParameters(BaseModel):
    """A request whose body or query string is derived from ``parameters``.

    Values may be scalars (``str``, ``int``, ``float``, ``bool``, ``None``),
    sequences, or nested mappings.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["parameters"] = "parameters"
    parameters: dict[str, Any] = Field(default_factory=dict)
    encoding: EncodingKind = EncodingKind.URL_DEFAULT


class CompositeData(BaseModel):
    """Raw ``body`` bytes combined with query-encoded ``url_parameters``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["composite"] = "composite"
    body: bytes
    url_parameters: dict[str, Any] = Field(default_factory=dict)


class MultipartUpload(BaseModel):
    """A single-file ``multipart/form-data`` upload.

    ``parameters`` are optional extra scalar form fields written before the
    file part.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["multipart"] = "multipart"
    data: bytes
    mime_type: str = Field(default="image/jpg", description="Content-Type of the file part")
    filename: str = Field(default="file", description="filename= of the file part")
    parameters: dict[str, str] = Field(default_factory=dict)


BodyStrategy = Annotated[
    Union[Plain, RawData, EncodedParameters, CompositeData, MultipartUpload],
    Field(discriminator="kind"),
]


class Endpoint(BaseModel):
    """Declarative description of one API call.

    ``path`` is appended to ``base_url`` by plain string concatenation, so
    the caller is responsible for the joining slash.

    Example::

        Endpoint(
            base_url="https://api.example.com",
            path="/items",
            method=HTTPMethod.POST,
            headers={"Accept": "application/json"},
            task=EncodedParameters(
                parameters={"name": "lamp"},
                encoding=EncodingKind.JSON_BODY,
            ),
        )
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(description="Absolute base URL")
    path: str = Field(default="", description="Appended verbatim to base_url")
    method: HTTPMethod = HTTPMethod.GET
    headers: Optional[dict[str, str]] = None
    task: BodyStrategy = Field(default_factory=Plain)
    sample_data: bytes = Field(
        default=b"", description="Canned response body returned in stub mode"
    )


class BuiltRequest(BaseModel):
    """A fully resolved, transport-ready request produced by the builder."""

    model_config = ConfigDict(frozen=True)

    method: HTTPMethod
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    body: Optional[bytes] = None

    def header(self, name: str) -> Optional[str]:
        """Return the value of header *name*, compared case-insensitively."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    def body_text(self) -> str:
        """Render the body as UTF-8 text; empty when absent, ``n/a`` when binary."""
        if not self.body:
            return ""
        try:
            return self.body.decode("utf-8")
        except UnicodeDecodeError:
            return "n/a"

    def to_httpx(self) -> httpx.Request:
        """Convert to an :class:`httpx.Request` for submission to a transport."""
        return httpx.Request(
            method=self.method.value,
            url=self.url,
            headers=self.headers,
            content=self.body,
        )


# --- Configuration Models ---


class ProviderConfig(BaseModel):
    """Settings applied to every request sent by a :class:`~netkit.client.Provider`."""

    verbose: bool = Field(default=False, description="Trace requests and responses")
    stub: bool = Field(
        default=False, description="Answer with Endpoint.sample_data instead of sending"
    )
    follow_redirects: bool = Field(default=True, description="Follow HTTP redirects")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """Effective configuration after :func:`~netkit.config.resolve_config`.

    Persisted by the user at ``~/.config/netkit/config.json`` and optionally
    per project in ``./netkit.json``; both files use this shape.
    """

    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
