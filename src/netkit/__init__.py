"""netkit -- Declarative HTTP endpoints on top of httpx.

Callers describe an API call as an immutable :class:`~netkit.models.Endpoint`
(base URL, path, method, headers and a body strategy).  The request builder
turns it into a transport-ready :class:`~netkit.models.BuiltRequest`, and the
:class:`~netkit.client.Provider` sends it asynchronously and reports a
two-variant outcome (:class:`~netkit.client.Success` or
:class:`~netkit.client.Failure`) to a completion callback.

Typical usage::

    from netkit import Endpoint, HTTPMethod, Provider

    endpoint = Endpoint(base_url="https://api.example.com", path="/items")

    async with Provider() as provider:
        await provider.request(endpoint, print)

Modules:
    models: Pydantic models for endpoints, body strategies and built requests.
    encoding: Parameter encoders (query string, form body, JSON body).
    builder: Endpoint -> BuiltRequest translation, multipart serialisation.
    client: The Provider execution shim and outcome types.
    config: Layered configuration (flags, env, project file, user file).
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr diagnostics with Rich support.
    app: Typer CLI entry point.
"""

from netkit.builder import build_request
from netkit.client import Failure, Provider, Success
from netkit.models import (
    BuiltRequest,
    CompositeData,
    EncodedParameters,
    EncodingKind,
    Endpoint,
    HTTPMethod,
    MultipartUpload,
    Plain,
    RawData,
)

__version__ = "0.1.0"

__all__ = [
    "BuiltRequest",
    "CompositeData",
    "EncodedParameters",
    "EncodingKind",
    "Endpoint",
    "Failure",
    "HTTPMethod",
    "MultipartUpload",
    "Plain",
    "Provider",
    "RawData",
    "Success",
    "build_request",
]
