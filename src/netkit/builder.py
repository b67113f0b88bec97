"""Endpoint -> BuiltRequest translation.

:func:`build_request` is the only entry point. It validates the URL,
copies method and headers, then dispatches on the endpoint's body strategy.
It performs no I/O: calling it twice on the same endpoint gives the same
result, except for the boundary token of a multipart upload, which is
generated fresh on every call.

Headers from the endpoint are applied first; a header the strategy needs
(``Content-Type`` for form, JSON and multipart bodies) is applied last and
replaces any same-named endpoint header regardless of case.
"""

from __future__ import annotations

import uuid
from typing import Optional

import httpx

from netkit.encoding import (
    FORM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    append_query,
    encode_form_body,
    encode_json_body,
    encode_query,
    uses_query_string,
)
from netkit.exceptions import ConfigurationError, EncodingError
from netkit.models import (
    BuiltRequest,
    CompositeData,
    EncodedParameters,
    EncodingKind,
    Endpoint,
    MultipartUpload,
    Plain,
    RawData,
)

CRLF = "\r\n"
_UNSAFE_PART_CHARS = ("\"", "\r", "\n")


def build_request(endpoint: Endpoint) -> BuiltRequest:
    """Translate *endpoint* into a transport-ready :class:`BuiltRequest`.

    Args:
        endpoint: The declarative description of the call.

    Returns:
        The built request.

    Raises:
        ConfigurationError: If ``base_url + path`` is not an absolute URL,
            or a header name or value is not ASCII.
        EncodingError: If the parameters cannot be serialised by the
            chosen encoding. Nothing is built in that case.
    """
    url = resolve_url(endpoint.base_url, endpoint.path)
    headers: dict[str, str] = dict(endpoint.headers or {})
    check_headers(headers)
    body: Optional[bytes] = None
    task = endpoint.task

    if isinstance(task, Plain):
        pass

    elif isinstance(task, RawData):
        body = task.data

    elif isinstance(task, EncodedParameters):
        if uses_query_string(task.encoding, endpoint.method):
            url = append_query(url, encode_query(task.parameters))
        elif task.encoding == EncodingKind.JSON_BODY:
            body = encode_json_body(task.parameters)
            set_header(headers, "Content-Type", JSON_CONTENT_TYPE)
        else:
            body = encode_form_body(task.parameters)
            set_header(headers, "Content-Type", FORM_CONTENT_TYPE)

    elif isinstance(task, CompositeData):
        url = append_query(url, encode_query(task.url_parameters))
        body = task.body

    elif isinstance(task, MultipartUpload):
        boundary = make_boundary()
        set_header(headers, "Content-Type", f"multipart/form-data; boundary={boundary}")
        body = multipart_body(
            boundary,
            task.data,
            mime_type=task.mime_type,
            filename=task.filename,
            parameters=task.parameters,
        )

    else:  # pragma: no cover - the union is closed
        raise TypeError(f"Unsupported body strategy: {type(task).__name__}")

    return BuiltRequest(method=endpoint.method, url=url, headers=headers, body=body)


def resolve_url(base_url: str, path: str) -> str:
    """Concatenate *base_url* and *path* and check the result is absolute.

    Raises:
        ConfigurationError: If the URL cannot be parsed or lacks a scheme
            or host.
    """
    raw = base_url + path
    try:
        parsed = httpx.URL(raw)
    except (httpx.InvalidURL, TypeError) as exc:
        raise ConfigurationError(f"Invalid URL '{raw}': {exc}") from exc
    if not parsed.is_absolute_url:
        raise ConfigurationError(f"Invalid URL '{raw}': not an absolute URL")
    return raw


def check_headers(headers: dict[str, str]) -> None:
    """Reject headers the transport cannot put on the wire.

    Raises:
        ConfigurationError: If a header name or value has non-ASCII characters.
    """
    for name, value in headers.items():
        if not (name.isascii() and value.isascii()):
            raise ConfigurationError(f"Header '{name}' must contain only ASCII characters")


def set_header(headers: dict[str, str], name: str, value: str) -> None:
    """Set *name* on *headers*, dropping existing entries that differ only in case."""
    lowered = name.lower()
    for key in [k for k in headers if k.lower() == lowered]:
        del headers[key]
    headers[name] = value


def make_boundary() -> str:
    """Return a fresh multipart boundary token."""
    return f"Boundary-{str(uuid.uuid4()).upper()}"


def multipart_body(
    boundary: str,
    data: bytes,
    mime_type: str = "image/jpg",
    filename: str = "file",
    parameters: Optional[dict[str, str]] = None,
) -> bytes:
    """Serialise a single-file ``multipart/form-data`` payload.

    Each extra parameter is written as its own part before the file part,
    which is always named ``file``. The closing delimiter has no trailing
    CRLF.

    Raises:
        EncodingError: If a field name, the filename or the MIME type
            contains a double quote, CR or LF.
    """
    boundary_line = f"--{boundary}{CRLF}".encode("utf-8")
    chunks: list[bytes] = []

    for key, value in (parameters or {}).items():
        _check_part_token(key, key)
        chunks.append(boundary_line)
        chunks.append(f'Content-Disposition: form-data; name="{key}"{CRLF}{CRLF}'.encode("utf-8"))
        chunks.append(f"{value}{CRLF}".encode("utf-8"))

    _check_part_token(filename, "filename")
    _check_part_token(mime_type, "mime_type")
    chunks.append(boundary_line)
    chunks.append(
        f'Content-Disposition: form-data; name="file"; filename="{filename}"{CRLF}'.encode("utf-8")
    )
    chunks.append(f"Content-Type: {mime_type}{CRLF}{CRLF}".encode("utf-8"))
    chunks.append(data)
    chunks.append(f"{CRLF}--{boundary}--".encode("utf-8"))
    return b"".join(chunks)


def _check_part_token(text: str, key: str) -> None:
    """Reject characters that would end a quoted part header early."""
    if any(char in text for char in _UNSAFE_PART_CHARS):
        raise EncodingError(
            f"Multipart {key!r} may not contain quotes or line breaks: {text!r}", key=key
        )
