"""Parameter encoders used by :class:`~netkit.models.EncodedParameters` and
:class:`~netkit.models.CompositeData`.

Query strings and form bodies share one nested-key convention, which is a
wire contract with the servers netkit talks to:

* top-level keys are emitted in sorted order;
* a mapping value becomes ``key[sub]=v`` for every sub-key (sorted);
* a list or tuple value becomes one ``key[]=v`` pair per item;
* ``True``/``False`` become ``true``/``false``, ``None`` an empty value,
  enum members their ``value``, and other ``str``/``int``/``float`` values
  ``str(value)``;
* keys and values are percent-encoded per RFC 3986, keeping only the
  unreserved characters plus ``/`` and ``?`` (so a space is ``%20`` and the
  brackets of ``key[]`` go out as ``key%5B%5D``).

Empty lists and mappings produce no pairs. :func:`decode_query` is the
inverse for scalars, lists and nested mappings; values come back as strings.

Anything else (bytes, arbitrary objects) raises
:class:`~netkit.exceptions.EncodingError` naming the offending key.
"""

from __future__ import annotations

import enum
import json
import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qsl, quote, urlsplit, urlunsplit

from netkit.exceptions import EncodingError
from netkit.models import EncodingKind, HTTPMethod

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"
JSON_CONTENT_TYPE = "application/json"

_QUERY_SAFE = "/?"
_QUERY_METHODS = frozenset({HTTPMethod.GET, HTTPMethod.HEAD, HTTPMethod.DELETE})
_KEY_PATTERN = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_SEGMENT_PATTERN = re.compile(r"\[([^\[\]]*)\]")


# --- Query string ---


def escape(text: str) -> str:
    """Percent-encode *text* for use as a query-string key or value."""
    return quote(text, safe=_QUERY_SAFE)


def query_components(key: str, value: Any) -> list[tuple[str, str]]:
    """Flatten one parameter into escaped ``(key, value)`` pairs.

    Args:
        key: The (possibly already bracketed) parameter name.
        value: A scalar, sequence, or mapping.

    Returns:
        Escaped key/value pairs in emission order.

    Raises:
        EncodingError: If a leaf value has a type the query convention
            cannot represent.
    """
    if isinstance(value, Mapping):
        components: list[tuple[str, str]] = []
        for sub_key in sorted(value, key=str):
            components.extend(query_components(f"{key}[{sub_key}]", value[sub_key]))
        return components

    if isinstance(value, (list, tuple)):
        components = []
        for item in value:
            components.extend(query_components(f"{key}[]", item))
        return components

    return [(escape(key), escape(_scalar_to_str(key, value)))]


def encode_query(parameters: Mapping[str, Any]) -> str:
    """Serialise *parameters* into an ``application/x-www-form-urlencoded`` string.

    Example::

        >>> encode_query({"page": 2, "tags": ["a", "b"]})
        'page=2&tags%5B%5D=a&tags%5B%5D=b'
    """
    components: list[tuple[str, str]] = []
    for key in sorted(parameters):
        components.extend(query_components(key, parameters[key]))
    return "&".join(f"{key}={value}" for key, value in components)


def decode_query(query: str) -> dict[str, Any]:
    """Parse a query string produced by :func:`encode_query` back into a mapping.

    ``key[]`` pairs collect into lists and ``key[sub]`` pairs into nested
    dicts. All leaf values are strings.

    Raises:
        EncodingError: If the same key is used both as a list and as a
            mapping (or as a scalar and a container).
    """
    result: dict[str, Any] = {}
    for raw_key, value in parse_qsl(query, keep_blank_values=True):
        match = _KEY_PATTERN.match(raw_key)
        if match is None:
            result[raw_key] = value
            continue
        name, suffix = match.groups()
        _insert(result, [name, *_SEGMENT_PATTERN.findall(suffix)], value, raw_key)
    return result


def append_query(url: str, query: str) -> str:
    """Append *query* to *url*, joining with ``&`` when a query already exists."""
    if not query:
        return url
    parts = urlsplit(url)
    merged = f"{parts.query}&{query}" if parts.query else query
    return urlunsplit(parts._replace(query=merged))


# --- Bodies ---


def encode_form_body(parameters: Mapping[str, Any]) -> bytes:
    """Serialise *parameters* into a form-encoded body (UTF-8)."""
    return encode_query(parameters).encode("utf-8")


def encode_json_body(parameters: Mapping[str, Any]) -> bytes:
    """Serialise *parameters* into a compact JSON document (UTF-8).

    Raises:
        EncodingError: If a value is not JSON serialisable, or is NaN/infinite.
    """
    try:
        text = json.dumps(
            parameters, ensure_ascii=False, allow_nan=False, separators=(",", ":")
        )
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"Cannot encode parameters as JSON: {exc}") from exc
    return text.encode("utf-8")


def uses_query_string(encoding: EncodingKind, method: HTTPMethod) -> bool:
    """Return ``True`` when *encoding* puts parameters in the URL for *method*."""
    if encoding == EncodingKind.URL_QUERY:
        return True
    if encoding == EncodingKind.URL_DEFAULT:
        return method in _QUERY_METHODS
    return False


# --- Private helpers ---


def _scalar_to_str(key: str, value: Any) -> str:
    if isinstance(value, enum.Enum):
        value = value.value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise EncodingError(
        f"Cannot encode value of type {type(value).__name__} for key '{key}'",
        key=key,
    )


def _insert(container: dict[str, Any], segments: list[str], value: str, raw_key: str) -> None:
    head, rest = segments[0], segments[1:]
    if not rest:
        container[head] = value
        return

    if rest[0] == "":
        items = container.setdefault(head, [])
        if not isinstance(items, list):
            raise EncodingError(f"Conflicting structure for key '{raw_key}'", key=raw_key)
        if len(rest) == 1:
            items.append(value)
            return
        # key[][sub] -- each pair opens a new mapping
        child: dict[str, Any] = {}
        items.append(child)
        _insert(child, rest[1:], value, raw_key)
        return

    nested = container.setdefault(head, {})
    if not isinstance(nested, dict):
        raise EncodingError(f"Conflicting structure for key '{raw_key}'", key=raw_key)
    _insert(nested, rest, value, raw_key)
