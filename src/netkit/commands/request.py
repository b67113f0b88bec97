"""``netkit request`` -- describe an endpoint on the command line and send it.

The command maps its options onto exactly one body strategy:

==============================  ==========================================
Options                          Strategy
==============================  ==========================================
(none)                           :class:`~netkit.models.Plain`
``--query``                      ``EncodedParameters(URL_QUERY)``
``--data``                       :class:`~netkit.models.RawData`
``--data`` + ``--query``         :class:`~netkit.models.CompositeData`
``--json-body``                  ``EncodedParameters(JSON_BODY)``
``--form``                       ``EncodedParameters(FORM_BODY)``
``--upload`` [+ ``--field``]     :class:`~netkit.models.MultipartUpload`
==============================  ==========================================

Any other combination is rejected with
:class:`~netkit.exceptions.InvalidUsageError`.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

import typer

from netkit.builder import build_request
from netkit.client import Provider, RequestResult
from netkit.client.response import format_outcome
from netkit.exceptions import ConfigurationError, InvalidUsageError, NetkitError
from netkit.exit_codes import EXIT_SUCCESS
from netkit.models import (
    BodyStrategy,
    BuiltRequest,
    CompositeData,
    EncodedParameters,
    EncodingKind,
    Endpoint,
    HTTPMethod,
    MultipartUpload,
    Plain,
    ProviderConfig,
    RawData,
)
from netkit.output import OutputManager


def request_command(
    ctx: typer.Context,
    method: HTTPMethod = typer.Argument(..., case_sensitive=False, help="HTTP method."),
    base_url: str = typer.Argument(..., help="Absolute base URL, e.g. https://api.example.com"),
    path: str = typer.Argument("", help="Path appended verbatim to the base URL."),
    header: Optional[list[str]] = typer.Option(
        None, "--header", "-H", help="Request header as 'Name: value' (repeatable)."
    ),
    query: Optional[list[str]] = typer.Option(
        None, "--query", help="Query parameter as key=value (repeatable)."
    ),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="Raw request body."),
    json_body: Optional[str] = typer.Option(
        None, "--json-body", help="JSON object sent as an application/json body."
    ),
    form: Optional[list[str]] = typer.Option(
        None, "--form", help="Form field as key=value (repeatable)."
    ),
    upload: Optional[Path] = typer.Option(
        None, "--upload", exists=True, dir_okay=False, readable=True,
        help="File sent as a multipart/form-data upload.",
    ),
    mime_type: str = typer.Option("image/jpg", "--mime-type", help="Content-Type of the uploaded file."),
    field: Optional[list[str]] = typer.Option(
        None, "--field", help="Extra multipart field as key=value (repeatable)."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Print the built request without sending it."
    ),
) -> None:
    """Send a single HTTP request and print the response body."""
    output: OutputManager = ctx.obj["output"]
    provider_config: ProviderConfig = ctx.obj["config"].provider

    try:
        endpoint = endpoint_from_options(
            method=method,
            base_url=base_url,
            path=path,
            headers=header or [],
            query=query or [],
            data=data,
            json_body=json_body,
            form=form or [],
            upload=upload.read_bytes() if upload is not None else None,
            mime_type=mime_type,
            fields=field or [],
        )
        output.debug(f"Body strategy: {endpoint.task.kind}")
        if dry_run:
            _print_dry_run(build_request(endpoint), output)
            return
        if provider_config.stub:
            output.warning("Stub mode is on: nothing is sent, the response body is empty")
        outcome = asyncio.run(_execute(endpoint, provider_config, output))
    except NetkitError as exc:
        output.error(str(exc))
        if isinstance(exc, ConfigurationError):
            output.suggest(
                "Use an absolute base URL (e.g. https://api.example.com) and ASCII-only headers"
            )
        raise typer.Exit(exc.exit_code)

    code = format_outcome(outcome, output)
    if code != EXIT_SUCCESS:
        raise typer.Exit(code)


def endpoint_from_options(
    method: HTTPMethod,
    base_url: str,
    path: str = "",
    headers: Optional[list[str]] = None,
    query: Optional[list[str]] = None,
    data: Optional[str] = None,
    json_body: Optional[str] = None,
    form: Optional[list[str]] = None,
    upload: Optional[bytes] = None,
    mime_type: str = "image/jpg",
    fields: Optional[list[str]] = None,
) -> Endpoint:
    """Map raw CLI option values onto an :class:`~netkit.models.Endpoint`.

    Raises:
        InvalidUsageError: On malformed ``key=value`` / header strings or
            conflicting body options.
    """
    body_options = [
        name
        for name, given in (
            ("--data", data is not None),
            ("--json-body", json_body is not None),
            ("--form", bool(form)),
            ("--upload", upload is not None),
        )
        if given
    ]
    if len(body_options) > 1:
        raise InvalidUsageError(f"Options {', '.join(body_options)} are mutually exclusive")
    if fields and upload is None:
        raise InvalidUsageError("--field can only be used together with --upload")

    query_params = _parse_pairs(query or [], "--query")
    task: BodyStrategy

    if upload is not None:
        _reject_query(query_params, "--upload")
        task = MultipartUpload(
            data=upload,
            mime_type=mime_type,
            parameters={k: str(v) for k, v in _parse_pairs(fields or [], "--field").items()},
        )
    elif json_body is not None:
        _reject_query(query_params, "--json-body")
        task = EncodedParameters(
            parameters=_parse_json_object(json_body), encoding=EncodingKind.JSON_BODY
        )
    elif form:
        _reject_query(query_params, "--form")
        task = EncodedParameters(
            parameters=_parse_pairs(form, "--form"), encoding=EncodingKind.FORM_BODY
        )
    elif data is not None:
        raw = data.encode("utf-8")
        if query_params:
            task = CompositeData(body=raw, url_parameters=query_params)
        else:
            task = RawData(data=raw)
    elif query_params:
        task = EncodedParameters(parameters=query_params, encoding=EncodingKind.URL_QUERY)
    else:
        task = Plain()

    return Endpoint(
        base_url=base_url,
        path=path,
        method=method,
        headers=_parse_headers(headers or []) or None,
        task=task,
    )


async def _execute(
    endpoint: Endpoint, config: ProviderConfig, output: OutputManager
) -> RequestResult:
    """Send *endpoint* through a :class:`Provider` and wait for the callback."""
    outcomes: list[RequestResult] = []
    async with Provider(config, output=output) as provider:
        await provider.request(endpoint, outcomes.append)
    return outcomes[0]


def _print_dry_run(built: BuiltRequest, output: OutputManager) -> None:
    """Print the built request to stdout instead of sending it."""
    output.info("Dry run: request not sent")
    output.format_response(
        {
            "method": built.method.value,
            "url": built.url,
            "headers": built.headers,
            "body": built.body_text(),
        }
    )


def _parse_headers(values: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for value in values:
        name, sep, content = value.partition(":")
        if not sep or not name.strip():
            raise InvalidUsageError(f"Invalid header '{value}', expected 'Name: value'")
        headers[name.strip()] = content.strip()
    return headers


def _parse_pairs(values: list[str], option: str) -> dict[str, Any]:
    """Parse ``key=value`` strings; a repeated key collects its values in a list."""
    pairs: dict[str, Any] = {}
    for value in values:
        key, sep, content = value.partition("=")
        if not sep or not key:
            raise InvalidUsageError(f"Invalid {option} value '{value}', expected key=value")
        if key in pairs:
            existing = pairs[key]
            pairs[key] = [*existing, content] if isinstance(existing, list) else [existing, content]
        else:
            pairs[key] = content
    return pairs


def _parse_json_object(text: str) -> dict[str, Any]:
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidUsageError(f"--json-body is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise InvalidUsageError("--json-body must be a JSON object")
    return parsed


def _reject_query(query_params: dict[str, Any], option: str) -> None:
    if query_params:
        raise InvalidUsageError(f"--query cannot be combined with {option}")
