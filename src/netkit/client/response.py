"""Outcome formatting bridge -- maps a :data:`RequestResult` to the output system.

After a request completes, :func:`format_outcome` routes a
:class:`~netkit.client.result.Success` body through
:meth:`~netkit.output.OutputManager.format_response` (which applies the
JSON, plain or Rich renderer) while emitting the status line to stderr.  A
:class:`~netkit.client.result.Failure` is reported as an error.

See Also:
    :mod:`netkit.output` -- the output manager that renders data.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from netkit.client.result import RequestResult, Success
from netkit.exit_codes import EXIT_SUCCESS
from netkit.output import OutputManager


def format_outcome(outcome: RequestResult, output: OutputManager) -> int:
    """Print *outcome* and return the matching process exit code.

    Writes the status line (e.g. ``HTTP 200 OK``) to stderr via
    :meth:`~netkit.output.OutputManager.info`, then renders the body to
    stdout.  Failures go to :meth:`~netkit.output.OutputManager.error`.

    Args:
        outcome: The result delivered by the provider.
        output: Where to write.

    Returns:
        :data:`~netkit.exit_codes.EXIT_SUCCESS` for a ``Success`` (whatever
        its status code), otherwise the error's ``exit_code``.
    """
    if not isinstance(outcome, Success):
        output.error(str(outcome.error))
        return outcome.error.exit_code

    output.info(f"HTTP {outcome.status_code} {_reason_phrase(outcome.status_code)}".rstrip())

    content_type = _header(outcome, "content-type") or "application/json"
    data = extract_response_data(outcome)
    if data is not None:
        output.format_response(data, content_type)
    return EXIT_SUCCESS


def extract_response_data(outcome: Success) -> Any:
    """Extract the body of a successful outcome.

    Attempts to parse the body as JSON first.  If that fails (e.g. the
    response is HTML or plain text), returns the decoded text.  Returns
    ``None`` for responses with no content, and a short ``<N bytes>``
    placeholder for bodies that are not UTF-8.

    Args:
        outcome: The :class:`Success` to extract data from.

    Returns:
        A JSON-decoded object, a ``str``, or ``None`` if the body is empty.
    """
    if not outcome.body:
        return None

    try:
        return outcome.json()
    except ValueError:
        pass

    try:
        return outcome.body.decode("utf-8")
    except UnicodeDecodeError:
        return f"<{len(outcome.body)} bytes>"


def _reason_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ""


def _header(outcome: Success, name: str) -> str | None:
    for key, value in outcome.headers.items():
        if key.lower() == name:
            return value
    return None
