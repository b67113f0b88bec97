"""The two-variant outcome delivered to a provider's completion callback.

A :class:`Success` is only produced when the transport reported no error
and returned a classifiable HTTP response with a body (possibly empty).
Everything else is a :class:`Failure` wrapping a
:class:`~netkit.exceptions.NetkitError`.

Callers usually branch with ``isinstance``::

    def on_complete(outcome: RequestResult) -> None:
        if isinstance(outcome, Success):
            print(outcome.status_code, outcome.json())
        else:
            print("failed:", outcome.error)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Union

from netkit.exceptions import NetkitError


@dataclass(frozen=True)
class Success:
    """A completed HTTP exchange.

    Attributes:
        status_code: The HTTP status code. 4xx and 5xx are still a
            ``Success``; interpreting them is up to the caller.
        headers: Response headers.
        body: Response body bytes.
        url: The final URL of the response (after redirects).
    """

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    url: str = ""

    @property
    def text(self) -> str:
        """The body decoded as UTF-8, with undecodable bytes replaced."""
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Parse the body as JSON. Raises :class:`ValueError` when it is not."""
        return json.loads(self.body)


@dataclass(frozen=True)
class Failure:
    """A request that did not produce a usable HTTP response."""

    error: NetkitError


RequestResult = Union[Success, Failure]
Callback = Callable[[RequestResult], None]
