"""Asynchronous execution shim -- sends built requests and normalises outcomes.

This module provides :class:`Provider`, which wraps :class:`httpx.AsyncClient`
and turns every call into exactly one of two outcomes:

- :class:`~netkit.client.result.Success` -- the transport returned an HTTP
  response with a body (possibly empty), whatever its status code.
- :class:`~netkit.client.result.Failure` -- carrying a
  :class:`~netkit.exceptions.TransportError` (DNS, connection refused,
  timeout, ...), a :class:`~netkit.exceptions.MalformedResponseError`
  (the peer did not speak usable HTTP), or a
  :class:`~netkit.exceptions.ConfigurationError` when a hand-built
  :class:`~netkit.models.BuiltRequest` cannot be converted for the transport.

Building happens synchronously before anything is scheduled, so a bad URL
or unencodable parameters raise from :meth:`Provider.request` and no
network call is attempted.  There are no retries, no timeout overrides and
no cancellation: a single attempt per call with httpx defaults.

When verbose tracing is enabled the request and the response (or error)
are written to the injected :class:`~netkit.output.OutputManager`.  Tracing
is best-effort and never changes the outcome.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import httpx

from netkit.builder import build_request
from netkit.client.result import Callback, Failure, RequestResult, Success
from netkit.exceptions import ConfigurationError, MalformedResponseError, TransportError
from netkit.models import BuiltRequest, Endpoint, ProviderConfig
from netkit.output import OutputManager


class Provider:
    """Sends :class:`~netkit.models.Endpoint` calls and reports their outcome.

    Must be used as an async context manager so that the underlying
    :class:`httpx.AsyncClient` (the connection pool shared by all calls made
    through this provider) is opened and closed properly.

    Args:
        config: Provider settings (verbose tracing, stub mode, redirects).
            Defaults to :class:`~netkit.models.ProviderConfig`.
        output: Sink for request/response traces.  When ``None`` and
            ``config.verbose`` is set, a stderr :class:`OutputManager` in
            verbose mode is created for this provider.
        transport: Optional :class:`httpx.AsyncBaseTransport`; the default
            is httpx's network transport.  Tests pass
            :class:`httpx.MockTransport`.

    Example::

        async with Provider(ProviderConfig(verbose=True)) as provider:
            task = provider.request(endpoint, on_complete)
            await task
    """

    def __init__(
        self,
        config: Optional[ProviderConfig] = None,
        output: Optional[OutputManager] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or ProviderConfig()
        if output is None and self._config.verbose:
            output = OutputManager(verbose=True)
        self._output = output
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def config(self) -> ProviderConfig:
        """The settings this provider was created with."""
        return self._config

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> Provider:
        self._client = httpx.AsyncClient(
            transport=self._transport,
            follow_redirects=self._config.follow_redirects,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    def request(self, endpoint: Endpoint, callback: Callback) -> asyncio.Task[None]:
        """Build *endpoint* and send it in the background.

        Must be called from a running event loop.  *callback* is invoked
        exactly once, with a :class:`Success` or a :class:`Failure`, when the
        exchange finishes.  Completions of concurrent calls arrive in no
        particular order.

        Args:
            endpoint: The call to make.
            callback: Completion handler receiving the outcome.

        Returns:
            The scheduled :class:`asyncio.Task`; awaiting it is optional.
            An exception raised by *callback* is re-raised by awaiting the
            task and, when an output sink is attached, reported through
            :meth:`~netkit.output.OutputManager.error`.

        Raises:
            ConfigurationError: If the endpoint URL is not absolute or a
                header is not ASCII.
            EncodingError: If the endpoint's parameters cannot be encoded.
        """
        built = build_request(endpoint)
        task = asyncio.get_running_loop().create_task(
            self._deliver(built, endpoint.sample_data, callback)
        )
        task.add_done_callback(self._report_callback_error)
        return task

    async def fetch(self, endpoint: Endpoint) -> RequestResult:
        """Build *endpoint*, send it, and return the outcome.

        Raises:
            ConfigurationError: If the endpoint URL is not absolute.
            EncodingError: If the endpoint's parameters cannot be encoded.
        """
        built = build_request(endpoint)
        return await self.send(built, sample_data=endpoint.sample_data)

    async def send(
        self, built: BuiltRequest, sample_data: Optional[bytes] = None
    ) -> RequestResult:
        """Send an already built request and classify the result.

        Args:
            built: The request to send.
            sample_data: Body answered in stub mode; ignored otherwise.

        Returns:
            The normalised outcome.  Never raises for network problems.
        """
        self._trace_request(built)
        if self._config.stub:
            outcome: RequestResult = Success(
                status_code=200, headers={}, body=sample_data or b"", url=built.url
            )
        else:
            outcome = await self._perform(built)
        self._trace_outcome(outcome)
        return outcome

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _deliver(
        self, built: BuiltRequest, sample_data: bytes, callback: Callback
    ) -> None:
        outcome = await self.send(built, sample_data=sample_data)
        callback(outcome)

    def _report_callback_error(self, task: asyncio.Task[None]) -> None:
        if task.cancelled() or self._output is None:
            return
        exc = task.exception()
        if exc is not None:
            self._output.error(f"Completion callback failed: {exc!r}")

    async def _perform(self, built: BuiltRequest) -> RequestResult:
        """Submit *built* to the transport and map the three possible results."""
        assert self._client is not None, "Provider not initialised -- use as async context manager"

        try:
            request = built.to_httpx()
        except (ValueError, httpx.InvalidURL) as exc:
            return Failure(ConfigurationError(f"Cannot send request: {exc}"))

        try:
            response = await self._client.send(request)
        except (httpx.RemoteProtocolError, httpx.DecodingError) as exc:
            error = MalformedResponseError(f"Malformed response: {exc}")
            error.__cause__ = exc
            return Failure(error)
        except httpx.HTTPError as exc:
            return Failure(TransportError(str(exc) or type(exc).__name__, original=exc))

        if not 100 <= response.status_code <= 599:
            return Failure(
                MalformedResponseError(f"Malformed response: status {response.status_code}")
            )

        return Success(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.content,
            url=str(response.url),
        )

    def _trace_request(self, built: BuiltRequest) -> None:
        self._emit(
            f"*** Request: {built.method.value} {built.url}\n"
            f"Headers: {built.headers}\n"
            f"Body: {built.body_text()}"
        )

    def _trace_outcome(self, outcome: RequestResult) -> None:
        if isinstance(outcome, Success):
            try:
                body = outcome.body.decode("utf-8")
            except UnicodeDecodeError:
                body = "n/a"
            self._emit(
                f"*** Response: {outcome.url} {outcome.status_code}\n"
                f"Headers: {outcome.headers}\n"
                f"Body: {body}"
            )
        else:
            self._emit(str(outcome.error))

    def _emit(self, message: str) -> None:
        if self._output is None or not self._config.verbose:
            return
        try:
            self._output.trace(message)
        except Exception:  # noqa: BLE001 - tracing never alters the outcome
            pass
