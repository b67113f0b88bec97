"""Execution shim for netkit.

Provides the asynchronous :class:`Provider`, which wraps
:class:`httpx.AsyncClient`, sends requests produced by
:func:`~netkit.builder.build_request`, and reports a two-variant outcome.

Classes:
    :class:`Provider` -- sends endpoints, invokes completion callbacks.
    :class:`Success` -- status code, headers and body of a completed exchange.
    :class:`Failure` -- wraps a transport or malformed-response error.

Example::

    from netkit.client import Provider

    async with Provider() as provider:
        outcome = await provider.fetch(endpoint)
"""

from netkit.client.provider import Provider
from netkit.client.result import Failure, RequestResult, Success

__all__ = ["Provider", "Success", "Failure", "RequestResult"]
