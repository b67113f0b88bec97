"""Exception hierarchy for netkit.

All exceptions inherit from :class:`NetkitError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`netkit.exit_codes`.
The top-level error handler in :func:`netkit.app.main` catches
``NetkitError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Builder errors (:class:`ConfigurationError`, :class:`EncodingError`) are
raised synchronously before anything is sent.  Execution errors
(:class:`TransportError`, :class:`MalformedResponseError`) are never raised
by the provider; they are delivered inside a
:class:`~netkit.client.result.Failure`.

Subclass hierarchy::

    NetkitError (exit 1)
    +-- InvalidUsageError       (exit 2)
    +-- ConfigurationError      (exit 3)
    +-- EncodingError           (exit 4)
    +-- TransportError          (exit 6)
    +-- MalformedResponseError  (exit 7)
"""

from __future__ import annotations

from typing import Optional

from netkit.exit_codes import (
    EXIT_CONFIGURATION_ERROR,
    EXIT_ENCODING_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MALFORMED_RESPONSE,
    EXIT_TRANSPORT_ERROR,
)


class NetkitError(Exception):
    """Base exception for all netkit errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`netkit.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(NetkitError):
    """Raised for invalid CLI arguments or conflicting body options."""

    exit_code = EXIT_INVALID_USAGE


class ConfigurationError(NetkitError):
    """Raised when ``base_url + path`` is not an absolute URL, or a config file is invalid."""

    exit_code = EXIT_CONFIGURATION_ERROR


class EncodingError(NetkitError):
    """Raised when a parameter mapping cannot be serialised by the chosen encoding.

    Args:
        message: Description of the failure.
        key: The (possibly nested, bracketed) key of the offending value.
    """

    exit_code = EXIT_ENCODING_ERROR

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class TransportError(NetkitError):
    """Network-level failure (DNS, connection refused, timeout, TLS).

    Wraps the underlying :class:`httpx.HTTPError`, which stays available as
    :attr:`original` and as ``__cause__``.
    """

    exit_code = EXIT_TRANSPORT_ERROR

    def __init__(self, message: str, original: Optional[BaseException] = None):
        super().__init__(message)
        self.original = original
        self.__cause__ = original


class MalformedResponseError(NetkitError):
    """The transport succeeded but the reply is not a usable HTTP response."""

    exit_code = EXIT_MALFORMED_RESPONSE
