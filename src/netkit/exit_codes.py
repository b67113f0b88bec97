"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~netkit.exceptions.NetkitError` subclass.
Shell scripts wrapping ``netkit request`` can inspect the exit code to tell
a bad URL apart from an unreachable host without parsing stderr.

Example::

    $ netkit request GET https://unreachable.invalid /items
    $ echo $?
    6   # EXIT_TRANSPORT_ERROR -- the host could not be reached
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid or conflicting options."""

EXIT_CONFIGURATION_ERROR = 3
"""The endpoint URL or a configuration file is invalid."""

EXIT_ENCODING_ERROR = 4
"""Request parameters could not be serialised by the chosen encoding."""

EXIT_TRANSPORT_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_MALFORMED_RESPONSE = 7
"""The server replied with something that is not a usable HTTP response."""
