"""Built-in CLI sub-commands for netkit.

* :mod:`~netkit.commands.request` -- build an endpoint from command-line
  options and send it (or print it with ``--dry-run``).

Each module exports a plain callback function registered directly on the
root app in :mod:`netkit.app`.
"""
