"""Shared test fixtures for netkit.

Provides reusable fixtures for building endpoints, isolating configuration,
creating output managers, and running CLI commands.  These fixtures are
automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from netkit.models import Endpoint, HTTPMethod
from netkit.output import OutputFormat, OutputManager


# ---------------------------------------------------------------------------
# Endpoint fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_endpoint() -> Callable[..., Endpoint]:
    """Factory for endpoints pointing at ``https://api.example.com``.

    Keyword arguments override the defaults (``path="/items"``, GET, no
    headers, plain body).
    """

    def _make(**overrides: Any) -> Endpoint:
        values: dict[str, Any] = {
            "base_url": "https://api.example.com",
            "path": "/items",
            "method": HTTPMethod.GET,
        }
        values.update(overrides)
        return Endpoint(**values)

    return _make


# ---------------------------------------------------------------------------
# Transport fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def recorded_requests() -> list[httpx.Request]:
    """List that :func:`echo_transport` appends every received request to."""
    return []


@pytest.fixture
def echo_transport(recorded_requests: list[httpx.Request]) -> httpx.MockTransport:
    """Mock transport answering 200 with a small JSON body, recording requests."""

    def handler(request: httpx.Request) -> httpx.Response:
        recorded_requests.append(request)
        return httpx.Response(
            200,
            headers={"content-type": "application/json"},
            json={"ok": True},
        )

    return httpx.MockTransport(handler)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path so
    that tests never touch real user config. Clears all NETKIT_* environment
    variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("netkit.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in ["NETKIT_VERBOSE", "NETKIT_STUB", "NETKIT_FORMAT"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """A PLAIN-format, quiet output manager for tests that don't care about output."""
    return OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)


@pytest.fixture
def verbose_output() -> OutputManager:
    """A PLAIN-format, colourless, verbose output manager (traces go to stderr)."""
    return OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True)


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
