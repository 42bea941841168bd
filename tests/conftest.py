"""Shared test fixtures for the deskremote test suite.

Provides mock effector backends so the dispatcher, session and server
can be exercised without touching the host's input devices.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from deskremote.backends.base import (
    Application,
    ApplicationLauncher,
    BackendSet,
    CapabilityLister,
    InputSimulator,
    VolumeController,
    WindowManagerBridge,
)
from deskremote.dispatch import Dispatcher


# ---------------------------------------------------------------------------
# Mock Backends
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_input() -> AsyncMock:
    """A mock InputSimulator with all async methods stubbed."""
    sim = AsyncMock(spec=InputSimulator)
    sim.name = "mock-input"
    return sim


@pytest.fixture
def mock_launcher() -> AsyncMock:
    return AsyncMock(spec=ApplicationLauncher)


@pytest.fixture
def mock_volume() -> AsyncMock:
    return AsyncMock(spec=VolumeController)


@pytest.fixture
def sample_apps() -> list[Application]:
    """Enumeration with a duplicate name, as two search paths can produce."""
    return [
        Application(name="Firefox", locator="/usr/share/applications/firefox.desktop"),
        Application(name="Steam", locator="/usr/share/applications/steam.desktop"),
        Application(name="Firefox", locator="/home/user/.local/share/applications/firefox.desktop"),
    ]


@pytest.fixture
def mock_apps(sample_apps: list[Application]) -> AsyncMock:
    lister = AsyncMock(spec=CapabilityLister)
    lister.list_applications.return_value = sample_apps
    return lister


@pytest.fixture
def mock_compositor() -> AsyncMock:
    return AsyncMock(spec=WindowManagerBridge)


@pytest.fixture
def backends(
    mock_input: AsyncMock,
    mock_launcher: AsyncMock,
    mock_volume: AsyncMock,
    mock_apps: AsyncMock,
    mock_compositor: AsyncMock,
) -> BackendSet:
    """A fully populated BackendSet of mocks."""
    return BackendSet(
        input=mock_input,
        launcher=mock_launcher,
        volume=mock_volume,
        apps=mock_apps,
        compositor=mock_compositor,
    )


@pytest.fixture
def dispatcher() -> Dispatcher:
    return Dispatcher(
        open_targets={"firefox": "firefox", "steam": "steam", "audio": "pavucontrol"},
        timeout=1.0,
    )
