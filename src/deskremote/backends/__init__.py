"""Effector backends for deskremote.

Performs the real-world side effects of dispatched actions through
pluggable capability providers.

Public API:
    BackendSet -- The backends bound to one session
    InputSimulator, WindowManagerBridge, ApplicationLauncher,
    VolumeController, CapabilityLister -- Capability interfaces
    BackendError -- Raised by any backend operation
    PynputInputSimulator -- Direct input simulation through pynput
"""

from deskremote.backends.base import (
    Application,
    ApplicationLauncher,
    Axis,
    BackendError,
    BackendSet,
    Button,
    CapabilityLister,
    InputSimulator,
    SymbolicKey,
    VolumeController,
    WindowManagerBridge,
)
from deskremote.backends.pynput_backend import PynputInputSimulator

__all__ = [
    "Application",
    "ApplicationLauncher",
    "Axis",
    "BackendError",
    "BackendSet",
    "Button",
    "CapabilityLister",
    "InputSimulator",
    "PynputInputSimulator",
    "SymbolicKey",
    "VolumeController",
    "WindowManagerBridge",
]
