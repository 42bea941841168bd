"""deskremote -- Remote-control relay for a desktop host.

A phone (or any browser) connects over a WebSocket and sends small JSON
commands. Each command is decoded into an Action, dispatched to a
pluggable effector backend (input simulation, helper-process relay,
compositor IPC, application launcher, volume control) and acknowledged.
"""

__version__ = "0.1.0"
