"""
Core state machine.

Public API:
    - RecorderMachine: Block recording orchestration
    - RecorderCallbacks: Side effects the machine drives
    - RecorderState / MachineState: State enumeration and snapshot

Usage:
    from core import RecorderMachine

    machine = RecorderMachine(callbacks)
    machine.enable()
"""

from core.state_machine import (
    MachineState,
    RecorderCallbacks,
    RecorderMachine,
    RecorderState,
)

__all__ = [
    "MachineState",
    "RecorderCallbacks",
    "RecorderMachine",
    "RecorderState",
]
