# stately/core/types.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
Enums shared across the state machine implementation.

Kept free of imports from the rest of the package so that behaviours, nodes and
the machine can all depend on it without circular imports.
"""

from enum import Enum, auto


class BehaviourKind(Enum):
    """Tags the variants of a trigger behaviour.

    The machine dispatches on this tag when a trigger resolves to a behaviour.
    """

    TRANSITIONING = auto()  # Exits source, enters a fixed destination
    REENTRY = auto()  # Exits and re-enters the owning state
    INTERNAL = auto()  # Runs an action, no exit/entry and no state change
    IGNORED = auto()  # Accepts the trigger and does nothing
    DYNAMIC = auto()  # Destination selected from fire-time arguments


class FiringMode(Enum):
    """Controls how triggers fired while another fire is in progress are handled."""

    IMMEDIATE = auto()  # Nested fire runs to completion right away
    QUEUED = auto()  # Nested fire waits until the current one finishes
