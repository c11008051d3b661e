# stately/core/transitions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from dataclasses import dataclass, field
from typing import Any, Hashable, Tuple


@dataclass(frozen=True)
class Transition:
    """
    Describes one state change as seen by actions and event subscribers.

    :param source: The state the machine was in when the trigger fired.
    :param destination: The state being entered.
    :param trigger: The trigger that caused the transition.
    :param parameters: Arguments passed to fire.
    """

    source: Hashable
    destination: Hashable
    trigger: Hashable
    parameters: Tuple[Any, ...] = field(default_factory=tuple)

    @property
    def is_reentry(self) -> bool:
        """True if the transition leaves and re-enters the same state."""
        return self.source == self.destination

    @property
    def is_initial(self) -> bool:
        return False


@dataclass(frozen=True)
class InitialTransition(Transition):
    """
    Automatic continuation from a state into its declared initial substate.

    The source is the already-active declaring state, so entering the target never
    re-enters the declaring state or anything above it.
    """

    @property
    def is_initial(self) -> bool:
        return True
