# stately/core/behaviours.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
Trigger behaviours: what a state does when a given trigger is fired while it is
active.

Each behaviour variant is tagged with a ``BehaviourKind`` and carries the trigger
it answers to and a ``TransitionGuard``. The state machine dispatches on
``behaviour.kind`` rather than on the class, so the set of variants is closed:

- TRANSITIONING: leave for a fixed destination.
- REENTRY: exit and re-enter the owning state.
- INTERNAL: run an action without leaving the state.
- IGNORED: accept the trigger and do nothing.
- DYNAMIC: leave for a destination computed from the fire-time arguments.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, Iterable, List, Optional, Sequence, Tuple

from stately.core.actions import ActionBehaviour, describe_callable
from stately.core.guards import TransitionGuard, as_guard
from stately.core.transitions import Transition
from stately.core.types import BehaviourKind


class TriggerBehaviour:
    """Base class for the behaviour variants."""

    kind: BehaviourKind

    def __init__(self, trigger: Hashable, guard: Any = None) -> None:
        self._trigger = trigger
        self._guard = as_guard(guard)

    @property
    def trigger(self) -> Hashable:
        return self._trigger

    @property
    def guard(self) -> TransitionGuard:
        return self._guard

    def unmet_guard_conditions(self, args: Sequence[Any]) -> List[str]:
        return self._guard.unmet_conditions(args)

    def guard_conditions_met(self, args: Sequence[Any]) -> bool:
        return self._guard.conditions_met(args)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(trigger={self._trigger!r})"


class TransitioningBehaviour(TriggerBehaviour):
    kind = BehaviourKind.TRANSITIONING

    def __init__(self, trigger: Hashable, destination: Hashable, guard: Any = None) -> None:
        super().__init__(trigger, guard)
        self._destination = destination

    @property
    def destination(self) -> Hashable:
        return self._destination


class ReentryBehaviour(TriggerBehaviour):
    """Exits and re-enters ``destination``, which must be the state owning the behaviour."""

    kind = BehaviourKind.REENTRY

    def __init__(self, trigger: Hashable, destination: Hashable, guard: Any = None) -> None:
        super().__init__(trigger, guard)
        self._destination = destination

    @property
    def destination(self) -> Hashable:
        return self._destination


class InternalBehaviour(TriggerBehaviour):
    """
    Runs ``action(transition, *args)`` and leaves the current state untouched.
    """

    kind = BehaviourKind.INTERNAL

    def __init__(
        self, trigger: Hashable, action: Callable, guard: Any = None, description: Optional[str] = None
    ) -> None:
        super().__init__(trigger, guard)
        self._action = ActionBehaviour(action, description)

    @property
    def action(self) -> ActionBehaviour:
        return self._action

    def execute(self, transition: Transition, args: Sequence[Any]) -> None:
        self._action.execute(transition, *args)

    async def execute_async(self, transition: Transition, args: Sequence[Any]) -> None:
        await self._action.execute_async(transition, *args)


class IgnoredBehaviour(TriggerBehaviour):
    kind = BehaviourKind.IGNORED


@dataclass(frozen=True)
class DynamicStateInfo:
    """A destination a dynamic behaviour may select, with the criterion for choosing it."""

    destination: Hashable
    criterion: str = ""


class DynamicBehaviour(TriggerBehaviour):
    """
    Selects the destination at fire time with ``selector(*args)``, or with
    ``selector(source, *args)`` when ``receives_state`` is set.

    ``possible_destinations`` is informational only; it feeds introspection and is
    never used for resolution.
    """

    kind = BehaviourKind.DYNAMIC

    def __init__(
        self,
        trigger: Hashable,
        selector: Callable[..., Hashable],
        guard: Any = None,
        possible_destinations: Iterable[DynamicStateInfo] = (),
        description: Optional[str] = None,
        receives_state: bool = False,
    ) -> None:
        super().__init__(trigger, guard)
        if not callable(selector):
            raise TypeError(f"Destination selector must be callable, got {selector!r}")
        self._selector = selector
        self._description = description or describe_callable(selector)
        self._possible_destinations: Tuple[DynamicStateInfo, ...] = tuple(possible_destinations)
        self._receives_state = receives_state

    @property
    def description(self) -> str:
        return self._description

    @property
    def possible_destinations(self) -> Tuple[DynamicStateInfo, ...]:
        return self._possible_destinations

    @property
    def receives_state(self) -> bool:
        return self._receives_state

    def select_destination(self, args: Sequence[Any], source: Hashable = None) -> Hashable:
        if self._receives_state:
            return self._selector(source, *args)
        return self._selector(*args)


@dataclass
class BehaviourResult:
    """A behaviour paired with the guard descriptions that failed when it was resolved."""

    behaviour: TriggerBehaviour
    unmet_guard_conditions: List[str] = field(default_factory=list)

    @property
    def is_satisfied(self) -> bool:
        return not self.unmet_guard_conditions
