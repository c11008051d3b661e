# stately/core/states.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
Per-state configuration and behaviour.

A ``StateNode`` holds everything configured for one state: its lifecycle actions,
the behaviours registered for each trigger, its place in the hierarchy and an
optional initial transition. It also implements the hierarchical parts of firing:
handler lookup through superstates and the ordering of entry, exit, activation
and deactivation actions.

Nodes are owned by a ``StateGraph``. The superstate link is a weak reference so
that a node never keeps its parent alive; substates are held strongly.
"""

import logging
import weakref
from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence, Tuple

from stately.core.actions import ActionBehaviour, EntryActionBehaviour
from stately.core.behaviours import BehaviourResult, TriggerBehaviour
from stately.core.errors import AmbiguousTransitionError, ConfigurationError
from stately.core.transitions import Transition
from stately.core.types import BehaviourKind

logger = logging.getLogger(__name__)


class StateNode:
    """
    Representation of a single configured state.

    :param state: The state identity. Any hashable value.
    """

    def __init__(self, state: Hashable) -> None:
        self._state = state
        self._entry_actions: List[EntryActionBehaviour] = []
        self._exit_actions: List[ActionBehaviour] = []
        self._activate_actions: List[ActionBehaviour] = []
        self._deactivate_actions: List[ActionBehaviour] = []
        self._trigger_behaviours: Dict[Hashable, List[TriggerBehaviour]] = {}
        self._superstate_ref: Optional["weakref.ref[StateNode]"] = None
        self._substates: List["StateNode"] = []
        self._initial_transition_target: Optional[Hashable] = None
        self._has_initial_transition = False

    # ---- Properties ----

    @property
    def state(self) -> Hashable:
        return self._state

    @property
    def superstate(self) -> Optional["StateNode"]:
        if self._superstate_ref is None:
            return None
        return self._superstate_ref()

    @property
    def substates(self) -> List["StateNode"]:
        return list(self._substates)

    @property
    def has_initial_transition(self) -> bool:
        return self._has_initial_transition

    @property
    def initial_transition_target(self) -> Optional[Hashable]:
        return self._initial_transition_target

    @property
    def trigger_behaviours(self) -> Dict[Hashable, List[TriggerBehaviour]]:
        return {trigger: list(behaviours) for trigger, behaviours in self._trigger_behaviours.items()}

    @property
    def entry_actions(self) -> List[EntryActionBehaviour]:
        return list(self._entry_actions)

    @property
    def exit_actions(self) -> List[ActionBehaviour]:
        return list(self._exit_actions)

    @property
    def activate_actions(self) -> List[ActionBehaviour]:
        return list(self._activate_actions)

    @property
    def deactivate_actions(self) -> List[ActionBehaviour]:
        return list(self._deactivate_actions)

    # ---- Configuration ----

    def add_entry_action(
        self, action: Callable, description: Optional[str] = None, from_trigger: Optional[Hashable] = None
    ) -> "StateNode":
        """
        Register ``action(transition, *args)`` to run when the state is entered.

        :param from_trigger: If given, the action only runs for transitions caused by this trigger.
        """
        self._entry_actions.append(EntryActionBehaviour(action, description, from_trigger))
        return self

    def add_exit_action(self, action: Callable, description: Optional[str] = None) -> "StateNode":
        """Register ``action(transition)`` to run when the state is exited."""
        self._exit_actions.append(ActionBehaviour(action, description))
        return self

    def add_activate_action(self, action: Callable, description: Optional[str] = None) -> "StateNode":
        self._activate_actions.append(ActionBehaviour(action, description))
        return self

    def add_deactivate_action(self, action: Callable, description: Optional[str] = None) -> "StateNode":
        self._deactivate_actions.append(ActionBehaviour(action, description))
        return self

    def add_trigger_behaviour(self, behaviour: TriggerBehaviour) -> "StateNode":
        """
        Register a behaviour for its trigger. Several behaviours may share a trigger as
        long as at most one of them has its guard satisfied when the trigger fires.

        :raises ConfigurationError: For a plain transition to this same state, or a
            reentry behaviour whose destination is another state.
        """
        if behaviour.kind is BehaviourKind.TRANSITIONING and behaviour.destination == self._state:
            raise ConfigurationError(
                f"Transition from state '{self._state}' to itself on trigger '{behaviour.trigger}' is not "
                "allowed. Use a reentry behaviour to exit and re-enter, or ignore the trigger."
            )
        if behaviour.kind is BehaviourKind.REENTRY and behaviour.destination != self._state:
            raise ConfigurationError(
                f"Reentry behaviour for trigger '{behaviour.trigger}' targets '{behaviour.destination}' "
                f"but is registered on state '{self._state}'."
            )
        self._trigger_behaviours.setdefault(behaviour.trigger, []).append(behaviour)
        return self

    def set_initial_transition(self, target: Hashable) -> "StateNode":
        """
        Declare the substate entered automatically whenever this state is entered.

        :raises ConfigurationError: If the target is this state or an initial
            transition was already declared.
        """
        if target == self._state:
            raise ConfigurationError(
                f"State '{self._state}' cannot declare itself as its own initial transition target."
            )
        if self._has_initial_transition:
            raise ConfigurationError(
                f"State '{self._state}' already has an initial transition to "
                f"'{self._initial_transition_target}'."
            )
        self._initial_transition_target = target
        self._has_initial_transition = True
        return self

    def set_superstate(self, superstate: "StateNode") -> "StateNode":
        """
        Make this state a substate of ``superstate``.

        :raises ConfigurationError: If the link would close a cycle, or this state
            already has a different superstate.
        """
        if superstate is self or superstate.is_included_in(self._state):
            raise ConfigurationError(
                f"Making '{self._state}' a substate of '{superstate.state}' would create a cycle."
            )
        current = self.superstate
        if current is not None:
            if current is superstate:
                return self
            raise ConfigurationError(
                f"Cannot re-parent state '{self._state}' from '{current.state}' to '{superstate.state}'."
            )
        self._superstate_ref = weakref.ref(superstate)
        superstate._substates.append(self)
        logger.debug(f"State '{self._state}' is now a substate of '{superstate.state}'")
        return self

    def add_substate(self, substate: "StateNode") -> "StateNode":
        substate.set_superstate(self)
        return self

    # ---- Hierarchy queries ----

    def includes(self, state: Hashable) -> bool:
        """True if ``state`` is this state or any of its (transitive) substates."""
        return self._state == state or any(substate.includes(state) for substate in self._substates)

    def is_included_in(self, state: Hashable) -> bool:
        """True if ``state`` is this state or any of its (transitive) superstates."""
        if self._state == state:
            return True
        superstate = self.superstate
        return superstate is not None and superstate.is_included_in(state)

    # ---- Resolution ----

    def find_handler(self, trigger: Hashable, args: Sequence[Any]) -> Tuple[bool, Optional[BehaviourResult]]:
        """
        Look for a behaviour that handles ``trigger``, searching superstates when this
        state has no satisfied behaviour of its own.

        Returns a ``(found, result)`` pair. When nothing is satisfied, ``result`` is the
        closest diagnostic available: an ancestor's result if any ancestor registered
        the trigger, otherwise this state's own unmet-guard result, otherwise None.

        :raises AmbiguousTransitionError: If several behaviours on one state are satisfied.
        """
        found, local = self._find_local_handler(trigger, args)
        inherited = None
        if not found:
            superstate = self.superstate
            if superstate is not None:
                found, inherited = superstate.find_handler(trigger, args)
        return found, inherited if inherited is not None else local

    def _find_local_handler(self, trigger: Hashable, args: Sequence[Any]) -> Tuple[bool, Optional[BehaviourResult]]:
        behaviours = self._trigger_behaviours.get(trigger)
        if not behaviours:
            return False, None

        # Each guard runs exactly once here; the results are reused below.
        results = [BehaviourResult(b, b.unmet_guard_conditions(args)) for b in behaviours]
        satisfied = [r for r in results if r.is_satisfied]
        if len(satisfied) > 1:
            raise AmbiguousTransitionError(
                f"Multiple permitted transitions are configured from state '{self._state}' for trigger "
                f"'{trigger}'. Guard clauses must be mutually exclusive."
            )
        if satisfied:
            return True, satisfied[0]

        unmet: List[str] = []
        for result in results:
            for description in result.unmet_guard_conditions:
                if description not in unmet:
                    unmet.append(description)
        return False, BehaviourResult(results[0].behaviour, unmet)

    def get_permitted_triggers(
        self, args: Sequence[Any] = (), arguments_for: Optional[Callable[[Hashable], Sequence[Any]]] = None
    ) -> List[Hashable]:
        """
        Triggers accepted in this state, own first, then inherited ones.

        :param args: Arguments handed to guards.
        :param arguments_for: Optional per-trigger override producing the guard arguments.
        """
        permitted: List[Hashable] = []
        for trigger, behaviours in self._trigger_behaviours.items():
            guard_args = arguments_for(trigger) if arguments_for is not None else args
            if any(b.guard_conditions_met(guard_args) for b in behaviours):
                permitted.append(trigger)
        superstate = self.superstate
        if superstate is not None:
            for trigger in superstate.get_permitted_triggers(args, arguments_for):
                if trigger not in permitted:
                    permitted.append(trigger)
        return permitted

    # ---- Entry / exit ----

    def _stops_entry_at(self, superstate: "StateNode", transition: Transition) -> bool:
        # An initial continuation never climbs above the state that declared it.
        return transition.is_initial and superstate.state == transition.source

    def enter(self, transition: Transition, args: Sequence[Any] = ()) -> None:
        """Run entry actions, entering superstates first where they are not yet active."""
        if transition.is_reentry:
            self._execute_entry_actions(transition, args)
        elif not self.includes(transition.source):
            superstate = self.superstate
            if superstate is not None and not self._stops_entry_at(superstate, transition):
                superstate.enter(transition, args)
            self._execute_entry_actions(transition, args)

    def exit(self, transition: Transition) -> Transition:
        """Run exit actions, cascading to superstates the destination is not inside of."""
        if transition.is_reentry:
            self._execute_exit_actions(transition)
        elif not self.includes(transition.destination):
            self._execute_exit_actions(transition)
            superstate = self.superstate
            if superstate is not None and superstate.state != transition.destination:
                return superstate.exit(transition)
        return transition

    async def enter_async(self, transition: Transition, args: Sequence[Any] = ()) -> None:
        if transition.is_reentry:
            await self._execute_entry_actions_async(transition, args)
        elif not self.includes(transition.source):
            superstate = self.superstate
            if superstate is not None and not self._stops_entry_at(superstate, transition):
                await superstate.enter_async(transition, args)
            await self._execute_entry_actions_async(transition, args)

    async def exit_async(self, transition: Transition) -> Transition:
        if transition.is_reentry:
            await self._execute_exit_actions_async(transition)
        elif not self.includes(transition.destination):
            await self._execute_exit_actions_async(transition)
            superstate = self.superstate
            if superstate is not None and superstate.state != transition.destination:
                return await superstate.exit_async(transition)
        return transition

    def _execute_entry_actions(self, transition: Transition, args: Sequence[Any]) -> None:
        for action in self._entry_actions:
            if action.applies_to(transition):
                action.execute(transition, *args)

    def _execute_exit_actions(self, transition: Transition) -> None:
        for action in self._exit_actions:
            action.execute(transition)

    async def _execute_entry_actions_async(self, transition: Transition, args: Sequence[Any]) -> None:
        for action in self._entry_actions:
            if action.applies_to(transition):
                await action.execute_async(transition, *args)

    async def _execute_exit_actions_async(self, transition: Transition) -> None:
        for action in self._exit_actions:
            await action.execute_async(transition)

    # ---- Activation ----

    def activate(self) -> None:
        """Run activate actions, outermost superstate first."""
        superstate = self.superstate
        if superstate is not None:
            superstate.activate()
        for action in self._activate_actions:
            action.execute()

    def deactivate(self) -> None:
        """Run deactivate actions, this state first, then its superstates."""
        for action in self._deactivate_actions:
            action.execute()
        superstate = self.superstate
        if superstate is not None:
            superstate.deactivate()

    async def activate_async(self) -> None:
        superstate = self.superstate
        if superstate is not None:
            await superstate.activate_async()
        for action in self._activate_actions:
            await action.execute_async()

    async def deactivate_async(self) -> None:
        for action in self._deactivate_actions:
            await action.execute_async()
        superstate = self.superstate
        if superstate is not None:
            await superstate.deactivate_async()

    def __repr__(self) -> str:
        return f"StateNode({self._state!r})"
