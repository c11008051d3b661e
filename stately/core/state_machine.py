# stately/core/state_machine.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
The state machine: resolves fired triggers and drives transitions.

Firing a trigger goes through these steps:

1. Validate the arguments against the trigger's registered signature.
2. Resolve a behaviour, starting at the current state and walking up through
   superstates. Unresolved triggers go to the unhandled-trigger handler.
3. Dispatch on the behaviour kind. Ignored triggers stop here; internal
   behaviours run their action and stop.
4. Exit the current state, and as many superstates as needed.
5. Notify "transitioned" subscribers and enter the destination, following initial
   transitions down into substates, notifying once per step.
6. Commit the final state through the state mutator, exactly once.
7. Notify "completed" subscribers with the source state and the final state.

While a transition is in progress the machine reports the state being entered, so
actions that query or fire the machine see the new state before it is committed.
Firing from inside an action either recurses immediately or is queued, depending
on the firing mode. A fire made while entering a state takes over: once it commits,
the outer transition stops following initial transitions and does not commit again.

Every step has an asynchronous counterpart. The synchronous methods raise
``InvalidUsageError`` when they reach a coroutine action or an asynchronous
subscriber.
"""

import logging
from collections import deque
from typing import Any, Callable, Deque, Hashable, List, Optional, Tuple

from stately.core.behaviours import TriggerBehaviour
from stately.core.errors import ConfigurationError, HSMError
from stately.core.events import TransitionEvent, UnhandledTriggerHandler
from stately.core.parameters import TriggerParameterRegistry, TriggerWithParameters
from stately.core.reflection import StateMachineInfo, describe_machine
from stately.core.states import StateNode
from stately.core.transitions import InitialTransition, Transition
from stately.core.types import BehaviourKind, FiringMode
from stately.runtime.graph import StateGraph

logger = logging.getLogger(__name__)

_NO_STATE = object()


class StateMachine:
    """
    Hierarchical state machine over arbitrary hashable states and triggers.

    Either pass ``initial_state`` to let the machine store its state, or pass both
    ``state_accessor`` and ``state_mutator`` to keep the state in host-owned storage.
    """

    def __init__(
        self,
        initial_state: Any = _NO_STATE,
        state_accessor: Optional[Callable[[], Hashable]] = None,
        state_mutator: Optional[Callable[[Hashable], None]] = None,
        firing_mode: FiringMode = FiringMode.IMMEDIATE,
    ) -> None:
        """
        :param initial_state: The starting state when the machine stores its own state.
        :param state_accessor: Returns the current state from external storage.
        :param state_mutator: Writes the current state to external storage.
        :param firing_mode: How triggers fired during another fire are processed.
        :raises ConfigurationError: If neither or both forms of state storage are given.
        """
        external = state_accessor is not None or state_mutator is not None
        if external:
            if initial_state is not _NO_STATE:
                raise ConfigurationError("Pass either an initial state or a state accessor/mutator pair, not both.")
            if state_accessor is None or state_mutator is None:
                raise ConfigurationError("Both a state accessor and a state mutator are required.")
            self._state_accessor = state_accessor
            self._state_mutator = state_mutator
        else:
            if initial_state is _NO_STATE:
                raise ConfigurationError("An initial state or a state accessor/mutator pair is required.")
            self._stored_state = initial_state
            self._state_accessor = self._get_stored_state
            self._state_mutator = self._set_stored_state

        if not isinstance(firing_mode, FiringMode):
            raise ConfigurationError(f"Unknown firing mode: {firing_mode!r}")

        self._graph = StateGraph()
        self._parameters = TriggerParameterRegistry()
        self._on_transitioned = TransitionEvent("transitioned")
        self._on_transition_completed = TransitionEvent("transition completed")
        self._unhandled = UnhandledTriggerHandler()
        self._firing_mode = firing_mode
        self._queue: Deque[Tuple[Hashable, Tuple[Any, ...]]] = deque()
        self._firing = False
        self._active = False
        self._pending_state: Any = _NO_STATE
        self._commit_count = 0

    def _get_stored_state(self) -> Hashable:
        return self._stored_state

    def _set_stored_state(self, state: Hashable) -> None:
        self._stored_state = state

    # ---- Configuration ----

    @property
    def graph(self) -> StateGraph:
        """The state graph holding the configuration."""
        return self._graph

    @property
    def firing_mode(self) -> FiringMode:
        return self._firing_mode

    def configure(self, state: Hashable) -> StateNode:
        """Return the node for ``state`` so that it can be configured."""
        return self._graph.get_node(state)

    def set_trigger_parameters(self, trigger: Hashable, *argument_types: Any) -> TriggerWithParameters:
        """
        Declare the argument types ``trigger`` must be fired with.

        :raises ConfigurationError: If a different signature was already declared.
        """
        return self._parameters.set_parameters(trigger, *argument_types)

    def on_transitioned(self, callback: Callable[[Transition], Any]) -> None:
        """Register ``callback(transition)`` to run after exit and before entry."""
        self._on_transitioned.register(callback)

    def on_transitioned_async(self, callback: Callable[[Transition], Any]) -> None:
        self._on_transitioned.register_async(callback)

    def on_transition_completed(self, callback: Callable[[Transition], Any]) -> None:
        """Register ``callback(transition)`` to run once the final state has been entered."""
        self._on_transition_completed.register(callback)

    def on_transition_completed_async(self, callback: Callable[[Transition], Any]) -> None:
        self._on_transition_completed.register_async(callback)

    def on_unhandled_trigger(self, handler: Callable[[Hashable, Hashable, List[str]], Any]) -> None:
        """
        Replace the unhandled-trigger handler. A coroutine function is only usable
        with the async firing methods.
        """
        self._unhandled = UnhandledTriggerHandler(handler)

    def validate(self) -> List[str]:
        """Return a list of configuration problems; empty when the configuration is valid."""
        return self._graph.validate()

    # ---- Queries ----

    @property
    def state(self) -> Hashable:
        """The current state, or the state being entered while a transition runs."""
        if self._pending_state is not _NO_STATE:
            return self._pending_state
        return self._state_accessor()

    @property
    def is_active(self) -> bool:
        return self._active

    def is_in_state(self, state: Hashable) -> bool:
        """True if the current state is ``state`` or one of its substates."""
        return self._graph.get_node(self.state).is_included_in(state)

    @property
    def permitted_triggers(self) -> List[Hashable]:
        return self.get_permitted_triggers()

    def get_permitted_triggers(self, *args: Any) -> List[Hashable]:
        """Triggers that can be fired in the current state with the given guard arguments."""
        return self._graph.get_node(self.state).get_permitted_triggers(
            args, lambda trigger: self._parameters.pad_arguments(trigger, args)
        )

    def unmet_guards(self, trigger: Hashable, *args: Any) -> Optional[List[str]]:
        """
        Guard descriptions preventing ``trigger`` from firing.

        Returns None when no behaviour for the trigger exists in the current state or
        its superstates, and an empty list when the trigger can fire.
        """
        trigger = self._trigger_of(trigger)
        args = self._parameters.pad_arguments(trigger, args)
        found, result = self._graph.get_node(self.state).find_handler(trigger, args)
        if found:
            return []
        if result is None:
            return None
        return list(result.unmet_guard_conditions)

    def can_fire(self, trigger: Hashable, *args: Any) -> bool:
        return self.unmet_guards(trigger, *args) == []

    def get_info(self) -> StateMachineInfo:
        """Describe the configured states and behaviours."""
        return describe_machine(self.state, self._graph.nodes)

    # ---- Firing ----

    @staticmethod
    def _trigger_of(trigger: Any) -> Hashable:
        if isinstance(trigger, TriggerWithParameters):
            return trigger.trigger
        return trigger

    def _validate_arguments(self, trigger: Any, args: Tuple[Any, ...]) -> Hashable:
        if isinstance(trigger, TriggerWithParameters):
            trigger.validate_parameters(args)
            trigger = trigger.trigger
        self._parameters.validate(trigger, args)
        return trigger

    def fire(self, trigger: Hashable, *args: Any) -> None:
        """
        Fire ``trigger`` with ``args``.

        :raises ParameterError: If the arguments do not match the trigger's signature.
        :raises AmbiguousTransitionError: If several behaviours are satisfied at one state.
        :raises UnhandledTriggerError: From the default handler when nothing handles the trigger.
        :raises InvalidUsageError: If a coroutine action or async subscriber is reached.
        """
        trigger = self._validate_arguments(trigger, args)
        if self._firing_mode is FiringMode.QUEUED:
            self._fire_queued(trigger, args)
        else:
            self._fire_one(trigger, args)

    def _fire_queued(self, trigger: Hashable, args: Tuple[Any, ...]) -> None:
        if self._firing:
            logger.debug(f"Queueing trigger '{trigger}'")
            self._queue.append((trigger, args))
            return
        self._firing = True
        try:
            self._fire_one(trigger, args)
            while self._queue:
                queued_trigger, queued_args = self._queue.popleft()
                self._fire_one(queued_trigger, queued_args)
        finally:
            self._firing = False
            self._queue.clear()

    def _resolve(self, trigger: Hashable, args: Tuple[Any, ...]) -> Tuple[Hashable, StateNode, bool, Any]:
        source = self.state
        representative = self._graph.get_node(source)
        found, result = representative.find_handler(trigger, args)
        if found:
            logger.debug(f"Trigger '{trigger}' in state '{source}' resolved to {result.behaviour!r}")
        else:
            logger.debug(f"Trigger '{trigger}' is not handled in state '{source}'")
        return source, representative, found, result

    @staticmethod
    def _destination_of(behaviour: TriggerBehaviour, source: Hashable, args: Tuple[Any, ...]) -> Hashable:
        kind = behaviour.kind
        if kind is BehaviourKind.DYNAMIC:
            return behaviour.select_destination(args, source)
        if kind is BehaviourKind.TRANSITIONING or kind is BehaviourKind.REENTRY:
            return behaviour.destination
        raise HSMError(f"Behaviour kind {kind} has no destination")

    def _check_initial_transitions(self, destination: Hashable) -> None:
        node = self._graph.get_node(destination)
        while node.has_initial_transition:
            error = self._graph.initial_transition_error(node)
            if error is not None:
                raise ConfigurationError(error)
            node = self._graph.get_node(node.initial_transition_target)

    def _commit(self, state: Hashable) -> None:
        logger.debug(f"Committing state '{state}'")
        self._state_mutator(state)
        self._commit_count += 1
        self._pending_state = _NO_STATE

    def _fire_one(self, trigger: Hashable, args: Tuple[Any, ...]) -> None:
        source, representative, found, result = self._resolve(trigger, args)
        if not found:
            unmet = result.unmet_guard_conditions if result is not None else []
            self._unhandled.execute(source, trigger, unmet)
            return

        behaviour = result.behaviour
        kind = behaviour.kind
        if kind is BehaviourKind.IGNORED:
            return
        if kind is BehaviourKind.INTERNAL:
            behaviour.execute(Transition(source, source, trigger, args), args)
            return

        transition = Transition(source, self._destination_of(behaviour, source, args), trigger, args)
        self._check_initial_transitions(transition.destination)
        transition = representative.exit(transition)
        if kind is BehaviourKind.REENTRY and transition.source != transition.destination:
            # Reentry handled by a superstate: the substates are gone, now reenter the superstate.
            transition = Transition(transition.destination, transition.destination, trigger, args)
            self._graph.get_node(transition.destination).exit(transition)

        serial = self._commit_count
        previous = self._pending_state
        self._pending_state = transition.destination
        try:
            final = self._enter_state(transition, args, serial)
            if self._commit_count == serial:
                self._commit(final)
        finally:
            if self._commit_count == serial:
                self._pending_state = previous
        self._on_transition_completed.invoke(Transition(source, final, trigger, args))

    def _enter_state(self, transition: Transition, args: Tuple[Any, ...], serial: int) -> Hashable:
        node = self._graph.get_node(transition.destination)
        self._on_transitioned.invoke(transition)
        while self._commit_count == serial:
            node.enter(transition, args)
            if self._commit_count != serial or not node.has_initial_transition:
                break
            transition = InitialTransition(node.state, node.initial_transition_target, transition.trigger, args)
            self._pending_state = transition.destination
            self._on_transitioned.invoke(transition)
            node = self._graph.get_node(transition.destination)
        if self._commit_count != serial:
            return self.state
        return node.state

    async def fire_async(self, trigger: Hashable, *args: Any) -> None:
        """
        Fire ``trigger`` with ``args``, awaiting coroutine actions and async subscribers.

        Raises the same errors as :meth:`fire`, except ``InvalidUsageError``.
        """
        trigger = self._validate_arguments(trigger, args)
        if self._firing_mode is FiringMode.QUEUED:
            await self._fire_queued_async(trigger, args)
        else:
            await self._fire_one_async(trigger, args)

    async def _fire_queued_async(self, trigger: Hashable, args: Tuple[Any, ...]) -> None:
        if self._firing:
            logger.debug(f"Queueing trigger '{trigger}'")
            self._queue.append((trigger, args))
            return
        self._firing = True
        try:
            await self._fire_one_async(trigger, args)
            while self._queue:
                queued_trigger, queued_args = self._queue.popleft()
                await self._fire_one_async(queued_trigger, queued_args)
        finally:
            self._firing = False
            self._queue.clear()

    async def _fire_one_async(self, trigger: Hashable, args: Tuple[Any, ...]) -> None:
        source, representative, found, result = self._resolve(trigger, args)
        if not found:
            unmet = result.unmet_guard_conditions if result is not None else []
            await self._unhandled.execute_async(source, trigger, unmet)
            return

        behaviour = result.behaviour
        kind = behaviour.kind
        if kind is BehaviourKind.IGNORED:
            return
        if kind is BehaviourKind.INTERNAL:
            await behaviour.execute_async(Transition(source, source, trigger, args), args)
            return

        transition = Transition(source, self._destination_of(behaviour, source, args), trigger, args)
        self._check_initial_transitions(transition.destination)
        transition = await representative.exit_async(transition)
        if kind is BehaviourKind.REENTRY and transition.source != transition.destination:
            transition = Transition(transition.destination, transition.destination, trigger, args)
            await self._graph.get_node(transition.destination).exit_async(transition)

        serial = self._commit_count
        previous = self._pending_state
        self._pending_state = transition.destination
        try:
            final = await self._enter_state_async(transition, args, serial)
            if self._commit_count == serial:
                self._commit(final)
        finally:
            if self._commit_count == serial:
                self._pending_state = previous
        await self._on_transition_completed.invoke_async(Transition(source, final, trigger, args))

    async def _enter_state_async(self, transition: Transition, args: Tuple[Any, ...], serial: int) -> Hashable:
        node = self._graph.get_node(transition.destination)
        await self._on_transitioned.invoke_async(transition)
        while self._commit_count == serial:
            await node.enter_async(transition, args)
            if self._commit_count != serial or not node.has_initial_transition:
                break
            transition = InitialTransition(node.state, node.initial_transition_target, transition.trigger, args)
            self._pending_state = transition.destination
            await self._on_transitioned.invoke_async(transition)
            node = self._graph.get_node(transition.destination)
        if self._commit_count != serial:
            return self.state
        return node.state

    # ---- Activation ----

    def activate(self) -> None:
        """Run activate actions of the current state and its superstates, once until deactivated."""
        if self._active:
            return
        logger.debug(f"Activating state '{self.state}'")
        self._graph.get_node(self.state).activate()
        self._active = True

    def deactivate(self) -> None:
        """Run deactivate actions of the current state and its superstates, once until activated."""
        if not self._active:
            return
        logger.debug(f"Deactivating state '{self.state}'")
        self._graph.get_node(self.state).deactivate()
        self._active = False

    async def activate_async(self) -> None:
        if self._active:
            return
        logger.debug(f"Activating state '{self.state}'")
        await self._graph.get_node(self.state).activate_async()
        self._active = True

    async def deactivate_async(self) -> None:
        if not self._active:
            return
        logger.debug(f"Deactivating state '{self.state}'")
        await self._graph.get_node(self.state).deactivate_async()
        self._active = False

    def __repr__(self) -> str:
        return f"StateMachine(state={self.state!r}, states={len(self._graph)})"
