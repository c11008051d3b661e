# stately/core/reflection.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
Read-only description of a configured machine.

These values are derived from the state graph and carry no behaviour. Tools that
render diagrams or documentation consume them.
"""

from dataclasses import dataclass, field
from typing import Any, Hashable, Iterable, Optional, Tuple

from stately.core.behaviours import DynamicStateInfo, TriggerBehaviour
from stately.core.states import StateNode
from stately.core.types import BehaviourKind


@dataclass(frozen=True)
class TransitionInfo:
    trigger: Hashable
    kind: BehaviourKind
    destination: Optional[Hashable] = None  # None for dynamic, internal and ignored behaviours
    guard_descriptions: Tuple[str, ...] = ()
    possible_destinations: Tuple[DynamicStateInfo, ...] = ()
    description: Optional[str] = None


@dataclass(frozen=True)
class StateInfo:
    state: Hashable
    superstate: Optional[Hashable] = None
    substates: Tuple[Hashable, ...] = ()
    initial_transition_target: Optional[Hashable] = None
    transitions: Tuple[TransitionInfo, ...] = ()
    entry_actions: Tuple[str, ...] = ()
    exit_actions: Tuple[str, ...] = ()
    activate_actions: Tuple[str, ...] = ()
    deactivate_actions: Tuple[str, ...] = ()

    @property
    def fixed_transitions(self) -> Tuple[TransitionInfo, ...]:
        fixed = (BehaviourKind.TRANSITIONING, BehaviourKind.REENTRY, BehaviourKind.INTERNAL)
        return tuple(t for t in self.transitions if t.kind in fixed)

    @property
    def dynamic_transitions(self) -> Tuple[TransitionInfo, ...]:
        return tuple(t for t in self.transitions if t.kind is BehaviourKind.DYNAMIC)

    @property
    def ignored_triggers(self) -> Tuple[Hashable, ...]:
        return tuple(t.trigger for t in self.transitions if t.kind is BehaviourKind.IGNORED)


@dataclass(frozen=True)
class StateMachineInfo:
    state: Hashable
    states: Tuple[StateInfo, ...] = field(default_factory=tuple)

    def get_state(self, state: Hashable) -> Optional[StateInfo]:
        for info in self.states:
            if info.state == state:
                return info
        return None


def describe_behaviour(behaviour: TriggerBehaviour) -> TransitionInfo:
    kind = behaviour.kind
    destination: Any = None
    possible: Tuple[DynamicStateInfo, ...] = ()
    description = None
    if kind is BehaviourKind.TRANSITIONING or kind is BehaviourKind.REENTRY:
        destination = behaviour.destination
    elif kind is BehaviourKind.DYNAMIC:
        possible = behaviour.possible_destinations
        description = behaviour.description
    elif kind is BehaviourKind.INTERNAL:
        description = behaviour.action.description
    return TransitionInfo(
        trigger=behaviour.trigger,
        kind=kind,
        destination=destination,
        guard_descriptions=tuple(behaviour.guard.descriptions),
        possible_destinations=possible,
        description=description,
    )


def describe_node(node: StateNode) -> StateInfo:
    superstate = node.superstate
    transitions = [
        describe_behaviour(behaviour)
        for behaviours in node.trigger_behaviours.values()
        for behaviour in behaviours
    ]
    return StateInfo(
        state=node.state,
        superstate=superstate.state if superstate is not None else None,
        substates=tuple(s.state for s in node.substates),
        initial_transition_target=node.initial_transition_target,
        transitions=tuple(transitions),
        entry_actions=tuple(a.description for a in node.entry_actions),
        exit_actions=tuple(a.description for a in node.exit_actions),
        activate_actions=tuple(a.description for a in node.activate_actions),
        deactivate_actions=tuple(a.description for a in node.deactivate_actions),
    )


def describe_machine(state: Hashable, nodes: Iterable[StateNode]) -> StateMachineInfo:
    return StateMachineInfo(state=state, states=tuple(describe_node(node) for node in nodes))
