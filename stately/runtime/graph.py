# stately/runtime/graph.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""Graph of state nodes and the configuration surface built on top of it."""

import logging
from typing import Callable, Dict, Hashable, Iterator, List, Optional

from ..core.behaviours import TriggerBehaviour
from ..core.states import StateNode

logger = logging.getLogger(__name__)


class StateGraph:
    """
    Owns every ``StateNode`` of a machine, keyed by state.

    Nodes are created on first reference, so configuration can mention states in any
    order. Nodes are never removed.
    """

    def __init__(self) -> None:
        self._nodes: Dict[Hashable, StateNode] = {}

    def get_node(self, state: Hashable) -> StateNode:
        """Return the node for ``state``, creating it if needed."""
        node = self._nodes.get(state)
        if node is None:
            node = StateNode(state)
            self._nodes[state] = node
            logger.debug(f"Created node for state '{state}'")
        return node

    def find_node(self, state: Hashable) -> Optional[StateNode]:
        """Return the node for ``state`` without creating it."""
        return self._nodes.get(state)

    @property
    def states(self) -> List[Hashable]:
        return list(self._nodes)

    @property
    def nodes(self) -> List[StateNode]:
        return list(self._nodes.values())

    def __contains__(self, state: object) -> bool:
        return state in self._nodes

    def __iter__(self) -> Iterator[StateNode]:
        return iter(list(self._nodes.values()))

    def __len__(self) -> int:
        return len(self._nodes)

    # ---- Configuration surface ----

    def add_entry_action(
        self,
        state: Hashable,
        action: Callable,
        description: Optional[str] = None,
        from_trigger: Optional[Hashable] = None,
    ) -> StateNode:
        return self.get_node(state).add_entry_action(action, description, from_trigger)

    def add_exit_action(self, state: Hashable, action: Callable, description: Optional[str] = None) -> StateNode:
        return self.get_node(state).add_exit_action(action, description)

    def add_activate_action(self, state: Hashable, action: Callable, description: Optional[str] = None) -> StateNode:
        return self.get_node(state).add_activate_action(action, description)

    def add_deactivate_action(
        self, state: Hashable, action: Callable, description: Optional[str] = None
    ) -> StateNode:
        return self.get_node(state).add_deactivate_action(action, description)

    def add_trigger_behaviour(self, state: Hashable, behaviour: TriggerBehaviour) -> StateNode:
        return self.get_node(state).add_trigger_behaviour(behaviour)

    def set_initial_transition(self, state: Hashable, target: Hashable) -> StateNode:
        node = self.get_node(state)
        node.set_initial_transition(target)
        self.get_node(target)
        return node

    def set_superstate(self, state: Hashable, superstate: Hashable) -> StateNode:
        """
        Make ``state`` a substate of ``superstate``.

        :raises ConfigurationError: On cycles or re-parenting.
        """
        return self.get_node(state).set_superstate(self.get_node(superstate))

    def add_substate(self, state: Hashable, substate: Hashable) -> StateNode:
        self.set_superstate(substate, state)
        return self.get_node(state)

    # ---- Validation ----

    def initial_transition_error(self, node: StateNode) -> Optional[str]:
        """Describe what is wrong with ``node``'s initial transition, or None."""
        if not node.has_initial_transition:
            return None
        target = node.initial_transition_target
        if target == node.state or not node.includes(target):
            return (
                f"The initial transition of state '{node.state}' targets '{target}', "
                f"which is not a substate of '{node.state}'."
            )
        return None

    def validate(self) -> List[str]:
        """Return a description of each structural problem found; empty when valid."""
        errors: List[str] = []
        for node in self._nodes.values():
            error = self.initial_transition_error(node)
            if error is not None:
                errors.append(error)
        return errors
