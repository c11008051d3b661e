# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from unittest.mock import MagicMock

import pytest

from stately.core.behaviours import (
    BehaviourResult,
    DynamicBehaviour,
    DynamicStateInfo,
    IgnoredBehaviour,
    InternalBehaviour,
    ReentryBehaviour,
    TransitioningBehaviour,
)
from stately.core.errors import InvalidUsageError
from stately.core.transitions import Transition
from stately.core.types import BehaviourKind


def test_each_variant_is_tagged():
    assert TransitioningBehaviour("X", "B").kind is BehaviourKind.TRANSITIONING
    assert ReentryBehaviour("X", "A").kind is BehaviourKind.REENTRY
    assert InternalBehaviour("X", lambda t: None).kind is BehaviourKind.INTERNAL
    assert IgnoredBehaviour("X").kind is BehaviourKind.IGNORED
    assert DynamicBehaviour("X", lambda: "B").kind is BehaviourKind.DYNAMIC


def test_behaviour_without_guard_is_always_met():
    behaviour = TransitioningBehaviour("X", "B")
    assert behaviour.guard_conditions_met(())
    assert behaviour.unmet_guard_conditions(()) == []


def test_behaviour_reports_unmet_guards():
    behaviour = IgnoredBehaviour("X", [(lambda: False, "closed")])
    assert not behaviour.guard_conditions_met(())
    assert behaviour.unmet_guard_conditions(()) == ["closed"]


def test_guard_receives_fire_arguments():
    behaviour = TransitioningBehaviour("X", "B", lambda amount: amount > 10)
    assert behaviour.guard_conditions_met((11,))
    assert not behaviour.guard_conditions_met((1,))


def test_dynamic_selects_destination_from_arguments():
    behaviour = DynamicBehaviour("X", lambda n: "B" if n == 1 else "C")
    assert behaviour.select_destination((1,)) == "B"
    assert behaviour.select_destination((2,)) == "C"


def test_dynamic_selector_receives_source_state_when_asked():
    behaviour = DynamicBehaviour("X", lambda state, n: f"{state}{n}", receives_state=True)
    assert behaviour.receives_state
    assert behaviour.select_destination((1,), "A") == "A1"
    assert not DynamicBehaviour("X", lambda: "B").receives_state


def test_dynamic_keeps_possible_destinations_for_introspection():
    hints = [DynamicStateInfo("B", "n is 1"), DynamicStateInfo("C", "otherwise")]
    behaviour = DynamicBehaviour("X", lambda n: "B", possible_destinations=hints)
    assert behaviour.possible_destinations == tuple(hints)


def test_internal_action_receives_transition_and_arguments():
    action = MagicMock(return_value=None)
    behaviour = InternalBehaviour("X", action)
    transition = Transition("A", "A", "X", (5,))

    behaviour.execute(transition, (5,))

    action.assert_called_once_with(transition, 5)


def test_internal_coroutine_action_rejected_synchronously():
    async def action(transition):
        pass

    with pytest.raises(InvalidUsageError):
        InternalBehaviour("X", action).execute(Transition("A", "A", "X"), ())


@pytest.mark.asyncio
async def test_internal_coroutine_action_awaited_asynchronously():
    calls = []

    async def action(transition):
        calls.append(transition.trigger)

    await InternalBehaviour("X", action).execute_async(Transition("A", "A", "X"), ())
    assert calls == ["X"]


def test_behaviour_result_is_satisfied_without_unmet_guards():
    behaviour = IgnoredBehaviour("X")
    assert BehaviourResult(behaviour).is_satisfied
    assert not BehaviourResult(behaviour, ["guard"]).is_satisfied
