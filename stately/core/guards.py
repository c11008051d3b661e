# stately/core/guards.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import inspect
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple, Union

from stately.core.actions import describe_callable, is_coroutine_callable
from stately.core.errors import ConfigurationError, InvalidUsageError


class GuardCondition:
    """
    A single predicate over fire-time arguments together with the description that
    is reported when it fails.
    """

    def __init__(self, predicate: Callable[..., bool], description: Optional[str] = None) -> None:
        if not callable(predicate):
            raise ConfigurationError(f"Guard predicate must be callable, got {predicate!r}")
        if is_coroutine_callable(predicate):
            raise ConfigurationError(f"Guard predicate must be synchronous, got coroutine function {predicate!r}")
        self._predicate = predicate
        self._description = description or describe_callable(predicate)

    @property
    def predicate(self) -> Callable[..., bool]:
        return self._predicate

    @property
    def description(self) -> str:
        return self._description

    def is_met(self, args: Sequence[Any]) -> bool:
        result = self._predicate(*args)
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            raise InvalidUsageError(f"Guard '{self._description}' returned an awaitable; guards must be synchronous.")
        return bool(result)

    def __repr__(self) -> str:
        return f"GuardCondition({self._description!r})"


ConditionLike = Union[GuardCondition, Callable[..., bool], Tuple[Callable[..., bool], str]]


def _is_described_pair(item: Any) -> bool:
    return isinstance(item, tuple) and len(item) == 2 and isinstance(item[1], str)


def _as_condition(item: ConditionLike) -> GuardCondition:
    if isinstance(item, GuardCondition):
        return item
    if _is_described_pair(item):
        predicate, description = item
        return GuardCondition(predicate, description)
    return GuardCondition(item)


class TransitionGuard:
    """
    Conjunction of guard conditions attached to a trigger behaviour.

    Every condition is evaluated on each call to ``unmet_conditions``; evaluation
    does not stop at the first failure so that all failing descriptions can be
    reported together.
    """

    def __init__(self, conditions: Iterable[ConditionLike] = ()) -> None:
        self._conditions: List[GuardCondition] = [_as_condition(c) for c in conditions]

    @property
    def conditions(self) -> List[GuardCondition]:
        return list(self._conditions)

    @property
    def descriptions(self) -> List[str]:
        return [c.description for c in self._conditions]

    def unmet_conditions(self, args: Sequence[Any]) -> List[str]:
        """Evaluate every condition once and return the descriptions of the failing ones."""
        results = [(condition, condition.is_met(args)) for condition in self._conditions]
        return [condition.description for condition, met in results if not met]

    def conditions_met(self, args: Sequence[Any]) -> bool:
        return not self.unmet_conditions(args)

    def __and__(self, other: "TransitionGuard") -> "TransitionGuard":
        if not isinstance(other, TransitionGuard):
            return NotImplemented
        return TransitionGuard(self._conditions + other._conditions)

    def __len__(self) -> int:
        return len(self._conditions)

    def __repr__(self) -> str:
        return f"TransitionGuard({self.descriptions!r})"


def as_guard(guard: Union[None, TransitionGuard, ConditionLike, Iterable[ConditionLike]]) -> TransitionGuard:
    """Normalise the accepted guard spellings into a TransitionGuard."""
    if guard is None:
        return TransitionGuard()
    if isinstance(guard, TransitionGuard):
        return guard
    if isinstance(guard, GuardCondition) or _is_described_pair(guard) or callable(guard):
        return TransitionGuard([guard])
    return TransitionGuard(guard)
