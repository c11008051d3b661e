# stately/core/actions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import inspect
from typing import Any, Callable, Hashable, Optional

from stately.core.errors import InvalidUsageError
from stately.core.transitions import Transition


def describe_callable(fn: Callable) -> str:
    """Return a human-readable name for a callback, used in diagnostics."""
    name = getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None)
    return name if name else repr(fn)


def is_coroutine_callable(fn: Callable) -> bool:
    """True for coroutine functions and objects whose __call__ is one."""
    if inspect.iscoroutinefunction(fn):
        return True
    return inspect.iscoroutinefunction(getattr(fn, "__call__", None))


def _reject_awaitable(result: Any, description: str) -> None:
    if inspect.isawaitable(result):
        if inspect.iscoroutine(result):
            result.close()
        raise InvalidUsageError(
            f"Action '{description}' returned an awaitable on the synchronous path. "
            "Use the async firing methods instead."
        )


class ActionBehaviour:
    """
    Wraps a user callback with a description and knows how to run it on either
    the synchronous or the asynchronous path.
    """

    def __init__(self, action: Callable, description: Optional[str] = None) -> None:
        """
        :param action: A plain or coroutine function.
        :param description: Optional label; defaults to the callable's qualified name.
        """
        if not callable(action):
            raise TypeError(f"Action must be callable, got {action!r}")
        self._action = action
        self._description = description or describe_callable(action)

    @property
    def action(self) -> Callable:
        return self._action

    @property
    def description(self) -> str:
        return self._description

    @property
    def is_async(self) -> bool:
        return is_coroutine_callable(self._action)

    def execute(self, *args: Any) -> Any:
        """
        Run the action synchronously.

        :raises InvalidUsageError: If the action is a coroutine function.
        """
        if self.is_async:
            raise InvalidUsageError(
                f"Cannot run asynchronous action '{self._description}' synchronously. "
                "Use the async firing methods instead."
            )
        result = self._action(*args)
        _reject_awaitable(result, self._description)
        return result

    async def execute_async(self, *args: Any) -> Any:
        """Run the action, awaiting its result when it is awaitable."""
        result = self._action(*args)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._description!r})"


class EntryActionBehaviour(ActionBehaviour):
    """
    Entry action, optionally restricted to transitions caused by one trigger.

    The action is called as ``action(transition, *args)``.
    """

    def __init__(
        self, action: Callable, description: Optional[str] = None, from_trigger: Optional[Hashable] = None
    ) -> None:
        super().__init__(action, description)
        self._from_trigger = from_trigger

    @property
    def from_trigger(self) -> Optional[Hashable]:
        return self._from_trigger

    def applies_to(self, transition: Transition) -> bool:
        return self._from_trigger is None or transition.trigger == self._from_trigger
