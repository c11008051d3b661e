# stately/core/events.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Any, Callable, Hashable, List, Optional, Sequence

from stately.core.actions import ActionBehaviour
from stately.core.errors import InvalidUsageError, UnhandledTriggerError
from stately.core.transitions import Transition


class TransitionEvent:
    """
    Multicast notification carrying a ``Transition``.

    Ordinary subscribers run on both firing paths. Asynchronous subscribers only run
    on the asynchronous path; invoking the event synchronously while any are
    registered is an error.
    """

    def __init__(self, name: str) -> None:
        """
        :param name: Label used in error messages, e.g. "transitioned".
        """
        self._name = name
        self._callbacks: List[Callable[[Transition], Any]] = []
        self._async_callbacks: List[Callable[[Transition], Any]] = []

    @property
    def name(self) -> str:
        return self._name

    def register(self, callback: Callable[[Transition], Any]) -> None:
        if not callable(callback):
            raise TypeError(f"Subscriber must be callable, got {callback!r}")
        self._callbacks.append(callback)

    def register_async(self, callback: Callable[[Transition], Any]) -> None:
        if not callable(callback):
            raise TypeError(f"Subscriber must be callable, got {callback!r}")
        self._async_callbacks.append(callback)

    def invoke(self, transition: Transition) -> None:
        """
        Notify ordinary subscribers in registration order.

        :raises InvalidUsageError: If asynchronous subscribers are registered.
        """
        if self._async_callbacks:
            raise InvalidUsageError(
                f"Cannot notify '{self._name}' subscribers synchronously because asynchronous "
                "subscribers are registered. Use the async firing methods instead."
            )
        for callback in self._callbacks:
            ActionBehaviour(callback).execute(transition)

    async def invoke_async(self, transition: Transition) -> None:
        """Notify ordinary subscribers, then await the asynchronous ones."""
        for callback in self._callbacks:
            ActionBehaviour(callback).execute(transition)
        for callback in self._async_callbacks:
            await ActionBehaviour(callback).execute_async(transition)

    def __len__(self) -> int:
        return len(self._callbacks) + len(self._async_callbacks)


def _raise_unhandled(state: Hashable, trigger: Hashable, unmet_guards: Sequence[str]) -> None:
    raise UnhandledTriggerError(state, trigger, unmet_guards)


class UnhandledTriggerHandler:
    """
    Callback invoked as ``handler(state, trigger, unmet_guards)`` when a fired trigger
    has no satisfied behaviour. Defaults to raising ``UnhandledTriggerError``.
    """

    def __init__(self, handler: Optional[Callable] = None) -> None:
        self._action = ActionBehaviour(handler or _raise_unhandled)

    @property
    def is_async(self) -> bool:
        return self._action.is_async

    def execute(self, state: Hashable, trigger: Hashable, unmet_guards: Sequence[str]) -> None:
        self._action.execute(state, trigger, list(unmet_guards))

    async def execute_async(self, state: Hashable, trigger: Hashable, unmet_guards: Sequence[str]) -> None:
        await self._action.execute_async(state, trigger, list(unmet_guards))
