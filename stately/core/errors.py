# stately/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Any, Optional, Sequence


class HSMError(Exception):
    """
    Base exception class for errors within the hierarchical state machine library.
    """


class ConfigurationError(HSMError, ValueError):
    """
    Raised when the configured hierarchy or trigger behaviours are invalid, e.g. a
    superstate cycle, a duplicate initial transition or an implicit reentry.
    """


class ParameterError(HSMError, TypeError):
    """
    Raised when fire-time arguments do not match the registered trigger signature.
    """


class InvalidUsageError(HSMError, RuntimeError):
    """
    Raised when a coroutine handler is reached through the synchronous firing path.
    """


class TransitionError(HSMError):
    """
    Raised when an attempted state transition is invalid or cannot be completed.
    """


class AmbiguousTransitionError(TransitionError):
    """
    Raised when more than one guard-satisfied behaviour exists for the same trigger
    at the same state.
    """


class UnhandledTriggerError(TransitionError):
    """
    Raised by the default unhandled-trigger callback.

    :param state: The state the machine was in when the trigger was fired.
    :param trigger: The trigger that could not be handled.
    :param unmet_guards: Descriptions of the guard conditions that failed, if any.
    """

    def __init__(self, state: Any, trigger: Any, unmet_guards: Optional[Sequence[str]] = None) -> None:
        self.state = state
        self.trigger = trigger
        self.unmet_guards = list(unmet_guards or [])
        if self.unmet_guards:
            message = (
                f"Trigger '{trigger}' is valid for transition from state '{state}' but guard "
                f"conditions are not met. Guard descriptions: '{', '.join(self.unmet_guards)}'."
            )
        else:
            message = (
                f"No valid leaving transitions are permitted from state '{state}' for trigger "
                f"'{trigger}'. Consider ignoring the trigger."
            )
        super().__init__(message)
