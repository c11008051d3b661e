# stately/core/parameters.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import logging
from typing import Any, Dict, Hashable, Optional, Sequence, Tuple

from stately.core.errors import ConfigurationError, ParameterError

logger = logging.getLogger(__name__)


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", repr(tp))


def _is_class(tp: Any) -> bool:
    # list[int] reports itself as a type on older interpreters
    return isinstance(tp, type) and getattr(tp, "__origin__", None) is None


def _is_checkable(tp: Any) -> bool:
    if tp is Any:
        return True
    if isinstance(tp, tuple):
        return bool(tp) and all(_is_class(t) for t in tp)
    return _is_class(tp)


def _accepts(expected: Any, value: Any) -> bool:
    if expected is Any or expected is object:
        return True
    return isinstance(value, expected)


class TriggerWithParameters:
    """
    A trigger together with the types of the arguments it must be fired with.

    Instances can be passed to ``StateMachine.fire`` in place of the bare trigger.
    """

    def __init__(self, trigger: Hashable, *argument_types: Any) -> None:
        if trigger is None:
            raise ConfigurationError("Trigger must not be None")
        for position, argument_type in enumerate(argument_types):
            if not _is_checkable(argument_type):
                raise ConfigurationError(
                    f"The argument type in position {position} of trigger '{trigger}' must be a class, "
                    f"a tuple of classes or typing.Any, got {argument_type!r}."
                )
        self._trigger = trigger
        self._argument_types: Tuple[Any, ...] = tuple(argument_types)

    @property
    def trigger(self) -> Hashable:
        return self._trigger

    @property
    def argument_types(self) -> Tuple[Any, ...]:
        return self._argument_types

    def validate_parameters(self, args: Sequence[Any]) -> None:
        """
        Check argument count and types positionally.

        :raises ParameterError: On too many or too few arguments, or a type mismatch.
        """
        expected = len(self._argument_types)
        if len(args) > expected:
            raise ParameterError(
                f"Too many parameters have been supplied for trigger '{self._trigger}'. "
                f"Expecting {expected} but got {len(args)}."
            )
        if len(args) < expected:
            raise ParameterError(
                f"Too few parameters have been supplied for trigger '{self._trigger}'. "
                f"Expecting {expected} but got {len(args)}."
            )
        for position, (expected_type, value) in enumerate(zip(self._argument_types, args)):
            if not _accepts(expected_type, value):
                raise ParameterError(
                    f"The argument in position {position} of trigger '{self._trigger}' is of type "
                    f"'{type(value).__name__}' but must be of type '{_type_name(expected_type)}'."
                )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TriggerWithParameters):
            return NotImplemented
        return self._trigger == other._trigger and self._argument_types == other._argument_types

    def __hash__(self) -> int:
        return hash((self._trigger, self._argument_types))

    def __repr__(self) -> str:
        types = ", ".join(_type_name(t) for t in self._argument_types)
        return f"TriggerWithParameters({self._trigger!r}, [{types}])"


class TriggerParameterRegistry:
    """Argument signatures keyed by trigger."""

    def __init__(self) -> None:
        self._signatures: Dict[Hashable, TriggerWithParameters] = {}

    def set_parameters(self, trigger: Hashable, *argument_types: Any) -> TriggerWithParameters:
        """
        Register the signature for ``trigger``. Registering the same signature again
        returns the existing entry.

        :raises ConfigurationError: If a different signature is already registered.
        """
        configuration = TriggerWithParameters(trigger, *argument_types)
        existing = self._signatures.get(trigger)
        if existing is not None:
            if existing == configuration:
                return existing
            raise ConfigurationError(
                f"Parameters for the trigger '{trigger}' have already been configured as {existing!r}."
            )
        self._signatures[trigger] = configuration
        logger.debug(f"Registered parameters {configuration!r}")
        return configuration

    def get(self, trigger: Hashable) -> Optional[TriggerWithParameters]:
        return self._signatures.get(trigger)

    def validate(self, trigger: Hashable, args: Sequence[Any]) -> None:
        """Validate ``args`` for ``trigger``. Triggers without a signature accept anything."""
        configuration = self._signatures.get(trigger)
        if configuration is not None:
            configuration.validate_parameters(args)

    def pad_arguments(self, trigger: Hashable, args: Sequence[Any]) -> Tuple[Any, ...]:
        """
        Extend ``args`` with None up to the registered arity, so guards can be probed
        without real arguments.
        """
        args = tuple(args)
        configuration = self._signatures.get(trigger)
        if configuration is None:
            return args
        missing = len(configuration.argument_types) - len(args)
        return args + (None,) * missing if missing > 0 else args

    def __contains__(self, trigger: object) -> bool:
        return trigger in self._signatures

    def __len__(self) -> int:
        return len(self._signatures)
