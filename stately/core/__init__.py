"""
Core package: states, trigger behaviours, guards, transitions and the machine that
ties them together.
"""

# Import order matters to avoid circular dependencies
from .types import BehaviourKind, FiringMode
from .errors import (
    AmbiguousTransitionError,
    ConfigurationError,
    HSMError,
    InvalidUsageError,
    ParameterError,
    TransitionError,
    UnhandledTriggerError,
)
from .transitions import InitialTransition, Transition
from .guards import GuardCondition, TransitionGuard
from .behaviours import (
    DynamicBehaviour,
    DynamicStateInfo,
    IgnoredBehaviour,
    InternalBehaviour,
    ReentryBehaviour,
    TransitioningBehaviour,
    TriggerBehaviour,
)
from .states import StateNode
from .parameters import TriggerParameterRegistry, TriggerWithParameters
from .reflection import StateInfo, StateMachineInfo, TransitionInfo
from .state_machine import StateMachine

__all__ = [
    "AmbiguousTransitionError",
    "BehaviourKind",
    "ConfigurationError",
    "DynamicBehaviour",
    "DynamicStateInfo",
    "FiringMode",
    "GuardCondition",
    "HSMError",
    "IgnoredBehaviour",
    "InitialTransition",
    "InternalBehaviour",
    "InvalidUsageError",
    "ParameterError",
    "ReentryBehaviour",
    "StateInfo",
    "StateMachine",
    "StateMachineInfo",
    "StateNode",
    "Transition",
    "TransitionError",
    "TransitionGuard",
    "TransitionInfo",
    "TransitioningBehaviour",
    "TriggerBehaviour",
    "TriggerParameterRegistry",
    "TriggerWithParameters",
    "UnhandledTriggerError",
]
