"""stately: hierarchical state machine engine

States and triggers are plain hashable values. Each state is configured with
entry, exit, activate and deactivate actions, the behaviours it applies to each
trigger, an optional superstate and an optional initial transition into one of its
substates. The machine resolves fired triggers through that hierarchy and runs
the resulting actions in order.

Responsibilities:
    - Trigger resolution through superstates, with guard diagnostics
    - Exit and entry ordering across the hierarchy
    - Initial transitions into substates
    - Internal, ignored, reentry and dynamic behaviours
    - Parameter validation for parameterized triggers
    - Synchronous and asyncio firing paths

Cross-cutting Concerns:
    Thread Safety:
        - Not thread-safe; one logical thread per machine
        - Nested fire calls from actions are supported

    Error Handling:
        - All errors derive from HSMError
        - Configuration errors are raised when configuring

    Logging:
        - Debug records through the standard logging module
"""

from stately.core import (
    AmbiguousTransitionError,
    BehaviourKind,
    ConfigurationError,
    DynamicBehaviour,
    DynamicStateInfo,
    FiringMode,
    GuardCondition,
    HSMError,
    IgnoredBehaviour,
    InitialTransition,
    InternalBehaviour,
    InvalidUsageError,
    ParameterError,
    ReentryBehaviour,
    StateInfo,
    StateMachine,
    StateMachineInfo,
    StateNode,
    Transition,
    TransitionError,
    TransitionGuard,
    TransitionInfo,
    TransitioningBehaviour,
    TriggerWithParameters,
    UnhandledTriggerError,
)
from stately.runtime import StateGraph

__version__ = "0.1.0"

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
    "StateGraph",
    "StateInfo",
    "StateMachine",
    "StateMachineInfo",
    "StateNode",
    "Transition",
    "TransitionError",
    "TransitionGuard",
    "TransitionInfo",
    "TransitioningBehaviour",
    "TriggerWithParameters",
    "UnhandledTriggerError",
]
