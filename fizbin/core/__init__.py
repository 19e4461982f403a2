"""Core components of fizbin."""

from .context import Context
from .exceptions import ConfigError, FizbinError, ResolutionError
from .expressions import GuardExpression
from .registry import ActionTable
from .types import (
    Action,
    CompiledDefinition,
    Event,
    Guard,
    StateDefinition,
    Transition,
    TriggerKind,
)

__all__ = [
    "Context",
    "ActionTable",
    "GuardExpression",
    "Action",
    "Guard",
    "Event",
    "Transition",
    "TriggerKind",
    "StateDefinition",
    "CompiledDefinition",
    "FizbinError",
    "ConfigError",
    "ResolutionError",
]
