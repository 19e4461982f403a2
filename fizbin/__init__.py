"""fizbin is a library for declarative finite state machines in Python.

Machines are described as plain data, compiled into immutable
definitions, run as independent instances and rendered as diagrams.
"""

__version__ = "0.1.0"

from .compiler import compile
from .core import (
    Action,
    ActionTable,
    CompiledDefinition,
    ConfigError,
    Context,
    Event,
    FizbinError,
    Guard,
    ResolutionError,
    StateDefinition,
    Transition,
    TriggerKind,
)
from .machine import Machine
from .runtime import (
    AsyncioTimerService,
    InstanceStatus,
    ManualTimerService,
    RuntimeInstance,
    ThreadingTimerService,
    TimerService,
    instantiate,
)
from .serialization import StateMachineConfig, TransitionSpec, load_config, save_config
from .visualization import GraphDescription, render

__all__ = [
    "__version__",
    "compile",
    "instantiate",
    "render",
    "load_config",
    "save_config",
    "Machine",
    "StateMachineConfig",
    "TransitionSpec",
    "ActionTable",
    "CompiledDefinition",
    "StateDefinition",
    "Transition",
    "TriggerKind",
    "Guard",
    "Action",
    "Event",
    "Context",
    "RuntimeInstance",
    "InstanceStatus",
    "TimerService",
    "ThreadingTimerService",
    "AsyncioTimerService",
    "ManualTimerService",
    "GraphDescription",
    "FizbinError",
    "ConfigError",
    "ResolutionError",
]
