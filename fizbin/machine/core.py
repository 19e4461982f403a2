"""Core Machine class and basic functionality."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..compiler import compile
from ..core.exceptions import ConfigError, FizbinError
from ..core.registry import ActionTable
from ..core.types import CompiledDefinition
from ..serialization.types import StateMachineConfig, TransitionSpec, as_name_list


@dataclass
class CoreMachine:
    """Core Machine class holding the authored configuration.

    This class provides the foundational functionality: conversion to
    and from :class:`StateMachineConfig`, lazy compilation and
    validation. Builder, execution, visualization and serialization
    features are layered on top by the mixins in this package.
    """

    name: str
    initial: str | None = None
    states: list[str] = field(default_factory=list)
    transitions: list[TransitionSpec] = field(default_factory=list)
    context: dict[str, Any] = field(default_factory=dict)
    terminal_states: list[str] = field(default_factory=list)
    updates: dict[str, list[str]] = field(default_factory=dict)
    on_entry: dict[str, list[str]] = field(default_factory=dict)
    on_exit: dict[str, list[str]] = field(default_factory=dict)
    target: str | None = None
    description: str | None = None
    table: ActionTable = field(default_factory=ActionTable)
    metadata: dict[str, Any] = field(default_factory=dict)

    _definition: CompiledDefinition | None = field(default=None, init=False, repr=False)

    def __setattr__(self, name: str, value: Any) -> None:
        super().__setattr__(name, value)
        # Reassigning any compiled field drops the cached definition.
        # In-place edits (e.g. machine.context["x"] = 1) need invalidate().
        if name not in ("_definition", "metadata"):
            super().__setattr__("_definition", None)

    @classmethod
    def from_config(
        cls,
        config: StateMachineConfig | Mapping[str, Any],
        table: ActionTable | None = None,
    ):
        """Create a machine from a configuration or a plain mapping."""
        if not isinstance(config, StateMachineConfig):
            from ..serialization.msgspec_serializer import MsgspecSerializer

            config = MsgspecSerializer().convert(config)

        return cls(
            name=config.id,
            initial=config.initial,
            states=list(config.states),
            transitions=list(config.transitions),
            context=dict(config.context),
            terminal_states=list(config.terminal),
            updates={k: as_name_list(v) for k, v in config.updates.items()},
            on_entry={k: as_name_list(v) for k, v in config.on_entry.items()},
            on_exit={k: as_name_list(v) for k, v in config.on_exit.items()},
            target=config.target,
            description=config.description,
            table=table if table is not None else ActionTable(),
        )

    def to_config(self) -> StateMachineConfig:
        """Build the serializable configuration for this machine."""
        if self.initial is None:
            raise ConfigError(f"No initial state defined for machine '{self.name}'")
        return StateMachineConfig(
            id=self.name,
            initial=self.initial,
            states=list(self.states),
            transitions=list(self.transitions),
            context=dict(self.context),
            terminal=list(self.terminal_states),
            updates={k: list(v) for k, v in self.updates.items()},
            on_entry={k: list(v) for k, v in self.on_entry.items()},
            on_exit={k: list(v) for k, v in self.on_exit.items()},
            target=self.target,
            description=self.description,
        )

    @property
    def definition(self) -> CompiledDefinition:
        """The compiled definition, compiled on first access after an edit."""
        if self._definition is None:
            self._definition = compile(self.to_config(), self.table)
        return self._definition

    def invalidate(self) -> None:
        """Drop the cached definition so the next access recompiles."""
        self._definition = None

    def validate(self) -> list[str]:
        """Validate the machine and return a list of problems (empty if valid)."""
        errors = []

        if not self.states:
            errors.append("No states")
            return errors

        if self.initial is None:
            errors.append(f"No initial state defined for machine '{self.name}'")

        initial_states = self.metadata.get("initial_states", [])
        if len(initial_states) > 1:
            errors.append(f"Multiple initial states defined: {', '.join(initial_states)}")

        if self.initial is not None:
            try:
                compile(self.to_config(), self.table)
            except FizbinError as e:
                errors.append(str(e))

        return errors

    def validate_or_raise(self) -> None:
        """Validate the machine and raise ConfigError if invalid."""
        errors = self.validate()
        if errors:
            raise ConfigError(f"Machine validation failed: {errors}")

    def is_terminal_state(self, state: str | None) -> bool:
        """Check if a given state is terminal in the compiled definition."""
        if not state or state not in self.definition:
            return False
        return self.definition.is_terminal(state)
