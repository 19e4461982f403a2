"""Serializable configuration types for fizbin machines."""

from typing import Any

import msgspec


class TransitionSpec(msgspec.Struct, forbid_unknown_fields=True, omit_defaults=True):
    """One authored transition.

    ``from`` may be a single state, a list of states or ``"*"`` for every
    state except ``to``. The trigger is ``evt`` or ``timer``
    (milliseconds); a transition with only ``when``/``unless`` is
    transient and is checked as soon as its source state is entered.
    """

    from_: str | list[str] = msgspec.field(name="from")
    to: str
    evt: str | None = None
    timer: float | None = None
    when: str | None = None
    unless: str | None = None
    actions: str | list[str] | None = None


class StateMachineConfig(msgspec.Struct, forbid_unknown_fields=True, omit_defaults=True):
    """Declarative description of a state machine."""

    id: str
    initial: str
    states: list[str]
    transitions: list[TransitionSpec] = msgspec.field(default_factory=list)
    context: dict[str, Any] = msgspec.field(default_factory=dict)
    terminal: list[str] = msgspec.field(default_factory=list)
    updates: dict[str, str | list[str]] = msgspec.field(default_factory=dict)
    on_entry: dict[str, str | list[str]] = msgspec.field(default_factory=dict)
    on_exit: dict[str, str | list[str]] = msgspec.field(default_factory=dict)
    target: str | None = None
    description: str | None = None


def as_name_list(value: str | list[str] | None) -> list[str]:
    """Normalize a single name, a list of names or None to a list."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)
