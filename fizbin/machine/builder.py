"""Machine builder methods and decorators."""

from collections.abc import Callable
from typing import Any

from ..serialization.types import TransitionSpec, as_name_list
from .core import CoreMachine


class MachineBuilder(CoreMachine):
    """Builder functionality for assembling machines in code."""

    def state(
        self,
        name: str,
        *,
        initial: bool = False,
        terminal: bool = False,
        on_entry: str | list[str] | None = None,
        on_exit: str | list[str] | None = None,
    ) -> "MachineBuilder":
        """Add a state to the machine.

        Args:
            name: State name
            initial: Mark this as the initial state
            terminal: Mark this as a terminal state
            on_entry: Actions run when the state is entered
            on_exit: Actions run when the state is left

        Returns:
            The machine, for chaining
        """
        if name not in self.states:
            self.states.append(name)

        if initial:
            # Store in metadata for validation later
            self.metadata.setdefault("initial_states", []).append(name)
            # Last one wins
            self.initial = name

        if terminal and name not in self.terminal_states:
            self.terminal_states.append(name)
        if on_entry:
            self.on_entry.setdefault(name, []).extend(as_name_list(on_entry))
        if on_exit:
            self.on_exit.setdefault(name, []).extend(as_name_list(on_exit))

        self.invalidate()
        return self

    def transition(
        self,
        from_: str | list[str],
        to: str,
        *,
        evt: str | None = None,
        timer: float | None = None,
        when: str | None = None,
        unless: str | None = None,
        actions: str | list[str] | None = None,
    ) -> "MachineBuilder":
        """Add a transition; ``from_`` may be a state, a list or ``"*"``."""
        self.transitions.append(
            TransitionSpec(
                from_=from_ if isinstance(from_, str) else list(from_),
                to=to,
                evt=evt,
                timer=timer,
                when=when,
                unless=unless,
                actions=actions,
            )
        )
        self.invalidate()
        return self

    def update(self, evt: str, actions: str | list[str]) -> "MachineBuilder":
        """Handle ``evt`` in any state by running actions on the context only."""
        self.updates.setdefault(evt, []).extend(as_name_list(actions))
        self.invalidate()
        return self

    def action(
        self, func: Callable[..., Any] | None = None, *, name: str | None = None
    ) -> Callable[..., Any]:
        """Decorator to register a function as a named action.

        Actions are called as ``action(context, event)``.
        """

        def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
            self.table.register_action(f, name)
            self.invalidate()
            return f

        if func is None:
            return decorator
        return decorator(func)

    def guard(
        self, func: Callable[..., Any] | None = None, *, name: str | None = None
    ) -> Callable[..., Any]:
        """Decorator to register a function as a named guard.

        Guards are called as ``guard(context, event)``.
        """

        def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
            self.table.register_guard(f, name)
            self.invalidate()
            return f

        if func is None:
            return decorator
        return decorator(func)
