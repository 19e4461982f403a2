"""Resolution table for named actions and guards."""

from collections.abc import Callable, Collection, Mapping
from typing import Any

from .exceptions import ResolutionError
from .expressions import GuardExpression


class ActionTable:
    """Maps action and guard names to the functions implementing them.

    Configurations reference behavior by name only. A table is built by
    the caller and handed to the compiler, which resolves every name
    eagerly. Tables are plain objects; nothing is registered globally.

    Actions are called as ``action(context, event)`` and may return a
    mapping that is merged into the context. Guards are called as
    ``guard(context, event)`` and return a truthy value.
    """

    def __init__(
        self,
        actions: Mapping[str, Callable[..., Any]] | None = None,
        guards: Mapping[str, Callable[..., Any]] | None = None,
    ):
        self._actions: dict[str, Callable[..., Any]] = dict(actions or {})
        self._guards: dict[str, Callable[..., Any]] = dict(guards or {})

    def register_action(self, func: Callable[..., Any], name: str | None = None) -> None:
        """Register an action, named after the function unless overridden."""
        self._actions[name or func.__name__] = func

    def register_guard(self, func: Callable[..., Any], name: str | None = None) -> None:
        """Register a guard, named after the function unless overridden."""
        self._guards[name or func.__name__] = func

    def action(
        self, func: Callable[..., Any] | None = None, *, name: str | None = None
    ) -> Callable[..., Any]:
        """Decorator registering a function as an action."""

        def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
            self.register_action(f, name)
            return f

        if func is None:
            return decorator
        return decorator(func)

    def guard(
        self, func: Callable[..., Any] | None = None, *, name: str | None = None
    ) -> Callable[..., Any]:
        """Decorator registering a function as a guard."""

        def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
            self.register_guard(f, name)
            return f

        if func is None:
            return decorator
        return decorator(func)

    def resolve_action(self, name: str) -> Callable[..., Any]:
        """Get an action by name.

        Raises:
            ResolutionError: If no action with that name is registered
        """
        try:
            return self._actions[name]
        except KeyError:
            raise ResolutionError(name, "action") from None

    def resolve_guard(
        self, name: str, known_terms: Collection[str] = ()
    ) -> Callable[..., Any]:
        """Get a guard by name, or compile it as an expression.

        A name that is not registered is parsed as a guard expression
        over ``known_terms`` (the machine's context variables).

        Raises:
            ResolutionError: If the name is neither registered nor a
                valid expression over known terms
        """
        if name in self._guards:
            return self._guards[name]
        return GuardExpression(name, known_terms)

    def merge(self, other: "ActionTable") -> "ActionTable":
        """Return a new table with entries of ``other`` taking precedence."""
        return ActionTable(
            actions={**self._actions, **other._actions},
            guards={**self._guards, **other._guards},
        )

    @property
    def action_names(self) -> list[str]:
        return list(self._actions)

    @property
    def guard_names(self) -> list[str]:
        return list(self._guards)

    def __contains__(self, name: object) -> bool:
        return name in self._actions or name in self._guards

    def __repr__(self) -> str:
        return f"ActionTable(actions={self.action_names}, guards={self.guard_names})"
