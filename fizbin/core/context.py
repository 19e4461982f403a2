"""Context carrying the extended state of a running machine."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Context:
    """Extended state of a machine instance.

    Stores the context variables mutated by actions and the history of
    visited states. Provides dict-like access to the variables so
    actions can write ``context["amount"] += 1``.
    """

    values: dict[str, Any] = field(default_factory=dict)
    state_history: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value with a default if not found."""
        return self.values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a context value."""
        self.values[key] = value

    def update(self, changes: Mapping[str, Any]) -> None:
        """Merge a mapping of changes into the context."""
        self.values.update(changes)

    def as_dict(self) -> dict[str, Any]:
        """Return a shallow copy of the context values."""
        return dict(self.values)

    @property
    def last_state(self) -> str | None:
        return self.state_history[-1] if self.state_history else None

    def __getitem__(self, key: str) -> Any:
        return self.values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.values[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self.values

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)
