"""Base serialization interface."""

from typing import Protocol, runtime_checkable

from .types import StateMachineConfig


@runtime_checkable
class Serializer(Protocol):
    """Protocol for machine configuration serializers."""

    def serialize(self, config: StateMachineConfig, format: str = "json") -> bytes | str:
        """Serialize a configuration to the specified format."""
        ...

    def deserialize(self, data: bytes | str, format: str = "json") -> StateMachineConfig:
        """Deserialize data into a configuration."""
        ...
