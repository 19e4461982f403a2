"""msgspec-based serializer implementation."""

from collections.abc import Mapping
from typing import Any

import msgspec
import yaml  # type: ignore[import-untyped]

from ..core.exceptions import ConfigError
from .base import Serializer
from .types import StateMachineConfig

FORMATS = ("json", "yaml", "msgpack")


class MsgspecSerializer(Serializer):
    """Serializer using msgspec for JSON and msgpack, PyYAML for YAML."""

    def __init__(self):
        self._json_encoder = msgspec.json.Encoder()
        self._json_decoder = msgspec.json.Decoder(StateMachineConfig)
        self._msgpack_encoder = msgspec.msgpack.Encoder()
        self._msgpack_decoder = msgspec.msgpack.Decoder(StateMachineConfig)

    def serialize(self, config: StateMachineConfig, format: str = "json") -> bytes | str:
        """Serialize a configuration to the specified format."""
        if not isinstance(config, StateMachineConfig):
            raise TypeError(f"Cannot serialize type: {type(config)}")

        if format == "json":
            return self._json_encoder.encode(config).decode("utf-8")
        elif format == "msgpack":
            return self._msgpack_encoder.encode(config)
        elif format == "yaml":
            data = msgspec.to_builtins(config)
            return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
        else:
            raise ValueError(f"Unknown format: {format}")

    def deserialize(self, data: bytes | str, format: str = "json") -> StateMachineConfig:
        """Deserialize data into a configuration.

        Raises:
            ConfigError: If the data cannot be decoded or does not
                describe a valid configuration
        """
        try:
            if format == "json":
                if isinstance(data, str):
                    data = data.encode("utf-8")
                return self._json_decoder.decode(data)
            elif format == "msgpack":
                if isinstance(data, str):
                    data = data.encode("utf-8")
                return self._msgpack_decoder.decode(data)
            elif format == "yaml":
                if isinstance(data, bytes):
                    data = data.decode("utf-8")
                return self.convert(yaml.safe_load(data))
            else:
                raise ValueError(f"Unknown format: {format}")
        except (msgspec.ValidationError, msgspec.DecodeError, yaml.YAMLError) as e:
            raise ConfigError(f"Invalid {format} machine configuration: {e}") from e

    def convert(self, raw: Any) -> StateMachineConfig:
        """Convert already-decoded builtin data into a configuration."""
        if isinstance(raw, StateMachineConfig):
            return raw
        if not isinstance(raw, Mapping):
            raise ConfigError(
                f"Machine configuration must be a mapping, got {type(raw).__name__}"
            )
        try:
            return msgspec.convert(dict(raw), StateMachineConfig)
        except msgspec.ValidationError as e:
            raise ConfigError(f"Invalid machine configuration: {e}") from e
