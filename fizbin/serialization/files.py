"""Reading and writing machine configuration files."""

import logging
from os import PathLike

from .msgspec_serializer import MsgspecSerializer
from .types import StateMachineConfig

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".msgpack": "msgpack",
    ".msgpk": "msgpack",
    ".mp": "msgpack",
}


def detect_format(filepath: str | PathLike[str]) -> str:
    """Infer the serialization format from a file extension, defaulting to JSON."""
    path = str(filepath).lower()
    for extension, format in _EXTENSIONS.items():
        if path.endswith(extension):
            return format
    return "json"


def save_config(
    config: StateMachineConfig,
    filepath: str | PathLike[str],
    *,
    format: str | None = None,
) -> None:
    """Save a configuration to a file.

    Args:
        config: Configuration to save
        filepath: File path to save to
        format: Serialization format (json, yaml, msgpack); inferred from
            the extension if not provided
    """
    if format is None:
        format = detect_format(filepath)

    data = MsgspecSerializer().serialize(config, format=format)

    if format == "msgpack":
        mode = "wb"
        if isinstance(data, str):
            data = data.encode("utf-8")
    else:
        mode = "w"
        if isinstance(data, bytes):
            data = data.decode("utf-8")

    with open(filepath, mode) as f:
        f.write(data)
    logger.debug("Saved machine '%s' to %s as %s", config.id, filepath, format)


def load_config(
    filepath: str | PathLike[str], *, format: str | None = None
) -> StateMachineConfig:
    """Load a configuration from a file.

    Args:
        filepath: File path to load from
        format: Serialization format (auto-detected if None)

    Raises:
        ConfigError: If the file does not hold a valid configuration
    """
    if format is None:
        format = detect_format(filepath)

    mode = "rb" if format == "msgpack" else "r"
    with open(filepath, mode) as f:
        data = f.read()

    config = MsgspecSerializer().deserialize(data, format=format)
    logger.debug("Loaded machine '%s' from %s", config.id, filepath)
    return config
