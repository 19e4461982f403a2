"""Serialization support for machine configurations."""

from .base import Serializer
from .files import detect_format, load_config, save_config
from .msgspec_serializer import MsgspecSerializer
from .types import StateMachineConfig, TransitionSpec

__all__ = [
    "Serializer",
    "MsgspecSerializer",
    "StateMachineConfig",
    "TransitionSpec",
    "detect_format",
    "load_config",
    "save_config",
]
