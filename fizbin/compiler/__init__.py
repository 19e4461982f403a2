"""Compilation of declarative configurations into machine definitions."""

from .compiler import compile
from .expansion import WILDCARD, classify, expand_sources, find_terminal_states

__all__ = [
    "compile",
    "WILDCARD",
    "classify",
    "expand_sources",
    "find_terminal_states",
]
