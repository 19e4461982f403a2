"""Machine serialization functionality."""

from typing import TYPE_CHECKING

from ..core.registry import ActionTable
from ..serialization.files import load_config, save_config
from .visualization import MachineVisualization

if TYPE_CHECKING:
    from . import Machine


class MachineSerialization(MachineVisualization):
    """Machine serialization functionality."""

    def save(self, filepath: str, *, format: str | None = None) -> None:
        """Save the machine configuration to a file.

        Actions and guards are saved by name only; pass the same table
        to :meth:`load` to get a working machine back.

        Args:
            filepath: File path to save to
            format: Serialization format (json, yaml, msgpack)
        """
        save_config(self.to_config(), filepath, format=format)

    @classmethod
    def load(
        cls,
        filename: str,
        format: str | None = None,
        table: ActionTable | None = None,
    ) -> "Machine":
        """Load a machine from a configuration file.

        Args:
            filename: File path to load from
            format: Serialization format (auto-detected if None)
            table: Actions and guards referenced by the configuration

        Returns:
            Loaded machine
        """
        return cls.from_config(load_config(filename, format=format), table)
