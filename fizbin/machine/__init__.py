"""Machine module combining all functionality."""

from .serialization import MachineSerialization


class Machine(MachineSerialization):
    """Complete Machine implementation with all functionality.

    This class combines all machine mixins:
    - Configuration, compilation and validation (CoreMachine)
    - States, transitions, actions and guards in code (MachineBuilder)
    - Instantiation and scripted runs (MachineExecution)
    - Diagrams (MachineVisualization)
    - Configuration files (MachineSerialization)
    """

    pass


__all__ = ["Machine"]
