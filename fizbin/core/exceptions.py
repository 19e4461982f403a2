"""Exception hierarchy for fizbin."""


class FizbinError(Exception):
    """Base exception for all fizbin errors."""

    pass


class ConfigError(FizbinError):
    """Raised when a machine configuration is structurally invalid.

    Covers unknown states, transitions without a resolvable trigger,
    ambiguous trigger or guard specifications, transient transition
    cycles detected at runtime, and unknown highlight states passed to
    the renderer.
    """

    def __init__(self, message: str, transition: str | None = None):
        if transition is not None:
            message = f"{message} (transition {transition})"
        super().__init__(message)
        self.transition = transition


class ResolutionError(FizbinError):
    """Raised when an action or guard name cannot be resolved."""

    def __init__(self, name: str, kind: str = "action", reason: str | None = None):
        message = f"Unknown {kind} '{name}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.name = name
        self.kind = kind
