"""Domain errors for hostinit."""


class InitializerError(RuntimeError):
    """Raised when the initialization cannot continue safely."""


class ValidationExhaustedError(InitializerError):
    """Raised when interactive input kept failing validation."""


class MutationError(InitializerError):
    """Raised when an external tool fails to apply a system change."""


class EnvironmentCheckError(InitializerError):
    """Raised when the host cannot be initialized by this tool."""
