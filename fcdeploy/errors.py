"""
Error hierarchy for fcdeploy.

Specification errors are raised before compilation, provider errors come
from the provider collaborator, and DeploymentError is the terminal error
of a reconciliation run.
"""

from typing import Any


class FcDeployError(Exception):
    """Base class for all fcdeploy errors."""
    pass


class SpecificationError(FcDeployError):
    """
    Raised when a service definition is malformed.

    Args:
        message: Human-readable description of the problem
        name: The offending service or function name
    """

    def __init__(self, message: str, name: str | None = None):
        super().__init__(message)
        self.name = name


class CompilationError(FcDeployError):
    """Raised when the compiled resource graph would violate an invariant."""
    pass


class ProviderError(FcDeployError):
    """Raised by a provider when a remote operation fails."""
    pass


class DeploymentError(FcDeployError):
    """
    Raised when a reconciliation run aborts.

    The message is the underlying error's message, unchanged. The lines
    already emitted are kept in ``trace`` and the original exception is
    available as ``error`` (and as ``__cause__``).
    """

    def __init__(self, step: str, error: BaseException, trace: Any = None):
        super().__init__(str(error))
        self.step = step
        self.error = error
        self.trace = trace
