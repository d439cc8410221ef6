"""
Error taxonomy for target definition resolution.
"""
from typing import Optional


class TargetDefinitionResolutionError(Exception):
    """Base class for errors that abort resolving a target definition."""
    pass


class RepositoryLoadError(TargetDefinitionResolutionError):
    """Raised when a root or referenced repository cannot be fetched or parsed."""

    def __init__(self, location: str, cause: Optional[BaseException] = None, kind: str = "metadata"):
        self.location = location
        self.cause = cause
        self.kind = kind
        message = f"Failed to load {kind} repository from location {location}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class MissingServiceError(TargetDefinitionResolutionError):
    """Raised when a required repository manager is not available from the agent."""
    pass


class ResolutionCanceledError(TargetDefinitionResolutionError):
    """Raised when a progress monitor was canceled between repository loads."""
    pass


class ProvisionError(Exception):
    """
    Raised by repository managers on network, storage or parse failures.

    The reference walker wraps these into RepositoryLoadError.
    """
    pass
