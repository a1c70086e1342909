"""Error taxonomy shared by the pipeline, reconciler and session."""

from __future__ import annotations


class AutoDeployError(Exception):
    """Base class for all AutoDeploy failures."""


class AuthError(AutoDeployError):
    """Credential rejected by a remote service."""


class ValidationError(AutoDeployError):
    """User input does not satisfy a transition guard."""


class PhaseError(AutoDeployError):
    """Action is not allowed in the current phase."""


class RecordNotFoundError(AutoDeployError):
    """Saved project record does not exist."""


class ServiceError(AutoDeployError):
    """Remote call failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DeploymentError(ServiceError):
    """File upload failed partway through a pipeline run."""

    def __init__(self, message: str, *, path: str, cause: BaseException | None = None) -> None:
        status_code = cause.status_code if isinstance(cause, ServiceError) else None
        super().__init__(message, status_code=status_code)
        self.path = path
        self.cause = cause
