"""Exceptions raised by the packaging engine and the publishing pipeline.

Structural errors are always fatal to a packaging call. Collaborator errors
are fatal to the current phase; only TransientCollaboratorError is retried.
Validation failures are data (verdicts) until the pipeline's validation
phase turns them into a ValidationFailedError.
"""


class PressError(Exception):
    """Base exception for all manuscript-press errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class PackagingError(PressError):
    """Raised when an artifact cannot be built."""

    pass


class StructuralError(PackagingError):
    """Raised when the input chapters or options are malformed."""

    pass


class CoverEmbeddingError(PackagingError):
    """Raised when a required cover image cannot be embedded."""

    pass


class CollaboratorError(PressError):
    """Raised when an external collaborator call fails."""

    pass


class OutOfInventoryError(CollaboratorError):
    """Raised when the identifier source has no identifier left to claim."""

    def __init__(self, message: str = "No available identifiers"):
        super().__init__(message)


class TransientCollaboratorError(CollaboratorError):
    """Raised when a collaborator failure is worth retrying."""

    pass


class ValidationFailedError(PressError):
    """Raised when at least one verdict contains a critical diagnostic."""

    def __init__(self, message: str, verdicts: list | None = None, *args, **kwargs):
        self.verdicts = verdicts or []
        super().__init__(message, *args, **kwargs)


class PhaseTimeoutError(PressError):
    """Raised when a phase does not settle before its deadline."""

    pass


class PublishCancelledError(PressError):
    """Raised when a publish call is cancelled through its token."""

    def __init__(self, message: str = "Publish call cancelled"):
        super().__init__(message)


class PublishError(PressError):
    """Raised by the orchestrator when a phase fails.

    Attributes:
        phase: Name of the failing phase
        project: The project in its terminal "error" state
    """

    def __init__(self, message: str, phase: str, project=None, *args, **kwargs):
        self.phase = phase
        self.project = project
        super().__init__(message, *args, **kwargs)
