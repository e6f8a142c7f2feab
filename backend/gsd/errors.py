"""Error taxonomy shared by validation, repositories and the HTTP layer.

Every failure the core raises is one of three kinds. The request layer
maps each kind to a status code; `InternalError` details are logged and
never returned to the caller.
"""


class GsdError(Exception):
    """Base class for all service failures.

    `kind` is the stable, snake_case name used in error response bodies.
    """
    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind.replace('_', ' ')}: {self.message}"


class InvalidArgumentError(GsdError):
    """Caller-supplied data failed a validation rule."""
    kind = "invalid_argument"


class NotFoundError(GsdError):
    """A referenced story or task does not exist or is soft-deleted."""
    kind = "not_found"


class InternalError(GsdError):
    """The store failed unexpectedly. Never caller-fixable."""
    kind = "internal"
