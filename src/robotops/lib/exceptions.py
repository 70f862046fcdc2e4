class RobotOpsError(Exception):
    """Base class for failures raised by access-controlled operations."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(RobotOpsError):
    """Raised when a referenced user, group, membership, asset or permission does not exist."""

    pass


class ForbiddenError(RobotOpsError):
    """Raised when the acting user lacks the authority required for an operation."""

    pass


class ConflictError(RobotOpsError):
    """Raised when an operation would violate a uniqueness constraint or a group ownership invariant."""

    pass


class InvalidOperationError(RobotOpsError):
    """Raised when an operation does not apply to the current state of the entities it references."""

    pass
