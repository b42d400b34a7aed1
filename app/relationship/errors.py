"""Error hierarchy for relationship actions.

Every failed action raises exactly one of these. The API layer maps
`status_code` straight onto the HTTP response; nothing here is retried.
"""


class RelationshipError(Exception):
    """Base class for all relationship errors."""

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SelfActionError(RelationshipError):
    """Raised when the actor targets themself."""

    status_code = 400

    def __init__(self, message: str = "Cannot perform action on yourself."):
        super().__init__(message)


class NotFoundError(RelationshipError):
    """Raised when the target user, or the edge a write expected, is missing."""

    status_code = 404


class InvalidTransitionError(RelationshipError):
    """Raised when a verb is not legal for the current edge state."""

    status_code = 400


class ConflictError(RelationshipError):
    """Raised when a concurrent write already created the same edge."""

    status_code = 409
