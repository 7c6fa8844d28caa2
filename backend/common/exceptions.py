"""Error taxonomy shared by the proximity, interaction and identity services."""


class InteractionError(Exception):
    """Base class for errors that cross a service boundary."""
    error_code = "internal"
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: str = ""):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInputError(InteractionError):
    """Raised when a required identifier or parameter is missing or invalid."""
    error_code = "invalid_input"
    status_code = 400
    default_message = "Invalid input"


class NotFoundError(InteractionError):
    """Raised when a referenced user or edge does not exist."""
    error_code = "not_found"
    status_code = 404
    default_message = "Not found"


class ConflictError(InteractionError):
    """Raised when an identical edge already exists."""
    error_code = "conflict"
    status_code = 409
    default_message = "Already exists"


class UnauthorizedError(InteractionError):
    """Raised when a token or session cannot be resolved to a user."""
    error_code = "unauthorized"
    status_code = 401
    default_message = "Not authorized"


class InternalError(InteractionError):
    """Raised when persistence fails. Safe to retry."""
    pass
