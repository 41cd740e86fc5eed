"""Auth-specific errors."""


class UnauthorizedError(Exception):
    """Raised by every project action when no authenticated user id is given.

    This is the only failure that is raised across the action boundary
    instead of being returned as an error result; the HTTP layer turns
    it into a generic 401.
    """

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)
