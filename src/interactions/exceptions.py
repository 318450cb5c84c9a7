"""Typed errors raised by the interaction engine.

Every error carries a stable ``code`` that the HTTP layer maps to a status
code; only ``StoreUnavailableError`` is retried automatically.
"""


class InteractionError(Exception):
    """Base interaction error."""

    def __init__(self, message: str, code: str = "interaction_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidInputError(InteractionError):
    """Empty content or malformed identifiers."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message, "invalid_input")


class InvalidReplyError(InteractionError):
    """Reply target missing or attached to a different content item."""

    def __init__(self, message: str = "Reply target does not exist in this thread"):
        super().__init__(message, "invalid_reply")


class UnauthorizedError(InteractionError):
    """No identity supplied for a call that requires one."""

    def __init__(self, message: str = "Sign in required"):
        super().__init__(message, "unauthorized")


class ForbiddenError(InteractionError):
    """Authenticated, but not allowed to perform the operation."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message, "forbidden")


class NotFoundError(InteractionError):
    """Operating on a comment or reaction that does not exist."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message, "not_found")


class StoreUnavailableError(InteractionError):
    """Transient failure of the document store (timeouts, lost nodes)."""

    def __init__(self, message: str = "Storage temporarily unavailable"):
        super().__init__(message, "store_unavailable")
