"""Centralized exception hierarchy for templatehub.

Every error carries a message key for callers and English parameters for logging.
"""


class AppBaseError(Exception):
    """Base exception for all application-specific errors."""

    def __init__(
        self,
        message_key: str,
        status_code: int = 500,
        retriable: bool = False,
        **params: object,
    ) -> None:
        """
        Initialize the error.

        Args:
            message_key: Dot-path identifying the error (e.g., 'templates.not_found')
            status_code: Recommended HTTP status code
            retriable: Whether the operation can be retried
            **params: Context for the message
        """
        super().__init__(message_key)
        self.message_key = message_key
        self.status_code = status_code
        self.retriable = retriable
        self.params = params

    def __str__(self) -> str:
        params_str = ", ".join(f"{k}={v}" for k, v in self.params.items())
        if params_str:
            return f"[{self.message_key}] {params_str}"
        return f"[{self.message_key}]"


class ResourceNotFoundError(AppBaseError):
    """Raised when a requested resource (template, repository, etc.) is not found."""

    def __init__(self, message_key: str, **params: object) -> None:
        super().__init__(message_key, status_code=404, **params)


class ResourceConflictError(AppBaseError):
    """Raised when an operation conflicts with the current state (e.g., another operation is running)."""

    def __init__(self, message_key: str, **params: object) -> None:
        super().__init__(message_key, status_code=409, **params)


class InvalidOperationError(AppBaseError):
    """Raised when an operation is called out of sequence (e.g., updating a template never downloaded)."""

    def __init__(self, message_key: str, **params: object) -> None:
        super().__init__(message_key, status_code=409, **params)


class ValidationError(AppBaseError):
    """Raised when input validation fails."""

    def __init__(self, message_key: str, **params: object) -> None:
        super().__init__(message_key, status_code=400, **params)


class OperationalError(AppBaseError):
    """Raised when an operational failure occurs (git command, API call, etc.)."""

    def __init__(self, message_key: str, retriable: bool = False, **params: object) -> None:
        super().__init__(message_key, status_code=500, retriable=retriable, **params)
