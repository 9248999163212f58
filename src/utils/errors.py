from typing import Optional


class ValidationError(ValueError):
    """
    Raised at the form boundary when user input is malformed.
    `field` names the offending input so screens can highlight it.
    """

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class InvalidCredentialsError(Exception):
    """
    Raised for every failed login, whatever the cause.
    """

    def __init__(self) -> None:
        super().__init__("Invalid username or password")


class PermissionDeniedError(Exception):
    pass


class InvalidTransitionError(Exception):
    pass
