from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AppError):
    pass


class ConflictError(AppError):
    pass


class InvalidTransitionError(ConflictError):
    """Attempt to move a message status backwards."""


class ValidationError(AppError):
    pass
