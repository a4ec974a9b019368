"""Domain-level error types shared across validation and use cases."""

from __future__ import annotations


class ValidationError(ValueError):
    """Raised when form input cannot be turned into a calculation request.

    Attributes:
        field: Name of the offending form field (``"income"`` or
            ``"national_insurance"``).
        message: User-presentable explanation.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


__all__ = ["ValidationError"]
