from __future__ import annotations as _annotations

__all__ = ('UserError',)


class UserError(RuntimeError):
    """Error caused by a usage mistake by the test author, e.g. malformed matcher arguments."""

    message: str

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
