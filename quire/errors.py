from __future__ import annotations

from typing import Optional


class ValidationError(ValueError):
    """Malformed book input, reported before anything is staged."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class HookError(RuntimeError):
    def __init__(self, message: str, returncode: Optional[int] = None) -> None:
        super().__init__(message)
        self.returncode = returncode
