"""Base exception for catalogo-query."""

from typing import Dict, Optional


class CatalogoError(Exception):
    """Base exception for all catalogo-query errors.

    ``exit_code`` is the status the CLI exits with when the error reaches it:
    1 for runtime failures, 2 for bad input (usage-style errors).
    """

    exit_code = 1

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({details_str})"
