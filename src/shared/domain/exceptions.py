"""Base class for the closed set of domain errors.

Every error raised across a module boundary derives from ``DomainError``
and exposes a stable ``code`` plus the structured ``details`` a caller
needs to correct and resubmit a request.  Callers branch on the type (or
on ``code``) instead of parsing messages.
"""

from __future__ import annotations

from typing import Any, Dict


class DomainError(Exception):
    """Root of all domain errors."""

    code: str = "domain_error"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        """Render the error as a plain, transport-agnostic payload."""
        return {"code": self.code, "message": self.message, "details": dict(self.details)}
