"""
errors.py: GST error taxonomy.

  ValidationError      malformed HSN input. The only error that reaches callers.
                       Subclasses ValueError so main.py's ValueError handler
                       turns it into a 422 VALIDATION_ERROR envelope.
  ProviderUnavailable  any fault talking to an external rate provider.
                       Raised by providers, caught and logged by the resolver.
"""
from __future__ import annotations

from typing import Optional


class ValidationError(ValueError):
    """Raised when an HSN code does not match the 4–8 digit pattern."""


class ProviderUnavailable(Exception):
    """A rate provider could not produce a usable rate."""

    def __init__(self, provider: str, reason: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"{provider}: {reason}")
        self.provider = provider
        self.reason = reason
        self.cause = cause
