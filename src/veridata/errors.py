# src/veridata/errors.py

"""
Error kinds raised by the registry.

Every error is caller-correctable: the operation that raised it made no
state change and the registry stays usable.
"""

from typing import Optional


class RegistryError(Exception):
    """Base class for all registry failures."""

    def __init__(self, message: str, subject: Optional[str] = None):
        super().__init__(message)
        self.subject = subject


class EmptyInputError(RegistryError, ValueError):
    """A required identity or content hash was blank."""


# Raised by DataSourceRegistry.add for a blank content hash
EmptyHashError = EmptyInputError


class MalformedHashError(RegistryError, ValueError):
    """A content hash carried leading or trailing whitespace."""


class InvalidTimestampError(RegistryError, ValueError):
    """A call time was not a non-negative integer Unix timestamp."""


class AlreadyExistsError(RegistryError):
    """A data source with the same content hash is already registered."""


class NotFoundError(RegistryError):
    """No data source is registered under the given content hash."""


class AlreadyVerifiedError(RegistryError):
    """The data source has already been verified."""


class NotAuthorizedError(RegistryError, PermissionError):
    """The caller lacks the authority required for the operation."""


class AlreadyVerifierError(RegistryError):
    """The account is already an active verifier."""


class InvalidRatingError(RegistryError, ValueError):
    """A feedback rating fell outside the accepted range."""


class InsufficientFundsError(RegistryError):
    """The ledger refused a transfer because the sender's balance is too low."""

    def __init__(
        self,
        message: str,
        subject: Optional[str] = None,
        required: int = 0,
        available: int = 0,
    ):
        super().__init__(message, subject)
        self.required = required
        self.available = available
