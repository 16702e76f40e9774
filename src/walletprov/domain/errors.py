"""Domain-specific exceptions."""

from __future__ import annotations

from typing import Any, Optional


class ProvisioningError(Exception):
    """Base class for every error surfaced by wallet provisioning."""


class ValidationError(ProvisioningError):
    """Raised when caller parameters are malformed or logically inconsistent.

    Always raised before any request reaches the wallet service.

    Attributes:
        field: Name of the offending parameter, as the caller spelled it.
        expected: Short description of the constraint that was violated
            (e.g. ``"boolean"``, ``"string"``, ``"exclusive"``).
    """

    def __init__(self, field: str, expected: str, message: str) -> None:
        self.field = field
        self.expected = expected
        super().__init__(message)

    @property
    def message(self) -> str:
        return str(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationError):
            return NotImplemented
        return (self.field, self.expected, self.message) == (
            other.field,
            other.expected,
            other.message,
        )

    def __hash__(self) -> int:
        return hash((self.field, self.expected, self.message))


class RequestError(ProvisioningError):
    """Raised when the wallet service rejects a call or cannot be reached.

    ``status_code`` is ``None`` for transport-level failures (connection
    refused, timeout) where no HTTP response was received.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: Any = None,
        url: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.url = url
        super().__init__(message)


class ProvisioningCancelledError(ProvisioningError):
    """Raised when a generation run is cancelled between two remote steps.

    Keys registered before the cancellation are not removed from the service;
    their ids are listed in ``orphaned_key_ids``.
    """

    def __init__(self, state: str, orphaned_key_ids: list[str]) -> None:
        self.state = state
        self.orphaned_key_ids = orphaned_key_ids
        super().__init__(
            f"Wallet generation cancelled before {state}"
            + (
                f"; orphaned keys: {', '.join(orphaned_key_ids)}"
                if orphaned_key_ids
                else ""
            )
        )
