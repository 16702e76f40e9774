"""Protocol interface for wallet service client implementations.

This protocol defines the contract that all wallet service clients must satisfy.
It enables dependency injection and makes the provisioning service testable by
allowing in-memory implementations.
"""

from __future__ import annotations

from typing import Protocol, Type, Optional, Callable, TYPE_CHECKING
from types import TracebackType

if TYPE_CHECKING:
    # Avoid circular imports by only importing types during type checking
    from ...application.wallets.dtos import CreateWalletRequestDTO
    from ..wallets.entities import KeyRecord, Keychain, Wallet


class WalletServiceClientProtocol(Protocol):
    """Protocol defining the interface for wallet service clients.

    Implementations should provide async methods for:
    - Key registration (one key record per call)
    - Wallet registration
    - Context manager support for resource cleanup

    Both registration methods raise ``RequestError`` when the service rejects
    the call or cannot be reached.
    """

    async def add_key(self, record: "KeyRecord") -> "Keychain":
        """Register a single key with the wallet service.

        Args:
            record: Key registration payload for one role

        Returns:
            The registered keychain, including its server-assigned id
        """
        ...

    async def add_wallet(self, dto: "CreateWalletRequestDTO") -> "Wallet":
        """Register a wallet with the wallet service.

        Args:
            dto: Wallet creation payload (standard or custodial)

        Returns:
            The created wallet
        """
        ...

    async def aclose(self) -> None:
        """Close the client and release resources."""
        ...

    async def __aenter__(
        self: "WalletServiceClientProtocol",
    ) -> "WalletServiceClientProtocol":
        ...

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        ...


# Factory type for creating wallet service clients
# This allows dependency injection while maintaining the context manager pattern
WalletServiceClientFactory = Callable[[], WalletServiceClientProtocol]
