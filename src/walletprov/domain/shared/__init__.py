"""Shared domain utilities.

This package is domain-accessible and should not depend on application code.
"""

from .wallet_service_protocol import (
    WalletServiceClientFactory,
    WalletServiceClientProtocol,
)

__all__ = ["WalletServiceClientProtocol", "WalletServiceClientFactory"]
