"""Test fixtures for in-memory and in-process wallet service implementations."""

from .fake_wallet_service import (
    FakeWalletServiceState,
    RecordedRequest,
    create_fake_wallet_service,
)
from .hd_keys import xpub_from_xprv
from .test_wallet_service_client import TestWalletServiceClient

__all__ = [
    "FakeWalletServiceState",
    "RecordedRequest",
    "TestWalletServiceClient",
    "create_fake_wallet_service",
    "xpub_from_xprv",
]
