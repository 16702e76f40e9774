"""Pytest fixtures for use case tests."""

from __future__ import annotations

import pytest

from walletprov.application.wallets.use_cases.key_material import KeyMaterialProvider
from walletprov.application.wallets.use_cases.provisioning import ProvisioningService
from walletprov.domain.shared import WalletServiceClientFactory
from tests.fixtures import TestWalletServiceClient


@pytest.fixture
def wallet_client() -> TestWalletServiceClient:
    """Create an in-memory wallet service client."""
    return TestWalletServiceClient()


@pytest.fixture
def wallet_client_factory(
    wallet_client: TestWalletServiceClient,
) -> WalletServiceClientFactory:
    """Factory returning the shared in-memory client, so tests can inspect calls."""

    def factory() -> TestWalletServiceClient:
        return wallet_client

    return factory


@pytest.fixture
def provisioning_service(
    wallet_client_factory: WalletServiceClientFactory,
    key_material: KeyMaterialProvider,
) -> ProvisioningService:
    """Create a ProvisioningService backed by the in-memory client."""
    return ProvisioningService(
        client_factory=wallet_client_factory, key_material=key_material
    )
