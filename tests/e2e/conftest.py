"""Shared pytest fixtures for E2E tests against the in-process fake wallet service.

The real HTTP client stack (AsyncWalletServiceClient over httpx) talks to a
FastAPI app through ``httpx.ASGITransport``, so requests are serialized and
routed exactly as they would be over the network.
"""

from __future__ import annotations

import httpx
import pytest
from fastapi import FastAPI

from walletprov.application.wallets.use_cases.key_material import KeyMaterialProvider
from walletprov.application.wallets.use_cases.provisioning import ProvisioningService
from walletprov.domain.shared import WalletServiceClientFactory
from walletprov.infrastructure.wallet_service.wallet_service_client import (
    AsyncWalletServiceClient,
)
from tests.fixtures import FakeWalletServiceState, create_fake_wallet_service

WALLET_SERVICE_URL = "http://wallet-service.test"
ACCESS_TOKEN = "e2e-access-token"
COIN = "tbtc"


@pytest.fixture
def fake_wallet_service() -> tuple[FastAPI, FakeWalletServiceState]:
    """Fresh fake service per test, so recorded requests never leak between tests."""
    return create_fake_wallet_service()


@pytest.fixture
def wallet_service_state(
    fake_wallet_service: tuple[FastAPI, FakeWalletServiceState],
) -> FakeWalletServiceState:
    return fake_wallet_service[1]


@pytest.fixture
def wallet_service_client_factory(
    fake_wallet_service: tuple[FastAPI, FakeWalletServiceState],
) -> WalletServiceClientFactory:
    app, _ = fake_wallet_service

    def factory() -> AsyncWalletServiceClient:
        return AsyncWalletServiceClient(
            WALLET_SERVICE_URL,
            COIN,
            access_token=ACCESS_TOKEN,
            transport=httpx.ASGITransport(app=app),
        )

    return factory


@pytest.fixture
def provisioning_service(
    wallet_service_client_factory: WalletServiceClientFactory,
    key_material: KeyMaterialProvider,
) -> ProvisioningService:
    """ProvisioningService wired to the fake service over HTTP."""
    return ProvisioningService(
        client_factory=wallet_service_client_factory, key_material=key_material
    )
