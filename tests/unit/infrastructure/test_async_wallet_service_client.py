"""Unit tests for AsyncWalletServiceClient using httpx.MockTransport."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from walletprov.application.wallets.dtos import CreateWalletRequestDTO
from walletprov.domain.errors import RequestError
from walletprov.domain.wallets.entities import KeyRecord, KeySource
from walletprov.infrastructure.wallet_service.wallet_service_client import (
    AsyncWalletServiceClient,
)

BASE_URL = "https://wallets.example.test/"


def _client(
    handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any
) -> AsyncWalletServiceClient:
    return AsyncWalletServiceClient(
        BASE_URL, "tbtc", transport=httpx.MockTransport(handler), **kwargs
    )


class TestAddKey:
    @pytest.mark.asyncio
    async def test_posts_wire_payload_to_coin_key_endpoint(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200, json={"id": "k1", "source": "backup", "provider": "krs"}
            )

        record = KeyRecord(
            source=KeySource.BACKUP,
            provider="krs",
            disable_krs_email=True,
            krs_specific={"coverage": "insurance"},
        )
        async with _client(handler, access_token="token-123") as client:
            keychain = await client.add_key(record)

        assert keychain.id == "k1"
        assert keychain.source is KeySource.BACKUP
        assert keychain.provider == "krs"

        (request,) = seen
        assert request.method == "POST"
        assert str(request.url) == "https://wallets.example.test/api/v2/tbtc/key"
        assert request.headers["Authorization"] == "Bearer token-123"
        assert json.loads(request.content) == {
            "source": "backup",
            "provider": "krs",
            "disableKRSEmail": True,
            "krsSpecific": {"coverage": "insurance"},
        }

    @pytest.mark.asyncio
    async def test_no_authorization_header_without_token(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "k1"})

        async with _client(handler) as client:
            await client.add_key(KeyRecord(source=KeySource.BITGO))

        assert "Authorization" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_keeps_unknown_response_fields(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"id": "k1", "ethAddress": "0xabc"})

        async with _client(handler) as client:
            keychain = await client.add_key(KeyRecord(source=KeySource.BITGO))

        assert keychain.model_extra == {"ethAddress": "0xabc"}

    @pytest.mark.asyncio
    async def test_rejection_maps_to_request_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": "invalid key provider"})

        async with _client(handler) as client:
            with pytest.raises(RequestError) as exc_info:
                await client.add_key(KeyRecord(source=KeySource.BACKUP, provider="x"))

        error = exc_info.value
        assert error.status_code == 400
        assert error.body == {"error": "invalid key provider"}
        assert str(error) == "400 invalid key provider"
        assert error.url == "https://wallets.example.test/api/v2/tbtc/key"

    @pytest.mark.asyncio
    async def test_invalid_keychain_maps_to_request_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"pub": "xpub-without-id"})

        async with _client(handler) as client:
            with pytest.raises(RequestError, match="Invalid key data"):
                await client.add_key(KeyRecord(source=KeySource.BITGO))


class TestAddWallet:
    @pytest.mark.asyncio
    async def test_posts_wallet_payload(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            body = json.loads(request.content)
            return httpx.Response(
                200,
                json={"id": "w1", "coin": "tbtc", **body, "balance": 0},
            )

        dto = CreateWalletRequestDTO(
            label="w", keys=["u", "b", "s"], m=2, n=3, gas_price=20
        )
        async with _client(handler) as client:
            wallet = await client.add_wallet(dto)

        assert str(seen[0].url).endswith("/api/v2/tbtc/wallet")
        assert json.loads(seen[0].content) == {
            "label": "w",
            "keys": ["u", "b", "s"],
            "m": 2,
            "n": 3,
            "gasPrice": 20,
        }
        assert wallet.id == "w1"
        assert wallet.keys == ["u", "b", "s"]
        assert wallet.model_extra == {"gasPrice": 20, "balance": 0}

    @pytest.mark.asyncio
    async def test_server_error_with_text_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="maintenance")

        async with _client(handler) as client:
            with pytest.raises(RequestError) as exc_info:
                await client.add_wallet(CreateWalletRequestDTO(label="w", type="custodial"))

        assert exc_info.value.status_code == 503
        assert exc_info.value.body == "maintenance"
        assert str(exc_info.value) == "503 maintenance"

    @pytest.mark.asyncio
    async def test_error_without_body_uses_reason_phrase(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        async with _client(handler) as client:
            with pytest.raises(RequestError, match="^404 Not Found$"):
                await client.add_wallet(CreateWalletRequestDTO(label="w", type="custodial"))

    @pytest.mark.asyncio
    async def test_non_json_success_maps_to_request_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>")

        async with _client(handler) as client:
            with pytest.raises(RequestError, match="non-JSON") as exc_info:
                await client.add_wallet(CreateWalletRequestDTO(label="w", type="custodial"))

        assert exc_info.value.status_code == 200


class TestTransportFailures:
    @pytest.mark.asyncio
    async def test_connection_error_has_no_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(RequestError, match="Could not connect") as exc_info:
                await client.add_key(KeyRecord(source=KeySource.BITGO))

        assert exc_info.value.status_code is None
        assert exc_info.value.url == "https://wallets.example.test/api/v2/tbtc/key"

    @pytest.mark.asyncio
    async def test_timeout_has_no_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with _client(handler, timeout=0.5) as client:
            with pytest.raises(RequestError) as exc_info:
                await client.add_wallet(CreateWalletRequestDTO(label="w", type="custodial"))

        assert exc_info.value.status_code is None
