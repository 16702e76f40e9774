from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Type
from types import TracebackType

import httpx
from pydantic import ValidationError

from ...application.wallets.dtos import CreateWalletRequestDTO
from ...domain.errors import RequestError
from ...domain.wallets.entities import KeyRecord, Keychain, Wallet
from ..http.http_client import AsyncHttpClient, HttpRequestError, HttpResponseError

logger = logging.getLogger(__name__)


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_message(status_code: int, body: Any) -> str:
    if isinstance(body, dict):
        detail = body.get("error") or body.get("message") or body.get("detail")
        if detail:
            return f"{status_code} {detail}"
    if body:
        return f"{status_code} {body}"
    return f"{status_code} {httpx.codes.get_reason_phrase(status_code)}"


class AsyncWalletServiceClient:
    """Asynchronous client for the wallet service key and wallet endpoints.

    Every method maps one service call; failures surface as ``RequestError``
    carrying the HTTP status and the service's error body. Nothing is retried.
    """

    def __init__(
        self,
        base_url: str,
        coin: str,
        timeout: float = 10.0,
        *,
        access_token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers: Dict[str, str] = {"Accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        self._coin = coin
        self._http = AsyncHttpClient(
            base_url, timeout=timeout, headers=headers, transport=transport
        )

    def _coin_path(self, resource: str) -> str:
        return f"/api/v2/{self._coin}/{resource}"

    async def _post(self, path: str, payload: Dict[str, Any]) -> Any:
        try:
            resp = await self._http.post(path, json=payload)
        except HttpResponseError as e:
            status_code = e.response.status_code
            body = _response_body(e.response)
            raise RequestError(
                _error_message(status_code, body),
                status_code=status_code,
                body=body,
                url=str(e.response.request.url),
            ) from e
        except HttpRequestError as e:
            raise RequestError(
                f"Could not connect to wallet service: {e}", url=e.url
            ) from e

        try:
            return resp.json()
        except ValueError as e:
            raise RequestError(
                "Wallet service returned a non-JSON response",
                status_code=resp.status_code,
                body=resp.text,
                url=str(resp.request.url),
            ) from e

    async def add_key(self, record: KeyRecord) -> Keychain:
        """Register one key record and return the keychain with its assigned id."""
        data = await self._post(self._coin_path("key"), record.to_payload())
        try:
            keychain = Keychain.model_validate(data)
        except ValidationError as e:
            raise RequestError(
                f"Invalid key data from wallet service: {e}", body=data
            ) from e
        logger.info("Registered %s key %s", record.source.value, keychain.id)
        return keychain

    async def add_wallet(self, dto: CreateWalletRequestDTO) -> Wallet:
        """Register a wallet from its creation payload."""
        data = await self._post(self._coin_path("wallet"), dto.to_payload())
        try:
            wallet = Wallet.model_validate(data)
        except ValidationError as e:
            raise RequestError(
                f"Invalid wallet data from wallet service: {e}", body=data
            ) from e
        logger.info("Registered wallet %s", wallet.id)
        return wallet

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "AsyncWalletServiceClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()
