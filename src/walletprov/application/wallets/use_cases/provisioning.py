"""Use cases for wallet provisioning: `add` and `generate_wallet`."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional, Union

from ....domain.errors import ProvisioningCancelledError
from ....domain.shared import WalletServiceClientFactory
from ....domain.wallets.entities import Keychain, KeySource, Wallet
from ..dtos import (
    AddWalletParams,
    CreateWalletRequestDTO,
    GeneratedBackupKey,
    GeneratedWallet,
    GenerateWalletParams,
    StandardWalletMode,
)
from .key_material import KeyMaterialProvider, ResolvedKey
from .wallet_validators import validate_add, validate_generate

logger = logging.getLogger(__name__)

GENERATED_WALLET_M = 2
GENERATED_WALLET_N = 3

BACKUP_KEYCHAIN_WARNING = (
    "Be sure to backup the backup keychain -- it is not stored anywhere else!"
)


class ProvisioningState(str, Enum):
    VALIDATING = "validating"
    RESOLVING_KEYS = "resolving_keys"
    REGISTERING_BITGO_KEY = "registering_bitgo_key"
    REGISTERING_USER_KEY = "registering_user_key"
    REGISTERING_BACKUP_KEY = "registering_backup_key"
    REGISTERING_WALLET = "registering_wallet"
    DONE = "done"
    FAILED = "failed"


# Registration order is fixed; nothing depends on it except callers asserting
# request sequences.
KEY_REGISTRATION_ORDER: tuple[tuple[KeySource, ProvisioningState], ...] = (
    (KeySource.BITGO, ProvisioningState.REGISTERING_BITGO_KEY),
    (KeySource.USER, ProvisioningState.REGISTERING_USER_KEY),
    (KeySource.BACKUP, ProvisioningState.REGISTERING_BACKUP_KEY),
)


class ProvisioningRun:
    """Bookkeeping for a single provisioning call.

    Tracks the current state, the states visited and the ids of keys already
    registered, and performs the cooperative cancellation check on every
    transition.
    """

    def __init__(
        self, operation: str, cancel_event: Optional[asyncio.Event] = None
    ) -> None:
        self.operation = operation
        self.cancel_event = cancel_event
        self.state = ProvisioningState.VALIDATING
        self.history: list[ProvisioningState] = [ProvisioningState.VALIDATING]
        self.registered_key_ids: list[str] = []

    def advance(self, state: ProvisioningState) -> None:
        if (
            state is not ProvisioningState.DONE
            and self.cancel_event is not None
            and self.cancel_event.is_set()
        ):
            raise ProvisioningCancelledError(state.value, list(self.registered_key_ids))
        logger.debug("%s: %s -> %s", self.operation, self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def fail(self, error: BaseException) -> None:
        failed_in = self.state
        self.state = ProvisioningState.FAILED
        self.history.append(ProvisioningState.FAILED)
        if self.registered_key_ids:
            logger.warning(
                "%s failed in %s; keys left registered on the service: %s",
                self.operation,
                failed_in.value,
                ", ".join(self.registered_key_ids),
            )
        else:
            logger.info("%s failed in %s: %s", self.operation, failed_in.value, error)


def build_add_wallet_request(params: AddWalletParams) -> CreateWalletRequestDTO:
    """Translate validated `add` params into the wallet registration payload.

    Standard wallets carry keys/m/n (and ``isCustodial`` when given) and never
    a ``type``; custodial wallets carry ``type`` and never keys/m/n.
    """
    tags = list(params.tags) if params.tags is not None else None
    mode = params.mode
    if isinstance(mode, StandardWalletMode):
        return CreateWalletRequestDTO(
            label=params.label,
            keys=list(mode.keys),
            m=mode.m,
            n=mode.n,
            is_custodial=mode.is_custodial,
            enterprise=params.enterprise,
            tags=tags,
        )
    return CreateWalletRequestDTO(
        label=params.label,
        type=mode.type,
        enterprise=params.enterprise,
        tags=tags,
    )


def _keychain_with_local_material(
    keychain: Keychain, resolved: ResolvedKey
) -> Keychain:
    if not resolved.generated_locally:
        return keychain
    return keychain.model_copy(
        update={
            "prv": resolved.prv,
            "encrypted_prv": keychain.encrypted_prv or resolved.encrypted_prv,
        }
    )


class ProvisioningService:
    """Service orchestrating wallet creation against the wallet service.

    Each call is independent: it opens its own client from the factory and
    keeps all state in locals, so concurrent calls do not interfere.

    Calls are not atomic. If a `generate_wallet` run fails after one or more
    keys were registered, those keys stay on the service; they are reported
    in the logs (and on ``ProvisioningCancelledError``) and are never reused
    by a later run. Callers retry by generating again.
    """

    def __init__(
        self,
        client_factory: WalletServiceClientFactory,
        key_material: Optional[KeyMaterialProvider] = None,
    ) -> None:
        self.client_factory = client_factory
        self.key_material = key_material or KeyMaterialProvider()

    async def add(self, params: Union[Mapping[str, Any], AddWalletParams]) -> Wallet:
        """Register a wallet from already registered keys (or a custodial wallet).

        Raises:
            ValidationError: Before any request, on malformed params.
            RequestError: If the service rejects the wallet.
        """
        run = ProvisioningRun("add")
        try:
            validated = (
                params if isinstance(params, AddWalletParams) else validate_add(params)
            )
            dto = build_add_wallet_request(validated)

            run.advance(ProvisioningState.REGISTERING_WALLET)
            async with self.client_factory() as client:
                wallet = await client.add_wallet(dto)
            run.advance(ProvisioningState.DONE)
            return wallet
        except (Exception, asyncio.CancelledError) as e:
            run.fail(e)
            raise

    async def generate_wallet(
        self,
        params: Union[Mapping[str, Any], GenerateWalletParams],
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> GeneratedWallet:
        """Generate a 2-of-3 wallet: resolve and register three keys, then the wallet.

        Args:
            params: Raw parameter bag or already validated params.
            cancel_event: When set, the run stops before its next step and
                raises ``ProvisioningCancelledError``.

        Raises:
            ValidationError: Before any request, on malformed params.
            RequestError: The first rejected registration, unchanged.
            ProvisioningCancelledError: If ``cancel_event`` was set.
        """
        run = ProvisioningRun("generate_wallet", cancel_event)
        try:
            return await self._generate_wallet(run, params)
        except (Exception, asyncio.CancelledError) as e:
            run.fail(e)
            raise

    async def _generate_wallet(
        self,
        run: ProvisioningRun,
        params: Union[Mapping[str, Any], GenerateWalletParams],
    ) -> GeneratedWallet:
        validated = (
            params
            if isinstance(params, GenerateWalletParams)
            else validate_generate(params)
        )

        run.advance(ProvisioningState.RESOLVING_KEYS)
        resolved: dict[KeySource, ResolvedKey] = {}
        for role, _ in KEY_REGISTRATION_ORDER:
            resolved[role] = await self.key_material.resolve_key(role, validated)

        keychains: dict[KeySource, Keychain] = {}
        async with self.client_factory() as client:
            for role, state in KEY_REGISTRATION_ORDER:
                run.advance(state)
                keychain = await client.add_key(resolved[role].record)
                run.registered_key_ids.append(keychain.id)
                keychains[role] = _keychain_with_local_material(
                    keychain, resolved[role]
                )

            dto = CreateWalletRequestDTO(
                label=validated.label,
                m=GENERATED_WALLET_M,
                n=GENERATED_WALLET_N,
                keys=[
                    keychains[KeySource.USER].id,
                    keychains[KeySource.BACKUP].id,
                    keychains[KeySource.BITGO].id,
                ],
                enterprise=validated.enterprise,
                disable_transaction_notifications=validated.disable_transaction_notifications,
                gas_price=validated.gas_price,
            )
            run.advance(ProvisioningState.REGISTERING_WALLET)
            wallet = await client.add_wallet(dto)

        run.advance(ProvisioningState.DONE)

        warning = None
        if isinstance(validated.backup_source, GeneratedBackupKey):
            warning = BACKUP_KEYCHAIN_WARNING
        return GeneratedWallet(
            wallet=wallet,
            user_keychain=keychains[KeySource.USER],
            backup_keychain=keychains[KeySource.BACKUP],
            bitgo_keychain=keychains[KeySource.BITGO],
            warning=warning,
        )
