"""Key material resolution for the three wallet roles."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, SecretStr

from ....crypto.hd_keys import ExtendedKeyPair, generate_keypair
from ....crypto.key_encryption import encrypt_private_key
from ....domain.errors import ValidationError
from ....domain.wallets.entities import KeyRecord, KeySource
from ..dtos import (
    DelegatedBackupKey,
    GenerateWalletParams,
    ProvidedBackupKey,
)

logger = logging.getLogger(__name__)

KeyPairGenerator = Callable[[], ExtendedKeyPair]
PrivateKeyEncryptor = Callable[[str, str], str]


class ResolvedKey(BaseModel):
    """Key record to register plus any private material that stays local.

    ``prv`` and ``encrypted_prv`` are handed back to the caller; only
    ``record`` is ever sent to the wallet service.
    """

    model_config = ConfigDict(frozen=True)

    record: KeyRecord
    prv: Optional[SecretStr] = None
    encrypted_prv: Optional[str] = None

    @property
    def generated_locally(self) -> bool:
        return self.prv is not None


class KeyMaterialProvider:
    """Produces the key record for each role of a new 2-of-3 wallet.

    Key generation and passphrase key-derivation are CPU bound and run in a
    worker thread so the event loop stays responsive.
    """

    def __init__(
        self,
        keypair_generator: KeyPairGenerator = generate_keypair,
        encryptor: PrivateKeyEncryptor = encrypt_private_key,
    ) -> None:
        self._generate_keypair = keypair_generator
        self._encrypt = encryptor

    async def resolve_key(
        self, role: KeySource, params: GenerateWalletParams
    ) -> ResolvedKey:
        if role is KeySource.BITGO:
            # The service creates and holds this key itself
            return ResolvedKey(record=KeyRecord(source=KeySource.BITGO))
        if role is KeySource.USER:
            return await self._resolve_user_key(params)
        if role is KeySource.BACKUP:
            return await self._resolve_backup_key(params)
        raise ValueError(f"Unknown key role: {role!r}")

    async def _resolve_user_key(self, params: GenerateWalletParams) -> ResolvedKey:
        if params.user_key:
            return ResolvedKey(
                record=KeyRecord(source=KeySource.USER, pub=params.user_key)
            )

        keypair = await asyncio.to_thread(self._generate_keypair)
        encrypted_prv = None
        if params.passphrase is not None:
            encrypted_prv = await asyncio.to_thread(
                self._encrypt,
                keypair.xprv.get_secret_value(),
                params.passphrase.get_secret_value(),
            )
        logger.debug("Generated user keypair locally")

        record = KeyRecord(
            source=KeySource.USER,
            pub=keypair.xpub,
            original_passcode_encryption_code=params.passcode_encryption_code,
        )
        return ResolvedKey(record=record, prv=keypair.xprv, encrypted_prv=encrypted_prv)

    async def _resolve_backup_key(self, params: GenerateWalletParams) -> ResolvedKey:
        source = params.backup_source
        if isinstance(source, ProvidedBackupKey):
            return ResolvedKey(
                record=KeyRecord(source=KeySource.BACKUP, pub=source.pub)
            )
        if isinstance(source, DelegatedBackupKey):
            logger.debug("Delegating backup key to provider %s", source.provider)
            return ResolvedKey(
                record=KeyRecord(
                    source=KeySource.BACKUP,
                    provider=source.provider,
                    disable_krs_email=source.disable_krs_email,
                    krs_specific=source.krs_specific,
                )
            )

        if params.passphrase is None:
            raise ValidationError(
                "passphrase",
                "string",
                "cannot generate backup keypair without passphrase",
            )
        keypair = await asyncio.to_thread(self._generate_keypair)
        encrypted_prv = await asyncio.to_thread(
            self._encrypt,
            keypair.xprv.get_secret_value(),
            params.passphrase.get_secret_value(),
        )
        logger.debug("Generated backup keypair locally")

        record = KeyRecord(
            source=KeySource.BACKUP,
            pub=keypair.xpub,
            encrypted_prv=encrypted_prv,
        )
        return ResolvedKey(record=record, prv=keypair.xprv, encrypted_prv=encrypted_prv)
