"""Wallet domain entities: KeyRecord, Keychain and Wallet."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr

KrsScalar = Union[str, bool, int, float]


class KeySource(str, Enum):
    """Role a key plays in a 2-of-3 multisig wallet."""

    BITGO = "bitgo"
    USER = "user"
    BACKUP = "backup"


class KeyRecord(BaseModel):
    """Key registration payload for a single role.

    Built by the key material provider and submitted exactly once to the key
    registration endpoint. Never carries a plaintext private key.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source: KeySource
    pub: Optional[str] = None
    encrypted_prv: Optional[str] = Field(default=None, alias="encryptedPrv")
    provider: Optional[str] = None
    disable_krs_email: Optional[bool] = Field(default=None, alias="disableKRSEmail")
    krs_specific: Optional[Dict[str, KrsScalar]] = Field(
        default=None, alias="krsSpecific"
    )
    original_passcode_encryption_code: Optional[str] = Field(
        default=None, alias="originalPasscodeEncryptionCode"
    )

    def to_payload(self) -> dict[str, Any]:
        """Wire representation: camelCase keys, unset fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Keychain(BaseModel):
    """A key as registered on the wallet service.

    ``prv`` is only populated for keys generated locally during this run and
    is excluded from every dump.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    pub: Optional[str] = None
    source: Optional[KeySource] = None
    encrypted_prv: Optional[str] = Field(default=None, alias="encryptedPrv")
    provider: Optional[str] = None
    prv: Optional[SecretStr] = Field(default=None, exclude=True)


class Wallet(BaseModel):
    """Wallet returned by the wallet registration endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    label: Optional[str] = None
    coin: Optional[str] = None
    keys: List[str] = Field(default_factory=list)
    m: Optional[int] = None
    n: Optional[int] = None
    type: Optional[str] = None
    is_custodial: Optional[bool] = Field(default=None, alias="isCustodial")
    enterprise: Optional[str] = None
