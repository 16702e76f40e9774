"""Data Transfer Objects for the wallet provisioning application layer."""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from ...domain.wallets.entities import Keychain, KrsScalar, Wallet


# Wallet modes accepted by `add`
class CustodialWalletMode(BaseModel):
    """Wallet whose keys are held entirely by the service."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["custodial"] = "custodial"
    type: str = "custodial"


class StandardWalletMode(BaseModel):
    """m-of-n multisig wallet built from already registered key ids.

    ``is_custodial`` marks a paired custodial wallet: keys are listed but the
    service co-manages them.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["standard"] = "standard"
    keys: Tuple[str, ...]
    m: int
    n: int
    is_custodial: Optional[bool] = None


WalletMode = Annotated[
    Union[CustodialWalletMode, StandardWalletMode], Field(discriminator="kind")
]


class AddWalletParams(BaseModel):
    """Validated parameters for adding a wallet from existing keys."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., min_length=1)
    enterprise: Optional[str] = None
    mode: WalletMode
    tags: Optional[Tuple[str, ...]] = None


# Backup key sources accepted by `generate_wallet`
class ProvidedBackupKey(BaseModel):
    """Caller already holds the backup key and supplies its xpub."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["provided"] = "provided"
    pub: str


class DelegatedBackupKey(BaseModel):
    """Backup key is created and held by a key recovery service (KRS)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["delegated"] = "delegated"
    provider: str
    disable_krs_email: Optional[bool] = None
    krs_specific: Optional[Dict[str, KrsScalar]] = None


class GeneratedBackupKey(BaseModel):
    """Backup keypair is generated locally and its private key encrypted."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["generate"] = "generate"


BackupKeySource = Annotated[
    Union[ProvidedBackupKey, DelegatedBackupKey, GeneratedBackupKey],
    Field(discriminator="kind"),
]


class GenerateWalletParams(BaseModel):
    """Validated parameters for generating a new 2-of-3 wallet."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., min_length=1)
    passphrase: Optional[SecretStr] = None
    user_key: Optional[str] = None
    backup_source: BackupKeySource
    passcode_encryption_code: Optional[str] = None
    enterprise: Optional[str] = None
    disable_transaction_notifications: Optional[bool] = None
    gas_price: Optional[Union[int, float]] = None
    disable_krs_email: Optional[bool] = None
    krs_specific: Optional[Dict[str, KrsScalar]] = None


# Wire payloads and results
class CreateWalletRequestDTO(BaseModel):
    """Wallet registration payload sent to the wallet service."""

    model_config = ConfigDict(populate_by_name=True)

    label: str
    keys: Optional[List[str]] = None
    m: Optional[int] = None
    n: Optional[int] = None
    type: Optional[str] = None
    is_custodial: Optional[bool] = Field(default=None, alias="isCustodial")
    enterprise: Optional[str] = None
    tags: Optional[List[str]] = None
    disable_transaction_notifications: Optional[bool] = Field(
        default=None, alias="disableTransactionNotifications"
    )
    gas_price: Optional[Union[int, float]] = Field(default=None, alias="gasPrice")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class GeneratedWallet(BaseModel):
    """Result of `generate_wallet`: the wallet and the three keychains."""

    wallet: Wallet
    user_keychain: Keychain
    backup_keychain: Keychain
    bitgo_keychain: Keychain
    warning: Optional[str] = None
