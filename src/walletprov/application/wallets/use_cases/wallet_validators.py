"""Pure validation functions for wallet provisioning parameters.

These functions turn an untyped parameter bag (as received from a caller or a
JSON document) into an immutable params model. Rules are checked in a fixed
order and the first violation is raised as a ``ValidationError`` naming the
offending field, so nothing reaches the wallet service with malformed input.

A key that is absent and a key explicitly set to ``None`` are treated alike.
For ``userKey``, ``backupXpub`` and ``backupXpubProvider`` an empty string is
also treated as absent.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import SecretStr

from ....domain.errors import ValidationError
from ..dtos import (
    AddWalletParams,
    BackupKeySource,
    CustodialWalletMode,
    DelegatedBackupKey,
    GeneratedBackupKey,
    GenerateWalletParams,
    ProvidedBackupKey,
    StandardWalletMode,
)

CUSTODIAL_WALLET_TYPE = "custodial"

KRS_SPECIFIC_ILLEGAL_VALUES = (
    "krsSpecific object contains illegal values. "
    "values must be strings, booleans, or numbers"
)


def describe_kind(value: Any) -> str:
    """Name the kind of a raw parameter value, as reported in error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    return type(value).__name__


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_krs_scalar(value: Any) -> bool:
    if isinstance(value, float):
        return math.isfinite(value)
    return isinstance(value, (str, bool, int))


def _require_mapping(raw: Any) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise ValidationError(
            "params",
            "object",
            f"Expecting parameters object but found {describe_kind(raw)}",
        )
    return raw


def _require_label(raw: Mapping[str, Any]) -> str:
    label = raw.get("label")
    if label is None or label == "":
        raise ValidationError("label", "string", "Missing parameter: label")
    if not isinstance(label, str):
        raise ValidationError(
            "label",
            "string",
            f"Expecting parameter string: label but found {describe_kind(label)}",
        )
    return label


def _optional_param_string(raw: Mapping[str, Any], name: str) -> Optional[str]:
    """String check in the ``Expecting parameter string`` wording used by `add`."""
    value = raw.get(name)
    if value is not None and not isinstance(value, str):
        raise ValidationError(
            name,
            "string",
            f"Expecting parameter string: {name} but found {describe_kind(value)}",
        )
    return value


def _optional_string(
    raw: Mapping[str, Any], name: str, message: Optional[str] = None
) -> Optional[str]:
    value = raw.get(name)
    if value is not None and not isinstance(value, str):
        raise ValidationError(
            name, "string", message or f"invalid {name} argument, expecting string"
        )
    return value


def _optional_key_string(raw: Mapping[str, Any], name: str) -> Optional[str]:
    """Like `_optional_string`, but an empty string counts as not supplied."""
    return _optional_string(raw, name) or None


def _optional_boolean(
    raw: Mapping[str, Any], name: str, message: Optional[str] = None
) -> Optional[bool]:
    value = raw.get(name)
    if value is not None and not isinstance(value, bool):
        raise ValidationError(
            name, "boolean", message or f"invalid {name} argument, expecting boolean"
        )
    return value


def _validate_tags(raw: Mapping[str, Any]) -> Optional[tuple[str, ...]]:
    tags = raw.get("tags")
    if tags is None:
        return None
    if not isinstance(tags, (list, tuple)) or not all(
        isinstance(tag, str) for tag in tags
    ):
        raise ValidationError(
            "tags", "array of strings", "invalid argument for tags - strings expected"
        )
    return tuple(tags)


def _validate_standard_mode(
    raw: Mapping[str, Any], is_custodial: Optional[bool]
) -> StandardWalletMode:
    """Validate the keys/m/n triple of a standard (optionally paired custodial) wallet.

    A paired custodial wallet may list fewer than ``n`` keys; the service
    supplies the remainder. Every other standard wallet must list all ``n``.
    """
    keys = raw.get("keys")
    if keys is None:
        raise ValidationError("keys", "array", "Missing parameter: keys")
    if not isinstance(keys, (list, tuple)) or not all(
        isinstance(key, str) for key in keys
    ):
        raise ValidationError(
            "keys", "array", "invalid argument for keys - array of key ids expected"
        )

    for name in ("m", "n"):
        value = raw.get(name)
        if value is None:
            raise ValidationError(name, "integer", f"Missing parameter: {name}")
        if not _is_integer(value):
            raise ValidationError(
                name, "integer", f"invalid argument for {name} - integer expected"
            )

    m, n = raw["m"], raw["n"]
    if m < 1 or m > n:
        raise ValidationError(
            "m", "1 <= m <= n", f"invalid m-of-n threshold: {m} of {n}"
        )
    if len(keys) > n:
        raise ValidationError(
            "keys",
            f"at most {n} keys",
            f"expected at most {n} keys but found {len(keys)}",
        )
    if not is_custodial and len(keys) != n:
        raise ValidationError(
            "keys",
            f"{n} keys",
            f"expected {n} keys for a {m}-of-{n} wallet but found {len(keys)}",
        )

    return StandardWalletMode(keys=tuple(keys), m=m, n=n, is_custodial=is_custodial)


def validate_add(raw: Any) -> AddWalletParams:
    """Validate parameters for adding a wallet from already registered keys. Pure function.

    Args:
        raw: Untyped parameter bag using the service's camelCase names
            (``label``, ``enterprise``, ``type``, ``isCustodial``, ``keys``,
            ``m``, ``n``, ``tags``).

    Returns:
        Validated params with either a custodial or a standard wallet mode.

    Raises:
        ValidationError: On the first violated rule.
    """
    raw = _require_mapping(raw)
    label = _require_label(raw)
    enterprise = _optional_param_string(raw, "enterprise")
    wallet_type = _optional_param_string(raw, "type")
    is_custodial = _optional_boolean(
        raw, "isCustodial", "invalid argument for isCustodial - boolean expected"
    )
    tags = _validate_tags(raw)

    if wallet_type is None:
        mode: CustodialWalletMode | StandardWalletMode = _validate_standard_mode(
            raw, is_custodial
        )
        return AddWalletParams(label=label, enterprise=enterprise, mode=mode, tags=tags)

    if wallet_type != CUSTODIAL_WALLET_TYPE:
        raise ValidationError(
            "type",
            CUSTODIAL_WALLET_TYPE,
            f"unsupported wallet type {wallet_type!r}, expecting 'custodial'",
        )
    if is_custodial is False:
        raise ValidationError(
            "isCustodial",
            "consistent with type",
            "isCustodial cannot be false for a custodial wallet type",
        )
    present = [name for name in ("keys", "m", "n") if raw.get(name) is not None]
    if present:
        raise ValidationError(
            present[0],
            "absent",
            f"custodial wallets cannot specify {', '.join(present)}",
        )

    mode = CustodialWalletMode(type=wallet_type)
    return AddWalletParams(label=label, enterprise=enterprise, mode=mode, tags=tags)


def _validate_krs_specific(raw: Mapping[str, Any]) -> Optional[dict[str, Any]]:
    krs_specific = raw.get("krsSpecific")
    if krs_specific is None:
        return None
    if not isinstance(krs_specific, Mapping) or not all(
        isinstance(key, str) and _is_krs_scalar(value)
        for key, value in krs_specific.items()
    ):
        raise ValidationError(
            "krsSpecific", "strings, booleans, or numbers", KRS_SPECIFIC_ILLEGAL_VALUES
        )
    return dict(krs_specific)


def validate_generate(raw: Any) -> GenerateWalletParams:
    """Validate parameters for generating a new 2-of-3 wallet. Pure function.

    The backup key source is selected here, once: a caller-supplied
    ``backupXpub``, delegation to the ``backupXpubProvider`` KRS, or local
    generation (which requires a ``passphrase``).

    Raises:
        ValidationError: On the first violated rule.
    """
    raw = _require_mapping(raw)
    label = _require_label(raw)

    if raw.get("backupXpub") and raw.get("backupXpubProvider"):
        raise ValidationError(
            "backupXpubProvider",
            "exclusive with backupXpub",
            "Cannot provide more than one backupXpub or backupXpubProvider flag",
        )

    passcode_encryption_code = _optional_string(
        raw, "passcodeEncryptionCode", "passcodeEncryptionCode must be a string"
    )
    enterprise = _optional_string(
        raw, "enterprise", "invalid enterprise argument, expecting string"
    )
    disable_transaction_notifications = _optional_boolean(
        raw, "disableTransactionNotifications"
    )

    gas_price = raw.get("gasPrice")
    if gas_price is not None and not _is_number(gas_price):
        raise ValidationError(
            "gasPrice", "number", "invalid gas price argument, expecting number"
        )

    disable_krs_email = _optional_boolean(raw, "disableKRSEmail")
    krs_specific = _validate_krs_specific(raw)

    passphrase = _optional_string(raw, "passphrase")
    user_key = _optional_key_string(raw, "userKey")
    backup_xpub = _optional_key_string(raw, "backupXpub")
    backup_xpub_provider = _optional_key_string(raw, "backupXpubProvider")

    backup_source: BackupKeySource
    if backup_xpub is not None:
        backup_source = ProvidedBackupKey(pub=backup_xpub)
    elif backup_xpub_provider is not None:
        backup_source = DelegatedBackupKey(
            provider=backup_xpub_provider,
            disable_krs_email=disable_krs_email,
            krs_specific=krs_specific,
        )
    else:
        if passphrase is None:
            raise ValidationError(
                "passphrase",
                "string",
                "cannot generate backup keypair without passphrase",
            )
        backup_source = GeneratedBackupKey()

    return GenerateWalletParams(
        label=label,
        passphrase=SecretStr(passphrase) if passphrase is not None else None,
        user_key=user_key,
        backup_source=backup_source,
        passcode_encryption_code=passcode_encryption_code,
        enterprise=enterprise,
        disable_transaction_notifications=disable_transaction_notifications,
        gas_price=gas_price,
        disable_krs_email=disable_krs_email,
        krs_specific=krs_specific,
    )
