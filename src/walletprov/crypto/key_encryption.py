"""Passphrase encryption of locally held private keys.

Blobs are canonical JSON documents carrying everything needed to decrypt
except the passphrase:

    {"ct": ..., "iter": 100000, "iv": ..., "kdf": "pbkdf2-sha256", "salt": ..., "v": 1}

The key is derived with PBKDF2-HMAC-SHA256 and the private key is sealed with
AES-256-GCM, so a wrong passphrase or a tampered blob fails authentication.
"""

from __future__ import annotations

import base64
import json
import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

BLOB_VERSION = 1
KDF_NAME = "pbkdf2-sha256"
PBKDF2_ITERATIONS = 100_000
KEY_SIZE = 32
SALT_SIZE = 16
NONCE_SIZE = 12


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("utf-8")


def _derive_key(passphrase: str, salt: bytes, iterations: int) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(passphrase.encode("utf-8"))


def encrypt_private_key(
    private_key: str, passphrase: str, *, iterations: int = PBKDF2_ITERATIONS
) -> str:
    """Encrypt a serialized private key with a passphrase and return the JSON blob."""
    salt = secrets.token_bytes(SALT_SIZE)
    nonce = secrets.token_bytes(NONCE_SIZE)
    key = _derive_key(passphrase, salt, iterations)
    ciphertext = AESGCM(key).encrypt(nonce, private_key.encode("utf-8"), None)
    blob = {
        "v": BLOB_VERSION,
        "kdf": KDF_NAME,
        "iter": iterations,
        "salt": _b64(salt),
        "iv": _b64(nonce),
        "ct": _b64(ciphertext),
    }
    return json.dumps(blob, separators=(",", ":"), sort_keys=True)


def decrypt_private_key(blob: str, passphrase: str) -> str:
    """Recover a private key from a blob produced by `encrypt_private_key`.

    Raises:
        ValueError: If the blob is malformed, of an unknown version, or the
            passphrase is wrong.
    """
    try:
        data = json.loads(blob)
        if data.get("v") != BLOB_VERSION or data.get("kdf") != KDF_NAME:
            raise ValueError("Unsupported encrypted key format")
        salt = base64.b64decode(data["salt"], validate=True)
        nonce = base64.b64decode(data["iv"], validate=True)
        ciphertext = base64.b64decode(data["ct"], validate=True)
        iterations = int(data["iter"])
    except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed encrypted key: {e}") from e

    key = _derive_key(passphrase, salt, iterations)
    try:
        plaintext = AESGCM(key).decrypt(nonce, ciphertext, None)
    except InvalidTag as e:
        raise ValueError(
            "Unable to decrypt private key: wrong passphrase or corrupted data"
        ) from e
    return plaintext.decode("utf-8")
