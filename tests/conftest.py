"""Shared pytest fixtures for wallet provisioning tests."""

from __future__ import annotations

import functools

import pytest

from walletprov.application.wallets.use_cases.key_material import KeyMaterialProvider
from walletprov.crypto.key_encryption import encrypt_private_key

# Low iteration count keeps key derivation fast in tests; blobs record it.
TEST_PBKDF2_ITERATIONS = 1_000


@pytest.fixture
def fast_encryptor():
    """Private key encryptor with a cheap key-derivation setting."""
    return functools.partial(encrypt_private_key, iterations=TEST_PBKDF2_ITERATIONS)


@pytest.fixture
def key_material(fast_encryptor) -> KeyMaterialProvider:
    """Key material provider generating real BIP32 keys with fast encryption."""
    return KeyMaterialProvider(encryptor=fast_encryptor)


@pytest.fixture
def krs_params() -> dict:
    """Generation params delegating the backup key to a KRS, with a user xpub."""
    return {
        "label": "my_wallet",
        "backupXpubProvider": "test",
        "passphrase": "test123",
        "userKey": "xpub123",
    }
