"""BIP32 extended keypair generation for wallet keychains."""

from __future__ import annotations

import secrets
from typing import Optional

from bip_utils import Bip32Slip10Secp256k1
from pydantic import BaseModel, ConfigDict, SecretStr

# BIP32 allows 128 to 512 bit seeds
SEED_SIZE = 32


class ExtendedKeyPair(BaseModel):
    """A freshly generated BIP32 root key, serialized as xpub/xprv strings."""

    model_config = ConfigDict(frozen=True)

    xpub: str
    xprv: SecretStr


def generate_keypair(seed: Optional[bytes] = None) -> ExtendedKeyPair:
    """Generate a secp256k1 BIP32 root keypair.

    Args:
        seed: Seed bytes; drawn from ``secrets`` when omitted. Only tests should
            pass a fixed seed.

    Returns:
        The keypair with mainnet-versioned extended keys (``xpub``/``xprv``).
    """
    if seed is None:
        seed = secrets.token_bytes(SEED_SIZE)
    ctx = Bip32Slip10Secp256k1.FromSeed(seed)
    return ExtendedKeyPair(
        xpub=ctx.PublicKey().ToExtended(),
        xprv=SecretStr(ctx.PrivateKey().ToExtended()),
    )

