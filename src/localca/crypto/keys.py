"""Key-pair generation policy.

CA keys (root and intermediate) live much longer than leaf keys, so they
get the stronger parameter set:

  tier           rsa        ecdsa
  root/inter     RSA-4096   P-384
  leaf           RSA-2048   P-256
"""
from __future__ import annotations

from enum import Enum
from typing import Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from ..errors import CryptoError

PrivateKey = Union[rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey]

__all__ = [
    "KeyTier",
    "KeyAlgorithm",
    "PrivateKey",
    "generate_private_key",
    "signature_hash_for",
    "describe_key",
]


class KeyTier(str, Enum):
    ROOT = "root"
    INTERMEDIATE = "intermediate"
    LEAF = "leaf"

    @property
    def is_ca(self) -> bool:
        return self is not KeyTier.LEAF


class KeyAlgorithm(str, Enum):
    RSA = "rsa"
    ECDSA = "ecdsa"

    @classmethod
    def from_flag(cls, use_rsa: bool) -> "KeyAlgorithm":
        return cls.RSA if use_rsa else cls.ECDSA


_RSA_BITS = {True: 4096, False: 2048}
_EC_CURVES = {True: ec.SECP384R1, False: ec.SECP256R1}


def generate_private_key(tier: KeyTier, algorithm: KeyAlgorithm) -> PrivateKey:
    strong = tier.is_ca
    try:
        if algorithm is KeyAlgorithm.RSA:
            return rsa.generate_private_key(public_exponent=65537, key_size=_RSA_BITS[strong])
        return ec.generate_private_key(_EC_CURVES[strong]())
    except Exception as e:
        raise CryptoError(f"failed to generate {tier.value} {algorithm.value} key: {e}") from e


def signature_hash_for(key) -> hashes.HashAlgorithm:
    """Pick the digest to pair with ``key`` when signing certificates."""
    if isinstance(key, ec.EllipticCurvePrivateKey):
        size = key.curve.key_size
        if size > 384:
            return hashes.SHA512()
        if size > 256:
            return hashes.SHA384()
        return hashes.SHA256()
    if isinstance(key, rsa.RSAPrivateKey):
        return hashes.SHA256()
    raise CryptoError(f"unsupported signing key type {type(key).__name__}")


def describe_key(key) -> str:
    if isinstance(key, rsa.RSAPrivateKey):
        return f"RSA-{key.key_size}"
    if isinstance(key, ec.EllipticCurvePrivateKey):
        return f"ECDSA-{key.curve.name}"
    return type(key).__name__
