"""Error taxonomy for the local CA.

Every hard error aborts the requested operation; the CLI is the only place
that catches them. PolicyWarning is advisory and travels on result objects.
"""
from __future__ import annotations

from dataclasses import dataclass


class LocalCAError(Exception):
    """Base class for all local CA failures."""


class ConfigError(LocalCAError):
    """Raised when the CA storage location cannot be resolved."""


class StorageError(LocalCAError):
    """Raised when reading or writing CA material or outputs fails."""


class ParseError(LocalCAError):
    """Raised for malformed PEM, DER or CSR input."""


class CryptoError(LocalCAError):
    """Raised when key generation, serial drawing or signing fails."""


class SigningKeyUnavailable(CryptoError):
    """Raised when the CA is in keyless mode and a signature is required."""


class ValidationError(LocalCAError):
    """Raised for inputs that parse but are not acceptable."""


@dataclass(frozen=True)
class PolicyWarning:
    code: str
    message: str


REDUCED_VALIDITY = "reduced_validity"
SECOND_LEVEL_WILDCARD = "second_level_wildcard"
WILDCARD_DEPTH = "wildcard_depth"
