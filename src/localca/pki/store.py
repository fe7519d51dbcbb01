"""Root CA material on disk.

Layout inside the CA directory:

  rootCA.pem           root certificate (0644)
  rootCA.key           PKCS#8 root key (0400); absent means keyless mode
  rootCA.{pem,key}-old.bak  previous material, renamed on rotation, never deleted
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from cryptography import x509

from .. import config
from ..crypto.keys import KeyAlgorithm, KeyTier, generate_private_key
from ..errors import SigningKeyUnavailable, StorageError, ValidationError
from ..identity import SystemIdentity
from ..options import RootOptions
from ..utils.fs import move_to_backup, path_exists, read_file, write_file
from ..utils.logging import get_logger
from .encoder import decode_certificate, decode_private_key, encode_certificate, encode_private_key
from .lifetime import root_validity, utcnow
from .signer import sign_certificate
from .templates import default_root_common_name, root_template

log = get_logger()


@dataclass
class CAMaterial:
    certificate: x509.Certificate
    private_key: Optional[object] = None

    @property
    def keyless(self) -> bool:
        return self.private_key is None

    @property
    def not_after(self):
        return self.certificate.not_valid_after_utc

    def require_key(self, action: str = "create new certificates"):
        if self.private_key is None:
            raise SigningKeyUnavailable(
                f"can't {action} because the CA key ({config.ROOT_KEY_NAME}) is missing"
            )
        return self.private_key

    def unique_name(self) -> str:
        orgs = self.certificate.subject.get_attributes_for_oid(x509.NameOID.ORGANIZATION_NAME)
        org = str(orgs[0].value) if orgs else ""
        return f"{org} - RootCA{self.certificate.serial_number}"


class CAStore:
    def __init__(self, caroot: str | os.PathLike, identity: Optional[SystemIdentity] = None):
        self.caroot = Path(caroot)
        self.identity = identity or SystemIdentity()

    @classmethod
    def from_identity(cls, identity: SystemIdentity) -> "CAStore":
        return cls(identity.caroot(), identity)

    @property
    def cert_path(self) -> Path:
        return self.caroot / config.ROOT_CERT_NAME

    @property
    def key_path(self) -> Path:
        return self.caroot / config.ROOT_KEY_NAME

    def ensure_dir(self) -> None:
        try:
            os.makedirs(self.caroot, mode=config.CAROOT_DIR_MODE, exist_ok=True)
        except OSError as e:
            raise StorageError(f"failed to create the CA directory {self.caroot}: {e}") from e

    def load(self, options: Optional[RootOptions] = None) -> CAMaterial:
        options = options or RootOptions()
        self.ensure_dir()
        if options.force_new or not path_exists(self.cert_path):
            self.generate_new_root(options)

        cert = decode_certificate(read_file(self.cert_path, "CA certificate"), "CA certificate")
        if cert.not_valid_after_utc < utcnow():
            raise ValidationError(
                "your root certificate has expired, pass --root to generate a new one"
            )

        if not path_exists(self.key_path):
            # keyless mode: enough for trust store operations, not for issuance
            return CAMaterial(certificate=cert)
        key = decode_private_key(read_file(self.key_path, "CA key"), "CA key")
        return CAMaterial(certificate=cert, private_key=key)

    def generate_new_root(self, options: Optional[RootOptions] = None) -> CAMaterial:
        options = options or RootOptions()
        algorithm = KeyAlgorithm.from_flag(options.use_rsa)
        key = generate_private_key(KeyTier.ROOT, algorithm)

        full_name = self.identity.full_name()
        tpl = root_template(
            key.public_key(),
            root_validity(options.years),
            country=options.country or config.DEFAULT_COUNTRY,
            organization=options.organization or self.identity.default_organization(),
            organizational_unit=options.organizational_unit,
            common_name=options.common_name or default_root_common_name(full_name, algorithm),
        )
        cert = sign_certificate(tpl, key)

        key_pem = encode_private_key(key)
        cert_pem = encode_certificate(cert)
        self.ensure_dir()
        for path, what in ((self.key_path, "root CA key"), (self.cert_path, "root CA certificate")):
            moved = move_to_backup(path, config.BACKUP_SUFFIX, what)
            if moved is not None:
                log.info("Moved old %s to %s", what, moved)
        write_file(self.key_path, key_pem, config.CA_KEY_FILE_MODE, "CA key")
        write_file(self.cert_path, cert_pem, config.CERT_FILE_MODE, "CA certificate")
        log.info("Created a new local CA at %s", self.caroot)
        return CAMaterial(certificate=cert, private_key=key)
