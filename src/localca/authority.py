"""Issuance pipeline.

CAStore supplies the parent key and certificate; templates are built from
classified hosts, a clamped validity and a fresh key; the signer signs
against the parent; the encoder writes the result. One call produces one
artifact. Warnings travel back on the returned IssuedCertificate.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from cryptography import x509

from . import config
from .crypto.keys import KeyAlgorithm, KeyTier, generate_private_key
from .errors import PolicyWarning, REDUCED_VALIDITY
from .identity import SystemIdentity
from .options import CertOptions, CSROptions, IntermediateOptions, RootOptions
from .pki.csr import load_csr
from .pki.encoder import write_pem, write_pkcs12
from .pki.hosts import classify_hosts, wildcard_warnings
from .pki.lifetime import Validity, format_date, issued_validity
from .pki.naming import output_paths, sanitize
from .pki.signer import sign_certificate
from .pki.store import CAMaterial, CAStore
from .pki.templates import CertificateKind, csr_template, intermediate_template, leaf_template
from .trust.stores import TrustStore, store_enabled
from .utils.logging import get_logger

log = get_logger()


@dataclass
class IssuedCertificate:
    kind: CertificateKind
    certificate: x509.Certificate
    validity: Validity
    hosts: List[str] = field(default_factory=list)
    cert_path: Optional[Path] = None
    key_path: Optional[Path] = None
    p12_path: Optional[Path] = None
    warnings: List[PolicyWarning] = field(default_factory=list)

    @property
    def reduced(self) -> bool:
        return self.validity.reduced

    @property
    def not_after(self):
        return self.validity.not_after

    @property
    def combined_pem(self) -> bool:
        return self.key_path is not None and self.cert_path == self.key_path


def certificate_hosts(cert: x509.Certificate) -> List[str]:
    """SAN values of ``cert`` in DNS, email, IP, URI order."""
    try:
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    except x509.ExtensionNotFound:
        return []
    hosts: List[str] = []
    hosts.extend(san.get_values_for_type(x509.DNSName))
    hosts.extend(san.get_values_for_type(x509.RFC822Name))
    hosts.extend(str(ip) for ip in san.get_values_for_type(x509.IPAddress))
    hosts.extend(san.get_values_for_type(x509.UniformResourceIdentifier))
    return hosts


def _validity_warnings(validity: Validity) -> List[PolicyWarning]:
    if not validity.reduced:
        return []
    log.warning("The planned validity is longer than the root validity, reducing it to %s",
                format_date(validity.not_after))
    return [PolicyWarning(
        REDUCED_VALIDITY,
        f"validity reduced to the issuer's expiry, {format_date(validity.not_after)}",
    )]


class LocalCA:
    def __init__(self, store: CAStore, material: CAMaterial):
        self.store = store
        self.material = material

    @classmethod
    def open(cls, identity: Optional[SystemIdentity] = None, root_options: Optional[RootOptions] = None) -> "LocalCA":
        identity = identity or SystemIdentity()
        store = CAStore.from_identity(identity)
        return cls(store, store.load(root_options))

    @property
    def identity(self) -> SystemIdentity:
        return self.store.identity

    def issue_leaf(self, hosts: Sequence[str], options: Optional[CertOptions] = None) -> IssuedCertificate:
        opts = options or CertOptions()
        ca_key = self.material.require_key()
        entries = classify_hosts(hosts)
        names = [e.value for e in entries]

        key = generate_private_key(KeyTier.LEAF, KeyAlgorithm.from_flag(opts.use_rsa))
        validity = issued_validity(
            self.material.not_after, years=opts.years, months=opts.months, days=opts.days, leaf=True,
        )
        tpl = leaf_template(entries, key.public_key(), validity, client=opts.client)
        cert = sign_certificate(tpl, ca_key, self.material.certificate)

        paths = output_paths(
            names,
            client=opts.client,
            cert_file=opts.cert_file,
            key_file=opts.key_file,
            p12_file=opts.p12_file,
            output_dir=opts.output_dir,
        )
        result = IssuedCertificate(kind=CertificateKind.LEAF, certificate=cert, validity=validity, hosts=names)
        if opts.pkcs12:
            write_pkcs12(cert, key, self.material.certificate, paths.p12)
            result.p12_path = paths.p12
        else:
            write_pem(cert, key, paths.cert, paths.key)
            result.cert_path, result.key_path = paths.cert, paths.key
        result.warnings = wildcard_warnings(names) + _validity_warnings(validity)
        return result

    def default_intermediate_name(self) -> str:
        return f"{self.identity.default_organization()} - Intermediate"

    def issue_intermediate(self, options: Optional[IntermediateOptions] = None) -> IssuedCertificate:
        opts = options or IntermediateOptions()
        ca_key = self.material.require_key("create new intermediate CA")

        key = generate_private_key(KeyTier.INTERMEDIATE, KeyAlgorithm.from_flag(opts.use_rsa))
        validity = issued_validity(
            self.material.not_after, years=opts.years, months=opts.months, days=opts.days, leaf=False,
        )
        cn = opts.common_name or self.default_intermediate_name()
        tpl = intermediate_template(self.material.certificate, key.public_key(), validity, common_name=cn)
        cert = sign_certificate(tpl, ca_key, self.material.certificate)

        base = Path(opts.output_dir) / sanitize(cn)
        cert_path, key_path = Path(f"{base}.pem"), Path(f"{base}.key")
        write_pem(cert, key, cert_path, key_path, key_mode=config.CA_KEY_FILE_MODE)
        return IssuedCertificate(
            kind=CertificateKind.INTERMEDIATE,
            certificate=cert,
            validity=validity,
            cert_path=cert_path,
            key_path=key_path,
            warnings=_validity_warnings(validity),
        )

    def issue_from_csr(self, csr_path: str | Path, options: Optional[CSROptions] = None) -> IssuedCertificate:
        opts = options or CSROptions()
        ca_key = self.material.require_key()
        csr = load_csr(csr_path)

        validity = issued_validity(
            self.material.not_after, years=opts.years, months=opts.months, days=opts.days, leaf=True,
        )
        tpl = csr_template(csr, validity, client=opts.client)
        cert = sign_certificate(tpl, ca_key, self.material.certificate)

        hosts = certificate_hosts(cert) or [tpl.common_name or "certificate"]
        paths = output_paths(hosts, cert_file=opts.cert_file, output_dir=opts.output_dir)
        write_pem(cert, None, paths.cert, None)
        return IssuedCertificate(
            kind=CertificateKind.CSR,
            certificate=cert,
            validity=validity,
            hosts=hosts,
            cert_path=paths.cert,
            warnings=wildcard_warnings(hosts) + _validity_warnings(validity),
        )

    def uninstalled_stores(self, stores: Iterable[TrustStore]) -> List[TrustStore]:
        return [s for s in stores if store_enabled(s.name) and not s.check(self.material)]
