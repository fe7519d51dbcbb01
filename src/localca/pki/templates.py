"""Unsigned certificate descriptions for the four certificate classes.

  root          self-issued CA, pathLen 2, cert-sign key usage, no SAN/EKU
  intermediate  CA signed by the root, pathLen 1, subject C/O/OU copied from the root
  leaf          from a host list; SAN + EKU derived from the classified hosts
  csr           subject and extensions copied from a verified CSR; KU/EKU forced

Templates are built fresh for every issuance and handed to the signer.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from cryptography import x509
from cryptography.x509.oid import ExtendedKeyUsageOID, ExtensionOID, NameOID

from ..crypto.keys import KeyAlgorithm
from ..crypto.serial import random_serial_number
from ..errors import ValidationError
from .hosts import HostEntry, SanSet, build_sans
from .lifetime import Validity

ROOT_PATH_LEN = 2
INTERMEDIATE_PATH_LEN = 1


class CertificateKind(str, Enum):
    ROOT = "root"
    INTERMEDIATE = "intermediate"
    LEAF = "leaf"
    CSR = "csr"


@dataclass
class CertificateTemplate:
    kind: CertificateKind
    subject: x509.Name
    public_key: object
    validity: Validity
    serial_number: int
    key_usage: Optional[x509.KeyUsage] = None
    extended_key_usage: List[x509.ObjectIdentifier] = field(default_factory=list)
    sans: SanSet = field(default_factory=SanSet)
    is_ca: bool = False
    path_length: Optional[int] = None
    subject_key_identifier: Optional[x509.SubjectKeyIdentifier] = None
    # copied verbatim from a CSR; never contains KU or EKU
    extra_extensions: List[x509.Extension] = field(default_factory=list)

    @property
    def common_name(self) -> str:
        attrs = self.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
        return str(attrs[0].value) if attrs else ""

    def extra_oids(self) -> set:
        return {ext.oid for ext in self.extra_extensions}

    def extensions(self) -> List[tuple]:
        """(extension value, critical) pairs in the order they are written."""
        out: List[tuple] = []
        if self.key_usage is not None:
            out.append((self.key_usage, True))
        if self.extended_key_usage:
            out.append((x509.ExtendedKeyUsage(self.extended_key_usage), False))
        if self.is_ca:
            out.append((x509.BasicConstraints(ca=True, path_length=self.path_length), True))
        if self.subject_key_identifier is not None:
            out.append((self.subject_key_identifier, False))
        general_names = san_general_names(self.sans)
        if general_names:
            # an empty subject makes the SAN the only identity, so it must be critical
            out.append((x509.SubjectAlternativeName(general_names), len(self.subject) == 0))
        for ext in self.extra_extensions:
            out.append((ext.value, ext.critical))
        return out


def san_general_names(sans: SanSet) -> List[x509.GeneralName]:
    names: List[x509.GeneralName] = []
    names.extend(x509.DNSName(d) for d in sans.dns_names)
    names.extend(x509.RFC822Name(e) for e in sans.email_addresses)
    names.extend(x509.IPAddress(ip) for ip in sans.ip_addresses)
    names.extend(x509.UniformResourceIdentifier(u) for u in sans.uris)
    return names


def build_name(country: str = "", organization: str = "", organizational_unit: str = "", common_name: str = "") -> x509.Name:
    attrs = []
    if country:
        attrs.append(x509.NameAttribute(NameOID.COUNTRY_NAME, country))
    if organization:
        attrs.append(x509.NameAttribute(NameOID.ORGANIZATION_NAME, organization))
    if organizational_unit:
        attrs.append(x509.NameAttribute(NameOID.ORGANIZATIONAL_UNIT_NAME, organizational_unit))
    if common_name:
        attrs.append(x509.NameAttribute(NameOID.COMMON_NAME, common_name))
    return x509.Name(attrs)


def _name_values(name: x509.Name, oid) -> List[str]:
    return [str(a.value) for a in name.get_attributes_for_oid(oid)]


def subject_key_identifier(public_key) -> x509.SubjectKeyIdentifier:
    # SHA-1 over the subjectPublicKey BIT STRING; an identifier, not a trust anchor
    return x509.SubjectKeyIdentifier.from_public_key(public_key)


def cert_sign_usage() -> x509.KeyUsage:
    return x509.KeyUsage(
        digital_signature=False, content_commitment=False, key_encipherment=False,
        data_encipherment=False, key_agreement=False, key_cert_sign=True,
        crl_sign=False, encipher_only=False, decipher_only=False,
    )


def leaf_usage() -> x509.KeyUsage:
    return x509.KeyUsage(
        digital_signature=True, content_commitment=False, key_encipherment=True,
        data_encipherment=False, key_agreement=False, key_cert_sign=False,
        crl_sign=False, encipher_only=False, decipher_only=False,
    )


def default_root_common_name(full_name: str, algorithm: KeyAlgorithm) -> str:
    tier = "RSA" if algorithm is KeyAlgorithm.RSA else "ECC"
    return f"{full_name} - {tier} Root"


def root_template(
    public_key,
    validity: Validity,
    *,
    country: str,
    organization: str,
    common_name: str,
    organizational_unit: str = "",
) -> CertificateTemplate:
    return CertificateTemplate(
        kind=CertificateKind.ROOT,
        # iOS only lists roots with a Common Name under Certificate Trust Settings
        subject=build_name(country, organization, organizational_unit, common_name),
        public_key=public_key,
        validity=validity,
        serial_number=random_serial_number(),
        key_usage=cert_sign_usage(),
        is_ca=True,
        path_length=ROOT_PATH_LEN,
        subject_key_identifier=subject_key_identifier(public_key),
    )


def is_root_certificate(cert: x509.Certificate) -> bool:
    """True for a self-issued CA whose path length leaves room for an intermediate."""
    if cert.issuer != cert.subject:
        return False
    try:
        bc = cert.extensions.get_extension_for_class(x509.BasicConstraints).value
    except x509.ExtensionNotFound:
        return False
    return bc.ca and (bc.path_length is None or bc.path_length >= ROOT_PATH_LEN)


def intermediate_template(
    root_cert: x509.Certificate,
    public_key,
    validity: Validity,
    *,
    common_name: str,
) -> CertificateTemplate:
    if not is_root_certificate(root_cert):
        raise ValidationError(
            "intermediate certificates can only be issued by a root CA "
            f"(issuer {root_cert.subject.rfc4514_string()!r} is not a self-issued root)"
        )
    parent = root_cert.subject
    subject = x509.Name(
        [x509.NameAttribute(NameOID.COUNTRY_NAME, v) for v in _name_values(parent, NameOID.COUNTRY_NAME)]
        + [x509.NameAttribute(NameOID.ORGANIZATION_NAME, v) for v in _name_values(parent, NameOID.ORGANIZATION_NAME)]
        + [x509.NameAttribute(NameOID.ORGANIZATIONAL_UNIT_NAME, v)
           for v in _name_values(parent, NameOID.ORGANIZATIONAL_UNIT_NAME)]
        + [x509.NameAttribute(NameOID.COMMON_NAME, common_name)]
    )
    return CertificateTemplate(
        kind=CertificateKind.INTERMEDIATE,
        subject=subject,
        public_key=public_key,
        validity=validity,
        serial_number=random_serial_number(),
        key_usage=cert_sign_usage(),
        is_ca=True,
        path_length=INTERMEDIATE_PATH_LEN,
        subject_key_identifier=subject_key_identifier(public_key),
    )


def leaf_extended_key_usage(sans: SanSet, client: bool) -> List[x509.ObjectIdentifier]:
    eku: List[x509.ObjectIdentifier] = []
    if client:
        eku.append(ExtendedKeyUsageOID.CLIENT_AUTH)
    if sans.serves_tls:
        eku.append(ExtendedKeyUsageOID.SERVER_AUTH)
    if sans.has_email:
        eku.append(ExtendedKeyUsageOID.EMAIL_PROTECTION)
    return eku


def leaf_template(
    entries: Sequence[HostEntry],
    public_key,
    validity: Validity,
    *,
    client: bool = False,
) -> CertificateTemplate:
    sans = build_sans(entries)
    # punycode CN; PKCS#12 consumers such as IIS show only the CN and do not render IDNs
    return CertificateTemplate(
        kind=CertificateKind.LEAF,
        subject=build_name(common_name=entries[0].value),
        public_key=public_key,
        validity=validity,
        serial_number=random_serial_number(),
        key_usage=leaf_usage(),
        extended_key_usage=leaf_extended_key_usage(sans, client),
        sans=sans,
    )


def csr_template(
    csr: x509.CertificateSigningRequest,
    validity: Validity,
    *,
    client: bool = False,
) -> CertificateTemplate:
    """Template for a CSR whose signature has already been verified."""
    extras: List[x509.Extension] = []
    san: Optional[x509.SubjectAlternativeName] = None
    for ext in csr.extensions:
        if ext.oid in (ExtensionOID.KEY_USAGE, ExtensionOID.EXTENDED_KEY_USAGE):
            continue
        if ext.oid == ExtensionOID.SUBJECT_ALTERNATIVE_NAME:
            san = ext.value
            if len(csr.subject) == 0 and not ext.critical:
                ext = x509.Extension(ext.oid, True, ext.value)
        extras.append(ext)

    sans = SanSet()
    if san is None:
        cn = _name_values(csr.subject, NameOID.COMMON_NAME)
        if not cn or not cn[0]:
            raise ValidationError("the CSR has neither a subjectAltName extension nor a Common Name")
        # modern validators ignore the Common Name, so give it a SAN
        sans.dns_names.append(cn[0])
        emails: List[str] = []
    else:
        emails = san.get_values_for_type(x509.RFC822Name)

    eku: List[x509.ObjectIdentifier] = [ExtendedKeyUsageOID.SERVER_AUTH]
    if client:
        eku.append(ExtendedKeyUsageOID.CLIENT_AUTH)
    if emails:
        eku.append(ExtendedKeyUsageOID.EMAIL_PROTECTION)

    return CertificateTemplate(
        kind=CertificateKind.CSR,
        subject=csr.subject,
        public_key=csr.public_key(),
        validity=validity,
        serial_number=random_serial_number(),
        key_usage=leaf_usage(),
        extended_key_usage=eku,
        sans=sans,
        extra_extensions=extras,
    )
