from __future__ import annotations

from typing import Optional

from cryptography import x509
from cryptography.x509.oid import ExtensionOID

from ..crypto.keys import signature_hash_for
from ..errors import CryptoError, SigningKeyUnavailable
from .templates import CertificateKind, CertificateTemplate


def _issuer_key_id(issuer: Optional[x509.Certificate]):
    if issuer is None:
        # self-signed roots carry no AKI
        return None
    try:
        return issuer.extensions.get_extension_for_class(x509.SubjectKeyIdentifier).value
    except x509.ExtensionNotFound:
        return None


def sign_certificate(
    template: CertificateTemplate,
    signing_key,
    issuer: Optional[x509.Certificate] = None,
) -> x509.Certificate:
    """Sign ``template`` with ``signing_key``.

    ``issuer`` is the parent certificate; None means self-issued, in which
    case ``signing_key`` must be the template's own private key.
    """
    if signing_key is None:
        raise SigningKeyUnavailable(
            "can't create new certificates because the CA key (rootCA.key) is missing"
        )
    if issuer is None and template.kind is not CertificateKind.ROOT:
        raise CryptoError(f"a {template.kind.value} certificate needs an issuing CA")

    builder = (
        x509.CertificateBuilder()
        .subject_name(template.subject)
        .issuer_name(issuer.subject if issuer is not None else template.subject)
        .public_key(template.public_key)
        .serial_number(template.serial_number)
        .not_valid_before(template.validity.not_before)
        .not_valid_after(template.validity.not_after)
    )
    for value, critical in template.extensions():
        builder = builder.add_extension(value, critical=critical)

    key_id = _issuer_key_id(issuer)
    if key_id is not None and ExtensionOID.AUTHORITY_KEY_IDENTIFIER not in template.extra_oids():
        builder = builder.add_extension(
            x509.AuthorityKeyIdentifier.from_issuer_subject_key_identifier(key_id),
            critical=False,
        )

    try:
        return builder.sign(signing_key, signature_hash_for(signing_key))
    except (ValueError, TypeError) as e:
        raise CryptoError(f"failed to generate {template.kind.value} certificate: {e}") from e
