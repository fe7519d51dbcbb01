from __future__ import annotations

from cryptography import x509

from ..errors import ParseError, ValidationError
from ..utils.fs import read_file


def parse_csr(data: bytes) -> x509.CertificateSigningRequest:
    """Decode a PEM CSR and check its self-signature against the embedded key.

    Both "CERTIFICATE REQUEST" and the legacy "NEW CERTIFICATE REQUEST"
    labels are accepted.
    """
    try:
        csr = x509.load_pem_x509_csr(data)
        # extensions are parsed lazily; force it so malformed ones fail here
        _ = csr.extensions
    except (ValueError, x509.DuplicateExtension) as e:
        raise ParseError(f"failed to parse the CSR: {e}") from e
    try:
        valid = csr.is_signature_valid
    except Exception as e:
        raise ValidationError(f"invalid CSR signature: {e}") from e
    if not valid:
        raise ValidationError("invalid CSR signature")
    return csr


def load_csr(path) -> x509.CertificateSigningRequest:
    return parse_csr(read_file(path, "CSR"))
