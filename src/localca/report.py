"""Human-readable summaries of issuance results."""
from __future__ import annotations

import logging
from typing import List, Optional

from cryptography import x509
from cryptography.x509.oid import ExtendedKeyUsageOID

from . import config
from .authority import IssuedCertificate
from .errors import SECOND_LEVEL_WILDCARD, WILDCARD_DEPTH
from .pki.lifetime import format_date
from .pki.templates import CertificateKind
from .utils.logging import get_logger


def _has_client_auth(cert: x509.Certificate) -> bool:
    try:
        eku = cert.extensions.get_extension_for_class(x509.ExtendedKeyUsage).value
    except x509.ExtensionNotFound:
        return False
    return ExtendedKeyUsageOID.CLIENT_AUTH in eku


def _common_name(cert: x509.Certificate) -> str:
    attrs = cert.subject.get_attributes_for_oid(x509.NameOID.COMMON_NAME)
    return str(attrs[0].value) if attrs else ""


def expiry_line(result: IssuedCertificate) -> str:
    date = format_date(result.not_after)
    if result.reduced:
        return f"Reduced validity: it will expire on {date}"
    return f"It will expire on {date}"


def location_lines(result: IssuedCertificate) -> List[str]:
    if result.p12_path is not None:
        return [
            f'The PKCS#12 bundle is at "{result.p12_path}"',
            f'The legacy PKCS#12 encryption password is the often hardcoded default "{config.PKCS12_PASSWORD}"',
        ]
    if result.key_path is None:
        return [f'The certificate is at "{result.cert_path}"']
    if result.combined_pem:
        return [f'The certificate and key are at "{result.cert_path}"']
    return [f'The certificate is at "{result.cert_path}" and the key at "{result.key_path}"']


def summary_lines(result: IssuedCertificate) -> List[str]:
    if result.kind is CertificateKind.INTERMEDIATE:
        lines = [f'Created a new intermediate certificate "{_common_name(result.certificate)}"']
    else:
        lines = ["Created a new certificate valid for the following names"]
        lines.extend(f' - "{h}"' for h in result.hosts)
        if _has_client_auth(result.certificate):
            lines.append("The certificate is also valid for client authentication")
    lines.extend(location_lines(result))
    lines.append(expiry_line(result))
    return lines


def report(result: IssuedCertificate, logger: Optional[logging.Logger] = None) -> None:
    logger = logger or get_logger()
    for line in summary_lines(result):
        logger.info(line)
    for w in result.warnings:
        if w.code == SECOND_LEVEL_WILDCARD:
            logger.warning("Warning: %s", w.message)
        elif w.code == WILDCARD_DEPTH:
            logger.info("Reminder: %s", w.message)
