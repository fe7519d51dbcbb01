import logging

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.x509.oid import NameOID

from localca.authority import LocalCA
from localca.identity import StaticIdentity


@pytest.fixture
def identity(tmp_path):
    return StaticIdentity(name="Test User", root_dir=tmp_path / "caroot")


@pytest.fixture
def ca(identity):
    return LocalCA.open(identity)


@pytest.fixture
def out_dir(tmp_path):
    d = tmp_path / "out"
    d.mkdir()
    return d


@pytest.fixture
def localca_logs(caplog):
    caplog.set_level(logging.INFO, logger="localca")
    return caplog


def make_csr(common_name=None, sans=None, extensions=(), key=None):
    """PEM CSR signed by a fresh P-256 key."""
    key = key or ec.generate_private_key(ec.SECP256R1())
    attrs = [x509.NameAttribute(NameOID.COMMON_NAME, common_name)] if common_name else []
    builder = x509.CertificateSigningRequestBuilder().subject_name(x509.Name(attrs))
    if sans:
        builder = builder.add_extension(x509.SubjectAlternativeName(sans), critical=False)
    for value, critical in extensions:
        builder = builder.add_extension(value, critical=critical)
    return builder.sign(key, hashes.SHA256()).public_bytes(Encoding.PEM)
