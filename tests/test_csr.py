import base64
import os

import pytest
from cryptography import x509
from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from conftest import make_csr
from localca.errors import ParseError, ValidationError
from localca.options import CSROptions
from localca.pki.csr import parse_csr
from localca.pki.templates import CertificateKind


def _write(tmp_path, data, name="req.csr"):
    path = tmp_path / name
    path.write_bytes(data)
    return path


def test_scenario_e_common_name_becomes_san(ca, tmp_path, out_dir):
    path = _write(tmp_path, make_csr(common_name="foo.example"))
    res = ca.issue_from_csr(path, CSROptions(output_dir=str(out_dir)))
    cert = res.certificate
    assert res.kind is CertificateKind.CSR
    san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    assert san.get_values_for_type(x509.DNSName) == ["foo.example"]
    eku = cert.extensions.get_extension_for_class(x509.ExtendedKeyUsage).value
    assert ExtendedKeyUsageOID.SERVER_AUTH in eku
    assert res.cert_path == out_dir / "foo.example.pem"
    assert res.key_path is None
    assert os.listdir(out_dir) == ["foo.example.pem"]
    cert.verify_directly_issued_by(ca.material.certificate)


def test_csr_subject_and_sans_copied(ca, tmp_path, out_dir):
    sans = [x509.DNSName("b.example"), x509.RFC822Name("me@b.example")]
    usage = x509.KeyUsage(
        digital_signature=False, content_commitment=True, key_encipherment=False,
        data_encipherment=False, key_agreement=False, key_cert_sign=False,
        crl_sign=False, encipher_only=False, decipher_only=False,
    )
    path = _write(tmp_path, make_csr(common_name="B Service", sans=sans, extensions=[(usage, True)]))
    res = ca.issue_from_csr(path, CSROptions(output_dir=str(out_dir)))
    cert = res.certificate
    assert cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)[0].value == "B Service"
    assert res.hosts == ["b.example", "me@b.example"]
    assert res.cert_path == out_dir / "b.example+1.pem"
    ku = cert.extensions.get_extension_for_class(x509.KeyUsage).value
    assert ku.digital_signature and ku.key_encipherment and not ku.content_commitment
    eku = list(cert.extensions.get_extension_for_class(x509.ExtendedKeyUsage).value)
    assert eku == [ExtendedKeyUsageOID.SERVER_AUTH, ExtendedKeyUsageOID.EMAIL_PROTECTION]


def test_empty_subject_makes_san_critical(ca, tmp_path, out_dir):
    path = _write(tmp_path, make_csr(sans=[x509.DNSName("nosubject.example")]))
    res = ca.issue_from_csr(path, CSROptions(output_dir=str(out_dir)))
    assert res.certificate.extensions.get_extension_for_class(x509.SubjectAlternativeName).critical


def test_new_certificate_request_label_accepted(ca, tmp_path, out_dir):
    data = make_csr(common_name="legacy.example").replace(b"CERTIFICATE REQUEST", b"NEW CERTIFICATE REQUEST")
    path = _write(tmp_path, data)
    res = ca.issue_from_csr(path, CSROptions(cert_file=str(out_dir / "custom.pem")))
    assert res.cert_path == out_dir / "custom.pem"


def _rewrap(label, der):
    body = base64.b64encode(der).decode()
    lines = [body[i:i + 64] for i in range(0, len(body), 64)]
    return "\n".join([f"-----BEGIN {label}-----", *lines, f"-----END {label}-----", ""]).encode()


def test_tampered_signature_rejected(tmp_path):
    der = x509.load_pem_x509_csr(make_csr(common_name="foo.example")).public_bytes(Encoding.DER)
    tampered = der[:-1] + bytes([der[-1] ^ 0x01])
    with pytest.raises(ValidationError, match="signature"):
        parse_csr(_rewrap("CERTIFICATE REQUEST", tampered))


def test_wrong_label_and_garbage(ca):
    with pytest.raises(ParseError):
        parse_csr(b"hello")
    with pytest.raises(ParseError):
        parse_csr(ca.material.certificate.public_bytes(Encoding.PEM))


def test_no_name_at_all_rejected(ca, tmp_path, out_dir):
    path = _write(tmp_path, make_csr())
    with pytest.raises(ValidationError):
        ca.issue_from_csr(path, CSROptions(output_dir=str(out_dir)))


def test_csr_lifetime_ceiling(ca, tmp_path, out_dir):
    path = _write(tmp_path, make_csr(common_name="foo.example"))
    with pytest.raises(ValidationError):
        ca.issue_from_csr(path, CSROptions(years=5, output_dir=str(out_dir)))
