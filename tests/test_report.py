from datetime import datetime, timezone
from pathlib import Path

from localca.authority import IssuedCertificate
from localca.errors import PolicyWarning, SECOND_LEVEL_WILDCARD
from localca.options import CertOptions
from localca.pki.lifetime import Validity
from localca.pki.templates import CertificateKind
from localca.report import expiry_line, location_lines, report, summary_lines

START = datetime(2026, 2, 1, tzinfo=timezone.utc)
END = datetime(2027, 3, 3, tzinfo=timezone.utc)


def _result(cert, **kw):
    kw.setdefault("validity", Validity(START, END))
    return IssuedCertificate(kind=CertificateKind.LEAF, certificate=cert, **kw)


def test_expiry_lines(ca):
    cert = ca.material.certificate
    assert expiry_line(_result(cert)) == "It will expire on 3 March 2027"
    reduced = _result(cert, validity=Validity(START, END, reduced=True))
    assert expiry_line(reduced) == "Reduced validity: it will expire on 3 March 2027"


def test_location_lines(ca):
    cert = ca.material.certificate
    pair = _result(cert, cert_path=Path("a.pem"), key_path=Path("a.key"))
    assert location_lines(pair) == ['The certificate is at "a.pem" and the key at "a.key"']
    both = _result(cert, cert_path=Path("b.pem"), key_path=Path("b.pem"))
    assert location_lines(both) == ['The certificate and key are at "b.pem"']
    only = _result(cert, cert_path=Path("c.pem"))
    assert location_lines(only) == ['The certificate is at "c.pem"']
    p12 = location_lines(_result(cert, p12_path=Path("d.p12")))
    assert p12[0] == 'The PKCS#12 bundle is at "d.p12"'
    assert '"changeit"' in p12[1]


def test_summary_lists_hosts(ca, out_dir):
    res = ca.issue_leaf(["example.com", "127.0.0.1"], CertOptions(client=True, output_dir=str(out_dir)))
    lines = summary_lines(res)
    assert lines[0] == "Created a new certificate valid for the following names"
    assert lines[1:3] == [' - "example.com"', ' - "127.0.0.1"']
    assert "The certificate is also valid for client authentication" in lines
    assert lines[-1].startswith("It will expire on ")


def test_report_logs_warnings(ca, localca_logs):
    res = _result(
        ca.material.certificate,
        hosts=["*.localhost"],
        cert_path=Path("x.pem"),
        key_path=Path("x.key"),
        warnings=[PolicyWarning(SECOND_LEVEL_WILDCARD, "many browsers don't support it")],
    )
    report(res)
    assert "Warning: many browsers don't support it" in localca_logs.text
    assert ' - "*.localhost"' in localca_logs.text
