from pathlib import Path

from localca.pki.naming import default_base_name, output_paths, sanitize


def test_sanitize_wildcards_and_colons():
    assert sanitize("*.example.it") == "_wildcard.example.it"
    assert sanitize("::1") == "__1"
    assert sanitize("https://example.com/x") == "https___example.com_x"


def test_base_name_counts_extra_hosts():
    hosts = ["example.com", "*.example.com", "example.test", "localhost", "127.0.0.1", "::1"]
    assert default_base_name(hosts) == "example.com+5"
    assert default_base_name(["example.com"]) == "example.com"
    assert default_base_name(["example.com", "a.test"], client=True) == "example.com+1-client"


def test_output_paths_defaults(tmp_path):
    paths = output_paths(["*.example.it"], output_dir=tmp_path)
    assert paths.cert == tmp_path / "_wildcard.example.it.pem"
    assert paths.key == tmp_path / "_wildcard.example.it.key"
    assert paths.p12 == tmp_path / "_wildcard.example.it.p12"
    assert not paths.combined


def test_output_paths_overrides():
    paths = output_paths(["example.com"], cert_file="both.pem", key_file="both.pem", p12_file="x.pfx")
    assert paths.cert == Path("both.pem")
    assert paths.p12 == Path("x.pfx")
    assert paths.combined
