from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

_UNSAFE = {":": "_", "/": "_", "*": "_wildcard"}


@dataclass(frozen=True)
class OutputPaths:
    cert: Path
    key: Path
    p12: Path

    @property
    def combined(self) -> bool:
        return self.cert == self.key


def sanitize(name: str) -> str:
    for ch, repl in _UNSAFE.items():
        name = name.replace(ch, repl)
    return name


def default_base_name(hosts: Sequence[str], client: bool = False) -> str:
    """``example.com+3-client`` style base name from the first host and the host count."""
    base = sanitize(hosts[0])
    if len(hosts) > 1:
        base += f"+{len(hosts) - 1}"
    if client:
        base += "-client"
    return base


def output_paths(
    hosts: Sequence[str],
    *,
    client: bool = False,
    cert_file: Optional[str] = None,
    key_file: Optional[str] = None,
    p12_file: Optional[str] = None,
    output_dir: str | Path = ".",
) -> OutputPaths:
    base = default_base_name(hosts, client)
    out = Path(output_dir)
    return OutputPaths(
        cert=Path(cert_file) if cert_file else out / f"{base}.pem",
        key=Path(key_file) if key_file else out / f"{base}.key",
        p12=Path(p12_file) if p12_file else out / f"{base}.p12",
    )
