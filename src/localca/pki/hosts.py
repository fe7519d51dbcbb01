"""Host string classification for Subject Alternative Names.

Each input is tried, in order, as an IP literal, a single email address, a
URI with scheme and host, and finally a DNS name. DNS names may carry one
leading ``*.`` label; non-ASCII labels are converted to punycode first.
"""
from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass, field
from email.utils import parseaddr
from enum import Enum
from typing import List, Sequence, Union
from urllib.parse import urlsplit

import idna

from ..errors import PolicyWarning, SECOND_LEVEL_WILDCARD, ValidationError, WILDCARD_DEPTH

HOSTNAME_RE = re.compile(r"^(\*\.)?[0-9a-z_-]([0-9a-z._-]*[0-9a-z_-])?$", re.IGNORECASE)
SECOND_LEVEL_WILDCARD_RE = re.compile(r"^\*\.[0-9a-z_-]+$", re.IGNORECASE)
EMAIL_RE = re.compile(r"^[^\s@:\"(),;<>\[\]\\]+@[^\s@:\"(),;<>\[\]\\]+$")

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


class HostKind(str, Enum):
    IP = "ip"
    EMAIL = "email"
    URI = "uri"
    DNS = "dns"


@dataclass(frozen=True)
class HostEntry:
    raw: str
    kind: HostKind
    value: str  # normalized form (punycode for DNS names)

    @property
    def ip(self) -> IPAddress:
        return ipaddress.ip_address(self.value)


@dataclass
class SanSet:
    dns_names: List[str] = field(default_factory=list)
    ip_addresses: List[IPAddress] = field(default_factory=list)
    email_addresses: List[str] = field(default_factory=list)
    uris: List[str] = field(default_factory=list)

    @property
    def serves_tls(self) -> bool:
        return bool(self.dns_names or self.ip_addresses or self.uris)

    @property
    def has_email(self) -> bool:
        return bool(self.email_addresses)

    def is_empty(self) -> bool:
        return not (self.serves_tls or self.has_email)


def _as_ip(host: str) -> IPAddress | None:
    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        return None
    if getattr(ip, "scope_id", None):
        return None
    return ip


def _is_email(host: str) -> bool:
    name, addr = parseaddr(host)
    if name or addr != host:
        return False
    return EMAIL_RE.match(addr) is not None


def _is_uri(host: str) -> bool:
    try:
        parts = urlsplit(host)
        return bool(parts.scheme and parts.hostname)
    except ValueError:
        return False


def to_ascii(host: str) -> str:
    """Punycode-encode the non-ASCII labels of ``host``; ASCII labels are kept as-is."""
    labels = []
    for label in host.split("."):
        if label.isascii():
            labels.append(label)
            continue
        try:
            labels.append(idna.encode(label, uts46=True).decode("ascii"))
        except idna.IDNAError as e:
            raise ValidationError(f"{host!r} is not a valid hostname, IP, URL or email: {e}") from e
    return ".".join(labels)


def classify_host(host: str) -> HostEntry:
    if _as_ip(host) is not None:
        return HostEntry(raw=host, kind=HostKind.IP, value=host)
    if _is_email(host):
        return HostEntry(raw=host, kind=HostKind.EMAIL, value=host)
    if _is_uri(host):
        return HostEntry(raw=host, kind=HostKind.URI, value=host)
    ascii_host = to_ascii(host)
    if not HOSTNAME_RE.match(ascii_host):
        raise ValidationError(f"{host!r} is not a valid hostname, IP, URL or email")
    return HostEntry(raw=host, kind=HostKind.DNS, value=ascii_host)


def classify_hosts(hosts: Sequence[str]) -> List[HostEntry]:
    if not hosts:
        raise ValidationError("at least one host name is required")
    return [classify_host(h) for h in hosts]


def build_sans(entries: Sequence[HostEntry]) -> SanSet:
    sans = SanSet()
    for e in entries:
        if e.kind is HostKind.IP:
            sans.ip_addresses.append(e.ip)
        elif e.kind is HostKind.EMAIL:
            sans.email_addresses.append(e.value)
        elif e.kind is HostKind.URI:
            sans.uris.append(e.value)
        elif e.kind is HostKind.DNS:
            sans.dns_names.append(e.value)
        else:  # pragma: no cover - enum is closed
            raise AssertionError(f"unhandled host kind {e.kind}")
    return sans


def wildcard_warnings(hosts: Sequence[str]) -> List[PolicyWarning]:
    warnings = []
    for h in hosts:
        if SECOND_LEVEL_WILDCARD_RE.match(h):
            warnings.append(PolicyWarning(
                SECOND_LEVEL_WILDCARD,
                f"many browsers don't support second-level wildcards like {h!r}",
            ))
    for h in hosts:
        if h.startswith("*."):
            warnings.append(PolicyWarning(
                WILDCARD_DEPTH,
                f"X.509 wildcards only go one level deep, so this won't match a.b.{h[2:]}",
            ))
            break
    return warnings
