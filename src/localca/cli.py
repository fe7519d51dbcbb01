from __future__ import annotations

import argparse
from typing import Optional, Sequence

import pydantic

from .authority import LocalCA
from .errors import LocalCAError, ValidationError
from .identity import SystemIdentity
from .options import CertOptions, CSROptions, IntermediateOptions, RootOptions
from .pki.store import CAStore
from .report import report
from .trust.stores import TrustStore
from .utils.fs import path_exists
from .utils.logging import get_logger

log = get_logger()

EXAMPLES = """examples:
  localca example.org
      Generate "example.org.pem" and "example.org.key".
  localca example.com myapp.dev localhost 127.0.0.1 ::1
      Generate "example.com+4.pem" and "example.com+4.key".
  localca "*.example.it"
      Generate "_wildcard.example.it.pem" and "_wildcard.example.it.key".

environment:
  CAROOT        CA certificate and key storage location
  TRUST_STORES  comma-separated trust stores to consider (system, nss, java)
"""


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        "localca",
        description="Issue locally-trusted development certificates.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("hosts", nargs="*", help="DNS names, IPs, email addresses or URIs")
    p.add_argument("--cert-file", dest="cert_file")
    p.add_argument("--key-file", dest="key_file")
    p.add_argument("--p12-file", dest="p12_file")
    p.add_argument("--client", action="store_true", help="generate a certificate for client authentication")
    p.add_argument("--rsa", action="store_true", help="use RSA keys (2048 leaf, 4096 CA)")
    p.add_argument("--pkcs12", action="store_true", help="write a legacy .p12 bundle instead of PEM files")
    p.add_argument("--csr", help="issue a certificate for the given CSR")
    p.add_argument("--inter", action="store_true", help="generate an intermediate CA certificate")
    p.add_argument("--inter-cn", dest="inter_cn", default="", help="intermediate Common Name")
    p.add_argument("--root", action="store_true", help="force the creation of a new root (old files are backed up)")
    p.add_argument("--root-years", dest="root_years", type=int, default=0)
    p.add_argument("--root-org", dest="root_org", default="")
    p.add_argument("--root-cn", dest="root_cn", default="")
    p.add_argument("--root-ou", dest="root_ou", default="")
    p.add_argument("--root-country", dest="root_country", default="")
    p.add_argument("--days", type=int, default=0)
    p.add_argument("--months", type=int, default=0)
    p.add_argument("--years", type=int, default=0)
    p.add_argument("--caroot", action="store_true", help="print the CA certificate and key storage location")
    return p


def check_flags(args: argparse.Namespace) -> None:
    if args.csr and (args.pkcs12 or args.rsa or args.client):
        raise ValidationError("can only combine --csr with --cert-file")
    if args.csr and args.hosts:
        raise ValidationError("can't specify extra arguments when using --csr")
    if args.inter_cn and not args.inter:
        raise ValidationError("use --inter to create an intermediate certificate")


def root_options(args: argparse.Namespace) -> RootOptions:
    return RootOptions(
        country=args.root_country,
        organization=args.root_org,
        organizational_unit=args.root_ou,
        common_name=args.root_cn,
        years=args.root_years,
        use_rsa=args.rsa,
        force_new=args.root,
    )


def run(args: argparse.Namespace, identity: SystemIdentity, stores: Sequence[TrustStore]) -> int:
    lifetime = dict(days=args.days, months=args.months, years=args.years)

    store = CAStore.from_identity(identity)
    opts = root_options(args)
    if opts.has_custom_subject() and not opts.force_new and path_exists(store.cert_path):
        log.info("Note: the --root-* flags only take effect when a new root CA is generated, pass --root to rotate")
    ca = LocalCA(store, store.load(opts))

    missing = ca.uninstalled_stores(stores)
    for s in missing:
        log.info("Note: the local CA is not installed in the %s trust store.", s.name)

    if args.inter:
        report(ca.issue_intermediate(IntermediateOptions(common_name=args.inter_cn, use_rsa=args.rsa, **lifetime)))
        return 0
    if args.csr:
        report(ca.issue_from_csr(args.csr, CSROptions(cert_file=args.cert_file, **lifetime)))
        return 0
    if args.hosts:
        cert_opts = CertOptions(
            client=args.client,
            use_rsa=args.rsa,
            pkcs12=args.pkcs12,
            cert_file=args.cert_file,
            key_file=args.key_file,
            p12_file=args.p12_file,
            **lifetime,
        )
        report(ca.issue_leaf(args.hosts, cert_opts))
    return 0


def main(
    argv: Optional[list[str]] = None,
    identity: Optional[SystemIdentity] = None,
    stores: Sequence[TrustStore] = (),
) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    identity = identity or SystemIdentity()
    try:
        if args.caroot:
            print(identity.caroot())
            return 0
        check_flags(args)
        if not (args.hosts or args.csr or args.inter or args.root):
            p.print_usage()
            return 0
        return run(args, identity, stores)
    except LocalCAError as e:
        log.error("ERROR: %s", e)
        return 1
    except pydantic.ValidationError as e:
        log.error("ERROR: invalid options: %s", e)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
