# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

import ldapmerge
from ldapmerge.adapters.nsx import (
    NsxClient,
    NsxIdentitySourceGateway,
    build_nsx_gateway,
    identity_source_to_domain,
)
from ldapmerge.adapters.payloads import (
    domains_to_document,
    dump_domains,
    load_certificate_response_file,
    load_domains_file,
    write_domains_file,
)
from ldapmerge.adapters.sqlalchemy import shutdown
from ldapmerge.app import (
    load_profile,
    merge_files,
    open_database,
    pull_domains,
    push_domains,
    sync,
)
from ldapmerge.config import (
    ConfigurationError,
    MissingConfigurationError,
    configure_logging,
    env_value,
    get_nsx_config,
    get_server_config,
)
from ldapmerge.domain.ports.persistence import RecordNotFoundError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

    from ldapmerge.adapters.http_resilience import ResilientClient
    from ldapmerge.config import NsxConfig, ResilienceConfig
    from ldapmerge.domain.model import ConnectionProfile
    from ldapmerge.domain.push import PushOutcome

    ClientFactory = Callable[[ResilienceConfig], ResilientClient]

log = logging.getLogger(__name__)


def _add_connection_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("NSX connection")
    group.add_argument(
        "--host",
        type=str,
        help="NSX Manager host URL, e.g. https://nsx.example.com",
    )
    group.add_argument("-u", "--username", type=str, help="NSX API username")
    group.add_argument("-P", "--password", type=str, help="NSX API password")
    group.add_argument(
        "-k",
        "--insecure",
        action="store_const",
        const=True,
        default=None,
        help="Skip TLS certificate verification",
    )
    group.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="API request timeout in seconds (default: 30)",
    )
    group.add_argument(
        "--profile",
        type=str,
        help="Name of a saved connection profile to take unset values from",
    )
    group.add_argument(
        "--db",
        type=str,
        help="Path to the SQLite database holding connection profiles",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ldapmerge",
        description="Merge LDAP identity source configurations with SSL certificates",
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default=env_value("LOG_DIR"),
        help="Write JSON logs to ldapmerge.log in this directory",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=env_value("LOG_LEVEL") or "info",
        help="Log level: debug, info, warn, error (default: %(default)s)",
    )
    parser.add_argument(
        "--log-console",
        action="store_true",
        help="Also log to stderr when --log-dir is set",
    )
    parser.add_argument(
        "--log-format",
        choices=("text", "json"),
        default=env_value("LOG_FORMAT") or "text",
        help="Console log format (default: %(default)s)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    merge = subparsers.add_parser(
        "merge", help="Merge an initial config with a certificate response"
    )
    merge.add_argument("-i", "--initial", required=True, help="Path to the initial JSON file")
    merge.add_argument("-r", "--response", required=True, help="Path to the response JSON file")
    merge.add_argument("-o", "--output", help="Path to the output file (default: stdout)")
    merge.add_argument(
        "-c", "--compact", action="store_true", help="Output compact JSON (no indentation)"
    )

    sync_parser = subparsers.add_parser(
        "sync", help="Pull from NSX, merge certificates and push the result back"
    )
    _add_connection_arguments(sync_parser)
    certificates = sync_parser.add_mutually_exclusive_group(required=True)
    certificates.add_argument(
        "-r", "--response", help="Path to the certificate response JSON file"
    )
    certificates.add_argument(
        "--fetch-certificates",
        action="store_true",
        help="Fetch the certificates of every pulled LDAP server through NSX instead",
    )
    sync_parser.add_argument("-o", "--output", help="Save the merged result to this file")
    sync_parser.add_argument(
        "--dry-run", action="store_true", help="Pull and merge, but skip the push to NSX"
    )

    nsx = subparsers.add_parser("nsx", help="NSX API operations")
    _add_connection_arguments(nsx)
    nsx_sub = nsx.add_subparsers(dest="nsx_command", required=True)
    pull = nsx_sub.add_parser("pull", help="Pull LDAP identity sources from NSX")
    pull.add_argument("-o", "--output", help="Path to the output file (default: stdout)")
    pull.add_argument("-c", "--compact", action="store_true", help="Output compact JSON")
    push = nsx_sub.add_parser("push", help="Push LDAP identity sources to NSX")
    push.add_argument("-f", "--file", required=True, help="Path to the merged JSON file")
    get = nsx_sub.add_parser("get", help="Get a specific LDAP identity source")
    get.add_argument("id")
    delete = nsx_sub.add_parser("delete", help="Delete an LDAP identity source")
    delete.add_argument("id")
    probe = nsx_sub.add_parser("probe", help="Test the LDAP server connections of a source")
    probe.add_argument("id")
    fetch_cert = nsx_sub.add_parser(
        "fetch-cert", help="Fetch the SSL certificate of an LDAP server"
    )
    fetch_cert.add_argument("url")
    search = nsx_sub.add_parser("search", help="Search users and groups in an identity source")
    search.add_argument("id")
    search.add_argument("filter")

    server = subparsers.add_parser("server", help="Start the HTTP API server")
    server.add_argument("--host", type=str, help="Address to bind (default: 0.0.0.0)")
    server.add_argument("-p", "--port", type=int, help="Port to listen on (default: 8080)")
    server.add_argument("--db", type=str, help="Path to the SQLite database")

    subparsers.add_parser("version", help="Print version information")

    return parser.parse_args(list(argv))


def _load_saved_profile(name: str, database_path: str | None) -> ConnectionProfile:
    database = open_database(database_path=database_path)
    try:
        return load_profile(database.unit_of_work, name)
    except RecordNotFoundError as exc:
        raise MissingConfigurationError(f"Unknown connection profile {name!r}") from exc
    finally:
        shutdown(database)


def _nsx_config(args: argparse.Namespace) -> NsxConfig:
    """Explicit flags win over a saved profile, which wins over the environment."""

    profile = _load_saved_profile(args.profile, args.db) if args.profile else None
    insecure = args.insecure
    if insecure is None and profile is not None:
        insecure = profile.insecure
    return get_nsx_config(
        host=args.host or (profile.host if profile else None),
        username=args.username or (profile.username if profile else None),
        password=args.password or (profile.password if profile else None),
        insecure=insecure,
        timeout_seconds=args.timeout,
    )


def _print_outcome(outcome: PushOutcome) -> None:
    if outcome.succeeded:
        print(f"  ✓ {outcome.domain_id}")
    else:
        print(f"  ✗ {outcome.domain_id}: {outcome.error}")


def _run_merge(args: argparse.Namespace) -> int:
    merged = merge_files(args.initial, args.response)
    if args.output:
        path = write_domains_file(merged, args.output, compact=args.compact)
        print(f"Output written to {path}", file=sys.stderr)
    else:
        print(dump_domains(merged, compact=args.compact))
    return 0


def _run_sync(args: argparse.Namespace, client_factory: ClientFactory | None) -> int:
    response = load_certificate_response_file(args.response) if args.response else None
    config = _nsx_config(args)
    gateway = build_nsx_gateway(config, client_factory=client_factory)
    result = sync(
        gateway=gateway,
        response=response,
        dry_run=args.dry_run,
        output=args.output,
        progress=print,
        on_outcome=_print_outcome,
    )
    if result.report is None:
        print("\nSync completed (dry-run)")
        return 0
    if result.report.ok:
        print("\nSync completed successfully")
        return 0
    print(
        f"\nSync completed with errors: {result.report.succeeded} succeeded, "
        f"{result.report.failed} failed"
    )
    return 1


def _run_nsx(  # noqa: C901, PLR0911
    args: argparse.Namespace, client_factory: ClientFactory | None
) -> int:
    config = _nsx_config(args)
    client = NsxClient(config=config, client_factory=client_factory)
    gateway = NsxIdentitySourceGateway(client)
    command = args.nsx_command

    if command == "pull":
        domains = pull_domains(gateway)
        if args.output:
            path = write_domains_file(domains, args.output, compact=args.compact)
            print(f"Output written to {path}", file=sys.stderr)
        else:
            print(dump_domains(domains, compact=args.compact))
        return 0

    if command == "push":
        domains = load_domains_file(args.file)
        log.debug("Pushing %d identity sources", len(domains))
        report = push_domains(domains, gateway, on_outcome=_print_outcome)
        print(f"\n{report.succeeded} succeeded, {report.failed} failed")
        return 0 if report.ok else 1

    if command == "get":
        domain = identity_source_to_domain(client.get_identity_source(args.id))
        print(json.dumps(domains_to_document([domain])[0], ensure_ascii=False, indent=4))
        return 0

    if command == "delete":
        client.delete_identity_source(args.id)
        print(f"✓ Deleted LDAP identity source: {args.id}")
        return 0

    if command == "probe":
        result = client.probe_configured_source(args.id)
        print(f"Probe results for {args.id}:")
        for item in result.results:
            line = f"  {'✓' if item.success else '✗'} {item.ldap_server_url}"
            if item.error_message:
                line += f" - {item.error_message}"
            print(line)
        return 0 if all(item.success for item in result.results) else 1

    if command == "fetch-cert":
        certificate = client.fetch_certificate(args.url)
        print(f"Certificate from {args.url}:\n")
        if certificate.details:
            detail = certificate.details[0]
            print(f"  Subject CN:  {detail.subject_cn or ''}")
            print(f"  Subject DN:  {detail.subject_dn or ''}")
            print(f"  Issuer CN:   {detail.issuer_cn or ''}")
            print(f"  Not Before:  {detail.not_before or ''}")
            print(f"  Not After:   {detail.not_after or ''}")
            print(f"  Algorithm:   {detail.signature_algorithm or ''}")
            print()
        print("PEM Certificate:")
        print(certificate.pem_encoded)
        return 0

    if command == "search":
        found = client.search(args.id, args.filter)
        print(f"Search results for '{args.filter}' in {args.id} ({found.result_count} found):\n")
        for item in found.results:
            print(f"  [{item.type or '?'}] {item.name}")
            print(f"      DN: {item.dn}")
            if item.email:
                print(f"      Email: {item.email}")
        return 0

    raise ValueError(f"Unsupported nsx command: {command}")


def _run_server(args: argparse.Namespace) -> int:
    import uvicorn  # noqa: PLC0415

    from ldapmerge.api import create_app  # noqa: PLC0415

    server_config = get_server_config(host=args.host, port=args.port)
    database = open_database(database_path=args.db)
    print(f"Using database: {database.engine.url.database}")
    address = f"{server_config.host}:{server_config.port}"
    print(f"Starting API server on {address}")
    print(f"API documentation available at http://{address}/docs")
    try:
        uvicorn.run(
            create_app(database),
            host=server_config.host,
            port=server_config.port,
            log_config=None,
        )
    finally:
        shutdown(database)
    return 0


def _run_version() -> int:
    print(f"ldapmerge {ldapmerge.__version__}")
    print(f"Python {sys.version.split()[0]}")
    return 0


def _dispatch(args: argparse.Namespace, client_factory: ClientFactory | None) -> int:
    if args.command == "merge":
        return _run_merge(args)
    if args.command == "sync":
        return _run_sync(args, client_factory)
    if args.command == "nsx":
        return _run_nsx(args, client_factory)
    if args.command == "server":
        return _run_server(args)
    if args.command == "version":
        return _run_version()
    raise ValueError(f"Unsupported command: {args.command}")


def main(
    argv: Sequence[str] | None = None,
    *,
    client_factory: ClientFactory | None = None,
) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(
            level=parsed_args.log_level,
            log_dir=parsed_args.log_dir,
            console=parsed_args.log_console,
            json_format=parsed_args.log_format == "json",
            force=True,
        )
    except (ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)

    command = parsed_args.command
    if command == "nsx":
        command = f"nsx.{parsed_args.nsx_command}"
    log.info("Running %s", command, extra={"command": command})

    try:
        exit_code = _dispatch(parsed_args, client_factory)
    except (ValueError, ConfigurationError) as exc:
        log.error(  # noqa: TRY400
            "Invalid input for %s: %s", command, exc, extra={"command": command}
        )
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    except Exception as exc:
        log.exception("Fatal error during %s", command, extra={"command": command})
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
