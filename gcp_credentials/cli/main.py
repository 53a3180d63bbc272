"""CLI entrypoint for gcp-credentials."""
import sys
import argparse
import logging

from .validators import validate_secret_name, validate_label_filter

VERSION = "0.1.0"

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        stream=sys.stderr,
        force=True,
    )


def _format_value(value) -> str:
    """Render a resolved credential value for printing."""
    from gcp_credentials.credentials.domains.models import KeyStore, Secret

    if isinstance(value, Secret):
        return value.get_plain_text()
    if isinstance(value, KeyStore):
        if not len(value):
            return "(empty key store)"
        return "\n".join(f"{alias}\t{kind}" for alias, kind in value.entries)
    if isinstance(value, list):
        return "\n".join(value)
    return str(value)


def cmd_version(args):
    """Show version information."""
    print(f"gcp-credentials {VERSION}")


def cmd_config_show(args):
    """Show current config file path."""
    from gcp_credentials.credentials.domains.config_loader import get_config_location

    config_path, source = get_config_location()
    if config_path.exists():
        print(f"Config path: {config_path}")
        print(f"Source: {source}")
    else:
        print(f"Config path: {config_path}")
        print(f"Source: {source} (file not found)")


def cmd_credentials_get(args):
    """Resolve one credential shape from a secret."""
    from gcp_credentials.credentials.workflows.credential_operations import resolve_credential

    validate_secret_name(args.secret_name)
    result = resolve_credential(args.secret_name, args.shape, args.project_id, quiet=args.quiet)

    if not result.ok:
        print(f"Error: Secret '{args.secret_name}' cannot be used as {args.shape}: {result.error.message}",
              file=sys.stderr)
        sys.exit(1)

    output = _format_value(result.value)
    if args.quiet:
        print(output)
    else:
        print(f"Credential '{args.secret_name}' ({args.shape}):")
        print(output)
    sys.exit(0)


def cmd_credentials_list(args):
    """List secrets available as credentials."""
    from gcp_credentials.credentials.workflows.credential_operations import list_credentials

    if args.filter:
        validate_label_filter(args.filter)
    for name in list_credentials(args.project_id, label_filter=args.filter):
        print(name)


def build_parser():
    from gcp_credentials.credentials.domains.resolver import SHAPES

    parser = argparse.ArgumentParser(
        prog="gcp-credentials",
        description="Use GCP Secret Manager secrets as string, username/password, SSH key or certificate credentials",
        epilog="""
Exit codes:
  0 - Success
  1 - Runtime error (secret not found, credential unavailable, configuration, etc.)
  2 - Usage error (invalid arguments, invalid secret name format, etc.)

Environment variables:
  GCP_PROJECT            - GCP project ID (overrides config file)
  GCP_CREDENTIALS_CONFIG - Path to config file

Configuration:
  Default location: ~/.config/gcp-credentials/config.yml
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging to stderr"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "version",
        help="Show version information",
        description="Display the current version of gcp-credentials"
    )

    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Inspect gcp-credentials configuration"
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")
    config_subparsers.add_parser(
        "show",
        help="Show current config path",
        description="""
Display the configuration file path and its source.

Sources:
  - env: Path set via GCP_CREDENTIALS_CONFIG
  - default: Default XDG location (~/.config/gcp-credentials/config.yml)
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    credentials_parser = subparsers.add_parser(
        "credentials",
        help="Credential operations",
        description="Resolve credentials from secrets in GCP Secret Manager"
    )
    credentials_subparsers = credentials_parser.add_subparsers(dest="credentials_command")

    get_parser = credentials_subparsers.add_parser(
        "get",
        help="Resolve a credential from a secret",
        description="""
Fetch a secret and print it as the requested credential shape.

Shapes:
  secret      - the text secret
  username    - value of the 'jenkins:credentials:username' tag
  password    - the text secret if a username tag is set, otherwise empty
  passphrase  - always empty (private keys are unencrypted)
  private-key - the text secret if it is a PEM or OpenSSH private key
  keystore    - entries of a binary PKCS#12 secret with an empty password

Exit codes:
  0 - Credential resolved and printed
  1 - Secret not found, or the secret cannot be used as the requested shape
  2 - Invalid secret name format
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    get_parser.add_argument(
        "secret_name",
        help="Name of the secret (format: [a-zA-Z0-9_-]+)"
    )
    get_parser.add_argument(
        "--shape",
        choices=list(SHAPES),
        default="secret",
        help="Credential shape to resolve (default: secret)"
    )
    get_parser.add_argument(
        "--project-id",
        help="GCP project ID (auto-detected from GCP_PROJECT env var or config file if not provided)"
    )
    get_parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Output only the credential value"
    )

    list_parser = credentials_subparsers.add_parser(
        "list",
        help="List secrets",
        description="List the secrets in the project that can be used as credentials"
    )
    list_parser.add_argument(
        "--project-id",
        help="GCP project ID (auto-detected from GCP_PROJECT env var or config file if not provided)"
    )
    list_parser.add_argument(
        "--filter",
        help="Only list secrets matching a label filter, e.g. labels.team=ci"
    )

    return parser, {"config": config_parser, "credentials": credentials_parser}


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (secret not found, credential unavailable, etc.)
        2 - Usage errors (invalid arguments, invalid secret name format, etc.)
    """
    parser, subparsers = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if not args.command:
        parser.print_help()
        sys.exit(2)

    try:
        if args.command == "version":
            cmd_version(args)
        elif args.command == "config":
            if args.config_command == "show":
                cmd_config_show(args)
            else:
                subparsers["config"].print_help()
                sys.exit(2)
        elif args.command == "credentials":
            if args.credentials_command == "get":
                cmd_credentials_get(args)
            elif args.credentials_command == "list":
                cmd_credentials_list(args)
            else:
                subparsers["credentials"].print_help()
                sys.exit(2)
        else:
            parser.print_help()
            sys.exit(2)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
