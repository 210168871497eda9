"""CLI argument parsing and main entry point.

Commands map one-to-one onto the :class:`~taemno_os.secrets.store.SecretStore`
facade::

    taemno-os set <service> <account> [secret]
    taemno-os get <service> <account>
    taemno-os delete <service> <account>
    taemno-os exists <service> <account>
    taemno-os resolve [file]
    taemno-os verify [file]

Exit status is 0 on success and 1 on any failure, including a missing
secret for ``exists`` and missing secrets for ``verify``.
"""

from __future__ import annotations

import argparse
import getpass
import json
import logging
import os
import sys
from typing import Any, Dict, List, Mapping, Optional

from taemno_os.config.loader import load_config
from taemno_os.config.schema import TaemnoConfig
from taemno_os.constants import APP_NAME, APP_VERSION
from taemno_os.display.logging_config import setup_logging
from taemno_os.envfile import load_env_file
from taemno_os.errors import TaemnoError
from taemno_os.secrets.store import SecretStore

module_logger = logging.getLogger(__name__)

_EXAMPLES = f"""
Examples:
  {APP_NAME} set service account "my-secret"
  {APP_NAME} get service account
  {APP_NAME} resolve .env
  {APP_NAME} verify

Secret references look like $(taemno os://service/account) by default.
"""


def _load_settings(args: argparse.Namespace) -> TaemnoConfig:
    return load_config(
        args.config,
        env_prefix=args.prefix,
        env_suffix=args.suffix,
        provider=args.provider,
        log_level=args.log_level,
    )


def _build_store(config: TaemnoConfig) -> SecretStore:
    """Composition point: pick the provider for the running platform."""
    return SecretStore.from_config(config)


def _load_env(file: Optional[str]) -> Mapping[str, Any]:
    if file:
        return load_env_file(file)
    return dict(os.environ)


# ── single-secret commands ──────────────────────────────────────────────


def _cmd_set(store: SecretStore, args: argparse.Namespace) -> int:
    secret = args.secret
    if secret is None:
        secret = getpass.getpass(f"Secret for '{args.service}/{args.account}': ")
    store.set(args.service, args.account, secret)
    print(f"Secret stored: {args.service}/{args.account}")
    return 0


def _cmd_get(store: SecretStore, args: argparse.Namespace) -> int:
    print(store.get(args.service, args.account))
    return 0


def _cmd_delete(store: SecretStore, args: argparse.Namespace) -> int:
    if not store.delete(args.service, args.account):
        print(f"Error: Secret not found: {args.service}/{args.account}", file=sys.stderr)
        return 1
    print(f"Secret deleted: {args.service}/{args.account}")
    return 0


def _cmd_exists(store: SecretStore, args: argparse.Namespace) -> int:
    found = store.exists(args.service, args.account)
    print("true" if found else "false")
    return 0 if found else 1


# ── environment commands ────────────────────────────────────────────────


def _cmd_resolve(store: SecretStore, args: argparse.Namespace) -> int:
    resolved: Dict[str, Any] = store.resolve_environment(_load_env(args.file))
    if args.json:
        print(json.dumps(resolved, indent=2))
    else:
        for key, value in resolved.items():
            print(f"{key}={value}")
    return 0


def _cmd_verify(store: SecretStore, args: argparse.Namespace) -> int:
    result = store.verify_environment(_load_env(args.file))
    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif result.success:
        print("All secrets are available")
    else:
        print("Missing secrets:", file=sys.stderr)
        for missing in result.missing_secrets:
            print(f"  {missing.key}: {missing.service}/{missing.account}", file=sys.stderr)
    return 0 if result.success else 1


# ── CLI parser construction ──────────────────────────────────────────────


def _add_pair_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("service", help="Service identifier")
    parser.add_argument("account", help="Account identifier")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser with one subcommand per facade operation."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description=f"{APP_NAME} v{APP_VERSION} - Secure secrets management across operating systems",
        epilog=_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        metavar="PATH",
        help="Path to configuration file (YAML). Default: $TAEMNO_CONFIG or ~/.config/taemno-os/config.yaml",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["debug", "info", "warning", "error", "critical"],
        help="Set stderr logging level (default: warning)",
    )
    parser.add_argument("--prefix", type=str, default=None, help="Secret reference prefix")
    parser.add_argument("--suffix", type=str, default=None, help="Secret reference suffix")
    parser.add_argument(
        "--provider",
        type=str,
        default=None,
        choices=["auto", "keychain", "keyring"],
        help="Secret provider backend (default: auto)",
    )

    subparsers = parser.add_subparsers(dest="command")

    sp_set = subparsers.add_parser("set", help="Store a secret")
    _add_pair_args(sp_set)
    sp_set.add_argument("secret", nargs="?", default=None, help="Secret value (prompted if omitted)")
    sp_set.set_defaults(func=_cmd_set)

    sp_get = subparsers.add_parser("get", help="Retrieve a secret")
    _add_pair_args(sp_get)
    sp_get.set_defaults(func=_cmd_get)

    sp_del = subparsers.add_parser("delete", help="Delete a secret")
    _add_pair_args(sp_del)
    sp_del.set_defaults(func=_cmd_delete)

    sp_exists = subparsers.add_parser("exists", help="Check if a secret exists")
    _add_pair_args(sp_exists)
    sp_exists.set_defaults(func=_cmd_exists)

    sp_resolve = subparsers.add_parser(
        "resolve", help="Resolve secrets in environment variables"
    )
    sp_resolve.add_argument(
        "file", nargs="?", default=None, help="Env file to load (default: process environment)"
    )
    sp_resolve.add_argument("--json", action="store_true", help="Print a JSON object")
    sp_resolve.set_defaults(func=_cmd_resolve)

    sp_verify = subparsers.add_parser("verify", help="Verify all secrets are accessible")
    sp_verify.add_argument(
        "file", nargs="?", default=None, help="Env file to load (default: process environment)"
    )
    sp_verify.add_argument("--json", action="store_true", help="Print a JSON report")
    sp_verify.set_defaults(func=_cmd_verify)

    subparsers.add_parser("help", help="Show this help message")

    return parser


def run(argv: Optional[List[str]] = None) -> int:
    """Parse *argv*, dispatch, and return the exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1
    if args.command == "help":
        parser.print_help()
        return 0

    try:
        config = _load_settings(args)
        setup_logging(config.log_level)
        store = _build_store(config)
        module_logger.debug("Dispatching '%s' with %r", args.command, store)
        return args.func(store, args)
    except TaemnoError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


def main() -> None:
    """Program entry point."""
    sys.exit(run())
