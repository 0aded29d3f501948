# setup/cli_handler.py
# -*- coding: utf-8 -*-
"""
Handles Command Line Interface (CLI) interactions for the Jitsi Meet setup.

Parsing happens in two steps: ``parse_arguments`` validates the argument
vector (any problem becomes a UsageError, nothing else happens), and
``build_run_config`` turns the namespace into the immutable RunConfig once
the application settings are known.
"""

import argparse
import logging
from typing import List, NoReturn, Optional, Sequence

from pydantic import ValidationError

from common.command_utils import log_setup_message
from common.errors import UsageError
from setup import config as static_config
from setup.config_models import (
    AppSettings,
    NatAddresses,
    RoomCreationMode,
    RunConfig,
    WebServer,
)

module_logger = logging.getLogger(__name__)

USAGE = (
    "%(prog)s [-aBprv] [-c CONFIG] [-N LOCAL:PUBLIC] [-e DAYS] "
    "FQDN CERT_PATH KEY_PATH"
)

# (namespace attribute, message when the argument is missing or empty)
POSITIONAL_HINTS = [
    ("fqdn", "Please specify SERVER_FQDN (e.g. jitsi.example.com)."),
    (
        "cert_path",
        "Please specify SERVER_CERT_PATH "
        "(e.g. /usr/local/etc/letsencrypt/live/jitsi.example.com/fullchain.pem).",
    ),
    (
        "key_path",
        "Please specify SERVER_KEY_PATH "
        "(e.g. /usr/local/etc/letsencrypt/live/jitsi.example.com/privkey.pem).",
    ),
]

NAT_HINT = "Please specify LOCAL:PUBLIC for NAT (e.g. -N 192.168.10.5:10.10.10.5)"


class SetupArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises UsageError instead of exiting with status 2."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(message)


def parse_nat_addresses(value: str) -> NatAddresses:
    """
    Split ``LOCAL:PUBLIC``: local is the text before the first colon,
    public the text after the last one.
    """
    if ":" not in value:
        raise argparse.ArgumentTypeError(NAT_HINT)
    local = value.split(":", 1)[0]
    public = value.rsplit(":", 1)[1]
    if not local or not public:
        raise argparse.ArgumentTypeError(NAT_HINT)
    try:
        return NatAddresses(local_ipv4=local, public_ipv4=public)
    except ValidationError as e:
        raise argparse.ArgumentTypeError(
            f"{NAT_HINT}: '{value}' is not a pair of IPv4 addresses"
        ) from e


def build_parser() -> SetupArgumentParser:
    parser = SetupArgumentParser(
        prog=static_config.PROG_NAME,
        usage=USAGE,
        description="Install and configure Jitsi Meet on FreeBSD.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-a",
        dest="apache",
        action="store_true",
        help="use apache web server instead of nginx",
    )
    parser.add_argument(
        "-B",
        dest="no_backup",
        action="store_true",
        help="do not back up files before replacing them",
    )
    parser.add_argument(
        "-p",
        dest="install_packages",
        action="store_true",
        help="install missing packages instead of exiting with an error",
    )
    parser.add_argument(
        "-r",
        dest="require_auth",
        action="store_true",
        help="require authentication for room creation "
        "(without this flag, any user can create a room)",
    )
    parser.add_argument(
        "-N",
        dest="nat",
        metavar="LOCAL:PUBLIC",
        type=parse_nat_addresses,
        help="local/public IPv4 addresses when using jitsi-meet behind a NAT",
    )
    parser.add_argument(
        "-e",
        dest="expiry_days",
        metavar="DAYS",
        type=int,
        help="validity of the internal certificates in days (default: 365)",
    )
    parser.add_argument(
        "-c",
        dest="config_file",
        metavar="CONFIG",
        help=f"YAML settings file (default: {static_config.CONFIG_FILE_DEFAULT})",
    )
    parser.add_argument(
        "-v",
        dest="verbose",
        action="store_true",
        help="log external commands and other debug output",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {static_config.SCRIPT_VERSION}",
    )
    for name, _ in POSITIONAL_HINTS:
        parser.add_argument(name, nargs="?", metavar=name.upper())
    return parser


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Raises:
        UsageError: Unknown flag, bad option value, or a missing/empty
            positional argument.
    """
    args = build_parser().parse_args(argv)
    for name, hint in POSITIONAL_HINTS:
        if not getattr(args, name):
            raise UsageError(hint)
    return args


def build_run_config(
    args: argparse.Namespace,
    app_settings: AppSettings,
    current_logger: Optional[logging.Logger] = None,
) -> RunConfig:
    """Certificate validity of zero or less falls back to the configured default."""
    logger_to_use = current_logger if current_logger else module_logger

    expiry_days = app_settings.default_cert_expiry_days
    if args.expiry_days is not None:
        if args.expiry_days > 0:
            expiry_days = args.expiry_days
        else:
            log_setup_message(
                f"ignoring certificate validity of {args.expiry_days} days; "
                f"using {expiry_days}",
                "warning",
                logger_to_use,
                app_settings,
            )

    try:
        return RunConfig(
            fqdn=args.fqdn,
            cert_path=args.cert_path,
            key_path=args.key_path,
            web_server=WebServer.APACHE if args.apache else WebServer.NGINX,
            backup_enabled=not args.no_backup,
            install_missing_packages=args.install_packages,
            room_creation_mode=(
                RoomCreationMode.AUTHENTICATED
                if args.require_auth
                else RoomCreationMode.ANONYMOUS
            ),
            nat=args.nat,
            cert_expiry_days=expiry_days,
        )
    except ValidationError as e:
        raise UsageError(f"Invalid arguments: {e}") from e


def usage_text() -> str:
    return build_parser().format_help()


def describe_run(
    run_config: RunConfig,
    app_settings: AppSettings,
    current_logger: Optional[logging.Logger] = None,
) -> List[str]:
    """Log the effective run parameters at debug level."""
    logger_to_use = current_logger if current_logger else module_logger
    nat = run_config.nat
    lines = [
        f"Server FQDN:           {run_config.fqdn}",
        f"Server certificate:    {run_config.cert_path}",
        f"Server key:            {run_config.key_path}",
        f"Web server:            {run_config.web_server.value}",
        f"Room creation:         {run_config.room_creation_mode.value}",
        f"NAT:                   {f'{nat.local_ipv4} -> {nat.public_ipv4}' if nat else 'no'}",
        f"Backups:               {'yes' if run_config.backup_enabled else 'no'}",
        f"Install packages:      {'yes' if run_config.install_missing_packages else 'no'}",
        f"Certificate validity:  {run_config.cert_expiry_days} days",
        f"Template directory:    {app_settings.template_dir}",
        f"Destination root:      {app_settings.dest_root}",
    ]
    for line in lines:
        log_setup_message(line, "debug", logger_to_use, app_settings)
    return lines
