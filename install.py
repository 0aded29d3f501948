#!/usr/bin/env python3
# filename: freebsd-jitsi-setup/install.py
# -*- coding: utf-8 -*-
"""
Entry point for the FreeBSD Jitsi Meet setup.

usage: install.py [-aBprv] [-c CONFIG] [-N LOCAL:PUBLIC] [-e DAYS]
                  FQDN CERT_PATH KEY_PATH

Stages run once, in order, each under its own banner on standard error.
Any SetupError stops the run with exit status 1; side effects of the
stages that already finished are left in place.
"""

import logging
import sys
from typing import Any, Dict, List, Optional, TextIO

from common.command_utils import log_setup_message
from common.core_utils import echo_err, setup_logging
from common.errors import MissingDependencyError, SetupError, UsageError
from common.orchestrator import Orchestrator
from installer.components.certificates.certificates_configurator import (
    CertificatesConfigurator,
)
from installer.components.config_files.config_files_configurator import (
    ConfigFilesConfigurator,
)
from installer.components.jicofo.truststore import TrustStoreConfigurator
from installer.components.packages.packages_installer import PackagesInstaller
from installer.components.prosody.prosody_accounts import AccountsConfigurator
from installer.components.services.services_configurator import (
    ServicesConfigurator,
)
from installer.components.services.summary import print_summary
from installer.context import RunContext, generate_secrets
from setup.cli_handler import (
    build_run_config,
    describe_run,
    parse_arguments,
    usage_text,
)
from setup.config_loader import load_app_settings
from setup.config_models import AppSettings

logger = logging.getLogger("jitsi_setup")

STAGE_PREPARE_PACKAGES = "Preparing latest package set"
STAGE_CHECK_PACKAGES = "Checking if the required packages/ports have been installed."
STAGE_CONFIG_FILES = "Installing custom config files"
STAGE_ACCOUNTS = "Registering XMPP accounts"
STAGE_CERTIFICATES = "Generating certificates used by internal processes"
STAGE_TRUSTSTORE = "Importing the internal certificate into the jicofo trust store"
STAGE_SERVICES = "Enabling services"
STAGE_FINISHED = "Finished!"


def build_orchestrator(
    app_settings: AppSettings,
    context: RunContext,
    stream: Optional[TextIO] = None,
    pkg_manager: Any = None,
    renderer: Any = None,
    account_registry: Any = None,
    cert_issuer: Any = None,
    trust_store: Any = None,
    service_manager: Any = None,
) -> Orchestrator:
    """
    Wire every component into an Orchestrator. Collaborators left as None
    are the real host tools (pkg, m4, prosodyctl, openssl, keytool, service).
    """
    packages = PackagesInstaller(
        app_settings, context, pkg_manager=pkg_manager, stream=stream
    )
    config_files = ConfigFilesConfigurator(
        app_settings, context, renderer=renderer, stream=stream
    )
    accounts = AccountsConfigurator(
        app_settings, context, registry=account_registry
    )
    certificates = CertificatesConfigurator(
        app_settings, context, issuer=cert_issuer
    )
    truststore = TrustStoreConfigurator(
        app_settings, context, trust_store=trust_store
    )
    services = ServicesConfigurator(
        app_settings, context, service_manager=service_manager
    )

    orchestrator = Orchestrator(app_settings, logger, stream=stream)
    orchestrator.add_task(STAGE_PREPARE_PACKAGES, packages.prepare_package_set)
    orchestrator.add_task(STAGE_CHECK_PACKAGES, packages.ensure_packages)
    orchestrator.add_task(STAGE_CONFIG_FILES, config_files.apply)
    orchestrator.add_task(STAGE_ACCOUNTS, accounts.apply)
    orchestrator.add_task(STAGE_CERTIFICATES, certificates.apply)
    orchestrator.add_task(STAGE_TRUSTSTORE, truststore.apply)
    orchestrator.add_task(STAGE_SERVICES, services.apply)
    orchestrator.add_task(
        STAGE_FINISHED,
        print_summary,
        args=[context.run_config],
        kwargs={"stream": stream},
    )
    return orchestrator


def report_missing_packages(
    error: MissingDependencyError, stream: Optional[TextIO] = None
) -> None:
    echo_err(
        "ERROR: please install the missing packages.",
        "",
        f"    {error.install_command}",
        "",
        stream=stream,
    )


def _console_level(app_settings: AppSettings) -> int:
    level = logging.getLevelName(app_settings.log_level)
    return level if isinstance(level, int) else logging.INFO


def main(
    argv: Optional[List[str]] = None,
    stream: Optional[TextIO] = None,
    collaborators: Optional[Dict[str, Any]] = None,
) -> int:
    """
    Run the whole setup.

    Args:
        argv: Arguments without the program name; ``sys.argv[1:]`` when None.
        stream: Where banners and the summary go (standard error when None).
        collaborators: Optional replacements for the host tools, passed on
            to ``build_orchestrator``.

    Returns:
        0 on success, 1 on any usage, dependency or provisioning error.
    """
    try:
        args = parse_arguments(argv)
    except UsageError as e:
        echo_err(str(e), usage_text().rstrip("\n"), stream=stream)
        return 1

    try:
        app_settings = load_app_settings(args, current_logger=logger)
    except SetupError as e:
        echo_err(f"ERROR: {e}", stream=stream)
        return 1

    setup_logging(
        log_level=_console_level(app_settings),
        log_file=str(app_settings.log_file) if app_settings.log_file else None,
        log_prefix=app_settings.log_prefix,
        symbols=app_settings.symbols,
    )

    try:
        run_config = build_run_config(args, app_settings, logger)
    except UsageError as e:
        echo_err(str(e), usage_text().rstrip("\n"), stream=stream)
        return 1

    describe_run(run_config, app_settings, logger)
    context = RunContext(
        run_config=run_config,
        secrets=generate_secrets(app_settings.secret_bytes),
    )
    orchestrator = build_orchestrator(
        app_settings, context, stream=stream, **(collaborators or {})
    )

    try:
        orchestrator.run()
    except MissingDependencyError as e:
        report_missing_packages(e, stream=stream)
        return 1
    except SetupError as e:
        log_setup_message(str(e), "error", logger, app_settings)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
