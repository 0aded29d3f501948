# installer/components/prosody/prosody_accounts.py
# -*- coding: utf-8 -*-
"""
XMPP account provisioning through prosodyctl.

The focus component logs into prosody as focus@auth.<fqdn> with a password
generated for this run, so the account is deleted and registered again on
every run. With authenticated room creation an administrative account at
the bare domain is also required; its password is chosen interactively.
"""

import logging
import re
import subprocess
from pathlib import Path
from typing import Optional

from common.command_utils import run_elevated_command
from common.errors import AccountError
from installer.base_component import BaseComponent
from installer.context import RunContext
from setup import config as static_config
from setup.config_models import AppSettings

module_logger = logging.getLogger(__name__)


def encode_prosody_path_component(value: str) -> str:
    """Encode like prosody's datamanager: every non-alphanumeric byte as %xx."""
    return re.sub(
        r"[^A-Za-z0-9]", lambda m: "%{:02x}".format(ord(m.group())), value
    )


class ProsodyAccountRegistry:
    """Registers, removes and looks up prosody accounts."""

    def __init__(
        self,
        app_settings: AppSettings,
        logger: Optional[logging.Logger] = None,
    ):
        self.app_settings = app_settings
        self.logger = logger or module_logger

    def account_data_path(self, username: str, host: str) -> Path:
        return (
            self.app_settings.prosody_data_dir
            / encode_prosody_path_component(host)
            / "accounts"
            / f"{encode_prosody_path_component(username)}.dat"
        )

    def exists(self, username: str, host: str) -> bool:
        return self.account_data_path(username, host).is_file()

    def delete(self, username: str, host: str) -> bool:
        """
        Remove an account; a missing account is not an error.

        Raises:
            AccountError: prosodyctl could not be run at all.
        """
        try:
            result = run_elevated_command(
                ["prosodyctl", "deluser", f"{username}@{host}"],
                self.app_settings,
                check=False,
                capture_output=True,
                current_logger=self.logger,
            )
        except FileNotFoundError as e:
            raise AccountError(
                f"Failed to delete {username}@{host}: {e}"
            ) from e
        return result.returncode == 0

    def register(self, username: str, host: str, password: str) -> None:
        """
        Raises:
            AccountError: prosodyctl failed.
        """
        try:
            run_elevated_command(
                ["prosodyctl", "register", username, host, password],
                self.app_settings,
                capture_output=True,
                current_logger=self.logger,
                redact=[password],
            )
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            raise AccountError(
                f"Failed to register {username}@{host}: {e}"
            ) from e

    def add_interactive(self, username: str, host: str) -> None:
        """
        Create an account, letting prosodyctl prompt for the password.

        Raises:
            AccountError: prosodyctl failed.
        """
        try:
            run_elevated_command(
                ["prosodyctl", "adduser", f"{username}@{host}"],
                self.app_settings,
                current_logger=self.logger,
            )
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            raise AccountError(
                f"Failed to create {username}@{host}: {e}"
            ) from e


class AccountsConfigurator(BaseComponent):
    def __init__(
        self,
        app_settings: AppSettings,
        context: RunContext,
        logger: Optional[logging.Logger] = None,
        registry: Optional[ProsodyAccountRegistry] = None,
    ):
        super().__init__(app_settings, context, logger)
        self.registry = registry or ProsodyAccountRegistry(
            app_settings, self.logger
        )

    def apply(self) -> None:
        self.register_focus_user()
        if self.run_config.requires_authentication:
            self.ensure_admin_user()

    def register_focus_user(self) -> None:
        username = static_config.FOCUS_USERNAME
        host = self.run_config.auth_domain
        if self.registry.delete(username, host):
            self.log(f"removed previous account {username}@{host}", "notice")
        self.registry.register(
            username, host, self.context.secrets.focus_user_secret
        )
        self.log(f"registered {username}@{host}", "notice")

    def ensure_admin_user(self) -> None:
        username = self.app_settings.admin_username
        host = self.run_config.fqdn
        if self.registry.exists(username, host):
            self.log(f"account {username}@{host} already exists")
            return
        self.log(
            f"creating {username}@{host}; enter its password when prompted",
            "notice",
        )
        self.registry.add_interactive(username, host)
