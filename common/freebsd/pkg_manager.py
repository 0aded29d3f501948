# common/freebsd/pkg_manager.py
# -*- coding: utf-8 -*-
import logging
import subprocess
from typing import Optional

from common.command_utils import (
    command_exists,
    run_command,
    run_elevated_command,
)
from common.errors import FilesystemError
from setup.config_models import AppSettings


class PkgManager:
    """
    A thin wrapper around FreeBSD's pkg(8) for querying and installing
    binary packages.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initializes the PkgManager.
        Args:
            logger: An optional logging object.
        """
        self.logger = logger or logging.getLogger(__name__)
        if not command_exists("pkg"):
            self.logger.critical(
                "'pkg' command not found. This manager cannot function."
            )
            raise FilesystemError(
                "pkg(8) is not available on this host; "
                "packages can be neither queried nor installed."
            )

    def query(
        self, package: str, app_settings: Optional[AppSettings]
    ) -> Optional[str]:
        """
        Looks up an installed package.

        Args:
            package: The package name, e.g. "jitsi-meet".
            app_settings: The application settings.

        Returns:
            "<name>-<version>" when installed, None otherwise.
        """
        try:
            result = run_command(
                ["pkg", "query", "%n-%v", package],
                app_settings,
                check=True,
                capture_output=True,
                current_logger=self.logger,
            )
        except subprocess.CalledProcessError:
            return None
        return result.stdout.strip() or None

    def update(self, app_settings: Optional[AppSettings]) -> bool:
        """
        Refreshes the repository catalogues with 'pkg update'.

        Returns:
            True if successful, False otherwise.
        """
        self.logger.debug("Updating pkg repository catalogues...")
        try:
            run_elevated_command(
                ["pkg", "update"],
                app_settings,
                capture_output=True,
                current_logger=self.logger,
            )
            return True
        except subprocess.CalledProcessError as e:
            self.logger.warning(f"Failed to update pkg catalogues: {e}")
            return False

    def install(self, package: str, app_settings: Optional[AppSettings]) -> bool:
        """
        Installs a single package non-interactively.

        Args:
            package: The package name.
            app_settings: The application settings.

        Returns:
            True if successful, False otherwise.
        """
        try:
            run_elevated_command(
                ["pkg", "install", "-y", package],
                app_settings,
                capture_output=True,
                current_logger=self.logger,
            )
            return True
        except subprocess.CalledProcessError as e:
            self.logger.debug(f"'pkg install {package}' failed: {e}")
            return False
