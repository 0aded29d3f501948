# installer/components/packages/packages_installer.py
# -*- coding: utf-8 -*-
"""
Package set preparation and required package checks.

Two steps run under separate banners:

1. prepare_package_set(): install the bundled pkg(8) repository
   configuration (directories and FreeBSD.conf) under the destination root.
2. ensure_packages(): query each required package. Missing packages are
   either installed on the spot (-p) or collected and reported together.
"""

import logging
from typing import List, Optional, TextIO

from common.core_utils import print_item_header
from common.errors import InstallFailureError, MissingDependencyError
from common.file_utils import backup_then_write, ensure_directory
from common.freebsd.pkg_manager import PkgManager
from installer.base_component import BaseComponent
from installer.context import RunContext
from installer.manifest import (
    PRE_CONFIG_MANIFEST,
    effective_entries,
    effective_packages,
)
from setup.config_models import AppSettings


class PackagesInstaller(BaseComponent):
    """
    Ensures pkg is pointed at the right repository and every required
    package of the stack is present.
    """

    def __init__(
        self,
        app_settings: AppSettings,
        context: RunContext,
        logger: Optional[logging.Logger] = None,
        pkg_manager: Optional[PkgManager] = None,
        stream: Optional[TextIO] = None,
    ):
        super().__init__(app_settings, context, logger, stream=stream)
        self._pkg_manager = pkg_manager

    @property
    def pkg_manager(self) -> PkgManager:
        if self._pkg_manager is None:
            self._pkg_manager = PkgManager(logger=self.logger)
        return self._pkg_manager

    def apply(self) -> List[str]:
        self.prepare_package_set()
        return self.ensure_packages()

    def prepare_package_set(self) -> int:
        """
        Install the bundled pkg repository configuration.

        Returns:
            Number of files or directories changed.
        """
        changed = 0
        template_dir = self.app_settings.template_dir
        dest_root = self.app_settings.dest_root
        for entry in effective_entries(PRE_CONFIG_MANIFEST, self.run_config):
            print_item_header(
                entry.relative_path,
                delay=self.app_settings.stage_delay,
                stream=self.stream,
            )
            destination = entry.destination(dest_root)
            if entry.is_directory:
                changed += ensure_directory(
                    destination, self.app_settings, self.logger
                )
                continue

            source = entry.source(template_dir)
            if not source.is_file():
                self.log(
                    f"bundled file {source} not found. Skipping...", "warning"
                )
                continue
            changed += backup_then_write(
                destination,
                source.read_bytes(),
                self.backup_enabled,
                self.backup_timestamp,
                self.app_settings,
                self.logger,
                mode_source=source,
            )
        return changed

    def ensure_packages(self) -> List[str]:
        """
        Check every required package, installing it when allowed.

        Returns:
            The packages that were installed during this run.

        Raises:
            InstallFailureError: An install attempt failed; raised at once.
            MissingDependencyError: Packages are missing and installing them
                was not requested; raised after all packages were checked.
        """
        install_missing = self.run_config.install_missing_packages
        if install_missing:
            self.pkg_manager.update(self.app_settings)

        missing: List[str] = []
        installed_now: List[str] = []
        for package in effective_packages(self.run_config):
            pkg_info = self.pkg_manager.query(package, self.app_settings)
            if pkg_info:
                self.log(f"{pkg_info} installed")
                continue

            if not install_missing:
                self.log(f"{package} not found.", "error")
                missing.append(package)
                continue

            self.log(f"{package} not found. Installing...", "notice")
            if not self.pkg_manager.install(package, self.app_settings):
                self.log(f"installing {package} failed", "error")
                raise InstallFailureError(package)
            self.log(f"{package} installed", "notice")
            installed_now.append(package)

        if missing:
            raise MissingDependencyError(missing)
        return installed_now
