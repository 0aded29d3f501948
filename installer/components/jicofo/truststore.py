# installer/components/jicofo/truststore.py
# -*- coding: utf-8 -*-
"""
Jicofo trust store handling.

jicofo talks to prosody over TLS and must trust the self-signed
auth.<fqdn> certificate, which is imported into a JKS file with keytool.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from common.command_utils import run_elevated_command
from common.errors import TrustStoreError
from common.file_utils import backup_file
from installer.base_component import BaseComponent
from installer.components.certificates.certificate_issuer import certificate_paths
from installer.context import RunContext
from setup.config_models import AppSettings

module_logger = logging.getLogger(__name__)


class KeytoolTrustStore:
    """A Java keystore file managed through keytool(1)."""

    def __init__(
        self,
        path: Path,
        password: str,
        app_settings: Optional[AppSettings] = None,
        logger: Optional[logging.Logger] = None,
        keytool_command: str = "keytool",
    ):
        self.path = path
        self.password = password
        self.app_settings = app_settings
        self.logger = logger or module_logger
        self.keytool_command = keytool_command

    def exists(self) -> bool:
        return self.path.is_file()

    def _base_command(self, action: str, alias: str) -> List[str]:
        return [
            self.keytool_command,
            action,
            "-noprompt",
            "-keystore",
            str(self.path),
            "-alias",
            alias,
            "-storepass",
            self.password,
        ]

    def delete(self, alias: str) -> bool:
        """Remove ``alias``; returns False when keytool refused (e.g. no such alias)."""
        try:
            result = run_elevated_command(
                self._base_command("-delete", alias),
                self.app_settings,
                check=False,
                capture_output=True,
                current_logger=self.logger,
                redact=[self.password],
            )
        except FileNotFoundError as e:
            raise TrustStoreError(f"keytool is not available: {e}") from e
        return result.returncode == 0

    def import_cert(self, alias: str, cert_file: Path) -> None:
        """
        Raises:
            TrustStoreError: keytool is missing or the import failed.
        """
        command = self._base_command("-importcert", alias) + ["-file", str(cert_file)]
        try:
            run_elevated_command(
                command,
                self.app_settings,
                capture_output=True,
                current_logger=self.logger,
                redact=[self.password],
            )
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            raise TrustStoreError(
                f"Failed to import {cert_file} into {self.path}: {e}"
            ) from e


class TrustStoreConfigurator(BaseComponent):
    def __init__(
        self,
        app_settings: AppSettings,
        context: RunContext,
        logger: Optional[logging.Logger] = None,
        trust_store: Optional[KeytoolTrustStore] = None,
    ):
        super().__init__(app_settings, context, logger)
        self.trust_store = trust_store or KeytoolTrustStore(
            app_settings.truststore_path,
            app_settings.truststore_password,
            app_settings,
            self.logger,
        )

    def auth_certificate(self) -> Path:
        return certificate_paths(
            self.app_settings.cert_dir, self.run_config.auth_domain
        ).cert_path

    def apply(self) -> Path:
        """
        Returns:
            The trust store path.

        Raises:
            TrustStoreError: The import failed.
            FilesystemError: The backup could not be made.
        """
        alias = self.app_settings.truststore_alias
        store_path = self.trust_store.path
        if self.trust_store.exists():
            if self.backup_enabled:
                backup_file(
                    store_path, self.backup_timestamp, self.app_settings, self.logger
                )
            if self.trust_store.delete(alias):
                self.log(f"removed alias '{alias}' from {store_path}", "notice")
            else:
                self.log(f"alias '{alias}' not present in {store_path}", "debug")
        else:
            self.log(f"creating {store_path}", "notice")

        self.trust_store.import_cert(alias, self.auth_certificate())
        self.log(f"imported {self.auth_certificate()} as '{alias}' into {store_path}", "notice")
        return store_path
