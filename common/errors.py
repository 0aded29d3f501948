# common/errors.py
# -*- coding: utf-8 -*-
"""
Exception hierarchy for the setup run.

Every failure the operator has to act on derives from SetupError; the
entry point turns any of them into exit status 1.
"""

from typing import Iterable, List


class SetupError(Exception):
    """Base class for errors that abort the setup run."""


class UsageError(SetupError):
    """Bad, missing or inconsistent command-line arguments."""


class MissingDependencyError(SetupError):
    """Required packages are absent and automatic installation is disabled."""

    def __init__(self, packages: Iterable[str]):
        self.packages: List[str] = list(packages)
        super().__init__(
            f"missing packages: {' '.join(self.packages)}"
        )

    @property
    def install_command(self) -> str:
        return "pkg install " + " ".join(self.packages)


class InstallFailureError(SetupError):
    """A package install attempt failed."""

    def __init__(self, package: str):
        self.package = package
        super().__init__(f"failed to install package '{package}'")


class FilesystemError(SetupError):
    """A directory or file could not be read, created or written."""


class AccountError(SetupError):
    """XMPP account registration failed."""


class CertificateError(SetupError):
    """Self-signed certificate generation failed."""


class TrustStoreError(SetupError):
    """Importing a certificate into the Java trust store failed."""


class TemplateError(SetupError):
    """A configuration template could not be rendered."""


class ConfigurationError(SetupError):
    """Settings from the environment or the YAML file failed validation."""
