# installer/components/certificates/certificate_issuer.py
# -*- coding: utf-8 -*-
"""
Self-signed X.509 certificates for internal service-to-service TLS.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from common.command_utils import run_elevated_command
from common.errors import CertificateError
from setup.config_models import AppSettings

module_logger = logging.getLogger(__name__)


class CertificateRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    common_name: str = Field(min_length=1)
    alt_names: Tuple[str, ...] = ()
    expiry_days: int = Field(ge=1)

    @property
    def subject_alt_names(self) -> List[str]:
        """The common name first, then the extra names, without duplicates."""
        names = [self.common_name]
        for name in self.alt_names:
            if name not in names:
                names.append(name)
        return names

    def san_extension(self) -> str:
        return ",".join(f"DNS:{name}" for name in self.subject_alt_names)


class CertificatePair(BaseModel):
    model_config = ConfigDict(frozen=True)

    key_path: Path
    cert_path: Path


def certificate_paths(directory: Path, common_name: str) -> CertificatePair:
    return CertificatePair(
        key_path=directory / f"{common_name}.key",
        cert_path=directory / f"{common_name}.crt",
    )


class OpenSSLCertificateIssuer:
    """Issues self-signed certificates with ``openssl req -x509``."""

    def __init__(
        self,
        app_settings: AppSettings,
        logger: Optional[logging.Logger] = None,
        openssl_command: str = "openssl",
    ):
        self.app_settings = app_settings
        self.logger = logger or module_logger
        self.openssl_command = openssl_command

    def subject(self, common_name: str) -> str:
        return (
            f"/C={self.app_settings.cert_country}"
            f"/O={self.app_settings.cert_organization}"
            f"/CN={common_name}"
        )

    def build_command(
        self, request: CertificateRequest, pair: CertificatePair
    ) -> List[str]:
        return [
            self.openssl_command,
            "req",
            "-new",
            "-x509",
            "-sha256",
            "-newkey",
            f"rsa:{self.app_settings.cert_key_bits}",
            "-nodes",
            "-days",
            str(request.expiry_days),
            "-keyout",
            str(pair.key_path),
            "-out",
            str(pair.cert_path),
            "-subj",
            self.subject(request.common_name),
            "-addext",
            f"subjectAltName = {request.san_extension()}",
        ]

    def issue(self, request: CertificateRequest, directory: Path) -> CertificatePair:
        """
        Write ``<cn>.key`` and ``<cn>.crt`` into ``directory``.

        Raises:
            CertificateError: openssl is missing or failed.
        """
        pair = certificate_paths(directory, request.common_name)
        try:
            run_elevated_command(
                self.build_command(request, pair),
                self.app_settings,
                capture_output=True,
                current_logger=self.logger,
                cwd=str(directory),
            )
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            raise CertificateError(
                f"Failed to generate certificate for {request.common_name}: {e}"
            ) from e
        return pair

    def set_owner(self, pair: CertificatePair, user: str, group: str) -> None:
        """
        Raises:
            CertificateError: chown failed.
        """
        try:
            run_elevated_command(
                ["chown", f"{user}:{group}", str(pair.key_path), str(pair.cert_path)],
                self.app_settings,
                current_logger=self.logger,
            )
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            raise CertificateError(
                f"Failed to hand {pair.key_path.name} over to {user}:{group}: {e}"
            ) from e
