# installer/components/certificates/certificates_configurator.py
# -*- coding: utf-8 -*-
"""
Generates the certificates prosody uses for the internal components.

Two pairs are issued on every run:

- <fqdn>: SANs <fqdn>, jitsi-videobridge.<fqdn>, conference.<fqdn>,
  focus.<fqdn>, auth.<fqdn>
- auth.<fqdn>: SAN auth.<fqdn> only; jicofo trusts this one.

Existing pairs are backed up, not compared: a new key is always generated.
"""

import logging
from typing import List, Optional

from common.errors import FilesystemError
from common.file_utils import backup_file
from installer.base_component import BaseComponent
from installer.components.certificates.certificate_issuer import (
    CertificatePair,
    CertificateRequest,
    OpenSSLCertificateIssuer,
    certificate_paths,
)
from installer.context import RunContext
from setup import config as static_config
from setup.config_models import AppSettings


class CertificatesConfigurator(BaseComponent):
    def __init__(
        self,
        app_settings: AppSettings,
        context: RunContext,
        logger: Optional[logging.Logger] = None,
        issuer: Optional[OpenSSLCertificateIssuer] = None,
    ):
        super().__init__(app_settings, context, logger)
        self.issuer = issuer or OpenSSLCertificateIssuer(app_settings, self.logger)

    def requests(self) -> List[CertificateRequest]:
        fqdn = self.run_config.fqdn
        days = self.run_config.cert_expiry_days
        return [
            CertificateRequest(
                common_name=fqdn,
                alt_names=tuple(
                    f"{sub}.{fqdn}" for sub in static_config.INTERNAL_CERT_SUBDOMAINS
                ),
                expiry_days=days,
            ),
            CertificateRequest(
                common_name=self.run_config.auth_domain,
                expiry_days=days,
            ),
        ]

    def apply(self) -> List[CertificatePair]:
        """
        Returns:
            The generated pairs, the bare FQDN first.

        Raises:
            FilesystemError: The certificate directory is missing or a backup failed.
            CertificateError: openssl or chown failed.
        """
        cert_dir = self.app_settings.cert_dir
        if not cert_dir.is_dir():
            raise FilesystemError(
                f"Certificate directory {cert_dir} does not exist. Is prosody installed?"
            )

        pairs = []
        for request in self.requests():
            existing = certificate_paths(cert_dir, request.common_name)
            if self.backup_enabled:
                for path in (existing.key_path, existing.cert_path):
                    backup_file(
                        path, self.backup_timestamp, self.app_settings, self.logger
                    )
            pair = self.issuer.issue(request, cert_dir)
            self.issuer.set_owner(
                pair, self.app_settings.prosody_user, self.app_settings.prosody_group
            )
            self.log(
                f"generated {pair.cert_path} ({', '.join(request.subject_alt_names)})",
                "notice",
            )
            pairs.append(pair)
        return pairs
