# common/freebsd/service_manager.py
# -*- coding: utf-8 -*-
import logging
import subprocess
from typing import Optional

from common.command_utils import run_elevated_command
from setup.config_models import AppSettings


class ServiceManager:
    """Marks rc.d services for start at boot through service(8)."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def enable(self, service: str, app_settings: Optional[AppSettings]) -> bool:
        """
        Runs 'service <name> enable', which sets <name>_enable="YES" in rc.conf.

        Returns:
            True if successful, False otherwise.
        """
        try:
            run_elevated_command(
                ["service", service, "enable"],
                app_settings,
                capture_output=True,
                current_logger=self.logger,
            )
            return True
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            self.logger.debug(f"'service {service} enable' failed: {e}")
            return False
