# installer/components/services/services_configurator.py
# -*- coding: utf-8 -*-
"""
Start-at-boot flags for the Jitsi Meet services.
"""

import logging
from typing import Dict, List, Optional

from common.freebsd.service_manager import ServiceManager
from installer.base_component import BaseComponent
from installer.context import RunContext
from setup import config as static_config
from setup.config_models import AppSettings, RunConfig


def services_for(run_config: RunConfig) -> List[str]:
    """rc.d service names in the order they are enabled and started."""
    return [
        static_config.XMPP_SERVICE,
        run_config.web_server.value,
        static_config.BRIDGE_SERVICE,
        static_config.FOCUS_SERVICE,
    ]


class ServicesConfigurator(BaseComponent):
    """
    Enables every service. One service failing to enable is reported and
    does not keep the remaining ones from being enabled.
    """

    def __init__(
        self,
        app_settings: AppSettings,
        context: RunContext,
        logger: Optional[logging.Logger] = None,
        service_manager: Optional[ServiceManager] = None,
    ):
        super().__init__(app_settings, context, logger)
        self.service_manager = service_manager or ServiceManager(logger=self.logger)

    def apply(self) -> Dict[str, bool]:
        results: Dict[str, bool] = {}
        for service in services_for(self.run_config):
            ok = self.service_manager.enable(service, self.app_settings)
            if ok:
                self.log(f"{service} enabled", "notice")
            else:
                self.log(f"failed to enable {service}", "error")
            results[service] = ok
        return results
