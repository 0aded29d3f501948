"""
Base component class for all setup stages.

A component owns one step of the run (packages, config files, accounts,
certificates, trust store, services). It receives the application settings
and the per-run context and performs its work in ``apply()``.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, TextIO

from common.command_utils import log_setup_message
from installer.context import RunContext
from setup.config_models import AppSettings, RunConfig


class BaseComponent(ABC):
    """
    Base class for all setup components.
    """

    def __init__(
        self,
        app_settings: AppSettings,
        context: RunContext,
        logger: Optional[logging.Logger] = None,
        stream: Optional[TextIO] = None,
    ):
        """
        Initialize the component.

        Args:
            app_settings: The application settings.
            context: Run parameters, secrets and backup timestamp.
            logger: Optional logger instance. If not provided, a new logger will be created.
            stream: Where per-entry headers are written (standard error by default).
        """
        self.app_settings = app_settings
        self.context = context
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.stream = stream

    @property
    def run_config(self) -> RunConfig:
        return self.context.run_config

    @property
    def backup_enabled(self) -> bool:
        return self.context.run_config.backup_enabled

    @property
    def backup_timestamp(self) -> str:
        return self.context.backup_timestamp

    def log(self, message: str, level: str = "info") -> None:
        log_setup_message(message, level, self.logger, self.app_settings)

    @abstractmethod
    def apply(self) -> Any:
        """
        Perform the component's work.

        Raises:
            SetupError: On any failure the operator must fix before re-running.
        """
