# common/template_utils.py
# -*- coding: utf-8 -*-
"""
Rendering of macro-templated configuration files.

Templates use m4 macros: every occurrence of a defined name such as
SERVER_FQDN is replaced by its value. Rendering is deterministic for
identical inputs.
"""

import logging
import subprocess
from pathlib import Path
from typing import Mapping, Optional, Sequence

from common.command_utils import run_command
from common.errors import TemplateError
from setup.config_models import AppSettings

module_logger = logging.getLogger(__name__)


class M4MacroRenderer:
    """Renders a template by running m4(1) with ``-DNAME=value`` definitions."""

    def __init__(
        self,
        app_settings: Optional[AppSettings] = None,
        logger: Optional[logging.Logger] = None,
        m4_command: str = "m4",
    ):
        self.app_settings = app_settings
        self.logger = logger or module_logger
        self.m4_command = m4_command

    def build_command(
        self, template_path: Path, macros: Mapping[str, str]
    ) -> list:
        defines = [f"-D{name}={value}" for name, value in macros.items()]
        return [self.m4_command, *defines, str(template_path)]

    def render(
        self,
        template_path: Path,
        macros: Mapping[str, str],
        sensitive: Optional[Sequence[str]] = None,
    ) -> bytes:
        """
        Render ``template_path`` and return the output bytes.

        Raises:
            TemplateError: m4 is missing or exited non-zero.
        """
        try:
            result = run_command(
                self.build_command(template_path, macros),
                self.app_settings,
                check=True,
                capture_output=True,
                text=False,
                current_logger=self.logger,
                redact=sensitive,
                log_output=False,
            )
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or b"").decode(errors="replace").strip()
            raise TemplateError(
                f"m4 failed to render {template_path} (rc {e.returncode}): {stderr}"
            ) from e
        except FileNotFoundError as e:
            raise TemplateError(
                f"'{self.m4_command}' not found; cannot render {template_path}"
            ) from e
        return result.stdout
