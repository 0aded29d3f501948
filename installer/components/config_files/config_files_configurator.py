# installer/components/config_files/config_files_configurator.py
# -*- coding: utf-8 -*-
"""
Installs the templated configuration files of prosody, jitsi-videobridge,
jicofo, jitsi-meet and the selected web server.
"""

import logging
from pathlib import Path
from typing import List, Optional, TextIO

from common.core_utils import print_item_header
from common.errors import FilesystemError
from common.file_utils import backup_then_write, ensure_directory
from common.template_utils import M4MacroRenderer
from installer.base_component import BaseComponent
from installer.context import RunContext
from installer.manifest import (
    CONFIG_MANIFEST,
    ManifestEntry,
    effective_entries,
    resolve_template_source,
)
from setup.config_models import AppSettings


class ConfigFilesConfigurator(BaseComponent):
    """
    Renders every applicable manifest entry into the destination root.

    Unchanged files are left untouched, so only files whose rendered content
    differs (in practice, those carrying the per-run secrets) are replaced
    and backed up on a repeated run.
    """

    def __init__(
        self,
        app_settings: AppSettings,
        context: RunContext,
        logger: Optional[logging.Logger] = None,
        renderer: Optional[M4MacroRenderer] = None,
        stream: Optional[TextIO] = None,
    ):
        super().__init__(app_settings, context, logger, stream=stream)
        self.renderer = renderer or M4MacroRenderer(app_settings, self.logger)

    def entries(self) -> List[ManifestEntry]:
        return effective_entries(CONFIG_MANIFEST, self.run_config)

    def apply(self) -> List[Path]:
        """
        Returns:
            The destination paths that were created or replaced.

        Raises:
            FilesystemError: The template directory is missing or a
                destination could not be written.
            TemplateError: A template failed to render.
        """
        template_dir = self.app_settings.template_dir
        if not template_dir.is_dir():
            raise FilesystemError(
                f"Template directory {template_dir} does not exist."
            )

        changed: List[Path] = []
        for entry in self.entries():
            print_item_header(
                entry.relative_path,
                delay=self.app_settings.stage_delay,
                stream=self.stream,
            )
            if self._install_entry(entry):
                changed.append(entry.destination(self.app_settings.dest_root))
        return changed

    def _install_entry(self, entry: ManifestEntry) -> bool:
        template_dir = self.app_settings.template_dir
        destination = entry.destination(self.app_settings.dest_root)
        source, is_variant = resolve_template_source(
            entry, template_dir, self.run_config.room_creation_mode
        )

        if (
            source is not None
            and not is_variant
            and source.resolve() == destination.resolve()
        ):
            self.log(
                "Source and destination files are the same. Skipping...",
                "warning",
            )
            return False

        if entry.is_directory:
            return ensure_directory(destination, self.app_settings, self.logger)

        if source is None:
            self.log(
                f"no template for {entry.relative_path} in {template_dir}. Skipping...",
                "warning",
            )
            return False

        if is_variant:
            self.log(f"using {source.name} as template", "debug")

        content = self.renderer.render(
            source,
            self.context.template_macros(),
            sensitive=self.context.secrets.values(),
        )
        return backup_then_write(
            destination,
            content,
            self.backup_enabled,
            self.backup_timestamp,
            self.app_settings,
            self.logger,
            mode_source=source,
        )
