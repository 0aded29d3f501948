# common/file_utils.py
# -*- coding: utf-8 -*-
"""
File system utility functions: timestamped backups and compare-then-write
reconciliation of installed files.

Every installed file goes through the same three steps:

    needs_update(path, content)      -> bool
    backup_file(path, timestamp)     -> sibling copy "<path>.<timestamp>"
    backup_then_write(path, content) -> atomic replace via "<path>.tmp"
"""

import datetime
import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from common.command_utils import log_setup_message
from common.errors import FilesystemError
from setup.config_models import AppSettings

module_logger = logging.getLogger(__name__)

BACKUP_TIMESTAMP_FORMAT = "%Y-%m-%d_%H:%M:%S"
TMP_SUFFIX = ".tmp"


def make_backup_timestamp(now: Optional[datetime.datetime] = None) -> str:
    """Return the backup suffix for this run, e.g. ``2026-10-19_14:03:59``."""
    return (now or datetime.datetime.now()).strftime(BACKUP_TIMESTAMP_FORMAT)


def backup_path_for(file_path: Path, timestamp: str) -> Path:
    return file_path.with_name(f"{file_path.name}.{timestamp}")


def backup_file(
    file_path: Path,
    timestamp: str,
    app_settings: Optional[AppSettings],
    current_logger: Optional[logging.Logger] = None,
) -> Optional[Path]:
    """
    Copy ``file_path`` to ``<file_path>.<timestamp>``, preserving mode and times.

    Parameters:
        file_path (Path): The file to back up.
        timestamp (str): Backup suffix shared by every backup of the run.
        app_settings (Optional[AppSettings]): Application settings.
        current_logger (Optional[logging.Logger]): Logger to use.

    Returns:
        Optional[Path]: The backup path, or None if there was nothing to back up.

    Raises:
        FilesystemError: The copy failed.
    """
    logger_to_use = current_logger if current_logger else module_logger

    if not file_path.is_file():
        log_setup_message(
            f"{file_path} does not exist or is not a regular file. No backup needed.",
            "debug",
            logger_to_use,
            app_settings,
        )
        return None

    backup_path = backup_path_for(file_path, timestamp)
    log_setup_message(
        f"backup {backup_path}", "notice", logger_to_use, app_settings
    )
    try:
        shutil.copy2(file_path, backup_path)
    except OSError as e:
        raise FilesystemError(
            f"Failed to backup {file_path} to {backup_path}: {e}"
        ) from e
    return backup_path


def needs_update(file_path: Path, content: bytes) -> bool:
    """True unless ``file_path`` already holds exactly ``content``."""
    if not file_path.is_file():
        return True
    try:
        return file_path.read_bytes() != content
    except OSError as e:
        raise FilesystemError(f"Cannot read {file_path}: {e}") from e


def backup_then_write(
    file_path: Path,
    content: bytes,
    backup_enabled: bool,
    timestamp: str,
    app_settings: Optional[AppSettings],
    current_logger: Optional[logging.Logger] = None,
    mode_source: Optional[Path] = None,
) -> bool:
    """
    Install ``content`` at ``file_path`` unless it is already there.

    The content is written to ``<file_path>.tmp`` and moved into place with
    ``os.replace``. The mode of the file being replaced is kept; a new file
    takes the mode of ``mode_source`` when given.

    Parameters:
        file_path (Path): Destination file.
        content (bytes): Desired file content.
        backup_enabled (bool): Back up a differing destination first.
        timestamp (str): Backup suffix for this run.
        app_settings (Optional[AppSettings]): Application settings.
        current_logger (Optional[logging.Logger]): Logger to use.
        mode_source (Optional[Path]): File whose permission bits a newly
            created destination should copy.

    Returns:
        bool: True if the file was written, False if it was already current.

    Raises:
        FilesystemError: Any read, backup or write failure.
    """
    logger_to_use = current_logger if current_logger else module_logger

    if not needs_update(file_path, content):
        log_setup_message(
            f"already there {file_path}", "info", logger_to_use, app_settings
        )
        return False

    existed = file_path.exists()
    if existed and backup_enabled:
        backup_file(file_path, timestamp, app_settings, logger_to_use)

    tmp_path = file_path.with_name(file_path.name + TMP_SUFFIX)
    log_setup_message(
        f"install {file_path}", "notice", logger_to_use, app_settings
    )
    try:
        tmp_path.write_bytes(content)
        if existed:
            shutil.copymode(file_path, tmp_path)
        elif mode_source is not None and mode_source.exists():
            shutil.copymode(mode_source, tmp_path)
        os.replace(tmp_path, file_path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise FilesystemError(f"Cannot write {file_path}: {e}") from e
    return True


def ensure_directory(
    dir_path: Path,
    app_settings: Optional[AppSettings],
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Create ``dir_path`` (and parents) when it is missing.

    Returns:
        bool: True if the directory was created.

    Raises:
        FilesystemError: The path exists as a non-directory or mkdir failed.
    """
    logger_to_use = current_logger if current_logger else module_logger

    if dir_path.is_dir():
        log_setup_message(
            f"nothing to do for {dir_path}", "info", logger_to_use, app_settings
        )
        return False

    log_setup_message(f"mkdir {dir_path}", "notice", logger_to_use, app_settings)
    try:
        dir_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Cannot create directory {dir_path}: {e}") from e
    return True
