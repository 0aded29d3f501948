# common/command_utils.py
# -*- coding: utf-8 -*-
"""
Utilities for executing shell commands and logging their output.
"""

import logging
import os
import shutil
import subprocess
from typing import Dict, List, Optional, Sequence, Union

from common.core_utils import NOTICE
from setup.config_models import SYMBOLS_DEFAULT, AppSettings

module_logger = logging.getLogger(__name__)

REDACTED = "********"


def log_setup_message(
    message: str,
    level: str = "info",
    current_logger: Optional[logging.Logger] = None,
    app_settings: Optional[AppSettings] = None,
    exc_info: bool = False,
) -> None:
    """
    Logs a message at the named severity.

    Args:
        message (str): The log message to be recorded.
        level (str): The severity level of the log message. Defaults to "info".
            Accepted values are "debug", "info", "success", "notice",
            "warning", "error" and "critical"; "success" is logged as info.
        current_logger (Optional[logging.Logger]): A logger instance to use for
            logging. If not provided, a module-level logger will be used.
        app_settings (Optional[AppSettings]): Optional application settings.
        exc_info (bool): Include exception details in the log record.

    Returns:
        None
    """
    effective_logger = current_logger if current_logger else module_logger

    if level == "warning":
        effective_logger.warning(message, exc_info=exc_info)
    elif level == "error":
        effective_logger.error(message, exc_info=exc_info)
    elif level == "critical":
        effective_logger.critical(message, exc_info=exc_info)
    elif level == "notice":
        effective_logger.log(NOTICE, message, exc_info=exc_info)
    elif level == "debug":
        effective_logger.debug(message, exc_info=exc_info)
    else:
        effective_logger.info(message, exc_info=exc_info)


def _get_elevated_command_prefix() -> List[str]:
    """
    Returns ["sudo"] unless the process already runs as root.
    """
    return [] if os.geteuid() == 0 else ["sudo"]


def _redact(command: Sequence[str], redact: Optional[Sequence[str]]) -> List[str]:
    if not redact:
        return list(command)
    masked = []
    for part in command:
        for secret in redact:
            if secret:
                part = part.replace(secret, REDACTED)
        masked.append(part)
    return masked


def run_command(
    command: Union[List[str], str],
    app_settings: Optional[AppSettings],
    check: bool = True,
    shell: bool = False,
    capture_output: bool = False,
    text: bool = True,
    cmd_input: Optional[Union[str, bytes]] = None,
    current_logger: Optional[logging.Logger] = None,
    cwd: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
    redact: Optional[Sequence[str]] = None,
    log_output: bool = True,
) -> subprocess.CompletedProcess:
    """
    Executes a system command and logs the process details and results.

    Args:
        command (Union[List[str], str]): The system command to execute. If shell
            mode is enabled and the input is a list, elements are joined into a
            single string.
        app_settings (Optional[AppSettings]): Settings providing log symbols.
        check (bool): Raise CalledProcessError on a non-zero exit code.
        shell (bool): Execute the command in a shell.
        capture_output (bool): Capture standard output and standard error.
        text (bool): Decode the output streams as text.
        cmd_input (Optional[Union[str, bytes]]): Data for the command's stdin.
        current_logger (Optional[logging.Logger]): Logger for command details.
        cwd (Optional[str]): Working directory for the command.
        env (Optional[Dict[str, str]]): Environment for the command.
        redact (Optional[Sequence[str]]): Values masked wherever they appear in
            logged command lines, such as passwords passed as arguments.
        log_output (bool): Log captured stdout/stderr. Disable for commands
            whose output is the product (rendered templates) or is sensitive.

    Returns:
        subprocess.CompletedProcess: The completed process instance.

    Raises:
        subprocess.CalledProcessError: The command failed and check is True.
        FileNotFoundError: The command is not installed.
    """
    effective_logger = current_logger if current_logger else module_logger
    symbols = (
        app_settings.symbols
        if app_settings and app_settings.symbols
        else SYMBOLS_DEFAULT
    )
    command_to_log_str: str
    command_to_run: Union[List[str], str]

    if shell:
        if isinstance(command, list):
            command_to_run = " ".join(command)
        else:
            command_to_run = command
        command_to_log_str = " ".join(_redact([str(command_to_run)], redact))
    else:
        if isinstance(command, str):
            log_setup_message(
                f"{symbols.get('warning', '!')} Running string command without shell=True. Consider list format.",
                "warning",
                effective_logger,
                app_settings,
            )
            command_to_run = command.split()
        else:
            command_to_run = list(command)
        command_to_log_str = subprocess.list2cmdline(
            _redact(command_to_run, redact)
        )

    log_setup_message(
        f"{symbols.get('gear', '⚙️')} Executing: {command_to_log_str} {f'(in {cwd})' if cwd else ''}".rstrip(),
        "debug",
        effective_logger,
        app_settings,
    )
    try:
        result = subprocess.run(
            command_to_run,
            check=check,
            shell=shell,
            capture_output=capture_output,
            text=text,
            input=cmd_input,
            cwd=cwd,
            env=env,
        )
        if capture_output and log_output:
            if result.stdout and result.stdout.strip():
                log_setup_message(
                    f"   stdout: {result.stdout.strip()}",
                    "debug",
                    effective_logger,
                    app_settings,
                )
            if result.stderr and result.stderr.strip():
                log_setup_message(
                    f"   stderr: {result.stderr.strip()}",
                    "debug",
                    effective_logger,
                    app_settings,
                )
        return result
    except subprocess.CalledProcessError as e:
        log_setup_message(
            f"{symbols.get('error', '❌')} Command `{command_to_log_str}` failed (rc {e.returncode}).",
            "debug",
            effective_logger,
            app_settings,
        )
        if log_output and e.stderr and hasattr(e.stderr, "strip"):
            log_setup_message(
                f"   stderr: {e.stderr.strip()}",
                "debug",
                effective_logger,
                app_settings,
            )
        raise
    except FileNotFoundError as e:
        log_setup_message(
            f"{symbols.get('error', '❌')} Command not found: {e.filename}. Ensure it's installed and in PATH.",
            "error",
            effective_logger,
            app_settings,
        )
        raise


def run_elevated_command(
    command: List[str],
    app_settings: Optional[AppSettings],
    check: bool = True,
    capture_output: bool = False,
    cmd_input: Optional[str] = None,
    current_logger: Optional[logging.Logger] = None,
    cwd: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
    redact: Optional[Sequence[str]] = None,
) -> subprocess.CompletedProcess:
    """
    Executes a command with root privileges, prefixing sudo when needed.

    Args:
        command: The command to execute, provided as a list of strings.
        app_settings: The application settings.
        check: Raise an exception if the command exits non-zero.
        capture_output: Capture the output of the command.
        cmd_input: Data passed to the command via standard input.
        current_logger: Logger for command details.
        cwd: Working directory for the command.
        env: Environment for the command.
        redact: Values masked in the logged command line.

    Returns:
        subprocess.CompletedProcess: The result of the command execution.

    Raises:
        subprocess.CalledProcessError: check is True and the command failed.
    """
    prefix = _get_elevated_command_prefix()
    elevated_command_list = prefix + list(command)
    return run_command(
        elevated_command_list,
        app_settings,
        check=check,
        shell=False,
        capture_output=capture_output,
        text=True,
        cmd_input=cmd_input,
        current_logger=current_logger,
        cwd=cwd,
        env=env,
        redact=redact,
    )


def command_exists(command_name: str) -> bool:
    """
    Check if a command exists in the system's PATH.
    """
    return shutil.which(command_name) is not None
