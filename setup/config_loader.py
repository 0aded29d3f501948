# setup/config_loader.py
# -*- coding: utf-8 -*-
"""
Configuration loader for the application.

Handles loading settings from Pydantic model defaults, environment
variables, a YAML file and command-line arguments, applying a specific
order of precedence:
1. Pydantic Model Defaults
2. Environment Variables (JITSI_SETUP_*, loaded by BaseSettings)
3. YAML Configuration File
4. Command-Line Arguments
"""

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from common.errors import ConfigurationError
from setup import config as static_config

from .config_models import AppSettings

module_logger = logging.getLogger(__name__)


def _deep_update(
    source: Dict[str, Any], overrides: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Recursively updates a dictionary `source` with values from another dictionary
    `overrides`. Nested dictionaries are merged; other values replace the
    existing ones unless they are None.

    Returns:
        Dict[str, Any]: The updated `source`.
    """
    for key, value in overrides.items():
        if (
            isinstance(value, dict)
            and key in source
            and isinstance(source[key], dict)
        ):
            source[key] = _deep_update(source[key], value)
        elif value is not None:
            source[key] = value
        elif key not in source:
            source[key] = value
    return source


def _read_yaml_settings(
    yaml_config_path: Path,
    explicit: bool,
    logger_to_use: logging.Logger,
) -> Dict[str, Any]:
    if not yaml_config_path.is_file():
        message = (
            f"Configuration file '{yaml_config_path}' not found. "
            "Using defaults, environment variables, and CLI args."
        )
        if explicit:
            logger_to_use.warning(message)
        else:
            logger_to_use.debug(message)
        return {}

    try:
        with open(yaml_config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger_to_use.warning(
            f"Could not parse YAML config file '{yaml_config_path}': {e}. Using defaults and environment variables."
        )
        return {}
    except IOError as e:
        logger_to_use.warning(
            f"Could not read config file '{yaml_config_path}': {e}. Using defaults and environment variables."
        )
        return {}

    if yaml_data is None:
        return {}
    if not isinstance(yaml_data, dict):
        logger_to_use.warning(
            f"Config file '{yaml_config_path}' does not contain a valid YAML dictionary. Ignoring."
        )
        return {}
    logger_to_use.info(f"Loaded configuration from {yaml_config_path}")
    return yaml_data


def _cli_overrides(cli_args: argparse.Namespace) -> Dict[str, Any]:
    mapped_cli_values: Dict[str, Any] = {}
    if getattr(cli_args, "verbose", False):
        mapped_cli_values["log_level"] = "DEBUG"
    return mapped_cli_values


def load_app_settings(
    cli_args: Optional[argparse.Namespace] = None,
    config_file_path: Optional[str] = None,
    current_logger: Optional[logging.Logger] = None,
) -> AppSettings:
    """
    Loads application settings with the precedence
    defaults < environment < YAML file < command line.

    Args:
        cli_args: Parsed command-line arguments (from argparse).
        config_file_path: Path to the YAML configuration file. When omitted,
            ``-c`` from ``cli_args`` is used, then ``config.yaml`` in the
            current directory. Only an explicitly named file that is missing
            is worth a warning.
        current_logger: Optional logger to use instead of the module logger.

    Returns:
        An instance of AppSettings with the fully resolved configuration.

    Raises:
        ConfigurationError: The merged values failed validation.
    """
    logger_to_use = current_logger if current_logger else module_logger

    try:
        # Defaults < environment variables
        current_values_dict = AppSettings().model_dump(exclude_defaults=False)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration error: {e}") from e

    explicit = True
    if config_file_path is None and cli_args is not None:
        config_file_path = getattr(cli_args, "config_file", None)
    if config_file_path is None:
        config_file_path = static_config.CONFIG_FILE_DEFAULT
        explicit = False

    yaml_data = _read_yaml_settings(
        Path(config_file_path), explicit, logger_to_use
    )
    current_values_dict = _deep_update(current_values_dict, yaml_data)

    if cli_args:
        current_values_dict = _deep_update(
            current_values_dict, _cli_overrides(cli_args)
        )

    try:
        final_settings = AppSettings(**current_values_dict)
    except ValidationError as e:
        logger_to_use.error(f"Configuration validation failed: {e}")
        raise ConfigurationError(f"Configuration error: {e}") from e

    logger_to_use.debug(
        "Successfully loaded and validated application settings"
    )
    return final_settings
