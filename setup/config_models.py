# setup/config_models.py
# -*- coding: utf-8 -*-
"""
Pydantic models for application configuration.

This module defines two kinds of settings:

- AppSettings: host layout and tooling defaults (paths, service accounts,
  certificate subject, delays). Loaded from model defaults, environment
  variables and an optional YAML file.
- RunConfig: the per-invocation parameters built once from the command line.
  It is immutable after construction and passed explicitly to every stage.
"""

from enum import Enum
from ipaddress import IPv4Address
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from setup.config import TEMPLATE_DIR_DEFAULT

# --- Default Static Values (can be overridden by config file/env/cli) ---
DEST_ROOT_DEFAULT: str = "/"
CERT_DIR_DEFAULT: str = "/var/db/prosody"
PROSODY_DATA_DIR_DEFAULT: str = "/var/db/prosody"
PROSODY_USER_DEFAULT: str = "prosody"
TRUSTSTORE_PATH_DEFAULT: str = "/usr/local/etc/jitsi/jicofo/truststore.jks"
TRUSTSTORE_ALIAS_DEFAULT: str = "prosody"
TRUSTSTORE_PASSWORD_DEFAULT: str = "changeit"
CERT_COUNTRY_DEFAULT: str = "JP"
CERT_ORGANIZATION_DEFAULT: str = "Prosody"
CERT_KEY_BITS_DEFAULT: int = 2048
CERT_EXPIRY_DAYS_DEFAULT: int = 365
SECRET_BYTES_DEFAULT: int = 16
ADMIN_USERNAME_DEFAULT: str = "admin"
STAGE_DELAY_DEFAULT: float = 1.0
LOG_PREFIX_DEFAULT: str = ""

SYMBOLS_DEFAULT: Dict[str, str] = {
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
    "notice": "📣",
    "step": "➡️",
    "gear": "⚙️",
    "package": "📦",
    "critical": "🔥",
    "debug": "🐛",
}


class WebServer(str, Enum):
    """Supported web servers. Values double as package and rc.d service names."""

    NGINX = "nginx"
    APACHE = "apache24"


class RoomCreationMode(str, Enum):
    """Who may create a conference room. Values are template variant suffixes."""

    ANONYMOUS = "anon"
    AUTHENTICATED = "auth"


class NatAddresses(BaseModel):
    """Local/public IPv4 pair used when the server sits behind a NAT box."""

    model_config = ConfigDict(frozen=True)

    local_ipv4: IPv4Address
    public_ipv4: IPv4Address


class RunConfig(BaseModel):
    """Immutable parameters of a single setup run."""

    model_config = ConfigDict(frozen=True)

    fqdn: str = Field(min_length=1, description="Resolvable server FQDN.")
    cert_path: str = Field(
        min_length=1, description="Server TLS certificate presented to clients."
    )
    key_path: str = Field(min_length=1, description="Server TLS private key.")
    web_server: WebServer = WebServer.NGINX
    backup_enabled: bool = True
    install_missing_packages: bool = False
    room_creation_mode: RoomCreationMode = RoomCreationMode.ANONYMOUS
    nat: Optional[NatAddresses] = None
    cert_expiry_days: int = Field(default=CERT_EXPIRY_DAYS_DEFAULT, ge=1)

    @property
    def auth_domain(self) -> str:
        return f"auth.{self.fqdn}"

    @property
    def nat_enabled(self) -> bool:
        return self.nat is not None

    @property
    def requires_authentication(self) -> bool:
        return self.room_creation_mode is RoomCreationMode.AUTHENTICATED


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(env_prefix="JITSI_SETUP_", extra="ignore")

    template_dir: Path = Field(
        default=TEMPLATE_DIR_DEFAULT,
        description="Directory holding the template tree (usr/local/...).",
    )
    dest_root: Path = Field(
        default=Path(DEST_ROOT_DEFAULT),
        description="Filesystem root the manifest paths are installed under.",
    )
    cert_dir: Path = Field(
        default=Path(CERT_DIR_DEFAULT),
        description="Directory receiving the internal self-signed certificates.",
    )
    prosody_user: str = Field(default=PROSODY_USER_DEFAULT)
    prosody_group: str = Field(default=PROSODY_USER_DEFAULT)
    prosody_data_dir: Path = Field(
        default=Path(PROSODY_DATA_DIR_DEFAULT),
        description="Prosody data_path, used to detect existing accounts.",
    )
    truststore_path: Path = Field(default=Path(TRUSTSTORE_PATH_DEFAULT))
    truststore_alias: str = Field(default=TRUSTSTORE_ALIAS_DEFAULT)
    truststore_password: str = Field(
        default=TRUSTSTORE_PASSWORD_DEFAULT,
        description="Keystore password. Well-known default, not a secret.",
    )
    cert_country: str = Field(default=CERT_COUNTRY_DEFAULT)
    cert_organization: str = Field(default=CERT_ORGANIZATION_DEFAULT)
    cert_key_bits: int = Field(default=CERT_KEY_BITS_DEFAULT, ge=1024)
    default_cert_expiry_days: int = Field(default=CERT_EXPIRY_DAYS_DEFAULT, ge=1)
    secret_bytes: int = Field(
        default=SECRET_BYTES_DEFAULT,
        ge=16,
        description="Entropy of each generated secret, in bytes.",
    )
    admin_username: str = Field(
        default=ADMIN_USERNAME_DEFAULT,
        description="Account allowed to create rooms when -r is given.",
    )
    stage_delay: float = Field(
        default=STAGE_DELAY_DEFAULT,
        ge=0,
        description="Pause after each banner so the operator can follow along.",
    )
    log_level: str = Field(default="INFO")
    log_file: Optional[Path] = Field(default=None)
    log_prefix: str = Field(default=LOG_PREFIX_DEFAULT)

    symbols: Dict[str, str] = Field(
        default_factory=lambda: dict(SYMBOLS_DEFAULT)
    )

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()
