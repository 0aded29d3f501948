"""
Per-run state shared by every stage: the run parameters, the generated
secrets and the backup timestamp.
"""

import secrets
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from common.file_utils import make_backup_timestamp
from setup.config_models import SECRET_BYTES_DEFAULT, RunConfig


class Secrets(BaseModel):
    """Random credentials consumed by the templates and the focus account."""

    model_config = ConfigDict(frozen=True)

    jvb_component_secret: str = Field(min_length=32)
    focus_component_secret: str = Field(min_length=32)
    focus_user_secret: str = Field(min_length=32)

    def values(self) -> List[str]:
        return [
            self.jvb_component_secret,
            self.focus_component_secret,
            self.focus_user_secret,
        ]


def generate_secrets(num_bytes: int = SECRET_BYTES_DEFAULT) -> Secrets:
    """Three independent hex secrets of ``num_bytes`` bytes of entropy each."""
    return Secrets(
        jvb_component_secret=secrets.token_hex(num_bytes),
        focus_component_secret=secrets.token_hex(num_bytes),
        focus_user_secret=secrets.token_hex(num_bytes),
    )


class RunContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    run_config: RunConfig
    secrets: Secrets
    backup_timestamp: str = Field(default_factory=make_backup_timestamp)

    def template_macros(self) -> Dict[str, str]:
        """Named macros substituted into every configuration template."""
        cfg = self.run_config
        return {
            "SERVER_FQDN": cfg.fqdn,
            "SERVER_CERT_PATH": cfg.cert_path,
            "SERVER_KEY_PATH": cfg.key_path,
            "JVB_COMPONENT_SECRET": self.secrets.jvb_component_secret,
            "FOCUS_COMPONENT_SECRET": self.secrets.focus_component_secret,
            "FOCUS_USER_SECRET": self.secrets.focus_user_secret,
            "SERVER_LOCAL_IP4ADDR": str(cfg.nat.local_ipv4) if cfg.nat else "",
            "SERVER_PUBLIC_IP4ADDR": str(cfg.nat.public_ipv4) if cfg.nat else "",
        }
