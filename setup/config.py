# setup/config.py
# -*- coding: utf-8 -*-
"""
Centralized static constants for the Jitsi Meet setup.

Runtime configuration (paths, service accounts, delays) lives in
'setup/config_models.py' and 'setup/config_loader.py'.
"""

from pathlib import Path
from typing import List, Tuple

SCRIPT_VERSION: str = "1.0"
PROG_NAME: str = "freebsd-jitsi-setup"

PACKAGE_DIR: Path = Path(__file__).resolve().parent
TEMPLATE_DIR_DEFAULT: Path = PACKAGE_DIR / "templates"
CONFIG_FILE_DEFAULT: str = "config.yaml"

# rc.d services enabled at the end of the run; the web server is added per run.
XMPP_SERVICE: str = "prosody"
BRIDGE_SERVICE: str = "jitsi-videobridge"
FOCUS_SERVICE: str = "jicofo"

FOCUS_USERNAME: str = "focus"

# Subdomains covered by the internal certificate of the bare FQDN.
INTERNAL_CERT_SUBDOMAINS: List[str] = [
    "jitsi-videobridge",
    "conference",
    "focus",
    "auth",
]

REQUIRED_PORTS: List[Tuple[int, str]] = [
    (443, "tcp"),
    (4443, "tcp"),
    (10000, "udp"),
]
