# installer/components/services/summary.py
# -*- coding: utf-8 -*-
"""
Operator guidance printed once everything is in place.
"""

from typing import List, Optional, TextIO

from common.core_utils import echo_err
from installer.components.services.services_configurator import services_for
from setup import config as static_config
from setup.config_models import RunConfig

PF_NOTE = [
    "If you are using PF, add rules like below to /etc/pf.conf and",
    "reload the PF by 'service pf reload'.",
    "(tighten those rules according to your needs)",
]


def firewall_rules(run_config: RunConfig) -> List[str]:
    if run_config.nat is not None:
        local = run_config.nat.local_ipv4
        rules = [
            f"    # $ext_if is an interface name which has {run_config.nat.public_ipv4}"
        ]
        rules.extend(
            f"    rdr pass inet proto {proto} to ($ext_if) port {port} -> {local}"
            for port, proto in static_config.REQUIRED_PORTS
        )
        return rules
    return [
        f"    pass in log proto {proto} to port {port}"
        for port, proto in static_config.REQUIRED_PORTS
    ]


def build_summary(run_config: RunConfig) -> List[str]:
    lines = [
        "Check your configs and run the following commands to start services.",
        "",
    ]
    lines.extend(f"    service {name} start" for name in services_for(run_config))
    lines.extend(
        [
            "",
            "Some additional notes:",
            "",
            "*** Firewall/NAT ***",
            "jitsi-meet requires the following ports are open.",
        ]
    )
    lines.extend(
        f"{port:>9}/{proto}" for port, proto in static_config.REQUIRED_PORTS
    )
    lines.append("")
    lines.extend(PF_NOTE)
    lines.extend(firewall_rules(run_config))
    lines.extend(
        [
            "",
            "*** Certificates ***",
            "If your server certificate in the following file:",
            f"    {run_config.cert_path}",
            "is selfsigned or issued by a private certificate authority (CA),",
            "you have to install the server certificate itself or",
            "the private CA certificate on your browser or operating system.",
            "Note that mobile jitsi apps don't seem to work with a private",
            "certificate.",
            "",
            "If the server certificate is issued by a public CA such as",
            "Let's Encrypt, it might be okay that you do nothing about it.",
            "",
            "",
            "If all set, launch your browser and access the following URL:",
            f"    https://{run_config.fqdn}/",
            "",
            "Enjoy!",
        ]
    )
    return lines


def print_summary(run_config: RunConfig, stream: Optional[TextIO] = None) -> None:
    echo_err(*build_summary(run_config), stream=stream)
