"""
Static manifests of bootstrap files, packages and configuration files.

Each entry carries the condition under which it applies; the effective
manifest for a run is obtained by filtering, keeping the declared order.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from setup.config_models import RoomCreationMode, RunConfig, WebServer

Predicate = Callable[[RunConfig], bool]


def always(_: RunConfig) -> bool:
    return True


def uses_nginx(cfg: RunConfig) -> bool:
    return cfg.web_server is WebServer.NGINX


def uses_apache(cfg: RunConfig) -> bool:
    return cfg.web_server is WebServer.APACHE


def behind_nat(cfg: RunConfig) -> bool:
    return cfg.nat_enabled


@dataclass(frozen=True)
class ManifestEntry:
    relative_path: str
    is_directory: bool = False
    applies: Predicate = always

    def destination(self, root: Path) -> Path:
        return root / self.relative_path

    def source(self, template_dir: Path) -> Path:
        return template_dir / self.relative_path

    def variant_source(
        self, template_dir: Path, mode: RoomCreationMode
    ) -> Path:
        """Room-creation specific template, e.g. ``jitsi.cfg.lua.auth``."""
        return template_dir / f"{self.relative_path}.{mode.value}"


@dataclass(frozen=True)
class PackageEntry:
    name: str
    applies: Predicate = always


PRE_CONFIG_MANIFEST: Tuple[ManifestEntry, ...] = (
    ManifestEntry("usr/local/etc/pkg", is_directory=True),
    ManifestEntry("usr/local/etc/pkg/repos", is_directory=True),
    ManifestEntry("usr/local/etc/pkg/repos/FreeBSD.conf"),
)

PACKAGE_MANIFEST: Tuple[PackageEntry, ...] = (
    PackageEntry("jitsi-meet"),
    PackageEntry("jitsi-videobridge"),
    PackageEntry("jicofo"),
    PackageEntry("prosody"),
    PackageEntry(WebServer.APACHE.value, uses_apache),
    PackageEntry(WebServer.NGINX.value, uses_nginx),
)

CONFIG_MANIFEST: Tuple[ManifestEntry, ...] = (
    ManifestEntry("usr/local/etc/prosody/prosody.cfg.lua"),
    ManifestEntry("usr/local/etc/prosody/conf.d", is_directory=True),
    ManifestEntry("usr/local/etc/prosody/conf.d/jitsi.cfg.lua"),
    ManifestEntry("usr/local/etc/jitsi/videobridge/jitsi-videobridge.conf"),
    ManifestEntry("usr/local/etc/jitsi/jicofo/jicofo.conf"),
    ManifestEntry("usr/local/www/jitsi-meet/config.js"),
    ManifestEntry("usr/local/etc/apache24/httpd.conf", applies=uses_apache),
    ManifestEntry(
        "usr/local/etc/apache24/extra/httpd-ssl.conf", applies=uses_apache
    ),
    ManifestEntry("usr/local/etc/nginx/nginx.conf", applies=uses_nginx),
    ManifestEntry(
        "usr/local/etc/jitsi/videobridge/sip-communicator.properties",
        applies=behind_nat,
    ),
)


def effective_entries(
    manifest: Tuple[ManifestEntry, ...], cfg: RunConfig
) -> List[ManifestEntry]:
    return [entry for entry in manifest if entry.applies(cfg)]


def effective_packages(cfg: RunConfig) -> List[str]:
    return [pkg.name for pkg in PACKAGE_MANIFEST if pkg.applies(cfg)]


def resolve_template_source(
    entry: ManifestEntry, template_dir: Path, mode: RoomCreationMode
) -> Tuple[Optional[Path], bool]:
    """
    Pick the template for ``entry``.

    Returns:
        (source, is_variant). ``source`` is None when neither the plain
        template nor the room-creation variant exists.
    """
    plain = entry.source(template_dir)
    variant = entry.variant_source(template_dir, mode)
    if not plain.exists() and variant.is_file():
        return variant, True
    if plain.exists():
        return plain, False
    return None, False
