# tests/conftest.py
import re
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from installer.components.certificates.certificate_issuer import (
    CertificatePair,
    certificate_paths,
)
from installer.context import RunContext, generate_secrets
from setup.config_models import AppSettings, RunConfig

FQDN = "jitsi.example.com"
BACKUP_TIMESTAMP = "2026-10-19_12:00:00"

# relative path -> template text; directories end with "/"
TEMPLATE_TREE = {
    "usr/local/etc/pkg/repos/FreeBSD.conf": 'FreeBSD: { url: "pkg+http://pkg.FreeBSD.org/${ABI}/latest" }\n',
    "usr/local/etc/prosody/prosody.cfg.lua": 'certificates = "/var/db/prosody" -- SERVER_FQDN\n',
    "usr/local/etc/prosody/conf.d/": None,
    "usr/local/etc/prosody/conf.d/jitsi.cfg.lua.anon": (
        'VirtualHost "SERVER_FQDN"\n'
        '    authentication = "anonymous"\n'
        'Component "focus.SERVER_FQDN"\n'
        '    component_secret = "FOCUS_COMPONENT_SECRET"\n'
    ),
    "usr/local/etc/prosody/conf.d/jitsi.cfg.lua.auth": (
        'VirtualHost "SERVER_FQDN"\n'
        '    authentication = "internal_hashed"\n'
        'VirtualHost "guest.SERVER_FQDN"\n'
        '    authentication = "anonymous"\n'
    ),
    "usr/local/etc/jitsi/videobridge/jitsi-videobridge.conf": "JVB_XMPP_SECRET=JVB_COMPONENT_SECRET\n",
    "usr/local/etc/jitsi/videobridge/sip-communicator.properties": (
        "NAT_HARVESTER_LOCAL_ADDRESS=SERVER_LOCAL_IP4ADDR\n"
        "NAT_HARVESTER_PUBLIC_ADDRESS=SERVER_PUBLIC_IP4ADDR\n"
    ),
    "usr/local/etc/jitsi/jicofo/jicofo.conf": "JVB_XMPP_USER_SECRET=FOCUS_USER_SECRET\n",
    "usr/local/www/jitsi-meet/config.js": "var config = { hosts: { domain: 'SERVER_FQDN' } };\n",
    "usr/local/etc/apache24/httpd.conf": "ServerName SERVER_FQDN\n",
    "usr/local/etc/apache24/extra/httpd-ssl.conf": 'SSLCertificateFile "SERVER_CERT_PATH"\n',
    "usr/local/etc/nginx/nginx.conf": "ssl_certificate SERVER_CERT_PATH;\nssl_certificate_key SERVER_KEY_PATH;\n",
}


class FakeRenderer:
    """Substitutes macros the way m4 does for plain words."""

    def __init__(self):
        self.calls: List[Path] = []

    def render(self, template_path, macros, sensitive=None) -> bytes:
        self.calls.append(Path(template_path))
        text = Path(template_path).read_text()
        pattern = re.compile(r"\b(" + "|".join(map(re.escape, macros)) + r")\b")
        return pattern.sub(lambda m: macros[m.group(1)], text).encode()


class FakePkgManager:
    def __init__(self, installed: Optional[Dict[str, str]] = None, broken=()):
        self.installed = dict(installed or {})
        self.broken = set(broken)
        self.install_calls: List[str] = []
        self.update_calls = 0

    def query(self, package, app_settings):
        version = self.installed.get(package)
        return f"{package}-{version}" if version else None

    def update(self, app_settings):
        self.update_calls += 1
        return True

    def install(self, package, app_settings):
        self.install_calls.append(package)
        if package in self.broken:
            return False
        self.installed[package] = "1.0"
        return True


class FakeAccountRegistry:
    def __init__(self, existing=()):
        self.accounts = {account: None for account in existing}
        self.calls: List[tuple] = []

    def exists(self, username, host):
        return f"{username}@{host}" in self.accounts

    def delete(self, username, host):
        self.calls.append(("delete", f"{username}@{host}"))
        return self.accounts.pop(f"{username}@{host}", False) is not False

    def register(self, username, host, password):
        self.calls.append(("register", f"{username}@{host}"))
        self.accounts[f"{username}@{host}"] = password

    def add_interactive(self, username, host):
        self.calls.append(("adduser", f"{username}@{host}"))
        self.accounts[f"{username}@{host}"] = "typed-by-operator"


class FakeCertificateIssuer:
    def __init__(self):
        self.requests = []
        self.owners = []

    def issue(self, request, directory) -> CertificatePair:
        self.requests.append(request)
        pair = certificate_paths(Path(directory), request.common_name)
        pair.key_path.write_text(f"new key for {request.common_name}\n")
        pair.cert_path.write_text(f"new cert for {request.common_name}\n")
        return pair

    def set_owner(self, pair, user, group):
        self.owners.append((pair, user, group))


class FakeTrustStore:
    def __init__(self, path: Path, has_alias: bool = True):
        self.path = path
        self.has_alias = has_alias
        self.calls: List[tuple] = []

    def exists(self):
        return self.path.is_file()

    def delete(self, alias):
        self.calls.append(("delete", alias))
        return self.has_alias

    def import_cert(self, alias, cert_file):
        self.calls.append(("import", alias, Path(cert_file)))
        self.path.write_text(f"{alias}:{Path(cert_file).name}\n")


class FakeServiceManager:
    def __init__(self, failing=()):
        self.failing = set(failing)
        self.enabled: List[str] = []

    def enable(self, service, app_settings):
        if service in self.failing:
            return False
        self.enabled.append(service)
        return True


@pytest.fixture
def app_settings(tmp_path) -> AppSettings:
    """Settings pointing every host path into tmp_path."""
    for name in ("templates", "root", "prosody", "jicofo"):
        (tmp_path / name).mkdir()
    return AppSettings(
        template_dir=tmp_path / "templates",
        dest_root=tmp_path / "root",
        cert_dir=tmp_path / "prosody",
        prosody_data_dir=tmp_path / "prosody",
        truststore_path=tmp_path / "jicofo" / "truststore.jks",
        stage_delay=0,
    )


@pytest.fixture
def template_tree(app_settings) -> Path:
    """Populate template_dir and create the destination parent directories."""
    for relative_path, text in TEMPLATE_TREE.items():
        source = app_settings.template_dir / relative_path
        if text is None:
            source.mkdir(parents=True, exist_ok=True)
            continue
        source.parent.mkdir(parents=True, exist_ok=True)
        source.write_text(text)
        destination_parent = app_settings.dest_root / Path(relative_path).parent
        if destination_parent.name != "conf.d":
            destination_parent.mkdir(parents=True, exist_ok=True)
    return app_settings.template_dir


@pytest.fixture
def run_config() -> RunConfig:
    return RunConfig(
        fqdn=FQDN,
        cert_path="/usr/local/etc/ssl/jitsi.crt",
        key_path="/usr/local/etc/ssl/jitsi.key",
    )


@pytest.fixture
def make_context(run_config):
    """Build a RunContext, optionally overriding RunConfig fields."""

    def _make(**overrides) -> RunContext:
        cfg = run_config.model_copy(update=overrides) if overrides else run_config
        return RunContext(
            run_config=cfg,
            secrets=generate_secrets(),
            backup_timestamp=BACKUP_TIMESTAMP,
        )

    return _make


@pytest.fixture
def context(make_context) -> RunContext:
    return make_context()


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def fake_issuer() -> FakeCertificateIssuer:
    return FakeCertificateIssuer()


@pytest.fixture
def fake_services() -> FakeServiceManager:
    return FakeServiceManager()
