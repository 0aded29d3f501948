# tests/test_install.py
import io

import pytest

import install
from common.errors import CertificateError
from conftest import (
    FakeAccountRegistry,
    FakeCertificateIssuer,
    FakePkgManager,
    FakeRenderer,
    FakeServiceManager,
    FakeTrustStore,
)

POSITIONALS = ["jitsi.example.com", "/etc/ssl/jitsi.crt", "/etc/ssl/jitsi.key"]
ALL_PACKAGES = {
    name: "1.0"
    for name in ("jitsi-meet", "jitsi-videobridge", "jicofo", "prosody", "nginx", "apache24")
}


@pytest.fixture
def host(app_settings, template_tree, tmp_path, monkeypatch, mocker):
    """Point every host path of the real settings loader at tmp_path."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("JITSI_SETUP_TEMPLATE_DIR", str(app_settings.template_dir))
    monkeypatch.setenv("JITSI_SETUP_DEST_ROOT", str(app_settings.dest_root))
    monkeypatch.setenv("JITSI_SETUP_CERT_DIR", str(app_settings.cert_dir))
    monkeypatch.setenv("JITSI_SETUP_PROSODY_DATA_DIR", str(app_settings.prosody_data_dir))
    monkeypatch.setenv("JITSI_SETUP_TRUSTSTORE_PATH", str(app_settings.truststore_path))
    monkeypatch.setenv("JITSI_SETUP_STAGE_DELAY", "0")
    mocker.patch("install.setup_logging")
    return app_settings


def _collaborators(app_settings, **overrides):
    collaborators = {
        "pkg_manager": FakePkgManager(installed=ALL_PACKAGES),
        "renderer": FakeRenderer(),
        "account_registry": FakeAccountRegistry(),
        "cert_issuer": FakeCertificateIssuer(),
        "trust_store": FakeTrustStore(app_settings.truststore_path),
        "service_manager": FakeServiceManager(),
    }
    collaborators.update(overrides)
    return collaborators


def test_full_run(host):
    stream = io.StringIO()
    collaborators = _collaborators(host)

    assert install.main(POSITIONALS, stream=stream, collaborators=collaborators) == 0

    output = stream.getvalue()
    stages = [
        install.STAGE_PREPARE_PACKAGES,
        install.STAGE_CHECK_PACKAGES,
        install.STAGE_CONFIG_FILES,
        install.STAGE_ACCOUNTS,
        install.STAGE_CERTIFICATES,
        install.STAGE_TRUSTSTORE,
        install.STAGE_SERVICES,
        install.STAGE_FINISHED,
    ]
    positions = [output.index(f"### {stage}\n") for stage in stages]
    assert positions == sorted(positions)
    assert output.rstrip().endswith("Enjoy!")
    assert positions[0] < output.index("\n# usr/local/etc/pkg/repos/FreeBSD.conf\n") < positions[1]
    assert positions[2] < output.index("\n# usr/local/etc/nginx/nginx.conf\n") < positions[3]

    root = host.dest_root
    assert (root / "usr/local/etc/nginx/nginx.conf").read_text().startswith(
        "ssl_certificate /etc/ssl/jitsi.crt;"
    )
    assert (root / "usr/local/etc/pkg/repos/FreeBSD.conf").exists()
    assert collaborators["service_manager"].enabled == [
        "prosody",
        "nginx",
        "jitsi-videobridge",
        "jicofo",
    ]
    assert host.truststore_path.exists()
    # The focus account uses the same secret the templates received.
    jicofo_conf = (root / "usr/local/etc/jitsi/jicofo/jicofo.conf").read_text()
    focus_password = collaborators["account_registry"].accounts["focus@auth.jitsi.example.com"]
    assert jicofo_conf == f"JVB_XMPP_USER_SECRET={focus_password}\n"


def test_usage_error_exits_before_any_work(host, mocker):
    build = mocker.patch("install.build_orchestrator")
    stream = io.StringIO()

    assert install.main(POSITIONALS[:2], stream=stream) == 1

    build.assert_not_called()
    assert "Please specify SERVER_KEY_PATH" in stream.getvalue()
    assert "usage:" in stream.getvalue()
    assert not any(host.dest_root.rglob("*.conf"))


def test_bad_nat_exits_before_any_work(host, mocker):
    build = mocker.patch("install.build_orchestrator")
    stream = io.StringIO()

    assert install.main(["-N", "192.168.10.5", *POSITIONALS], stream=stream) == 1

    build.assert_not_called()
    assert "LOCAL:PUBLIC" in stream.getvalue()


def test_missing_packages_report(host):
    stream = io.StringIO()
    pkg = FakePkgManager(installed={"prosody": "0.12.4"})

    code = install.main(POSITIONALS, stream=stream, collaborators=_collaborators(host, pkg_manager=pkg))

    assert code == 1
    assert (
        "ERROR: please install the missing packages.\n"
        "\n"
        "    pkg install jitsi-meet jitsi-videobridge jicofo nginx\n"
        "\n"
    ) in stream.getvalue()
    assert install.STAGE_CONFIG_FILES not in stream.getvalue()


def test_install_failure_exits(host):
    pkg = FakePkgManager(broken={"jitsi-meet"})
    stream = io.StringIO()

    code = install.main(["-p", *POSITIONALS], stream=stream, collaborators=_collaborators(host, pkg_manager=pkg))

    assert code == 1
    assert pkg.install_calls == ["jitsi-meet"]
    assert install.STAGE_CONFIG_FILES not in stream.getvalue()


def test_certificate_failure_leaves_earlier_stages(host, mocker):
    issuer = FakeCertificateIssuer()
    mocker.patch.object(issuer, "issue", side_effect=CertificateError("openssl failed"))
    services = FakeServiceManager()

    code = install.main(
        POSITIONALS,
        stream=io.StringIO(),
        collaborators=_collaborators(host, cert_issuer=issuer, service_manager=services),
    )

    assert code == 1
    assert (host.dest_root / "usr/local/etc/nginx/nginx.conf").exists()
    assert services.enabled == []


def test_service_failure_still_finishes(host):
    stream = io.StringIO()
    services = FakeServiceManager(failing={"jicofo"})

    code = install.main(POSITIONALS, stream=stream, collaborators=_collaborators(host, service_manager=services))

    assert code == 0
    assert services.enabled == ["prosody", "nginx", "jitsi-videobridge"]
    assert "Enjoy!" in stream.getvalue()


def test_no_backups_with_B_flag(host):
    collaborators = _collaborators(host)
    assert install.main(POSITIONALS, stream=io.StringIO(), collaborators=collaborators) == 0

    assert install.main(["-B", *POSITIONALS], stream=io.StringIO(), collaborators=_collaborators(host)) == 0

    leftovers = [
        path
        for path in host.dest_root.rglob("*")
        if path.is_file() and path.name.count(":") == 2
    ]
    assert leftovers == []
