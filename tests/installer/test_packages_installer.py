# tests/installer/test_packages_installer.py
import io

import pytest

from common.errors import InstallFailureError, MissingDependencyError
from conftest import FakePkgManager
from installer.components.packages.packages_installer import PackagesInstaller
from setup.config_models import WebServer

ALL_NGINX = {
    "jitsi-meet": "1.0.7",
    "jitsi-videobridge": "2.3",
    "jicofo": "1.0",
    "prosody": "0.12.4",
    "nginx": "1.26.2",
}


def test_all_packages_present(app_settings, context, mocker):
    pkg = FakePkgManager(installed=ALL_NGINX)
    installer = PackagesInstaller(app_settings, context, pkg_manager=pkg)
    mock_log = mocker.patch.object(installer, "log")

    assert installer.ensure_packages() == []

    mock_log.assert_any_call("prosody-0.12.4 installed")
    assert pkg.install_calls == []
    assert pkg.update_calls == 0


def test_missing_packages_are_reported_together(app_settings, context):
    installed = {k: v for k, v in ALL_NGINX.items() if k not in ("jicofo", "nginx")}
    installer = PackagesInstaller(
        app_settings, context, pkg_manager=FakePkgManager(installed=installed)
    )

    with pytest.raises(MissingDependencyError) as excinfo:
        installer.ensure_packages()

    assert excinfo.value.packages == ["jicofo", "nginx"]
    assert excinfo.value.install_command == "pkg install jicofo nginx"


def test_auto_install_installs_missing(app_settings, make_context):
    context = make_context(install_missing_packages=True)
    pkg = FakePkgManager(installed={"prosody": "0.12.4"})
    installer = PackagesInstaller(app_settings, context, pkg_manager=pkg)

    installed_now = installer.ensure_packages()

    assert installed_now == ["jitsi-meet", "jitsi-videobridge", "jicofo", "nginx"]
    assert pkg.update_calls == 1


def test_install_failure_stops_immediately(app_settings, make_context):
    context = make_context(install_missing_packages=True)
    pkg = FakePkgManager(broken={"jitsi-videobridge"})
    installer = PackagesInstaller(app_settings, context, pkg_manager=pkg)

    with pytest.raises(InstallFailureError) as excinfo:
        installer.ensure_packages()

    assert excinfo.value.package == "jitsi-videobridge"
    # Nothing after the failing package was attempted.
    assert pkg.install_calls == ["jitsi-meet", "jitsi-videobridge"]


def test_apache_package_set(app_settings, make_context):
    context = make_context(web_server=WebServer.APACHE)
    installer = PackagesInstaller(app_settings, context, pkg_manager=FakePkgManager())

    with pytest.raises(MissingDependencyError) as excinfo:
        installer.ensure_packages()

    assert "apache24" in excinfo.value.packages
    assert "nginx" not in excinfo.value.packages


def test_prepare_package_set_installs_bundled_repo_config(app_settings, context, template_tree):
    installer = PackagesInstaller(app_settings, context, pkg_manager=FakePkgManager())
    destination = app_settings.dest_root / "usr/local/etc/pkg/repos/FreeBSD.conf"

    assert installer.prepare_package_set() == 1
    assert destination.read_bytes() == (
        template_tree / "usr/local/etc/pkg/repos/FreeBSD.conf"
    ).read_bytes()

    # Second run: directories and file are already there.
    assert installer.prepare_package_set() == 0
    assert not list(destination.parent.glob("FreeBSD.conf.*"))


def test_prepare_package_set_creates_directories(app_settings, context):
    source = app_settings.template_dir / "usr/local/etc/pkg/repos/FreeBSD.conf"
    source.parent.mkdir(parents=True)
    source.write_text("FreeBSD: { enabled: yes }\n")
    installer = PackagesInstaller(app_settings, context, pkg_manager=FakePkgManager())

    assert installer.prepare_package_set() == 3
    assert (app_settings.dest_root / "usr/local/etc/pkg/repos").is_dir()


def test_prepare_package_set_backs_up_local_change(app_settings, context, template_tree):
    destination = app_settings.dest_root / "usr/local/etc/pkg/repos/FreeBSD.conf"
    destination.write_text("FreeBSD: { enabled: no }\n")
    installer = PackagesInstaller(app_settings, context, pkg_manager=FakePkgManager())

    installer.prepare_package_set()

    backup = destination.with_name(f"FreeBSD.conf.{context.backup_timestamp}")
    assert backup.read_text() == "FreeBSD: { enabled: no }\n"


def test_prepare_package_set_missing_bundle_is_skipped(app_settings, context, mocker):
    installer = PackagesInstaller(app_settings, context, pkg_manager=FakePkgManager())
    mock_log = mocker.patch.object(installer, "log")

    installer.prepare_package_set()

    assert any(call.args[1] == "warning" for call in mock_log.call_args_list)
    assert not (app_settings.dest_root / "usr/local/etc/pkg/repos/FreeBSD.conf").exists()


def test_bootstrap_headers_go_to_the_given_stream(app_settings, context, template_tree):
    stream = io.StringIO()
    installer = PackagesInstaller(
        app_settings, context, pkg_manager=FakePkgManager(), stream=stream
    )

    installer.prepare_package_set()

    assert "\n# usr/local/etc/pkg/repos/FreeBSD.conf\n" in stream.getvalue()
