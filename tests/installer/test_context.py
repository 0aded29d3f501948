# tests/installer/test_context.py
import re

import pytest
from pydantic import ValidationError

from installer.context import RunContext, Secrets, generate_secrets
from setup.config_models import NatAddresses, RunConfig

HEX32 = re.compile(r"^[0-9a-f]{32}$")


def test_generate_secrets_are_independent_hex():
    secrets = generate_secrets()

    values = secrets.values()
    assert len(values) == 3
    assert all(HEX32.match(value) for value in values)
    assert len(set(values)) == 3


def test_generate_secrets_differ_between_runs():
    assert generate_secrets().values() != generate_secrets().values()


def test_generate_secrets_honours_size():
    assert len(generate_secrets(32).jvb_component_secret) == 64


def test_short_secret_rejected():
    with pytest.raises(ValidationError):
        Secrets(
            jvb_component_secret="abc",
            focus_component_secret="0" * 32,
            focus_user_secret="0" * 32,
        )


def test_template_macros_without_nat(context):
    macros = context.template_macros()

    assert macros["SERVER_FQDN"] == "jitsi.example.com"
    assert macros["SERVER_CERT_PATH"] == "/usr/local/etc/ssl/jitsi.crt"
    assert macros["SERVER_KEY_PATH"] == "/usr/local/etc/ssl/jitsi.key"
    assert macros["FOCUS_USER_SECRET"] == context.secrets.focus_user_secret
    assert macros["SERVER_LOCAL_IP4ADDR"] == ""
    assert macros["SERVER_PUBLIC_IP4ADDR"] == ""
    assert len(macros) == 8


def test_template_macros_with_nat(make_context):
    nat = NatAddresses(local_ipv4="192.168.10.5", public_ipv4="203.0.113.5")

    macros = make_context(nat=nat).template_macros()

    assert macros["SERVER_LOCAL_IP4ADDR"] == "192.168.10.5"
    assert macros["SERVER_PUBLIC_IP4ADDR"] == "203.0.113.5"


def test_run_config_is_immutable(run_config):
    with pytest.raises(ValidationError):
        run_config.fqdn = "other.example.com"


def test_run_config_rejects_empty_fqdn():
    with pytest.raises(ValidationError):
        RunConfig(fqdn="", cert_path="/c", key_path="/k")


def test_backup_timestamp_default_format(run_config):
    context = RunContext(run_config=run_config, secrets=generate_secrets())

    assert re.match(r"^\d{4}-\d{2}-\d{2}_\d{2}:\d{2}:\d{2}$", context.backup_timestamp)
