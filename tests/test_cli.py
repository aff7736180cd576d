import base64
import json
import logging

import pytest
from boto3.dynamodb.types import Binary
from click.testing import CliRunner

from vanishingkeys.cli.cli import _json_default, cli
from vanishingkeys.secretstore.secretstore import SecretStore


@pytest.fixture(autouse=True)
def quiet_logs(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("LOG_FORMAT", "dev_terminal")


@pytest.fixture(autouse=True)
def reset_root_handlers():
    # the CLI points the root logger at the runner's stdout
    yield
    logging.getLogger().handlers.clear()


@pytest.fixture
def shared_store(monkeypatch, secret_store):
    monkeypatch.setattr(SecretStore, "from_config", lambda: secret_store)
    return secret_store


def test_version():
    runner = CliRunner()
    result = runner.invoke(cli, ["version"])
    assert result.exit_code == 0
    assert result.output.strip()


def test_create_consume_delete(shared_store):
    runner = CliRunner()

    result = runner.invoke(
        cli, ["create", "abc", "--secret", "ciphertext", "--ttl", "60"]
    )
    assert result.exit_code == 0
    assert "created" in result.output

    result = runner.invoke(cli, ["create", "abc", "--secret", "other"])
    assert result.exit_code == 0
    assert "already_exists" in result.output

    result = runner.invoke(cli, ["consume", "abc"])
    assert result.exit_code == 0
    payload = json.loads(result.output[result.output.index("{") :])
    assert payload["secretId"] == "abc"
    assert payload["encryptedSecret"] == "ciphertext"
    assert payload["consumedAtTime"] is not None

    result = runner.invoke(cli, ["delete", "abc"])
    assert result.exit_code == 0
    assert "deleted" in result.output

    result = runner.invoke(cli, ["delete", "abc"])
    assert result.exit_code == 0
    assert "not_found" in result.output


def test_consume_missing_exits_non_zero(shared_store):
    runner = CliRunner()
    result = runner.invoke(cli, ["consume", "missing"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_memory_backend_from_env(monkeypatch):
    monkeypatch.setenv("SECRET_STORE_BACKEND", "MEMORY")
    runner = CliRunner()
    result = runner.invoke(cli, ["create", "abc", "--secret", "ciphertext"])
    assert result.exit_code == 0
    assert "created" in result.output


def test_rejects_non_positive_ttl(shared_store):
    runner = CliRunner()
    result = runner.invoke(cli, ["create", "abc", "--secret", "x", "--ttl", "0"])
    assert result.exit_code == 2


def test_log_level_from_env(monkeypatch, shared_store):
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    runner = CliRunner()
    result = runner.invoke(cli, ["create", "abc", "--secret", "ciphertext"])
    assert result.exit_code == 0
    assert "Secret created" in result.output
    assert "[secret_id: abc]" in result.output


def test_log_level_warning_hides_info(shared_store):
    runner = CliRunner()
    result = runner.invoke(cli, ["create", "abc", "--secret", "ciphertext"])
    assert result.exit_code == 0
    assert "Secret created" not in result.output


def test_verbose_overrides_log_level(shared_store):
    runner = CliRunner()
    result = runner.invoke(cli, ["-v", "create", "abc", "--secret", "ciphertext"])
    assert result.exit_code == 0
    assert "Secret created" in result.output


def test_consume_prints_binary_payload_as_base64(shared_store):
    shared_store.create("bin", b"\x00\x01ciphertext", 300)
    runner = CliRunner()
    result = runner.invoke(cli, ["consume", "bin"])
    assert result.exit_code == 0
    payload = json.loads(result.output[result.output.index("{") :])
    assert payload["encryptedSecret"] == base64.b64encode(
        b"\x00\x01ciphertext"
    ).decode()


def test_json_default_decodes_dynamodb_binary():
    assert _json_default(Binary(b"\x00abc")) == base64.b64encode(b"\x00abc").decode()
    assert _json_default(bytearray(b"abc")) == "YWJj"
