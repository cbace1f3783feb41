"""Test fixtures and utilities."""

from pathlib import Path

import pytest

from fusebill.api_client import Credentials

SAMPLE_CONFIG_YAML = """
fusebill:
  mode: "production"
  token: "file-token"
  username: "billing@example.com"
  password: "file-password"
  timeout: 10
"""


@pytest.fixture
def credentials() -> Credentials:
    """Credentials usable by both client flavours."""
    return Credentials(
        username="billing@example.com",
        password="s3cret",
        token="dGVzdDp0b2tlbg==",
    )


@pytest.fixture
def sample_invoice_response() -> dict:
    """Sample Fusebill invoice API response."""
    return {
        "id": 1234,
        "invoiceNumber": 88,
        "outstandingBalance": 42.5,
        "sumOfPayments": 0.0,
    }


@pytest.fixture
def config_file(tmp_path) -> Path:
    """Config file with every Fusebill key set."""
    path = tmp_path / "config.yaml"
    path.write_text(SAMPLE_CONFIG_YAML)
    return path


@pytest.fixture(autouse=True)
def clear_fusebill_env(monkeypatch):
    """Keep developer environment variables out of config tests."""
    for name in (
        "FUSEBILL_MODE",
        "FUSEBILL_TOKEN",
        "FUSEBILL_USERNAME",
        "FUSEBILL_PASSWORD",
        "FUSEBILL_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
