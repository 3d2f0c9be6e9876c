"""Tests for .env loading used by CLI scripts."""
import os

from app.utils.env import load_env_if_present


def test_load_env_if_present(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("LEGACY_TEST_VAR=from_file\nLEGACY_TEST_KEEP=from_file\n")
    monkeypatch.delenv("LEGACY_TEST_VAR", raising=False)
    monkeypatch.setenv("LEGACY_TEST_KEEP", "from_env")

    assert load_env_if_present(str(env_file)) is True
    assert os.environ["LEGACY_TEST_VAR"] == "from_file"
    # existing variables win
    assert os.environ["LEGACY_TEST_KEEP"] == "from_env"
    monkeypatch.delenv("LEGACY_TEST_VAR")


def test_missing_file(tmp_path):
    assert load_env_if_present(str(tmp_path / "absent.env")) is False
