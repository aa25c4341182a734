"""Tests for rsiscan.config — environment variable loading and validation."""

import pytest

from rsiscan.config import load_config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Ensure rsiscan env vars are cleared between tests."""
    for var in [
        "DATA_SOURCE",
        "FINNHUB_API_KEY",
        "CACHE_TTL_SECONDS",
        "BATCH_SIZE",
        "BATCH_DELAY_SECONDS",
        "LOG_LEVEL",
        "API_PORT",
    ]:
        monkeypatch.delenv(var, raising=False)


def _missing_env(tmp_path):
    # Non-existent env_path so load_dotenv doesn't pick up a real .env file
    return str(tmp_path / "nonexistent.env")


class TestLoadConfig:
    def test_defaults(self, tmp_path):
        cfg = load_config(env_path=_missing_env(tmp_path))
        assert cfg.data_source == "yahoo"
        assert cfg.finnhub_api_key == ""
        assert cfg.cache_ttl_seconds == 300.0
        assert cfg.batch_size == 2
        assert cfg.batch_delay_seconds == 0.5
        assert cfg.log_level == "INFO"
        assert cfg.api_port == 8080
        assert cfg.data_source_label == "Yahoo Finance"

    def test_finnhub_defaults_to_larger_batches(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DATA_SOURCE", "finnhub")
        monkeypatch.setenv("FINNHUB_API_KEY", "abc123")
        cfg = load_config(env_path=_missing_env(tmp_path))
        assert cfg.batch_size == 5
        assert cfg.finnhub_api_key == "abc123"
        assert cfg.data_source_label == "Finnhub"

    def test_finnhub_requires_key(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DATA_SOURCE", "finnhub")
        with pytest.raises(ValueError, match="FINNHUB_API_KEY"):
            load_config(env_path=_missing_env(tmp_path))

    def test_unknown_source(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DATA_SOURCE", "bloomberg")
        with pytest.raises(ValueError, match="DATA_SOURCE"):
            load_config(env_path=_missing_env(tmp_path))

    def test_malformed_number(self, monkeypatch, tmp_path):
        monkeypatch.setenv("BATCH_SIZE", "three")
        with pytest.raises(ValueError, match="BATCH_SIZE"):
            load_config(env_path=_missing_env(tmp_path))

    def test_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CACHE_TTL_SECONDS", "60")
        monkeypatch.setenv("BATCH_SIZE", "4")
        monkeypatch.setenv("BATCH_DELAY_SECONDS", "1.5")
        cfg = load_config(env_path=_missing_env(tmp_path))
        assert cfg.cache_ttl_seconds == 60.0
        assert cfg.batch_size == 4
        assert cfg.batch_delay_seconds == 1.5

    def test_reads_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("BATCH_SIZE=7\nLOG_LEVEL=DEBUG\n", encoding="utf-8")
        cfg = load_config(env_path=str(env_file))
        assert cfg.batch_size == 7
        assert cfg.log_level == "DEBUG"
