"""Tests for environment-backed configuration."""

import pytest

from metaclient.errors import InputInvalid
from shared.config import DEFAULT_RPC_TIMEOUT_MS, load_config, parse_addr_list


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("FSQUOTA_MDS_ADDRS", "FSQUOTA_RPC_TIMEOUT_MS", "FSQUOTA_RPC_RETRY_TIMES",
                 "FSQUOTA_MAX_DIR_DEPTH", "FSQUOTA_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestParseAddrList:

    def test_splits_and_strips(self):
        assert parse_addr_list(" 10.0.0.1:6700, ,10.0.0.2:6700 ") == ["10.0.0.1:6700", "10.0.0.2:6700"]

    @pytest.mark.parametrize("raw", ["", " , ", "10.0.0.1", "10.0.0.1:abc", ":6700"])
    def test_rejects_bad_entries(self, raw):
        with pytest.raises(InputInvalid):
            parse_addr_list(raw)


class TestLoadConfig:

    def test_defaults(self):
        config = load_config()
        assert config.mds_addrs == ["127.0.0.1:6700"]
        assert config.rpc_timeout_ms == DEFAULT_RPC_TIMEOUT_MS
        assert config.rpc_retry_times == 3
        assert config.max_dir_depth == 1024
        assert config.log_level == "INFO"

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("FSQUOTA_MDS_ADDRS", "m1:1,m2:2")
        monkeypatch.setenv("FSQUOTA_RPC_TIMEOUT_MS", "500")
        monkeypatch.setenv("FSQUOTA_RPC_RETRY_TIMES", "5")
        monkeypatch.setenv("FSQUOTA_LOG_LEVEL", "debug")
        config = load_config()
        assert config.mds_addrs == ["m1:1", "m2:2"]
        assert config.rpc_timeout_ms == 500
        assert config.rpc_retry_times == 5
        assert config.log_level == "DEBUG"

    def test_bad_environment_falls_back(self, monkeypatch):
        monkeypatch.setenv("FSQUOTA_RPC_TIMEOUT_MS", "soon")
        monkeypatch.setenv("FSQUOTA_RPC_RETRY_TIMES", "0")
        config = load_config()
        assert config.rpc_timeout_ms == DEFAULT_RPC_TIMEOUT_MS
        assert config.rpc_retry_times == 1

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("FSQUOTA_MDS_ADDRS", "m1:1")
        config = load_config(mds_addrs="o1:9", rpc_timeout_ms=42, max_dir_depth=8)
        assert config.mds_addrs == ["o1:9"]
        assert config.rpc_timeout_ms == 42
        assert config.max_dir_depth == 8

    def test_invalid_override(self):
        with pytest.raises(InputInvalid, match="invalid configuration"):
            load_config(rpc_retry_times=0)
