"""
Tool configuration.

Values come from FSQUOTA_* environment variables; explicit overrides (CLI flags)
take precedence. Bad environment values fall back to the defaults.
"""

import os
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from metaclient.errors import InputInvalid


DEFAULT_MDS_ADDRS = "127.0.0.1:6700"
DEFAULT_RPC_TIMEOUT_MS = 10000
DEFAULT_RPC_RETRY_TIMES = 3
DEFAULT_MAX_DIR_DEPTH = 1024
DEFAULT_LOG_LEVEL = "INFO"


def _int_env(name: str, default: int) -> int:
    raw = str(os.getenv(name, str(default))).strip()
    try:
        return int(raw)
    except Exception:
        return default


def parse_addr_list(raw: str) -> List[str]:
    """Split a comma-separated host:port list, rejecting entries without a numeric port."""
    addrs = []
    for item in raw.split(","):
        addr = item.strip()
        if not addr:
            continue
        host, sep, port = addr.rpartition(":")
        if not sep or not host or not port.isdigit():
            raise InputInvalid(f"invalid address '{addr}', expected host:port")
        addrs.append(addr)
    if not addrs:
        raise InputInvalid("at least one metadata service address is required")
    return addrs


class ToolConfig(BaseModel):
    mds_addrs: List[str] = Field(default_factory=lambda: [DEFAULT_MDS_ADDRS])
    rpc_timeout_ms: int = Field(default=DEFAULT_RPC_TIMEOUT_MS, gt=0)
    rpc_retry_times: int = Field(default=DEFAULT_RPC_RETRY_TIMES, ge=1)
    max_dir_depth: int = Field(default=DEFAULT_MAX_DIR_DEPTH, ge=1)
    log_level: str = DEFAULT_LOG_LEVEL

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper()


def load_config(
    mds_addrs: Optional[str] = None,
    rpc_timeout_ms: Optional[int] = None,
    rpc_retry_times: Optional[int] = None,
    max_dir_depth: Optional[int] = None,
    log_level: Optional[str] = None,
) -> ToolConfig:
    """
    Build the tool configuration.

    Args:
        mds_addrs: Comma-separated host:port list (overrides FSQUOTA_MDS_ADDRS)
        rpc_timeout_ms: Per-call timeout (overrides FSQUOTA_RPC_TIMEOUT_MS)
        rpc_retry_times: Attempts per call (overrides FSQUOTA_RPC_RETRY_TIMES)
        max_dir_depth: Aggregation depth guard (overrides FSQUOTA_MAX_DIR_DEPTH)
        log_level: Logging level name (overrides FSQUOTA_LOG_LEVEL)

    Raises:
        InputInvalid: An override is out of range or malformed
    """
    raw_addrs = mds_addrs if mds_addrs is not None else os.getenv("FSQUOTA_MDS_ADDRS", DEFAULT_MDS_ADDRS)
    values = {
        "mds_addrs": parse_addr_list(raw_addrs),
        "rpc_timeout_ms": rpc_timeout_ms if rpc_timeout_ms is not None
        else _int_env("FSQUOTA_RPC_TIMEOUT_MS", DEFAULT_RPC_TIMEOUT_MS),
        "rpc_retry_times": rpc_retry_times if rpc_retry_times is not None
        else max(1, _int_env("FSQUOTA_RPC_RETRY_TIMES", DEFAULT_RPC_RETRY_TIMES)),
        "max_dir_depth": max_dir_depth if max_dir_depth is not None
        else _int_env("FSQUOTA_MAX_DIR_DEPTH", DEFAULT_MAX_DIR_DEPTH),
        "log_level": log_level if log_level is not None
        else os.getenv("FSQUOTA_LOG_LEVEL", DEFAULT_LOG_LEVEL),
    }
    try:
        return ToolConfig(**values)
    except ValidationError as e:
        raise InputInvalid(f"invalid configuration: {e}") from e
