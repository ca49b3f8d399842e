"""
Shared utilities for the quota tool.

This package contains ambient functionality used by metaclient and quota:
- config: FSQUOTA_* environment settings and CLI overrides
- logging_config: Logging setup for launchers
- rpc_transport: JSON-over-HTTP remote calls with timeout and retry
"""
