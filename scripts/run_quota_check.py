"""
Directory Quota Check Launcher

Resolves a directory, recomputes its byte and inode usage by walking it, and
compares the result with the usage counters of the directory's quota.

Usage:
    python scripts/run_quota_check.py --fsname fs01 --path /projects/a
    python scripts/run_quota_check.py --fsid 2 --path /projects/a --mds-addrs 10.0.1.1:6700,10.0.1.2:6700

Environment Variables:
    FSQUOTA_MDS_ADDRS: Metadata service addresses (default: 127.0.0.1:6700)
    FSQUOTA_RPC_TIMEOUT_MS: Per-call timeout (default: 10000)
    FSQUOTA_RPC_RETRY_TIMES: Attempts per call (default: 3)
    FSQUOTA_MAX_DIR_DEPTH: Directory depth guard (default: 1024)
    FSQUOTA_LOG_LEVEL: Log level (default: INFO)
"""
import argparse
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from metaclient.errors import MetaClientError, exit_code_for
from quota.checker import QuotaChecker
from quota.formatting import USAGE_HEADER
from quota.reconciler import CHECK_HEADER
from shared.config import load_config
from shared.logging_config import setup_logging


def format_table(header: List[str], rows: List[List[str]]) -> str:
    widths = [max(len(cell) for cell in column) for column in zip(header, *rows)]
    lines = []
    for row in [header, *rows]:
        lines.append("  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip())
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Check a directory quota against recomputed usage")
    fs_group = parser.add_mutually_exclusive_group(required=True)
    fs_group.add_argument("--fsid", type=int, help="Filesystem id")
    fs_group.add_argument("--fsname", help="Filesystem name")
    parser.add_argument("--path", required=True, help="Directory path inside the filesystem")
    parser.add_argument("--mds-addrs", help="Comma-separated metadata service host:port list")
    parser.add_argument("--rpc-timeout-ms", type=int)
    parser.add_argument("--rpc-retry-times", type=int)
    parser.add_argument("--max-depth", type=int, help="Directory depth guard")
    parser.add_argument("--aligned", action="store_true", help="Count file lengths in whole 512-byte sectors")
    parser.add_argument("--show-usage", action="store_true", help="Also print humanized quota usage")
    parser.add_argument("--log-level")
    parser.add_argument("--log-file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(
            mds_addrs=args.mds_addrs,
            rpc_timeout_ms=args.rpc_timeout_ms,
            rpc_retry_times=args.rpc_retry_times,
            max_dir_depth=args.max_depth,
            log_level=args.log_level,
        )
    except MetaClientError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return exit_code_for(e)

    logger = setup_logging("quota-check", level=config.log_level, log_file=args.log_file)

    try:
        with QuotaChecker(config) as checker:
            result = checker.check_directory(args.path, fs_id=args.fsid, fs_name=args.fsname, aligned=args.aligned)
            print(format_table(["fsId", "path", *CHECK_HEADER],
                               [[str(result.fs_id), result.path, *result.row.as_list()]]))
            if args.show_usage:
                quota = result.quota
                usage = checker.humanize_quota_row(quota.max_bytes, quota.used_bytes,
                                                   quota.max_inodes, quota.used_inodes)
                print()
                print(format_table(USAGE_HEADER, [usage.as_list()]))
    except MetaClientError as e:
        logger.error(f"Quota check failed: {e}")
        return exit_code_for(e)

    return 0 if result.consistent else 1


if __name__ == "__main__":
    sys.exit(main())
