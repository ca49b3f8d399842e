"""
Quota Checker Session

One QuotaChecker is one tool session: it owns the topology cache and wires the
router, accessor, path resolver, aggregator and identity resolver around it.
Everything a display layer needs is exposed here.
"""

import logging
from typing import Optional, Tuple

from pydantic import BaseModel

from metaclient.accessor import MetadataAccessor
from metaclient.aggregator import DirectoryAggregator
from metaclient.errors import NotFound, RemoteError
from metaclient.fs_identity import FsIdentityResolver
from metaclient.models import DirQuota, FsStatusCode, GetDirQuotaResponse, parse_response
from metaclient.path_resolver import PathResolver, normalize_path
from metaclient.router import PartitionRouter
from metaclient.topology_cache import TopologyCache
from quota.formatting import QuotaUsageRow, humanize_quota_row
from quota.reconciler import QuotaCheckRow, reconcile
from shared.config import ToolConfig
from shared.rpc_transport import RpcTransport

logger = logging.getLogger(__name__)


class QuotaCheckResult(BaseModel):
    fs_id: int
    path: str
    inode_id: int
    quota: DirQuota
    row: QuotaCheckRow
    consistent: bool


class QuotaChecker:
    """
    Session facade over the metadata client.

    Usage:
        with QuotaChecker(load_config()) as checker:
            result = checker.check_directory("/projects/a", fs_name="fs01")
    """

    def __init__(self, config: ToolConfig, transport=None, cache: Optional[TopologyCache] = None):
        """
        Initialize a session.

        Args:
            config: Tool configuration (addresses, timeouts, depth guard)
            transport: Remote-call primitive; an RpcTransport is built from config when omitted
            cache: Topology cache to share; a fresh one is created when omitted
        """
        self.config = config
        self._owns_transport = transport is None
        self.transport = transport or RpcTransport(
            timeout_ms=config.rpc_timeout_ms,
            retry_times=config.rpc_retry_times,
        )
        self.cache = cache or TopologyCache()
        self.router = PartitionRouter(self.transport, config.mds_addrs, self.cache)
        self.accessor = MetadataAccessor(self.transport, self.router)
        self.paths = PathResolver(self.accessor)
        self.aggregator = DirectoryAggregator(self.accessor, max_depth=config.max_dir_depth)
        self.identity = FsIdentityResolver(self.transport, config.mds_addrs)

    # ========================================================================
    # UPWARD INTERFACE
    # ========================================================================

    def resolve_fs_id(self, fs_id: Optional[int] = None, fs_name: Optional[str] = None) -> int:
        return self.identity.resolve_fs_id(fs_id, fs_name)

    def resolve_fs_name(self, fs_id: Optional[int] = None, fs_name: Optional[str] = None) -> str:
        return self.identity.resolve_fs_name(fs_id, fs_name)

    def path_to_inode(self, fs_id: int, path: str) -> int:
        return self.paths.path_to_inode(fs_id, path)

    def inode_to_path(self, fs_id: int, inode_id: int) -> str:
        return self.paths.inode_to_path(fs_id, inode_id)

    def summarize_directory(self, fs_id: int, dir_inode_id: int, aligned: bool = False) -> Tuple[int, int]:
        return self.aggregator.summarize(fs_id, dir_inode_id, aligned=aligned)

    def get_dir_quota(self, fs_id: int, dir_inode_id: int) -> DirQuota:
        """
        Fetch the quota the metadata service reports for a directory.

        Raises:
            NotFound: No quota is set on the directory
        """
        method = "GetDirQuota"
        body = self.transport.call(self.config.mds_addrs, method, {"fsId": fs_id, "dirInodeId": dir_inode_id})
        response = parse_response(GetDirQuotaResponse, method, body)
        if response.status_code == FsStatusCode.NOT_FOUND:
            raise NotFound(f"no quota on dir inode[{dir_inode_id}] of fs[{fs_id}]")
        if response.status_code != FsStatusCode.OK or response.quota is None:
            raise RemoteError(method, f"get quota of dir inode[{dir_inode_id}] failed: {response.status_code}")
        return response.quota

    @staticmethod
    def reconcile_quota(
        capacity: int,
        used_bytes: int,
        max_inodes: int,
        used_inodes: int,
        real_used_bytes: int,
        real_used_inodes: int,
    ) -> Tuple[QuotaCheckRow, bool]:
        return reconcile(capacity, used_bytes, max_inodes, used_inodes, real_used_bytes, real_used_inodes)

    @staticmethod
    def humanize_quota_row(capacity: int, used_bytes: int, max_inodes: int, used_inodes: int) -> QuotaUsageRow:
        return humanize_quota_row(capacity, used_bytes, max_inodes, used_inodes)

    # ========================================================================
    # END-TO-END CHECK
    # ========================================================================

    def check_directory(
        self,
        path: str,
        fs_id: Optional[int] = None,
        fs_name: Optional[str] = None,
        aligned: bool = False,
    ) -> QuotaCheckResult:
        """Resolve a directory, recompute its usage and reconcile it with its quota."""
        resolved_fs_id = self.resolve_fs_id(fs_id, fs_name)
        path = normalize_path(path)
        inode_id = self.path_to_inode(resolved_fs_id, path)
        quota = self.get_dir_quota(resolved_fs_id, inode_id)
        real_bytes, real_inodes = self.summarize_directory(resolved_fs_id, inode_id, aligned=aligned)
        row, consistent = self.reconcile_quota(
            quota.max_bytes, quota.used_bytes,
            quota.max_inodes, quota.used_inodes,
            real_bytes, real_inodes,
        )
        logger.info(f"quota check fs[{resolved_fs_id}] {path}: {row.status}")
        return QuotaCheckResult(
            fs_id=resolved_fs_id,
            path=path,
            inode_id=inode_id,
            quota=quota,
            row=row,
            consistent=consistent,
        )

    def close(self):
        if self._owns_transport:
            self.transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
