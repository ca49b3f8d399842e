"""
Partition Router

Maps (fs id, inode id) to the partition that owns the inode and to the leader
replica of that partition's copyset. Topology answers are read through the
session's TopologyCache; a miss is the only time a remote call is issued.

A NotFound from resolve_partition is terminal for the current operation: the
partition list is not refreshed and the lookup is not retried.
"""

import logging
from typing import List

from metaclient.errors import NotFound, RemoteError
from metaclient.models import (
    CopysetInfo,
    GetCopysetsInfoResponse,
    ListPartitionResponse,
    PartitionInfo,
    TopoStatusCode,
    parse_response,
    peer_to_addr,
)
from metaclient.topology_cache import TopologyCache

logger = logging.getLogger(__name__)


class PartitionRouter:
    """Resolve inode ownership and copyset leaders against the topology service"""

    def __init__(self, transport, mds_addrs: List[str], cache: TopologyCache):
        """
        Initialize router.

        Args:
            transport: Remote-call primitive exposing call(addrs, method, payload)
            mds_addrs: Topology/metadata service addresses (host:port)
            cache: Session-owned topology cache
        """
        self.transport = transport
        self.mds_addrs = list(mds_addrs)
        self.cache = cache

    # ========================================================================
    # REMOTE FETCHERS (only reached on cache miss)
    # ========================================================================

    def _fetch_partitions(self, fs_id: int) -> List[PartitionInfo]:
        method = "ListPartition"
        body = self.transport.call(self.mds_addrs, method, {"fsId": fs_id})
        response = parse_response(ListPartitionResponse, method, body)
        if response.status_code != TopoStatusCode.TOPO_OK:
            raise RemoteError(method, f"get partition failed in fs[{fs_id}], error[{response.status_code}]")
        if not response.partition_info_list:
            raise NotFound(f"partition not found in fs[{fs_id}]")
        logger.debug(f"fs[{fs_id}] has {len(response.partition_info_list)} partitions")
        return response.partition_info_list

    def _fetch_copyset(self, pool_id: int, copyset_id: int) -> CopysetInfo:
        method = "GetCopysetsInfo"
        payload = {"copysetKeys": [{"poolId": pool_id, "copysetId": copyset_id}]}
        body = self.transport.call(self.mds_addrs, method, payload)
        response = parse_response(GetCopysetsInfoResponse, method, body)
        if not response.copyset_values:
            raise NotFound(f"no copyset info found for pool[{pool_id}] copyset[{copyset_id}]")

        # one key requested, one value expected
        value = response.copyset_values[0]
        if value.status_code != TopoStatusCode.TOPO_OK:
            raise RemoteError(method, f"get copyset pool[{pool_id}] copyset[{copyset_id}] failed: {value.status_code}")
        if value.copyset_info is None:
            raise NotFound(f"copyset pool[{pool_id}] copyset[{copyset_id}] has no info")
        return value.copyset_info

    # ========================================================================
    # ROUTING
    # ========================================================================

    def list_partitions(self, fs_id: int) -> List[PartitionInfo]:
        return self.cache.get_partitions(fs_id, lambda: self._fetch_partitions(fs_id))

    def get_copyset(self, pool_id: int, copyset_id: int) -> CopysetInfo:
        return self.cache.get_copyset(pool_id, copyset_id, lambda: self._fetch_copyset(pool_id, copyset_id))

    def resolve_partition(self, fs_id: int, inode_id: int) -> PartitionInfo:
        """
        Find the partition whose [start, end] range covers the inode.

        Raises:
            NotFound: No known partition of the filesystem covers the inode
        """
        for partition in self.list_partitions(fs_id):
            if partition.covers(fs_id, inode_id):
                return partition
        raise NotFound(f"inode[{inode_id}] is not on any partition of fs[{fs_id}]")

    def resolve_leader(self, fs_id: int, inode_id: int) -> str:
        """
        Address of the leader replica serving the inode's partition.

        Raises:
            NotFound: Inode not covered by any partition, or copyset unknown
            LeaderParseError: Leader peer cannot be turned into host:port
        """
        partition = self.resolve_partition(fs_id, inode_id)

        def fetch_leader() -> str:
            copyset = self.get_copyset(partition.pool_id, partition.copyset_id)
            addr = peer_to_addr(copyset.leader_peer)
            logger.debug(f"partition[{partition.partition_id}] leader is {addr}")
            return addr

        return self.cache.get_leader_addr(partition.partition_id, fetch_leader)
