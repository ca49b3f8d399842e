"""
Metadata Accessor

Single-inode attribute lookups and directory listings, sent to the leader of
the partition that owns the inode in question.
"""

import logging
from typing import Any, Dict, List

from metaclient.errors import InvariantViolation, NotFound, RemoteError
from metaclient.models import (
    BatchGetInodeAttrResponse,
    Dentry,
    GetDentryResponse,
    InodeAttr,
    ListDentryResponse,
    MetaStatusCode,
    PartitionInfo,
    parse_response,
)
from metaclient.router import PartitionRouter

logger = logging.getLogger(__name__)


def _partition_coordinates(fs_id: int, partition: PartitionInfo) -> Dict[str, Any]:
    return {
        "poolId": partition.pool_id,
        "copysetId": partition.copyset_id,
        "partitionId": partition.partition_id,
        "fsId": fs_id,
    }


def _check_status(method: str, status_code: str, what: str):
    if status_code == MetaStatusCode.OK:
        return
    if status_code == MetaStatusCode.NOT_FOUND:
        raise NotFound(f"{what} not found")
    raise RemoteError(method, f"{what}: {status_code}")


class MetadataAccessor:
    """Inode and dentry reads against partition leaders"""

    def __init__(self, transport, router: PartitionRouter):
        self.transport = transport
        self.router = router

    def _send(self, fs_id: int, inode_id: int, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        addr = self.router.resolve_leader(fs_id, inode_id)
        return self.transport.call([addr], method, payload)

    def get_attr(self, fs_id: int, inode_id: int) -> InodeAttr:
        """
        Fetch one inode's attributes with a batch lookup of size one.

        Raises:
            NotFound: Inode absent (or not covered by any partition)
            RemoteError: Any other non-OK status
            InvariantViolation: Reply did not carry exactly one attribute
        """
        method = "BatchGetInodeAttr"
        partition = self.router.resolve_partition(fs_id, inode_id)
        payload = _partition_coordinates(fs_id, partition)
        payload["inodeId"] = [inode_id]

        body = self._send(fs_id, inode_id, method, payload)
        response = parse_response(BatchGetInodeAttrResponse, method, body)
        _check_status(method, response.status_code, f"inode[{inode_id}] of fs[{fs_id}]")
        if len(response.attr) != 1:
            raise InvariantViolation(f"{method} returned {len(response.attr)} attrs for inode[{inode_id}], expected 1")
        return response.attr[0]

    def list_entries(self, fs_id: int, dir_inode_id: int) -> List[Dentry]:
        """List a directory's entries at its partition's latest transaction id."""
        method = "ListDentry"
        partition = self.router.resolve_partition(fs_id, dir_inode_id)
        payload = _partition_coordinates(fs_id, partition)
        payload["dirInodeId"] = dir_inode_id
        payload["txId"] = partition.tx_id

        body = self._send(fs_id, dir_inode_id, method, payload)
        response = parse_response(ListDentryResponse, method, body)
        _check_status(method, response.status_code, f"dentries of dir[{dir_inode_id}] in fs[{fs_id}]")
        logger.debug(f"dir[{dir_inode_id}] has {len(response.dentrys)} entries")
        return response.dentrys

    def get_dentry(self, fs_id: int, parent_id: int, name: str) -> Dentry:
        """Look up a single (parent, name) entry."""
        method = "GetDentry"
        partition = self.router.resolve_partition(fs_id, parent_id)
        payload = _partition_coordinates(fs_id, partition)
        payload["parentInodeId"] = parent_id
        payload["name"] = name
        payload["txId"] = partition.tx_id

        body = self._send(fs_id, parent_id, method, payload)
        response = parse_response(GetDentryResponse, method, body)
        _check_status(method, response.status_code, f"dentry '{name}' under inode[{parent_id}]")
        if response.dentry is None:
            raise InvariantViolation(f"{method} returned OK without a dentry for '{name}' under inode[{parent_id}]")
        return response.dentry
