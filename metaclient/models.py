"""
Metadata Client Records

Strongly typed request/response records for the topology and metadata
services. Replies are validated here, at the decoding boundary; a missing or
malformed field is rejected as InvariantViolation naming the remote method.

Wire field names are camelCase (fsId, poolId, ...); Python attributes are
snake_case.
"""

import enum
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from metaclient.errors import InvariantViolation, LeaderParseError

ROOT_INODE_ID = 1

# ============================================================================
# ENUM DEFINITIONS
# ============================================================================

class FsFileType(str, enum.Enum):
    """Inode / dentry type"""
    TYPE_DIRECTORY = "TYPE_DIRECTORY"
    TYPE_FILE = "TYPE_FILE"
    TYPE_SYM_LINK = "TYPE_SYM_LINK"
    TYPE_S3 = "TYPE_S3"


class MetaStatusCode(str, enum.Enum):
    """Metaserver reply status (unknown codes are kept as plain strings)"""
    OK = "OK"
    NOT_FOUND = "NOT_FOUND"


class TopoStatusCode(str, enum.Enum):
    """Topology service reply status (unknown codes are kept as plain strings)"""
    TOPO_OK = "TOPO_OK"


class FsStatusCode(str, enum.Enum):
    """Filesystem-info / quota service reply status"""
    OK = "OK"
    NOT_FOUND = "NOT_FOUND"


FILE_TYPES = (FsFileType.TYPE_FILE, FsFileType.TYPE_S3)


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# ============================================================================
# TOPOLOGY RECORDS
# ============================================================================

class PartitionInfo(_Record):
    """Contiguous inode range [start, end] of one filesystem, replicated by one copyset"""
    fs_id: int = Field(ge=0)
    pool_id: int = Field(ge=0)
    copyset_id: int = Field(ge=0)
    partition_id: int = Field(ge=0)
    start: int = Field(ge=0)
    end: int = Field(ge=0)
    tx_id: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_range(self):
        if self.start > self.end:
            raise ValueError(f"partition {self.partition_id} range start {self.start} > end {self.end}")
        return self

    def covers(self, fs_id: int, inode_id: int) -> bool:
        return self.fs_id == fs_id and self.start <= inode_id <= self.end


def copyset_key(pool_id: int, copyset_id: int) -> int:
    """Composite copyset key; several partitions may share one copyset."""
    return (pool_id << 32) | copyset_id


class Peer(_Record):
    id: int = 0
    address: str


class CopysetInfo(_Record):
    pool_id: int = Field(ge=0)
    copyset_id: int = Field(ge=0)
    peers: List[Peer] = Field(default_factory=list)
    leader_peer: Optional[Peer] = None


class FsInfo(_Record):
    fs_id: int = Field(ge=0)
    fs_name: str


# ============================================================================
# METADATA RECORDS
# ============================================================================

class InodeAttr(_Record):
    """Attributes of one inode; hard links give it several parents"""
    inode_id: int = Field(ge=0)
    length: int = Field(default=0, ge=0)
    type: FsFileType
    parent: List[int] = Field(default_factory=list)


class Dentry(_Record):
    fs_id: int = Field(ge=0)
    parent_inode_id: int = Field(ge=0)
    name: str
    inode_id: int = Field(ge=0)
    type: FsFileType
    tx_id: int = Field(default=0, ge=0)


class DirQuota(_Record):
    """Quota counters as reported by the system; a zero limit means unlimited"""
    max_bytes: int = Field(default=0, ge=0)
    used_bytes: int = 0
    max_inodes: int = Field(default=0, ge=0)
    used_inodes: int = 0


@dataclass
class Summary:
    """Running (bytes, inodes) total owned by a single aggregation call chain"""
    length: int = 0
    inodes: int = 0

    def add(self, length: int = 0, inodes: int = 0):
        self.length += length
        self.inodes += inodes


# ============================================================================
# RESPONSE ENVELOPES
# ============================================================================

class GetFsInfoResponse(_Record):
    status_code: str
    fs_info: Optional[FsInfo] = None


class ListPartitionResponse(_Record):
    status_code: str
    partition_info_list: Optional[List[PartitionInfo]] = None


class CopysetValue(_Record):
    status_code: str
    copyset_info: Optional[CopysetInfo] = None


class GetCopysetsInfoResponse(_Record):
    copyset_values: List[CopysetValue] = Field(default_factory=list)


class BatchGetInodeAttrResponse(_Record):
    status_code: str
    attr: List[InodeAttr] = Field(default_factory=list)


class ListDentryResponse(_Record):
    status_code: str
    dentrys: List[Dentry] = Field(default_factory=list)


class GetDentryResponse(_Record):
    status_code: str
    dentry: Optional[Dentry] = None


class GetDirQuotaResponse(_Record):
    status_code: str
    quota: Optional[DirQuota] = None


R = TypeVar("R", bound=BaseModel)


def parse_response(model: Type[R], method: str, body: Dict[str, Any]) -> R:
    """Validate a decoded reply against its record type."""
    try:
        return model.model_validate(body)
    except ValidationError as e:
        raise InvariantViolation(f"{method} returned a malformed reply: {e}") from e


def peer_to_addr(peer: Optional[Peer]) -> str:
    """
    Convert a copyset peer to a host:port address.

    Peer addresses look like 'ip:port:index'; the trailing index is dropped.
    """
    if peer is None:
        raise LeaderParseError("", "copyset has no leader")
    parts = peer.address.split(":")
    if len(parts) < 2 or not parts[0] or not parts[1].isdigit():
        raise LeaderParseError(peer.address, "expected ip:port:index")
    return f"{parts[0]}:{parts[1]}"
