"""Shared fixtures: an in-memory metadata cluster standing in for the remote services."""

from collections import Counter, OrderedDict

import pytest

from metaclient.models import ROOT_INODE_ID
from quota.checker import QuotaChecker
from shared.config import ToolConfig

MDS_ADDR = "127.0.0.1:6700"


class FakeMetaCluster:
    """
    Serves every remote method from in-memory tables and counts calls.

    Implements the transport interface: call(addrs, method, payload).
    Set `overrides[method]` to a callable(payload) -> reply to inject faults.
    """

    def __init__(self, fs_id=1, fs_name="fs01"):
        self.fs_id = fs_id
        self.fs_name = fs_name
        self.partitions = []
        self.copysets = {}
        self.inodes = {}
        self.children = {}
        self.quotas = {}
        self.overrides = {}
        self.calls = Counter()
        self.requests = []

    # -- building ----------------------------------------------------------

    def add_partition(self, partition_id, start, end, pool_id=1, copyset_id=100, tx_id=0, fs_id=None):
        self.partitions.append({
            "fsId": self.fs_id if fs_id is None else fs_id,
            "poolId": pool_id,
            "copysetId": copyset_id,
            "partitionId": partition_id,
            "start": start,
            "end": end,
            "txId": tx_id,
        })

    def add_copyset(self, pool_id, copyset_id, leader):
        self.copysets[(pool_id, copyset_id)] = {
            "poolId": pool_id,
            "copysetId": copyset_id,
            "peers": [{"id": 1, "address": leader}],
            "leaderPeer": {"id": 1, "address": leader},
        }

    def add_inode(self, inode_id, parent_id, name, type_, length=0):
        self.inodes[inode_id] = {
            "inodeId": inode_id,
            "length": length,
            "type": type_,
            "parent": [parent_id],
        }
        self.children.setdefault(parent_id, OrderedDict())[name] = inode_id
        if type_ == "TYPE_DIRECTORY":
            self.children.setdefault(inode_id, OrderedDict())

    def remove_entry(self, parent_id, name):
        del self.children[parent_id][name]

    def set_quota(self, inode_id, max_bytes, used_bytes, max_inodes, used_inodes):
        self.quotas[inode_id] = {
            "maxBytes": max_bytes,
            "usedBytes": used_bytes,
            "maxInodes": max_inodes,
            "usedInodes": used_inodes,
        }

    # -- transport ---------------------------------------------------------

    def call(self, addrs, method, payload):
        self.calls[method] += 1
        self.requests.append((method, list(addrs), payload))
        if method in self.overrides:
            return self.overrides[method](payload)
        return getattr(self, f"_{method}")(payload)

    def close(self):
        pass

    def _dentry(self, parent_id, name, inode_id):
        return {
            "fsId": self.fs_id,
            "parentInodeId": parent_id,
            "name": name,
            "inodeId": inode_id,
            "type": self.inodes[inode_id]["type"],
            "txId": 0,
        }

    def _GetFsInfo(self, payload):
        if payload.get("fsId") == self.fs_id or payload.get("fsName") == self.fs_name:
            return {"statusCode": "OK", "fsInfo": {"fsId": self.fs_id, "fsName": self.fs_name}}
        return {"statusCode": "NOT_FOUND"}

    def _ListPartition(self, payload):
        found = [p for p in self.partitions if p["fsId"] == payload["fsId"]]
        return {"statusCode": "TOPO_OK", "partitionInfoList": found}

    def _GetCopysetsInfo(self, payload):
        values = []
        for key in payload["copysetKeys"]:
            info = self.copysets.get((key["poolId"], key["copysetId"]))
            if info is None:
                values.append({"statusCode": "TOPO_COPYSET_NOT_FOUND"})
            else:
                values.append({"statusCode": "TOPO_OK", "copysetInfo": info})
        return {"copysetValues": values}

    def _owner_ok(self, payload, inode_id):
        for p in self.partitions:
            if p["partitionId"] == payload["partitionId"]:
                return p["start"] <= inode_id <= p["end"]
        return False

    def _BatchGetInodeAttr(self, payload):
        inode_id = payload["inodeId"][0]
        if not self._owner_ok(payload, inode_id):
            return {"statusCode": "PARTITION_ID_MISSMATCH"}
        if inode_id not in self.inodes:
            return {"statusCode": "NOT_FOUND"}
        return {"statusCode": "OK", "attr": [self.inodes[inode_id]]}

    def _ListDentry(self, payload):
        dir_id = payload["dirInodeId"]
        if not self._owner_ok(payload, dir_id):
            return {"statusCode": "PARTITION_ID_MISSMATCH"}
        if dir_id not in self.children:
            return {"statusCode": "NOT_FOUND"}
        return {
            "statusCode": "OK",
            "dentrys": [self._dentry(dir_id, name, ino) for name, ino in self.children[dir_id].items()],
        }

    def _GetDentry(self, payload):
        parent_id = payload["parentInodeId"]
        if not self._owner_ok(payload, parent_id):
            return {"statusCode": "PARTITION_ID_MISSMATCH"}
        inode_id = self.children.get(parent_id, {}).get(payload["name"])
        if inode_id is None:
            return {"statusCode": "NOT_FOUND"}
        return {"statusCode": "OK", "dentry": self._dentry(parent_id, payload["name"], inode_id)}

    def _GetDirQuota(self, payload):
        quota = self.quotas.get(payload["dirInodeId"])
        if quota is None:
            return {"statusCode": "NOT_FOUND"}
        return {"statusCode": "OK", "quota": quota}


def build_cluster():
    """
    /                 (1)
    ├── a/            (2)    partition 10, copyset (1,100)
    │   ├── b.txt     (3)    1000 bytes
    │   └── c/        (4)    empty
    └── d/            (100)  partition 11, copyset (1,101)
        ├── e.bin     (101)  4096 bytes, object-backed
        ├── f.log     (5)    10 bytes
        └── link      (102)  symlink
    """
    cluster = FakeMetaCluster()
    cluster.add_partition(10, 0, 99, pool_id=1, copyset_id=100, tx_id=3)
    cluster.add_partition(11, 100, 199, pool_id=1, copyset_id=101, tx_id=7)
    cluster.add_copyset(1, 100, "10.0.0.1:6800:0")
    cluster.add_copyset(1, 101, "10.0.0.2:6801:0")

    cluster.children[ROOT_INODE_ID] = OrderedDict()
    cluster.inodes[ROOT_INODE_ID] = {"inodeId": 1, "length": 0, "type": "TYPE_DIRECTORY", "parent": [0]}
    cluster.add_inode(2, 1, "a", "TYPE_DIRECTORY")
    cluster.add_inode(3, 2, "b.txt", "TYPE_FILE", length=1000)
    cluster.add_inode(4, 2, "c", "TYPE_DIRECTORY")
    cluster.add_inode(100, 1, "d", "TYPE_DIRECTORY")
    cluster.add_inode(101, 100, "e.bin", "TYPE_S3", length=4096)
    cluster.add_inode(5, 100, "f.log", "TYPE_FILE", length=10)
    cluster.add_inode(102, 100, "link", "TYPE_SYM_LINK", length=7)
    return cluster


@pytest.fixture
def cluster():
    return build_cluster()


@pytest.fixture
def config():
    return ToolConfig(mds_addrs=[MDS_ADDR], rpc_timeout_ms=1000, rpc_retry_times=1, max_dir_depth=64)


@pytest.fixture
def checker(cluster, config):
    return QuotaChecker(config, transport=cluster)
