"""
Filesystem Identity

A filesystem is named either by numeric id or by name. Whichever one the
caller did not give is looked up with GetFsInfo on the metadata service.
"""

import logging
from typing import Dict, List, Optional, Tuple

from metaclient.errors import InputInvalid, NotFound, RemoteError
from metaclient.models import FsInfo, FsStatusCode, GetFsInfoResponse, parse_response

logger = logging.getLogger(__name__)


def check_fs_id_or_name(fs_id: Optional[int] = None, fs_name: Optional[str] = None) -> Tuple[int, str]:
    """
    Validate the (fs id, fs name) pair supplied by the caller.

    Exactly one of the two must be given.

    Raises:
        InputInvalid: Neither or both are given, or the given one is zero/empty
    """
    if fs_id is None and fs_name is None:
        raise InputInvalid("fsname or fsid is required")
    if fs_id is not None and fs_name is not None:
        raise InputInvalid("only one of fsid and fsname may be given")
    if fs_id is not None:
        if fs_id < 0:
            raise InputInvalid(f"fsid {fs_id} is invalid")
        fs_name = ""
    else:
        fs_id = 0
        fs_name = fs_name.strip()
    if fs_id == 0 and not fs_name:
        raise InputInvalid("fsname or fsid is invalid")
    return fs_id, fs_name


class FsIdentityResolver:
    """Resolve fs id <-> fs name through the metadata service"""

    def __init__(self, transport, mds_addrs: List[str]):
        self.transport = transport
        self.mds_addrs = list(mds_addrs)
        self._by_id: Dict[int, FsInfo] = {}
        self._by_name: Dict[str, FsInfo] = {}

    def get_fs_info(self, fs_id: int = 0, fs_name: str = "") -> FsInfo:
        cached = self._by_id.get(fs_id) if fs_id else self._by_name.get(fs_name)
        if cached is not None:
            return cached

        method = "GetFsInfo"
        payload = {"fsId": fs_id} if fs_id else {"fsName": fs_name}
        body = self.transport.call(self.mds_addrs, method, payload)
        response = parse_response(GetFsInfoResponse, method, body)
        target = f"fs[{fs_id}]" if fs_id else f"fs[{fs_name}]"
        if response.status_code == FsStatusCode.NOT_FOUND:
            raise NotFound(f"{target} not found")
        if response.status_code != FsStatusCode.OK or response.fs_info is None:
            raise RemoteError(method, f"get {target} info failed: {response.status_code}")

        info = response.fs_info
        logger.debug(f"{target} resolved to id={info.fs_id} name={info.fs_name}")
        self._by_id[info.fs_id] = info
        self._by_name[info.fs_name] = info
        return info

    def resolve_fs_id(self, fs_id: Optional[int] = None, fs_name: Optional[str] = None) -> int:
        fs_id, fs_name = check_fs_id_or_name(fs_id, fs_name)
        if fs_id:
            return fs_id
        resolved = self.get_fs_info(fs_name=fs_name).fs_id
        if resolved == 0:
            raise InputInvalid("fsid is invalid")
        return resolved

    def resolve_fs_name(self, fs_id: Optional[int] = None, fs_name: Optional[str] = None) -> str:
        fs_id, fs_name = check_fs_id_or_name(fs_id, fs_name)
        if fs_name:
            return fs_name
        resolved = self.get_fs_info(fs_id=fs_id).fs_name
        if not resolved:
            raise InputInvalid("fsName is invalid")
        return resolved
