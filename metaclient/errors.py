"""
Metadata Client Error Kinds

Every failure in the resolution layer is raised as one of these and propagated
to the caller unchanged. Nothing here retries or invalidates caches.
"""

import errno


class MetaClientError(Exception):
    """Base class for all metadata client failures"""


class InputInvalid(MetaClientError):
    """Caller supplied unusable input (missing fs id/name, zero id, bad address)"""


class NotFound(MetaClientError):
    """Inode, dentry, partition, copyset or filesystem does not exist"""
    errno = errno.ENOENT


class NotADirectory(MetaClientError):
    """Path traversal expected a directory and found another type"""
    errno = errno.ENOTDIR


class RemoteError(MetaClientError):
    """
    Remote call failed or answered with a non-success status.

    Transport failures (timeouts, exhausted retries) land here too.
    """

    def __init__(self, method: str, status: str):
        self.method = method
        self.status = status
        super().__init__(f"{method} failed: {status}")


class LeaderParseError(RemoteError):
    """Copyset leader peer could not be converted to a reachable address"""

    def __init__(self, peer: str, reason: str):
        self.peer = peer
        super().__init__("ParseLeaderPeer", f"parse leader peer[{peer}] failed: {reason}")


class InvariantViolation(MetaClientError):
    """Remote answer broke a structural guarantee (wrong batch size, malformed record)"""


def exit_code_for(exc: BaseException) -> int:
    """Map an error to the process exit status used by the launchers."""
    if isinstance(exc, (NotFound, NotADirectory)):
        return exc.errno
    if isinstance(exc, InputInvalid):
        return errno.EINVAL
    return 1
