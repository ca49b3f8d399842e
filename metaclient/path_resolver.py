"""
Path Resolver

Converts slash-delimited paths to inode ids by walking one dentry per segment
from the root, and inode ids back to absolute paths by following first-parent
links up to the root.
"""

import logging
from typing import List

from metaclient.accessor import MetadataAccessor
from metaclient.errors import InvariantViolation, NotADirectory
from metaclient.models import ROOT_INODE_ID, FsFileType

logger = logging.getLogger(__name__)


def split_path(path: str) -> List[str]:
    return [segment for segment in path.split("/") if segment]


def normalize_path(path: str) -> str:
    """'a//b/' -> '/a/b'; empty and '/' both give '/'."""
    return "/" + "/".join(split_path(path))


class PathResolver:
    def __init__(self, accessor: MetadataAccessor):
        self.accessor = accessor

    def path_to_inode(self, fs_id: int, path: str, expect_dir: bool = True) -> int:
        """
        Resolve a path to its inode id.

        The root path resolves without any remote call. Every intermediate
        segment must be a directory; with expect_dir the last one must be too.

        Raises:
            NotFound: A segment does not exist
            NotADirectory: A segment that must be a directory is not one
        """
        inode_id = ROOT_INODE_ID
        segments = split_path(path)
        for index, name in enumerate(segments):
            dentry = self.accessor.get_dentry(fs_id, inode_id, name)
            is_last = index == len(segments) - 1
            if dentry.type != FsFileType.TYPE_DIRECTORY and (expect_dir or not is_last):
                raise NotADirectory(f"'{name}' in path '{path}' is not a directory")
            inode_id = dentry.inode_id
        return inode_id

    def inode_to_path(self, fs_id: int, inode_id: int) -> str:
        """
        Rebuild the absolute path of an inode.

        Returns an empty string when some ancestor no longer lists the entry
        being walked (removed while walking); callers treat that as "not
        currently resolvable" rather than an error.
        """
        if inode_id == ROOT_INODE_ID:
            return "/"

        names = []
        current = inode_id
        while current != ROOT_INODE_ID:
            attr = self.accessor.get_attr(fs_id, current)
            if not attr.parent:
                raise InvariantViolation(f"inode[{current}] of fs[{fs_id}] has no parent")
            # hard links: only the first parent is followed
            parent_id = attr.parent[0]

            entries = self.accessor.list_entries(fs_id, parent_id)
            name = next((e.name for e in entries if e.inode_id == current), None)
            if name is None:
                logger.warning(f"inode[{current}] not listed under parent[{parent_id}] in fs[{fs_id}], directory may be deleted")
                return ""
            names.append(name)
            current = parent_id

        return "/" + "/".join(reversed(names))
