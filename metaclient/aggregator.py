"""
Directory Aggregator

Recomputes a directory subtree's total byte length and inode count by walking
it depth-first through the Metadata Accessor. Every entry below the directory
counts as one inode; regular and object-backed files add their length.
"""

import logging
from typing import Tuple

from metaclient.accessor import MetadataAccessor
from metaclient.errors import InvariantViolation
from metaclient.models import FILE_TYPES, FsFileType, Summary

logger = logging.getLogger(__name__)

SECTOR_SIZE = 512


def align512(length: int) -> int:
    """Round a length up to a whole number of 512-byte sectors (0 stays 0)."""
    if length <= 0:
        return 0
    return ((length - 1) // SECTOR_SIZE + 1) * SECTOR_SIZE


class DirectoryAggregator:
    """Depth-first (bytes, inodes) summarizer with a recursion depth guard"""

    def __init__(self, accessor: MetadataAccessor, max_depth: int = 1024):
        """
        Initialize aggregator.

        Args:
            accessor: Metadata accessor bound to the session's router
            max_depth: Deepest directory level walked before the tree is
                considered corrupt (cyclic or runaway)
        """
        self.accessor = accessor
        self.max_depth = max_depth

    def summarize(self, fs_id: int, dir_inode_id: int, aligned: bool = False) -> Tuple[int, int]:
        """
        Total byte length and inode count under a directory.

        Args:
            fs_id: Filesystem id
            dir_inode_id: Directory to summarize (not counted itself)
            aligned: Sum file lengths rounded up to 512-byte sectors

        Returns:
            (total_bytes, total_inodes)
        """
        logger.info(f"start to summary directory statistics, inode[{dir_inode_id}]")
        summary = Summary()
        self._walk(fs_id, dir_inode_id, summary, 0, aligned)
        logger.info(
            f"end summary directory statistics, inode[{dir_inode_id}], "
            f"inodes[{summary.inodes}], size[{summary.length}]"
        )
        return summary.length, summary.inodes

    def _walk(self, fs_id: int, inode_id: int, summary: Summary, depth: int, aligned: bool):
        if depth > self.max_depth:
            raise InvariantViolation(
                f"directory inode[{inode_id}] of fs[{fs_id}] is deeper than {self.max_depth} levels, tree may be cyclic"
            )

        for entry in self.accessor.list_entries(fs_id, inode_id):
            summary.add(inodes=1)
            if entry.type in FILE_TYPES:
                length = self.accessor.get_attr(fs_id, entry.inode_id).length
                summary.add(length=align512(length) if aligned else length)
            elif entry.type == FsFileType.TYPE_DIRECTORY:
                self._walk(fs_id, entry.inode_id, summary, depth + 1, aligned)
