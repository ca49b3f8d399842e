"""
Metadata Client — Resolution Layer

Client-side view of a partitioned filesystem namespace.
Responsibilities:
- Topology caching (partitions, copysets, leaders)
- Inode -> partition -> leader routing
- Inode attribute and dentry reads
- Path <-> inode resolution
- Recursive directory size/inode aggregation
"""
