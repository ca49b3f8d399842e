"""
Quota display helpers: humanized usage rows.
"""

from typing import List

import humanize
from pydantic import BaseModel

from quota.reconciler import UNLIMITED, limit_display, usage_percent


def ibytes(value: int) -> str:
    """Binary-unit size ('1.0 GiB'); keeps the sign of a negative value."""
    if value < 0:
        return "-" + humanize.naturalsize(-value, binary=True)
    return humanize.naturalsize(value, binary=True)


class QuotaUsageRow(BaseModel):
    capacity: str
    used_bytes: str
    used_bytes_percent: str
    max_inodes: str
    used_inodes: str
    used_inodes_percent: str

    def as_list(self) -> List[str]:
        return [
            self.capacity,
            self.used_bytes,
            self.used_bytes_percent,
            self.max_inodes,
            self.used_inodes,
            self.used_inodes_percent,
        ]


USAGE_HEADER = ["capacity", "used", "used%", "inodes", "inodesUsed", "inodesUsed%"]


def humanize_quota_row(capacity: int, used_bytes: int, max_inodes: int, used_inodes: int) -> QuotaUsageRow:
    return QuotaUsageRow(
        capacity=UNLIMITED if capacity == 0 else ibytes(capacity),
        used_bytes=ibytes(used_bytes),
        used_bytes_percent=usage_percent(used_bytes, capacity),
        max_inodes=limit_display(max_inodes),
        used_inodes=humanize.intcomma(used_inodes),
        used_inodes_percent=usage_percent(used_inodes, max_inodes),
    )
