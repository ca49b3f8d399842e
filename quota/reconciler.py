"""
Quota Reconciler

Cross-checks the usage counters a directory quota reports against totals
recomputed by walking the directory. Equality is exact; there is no tolerance.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Tuple

import humanize
from pydantic import BaseModel

logger = logging.getLogger(__name__)

UNLIMITED = "unlimited"
CHECK_SUCCESS = "success"
CHECK_FAILED = "failed"


def round_half_away(value: Decimal) -> int:
    """Round to the nearest integer, halves away from zero (33.5 -> 34, -0.5 -> -1)."""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def usage_percent(used: int, limit: int) -> str:
    """Whole-number percentage of a limit; empty string when the limit is 0 (unlimited)."""
    if limit == 0:
        return ""
    return str(round_half_away(Decimal(used) * 100 / Decimal(limit)))


def limit_display(limit: int) -> str:
    return UNLIMITED if limit == 0 else humanize.intcomma(limit)


class QuotaCheckRow(BaseModel):
    capacity: str
    used_bytes: str
    real_used_bytes: str
    max_inodes: str
    used_inodes: str
    real_used_inodes: str
    status: str

    def as_list(self) -> List[str]:
        return [
            self.capacity,
            self.used_bytes,
            self.real_used_bytes,
            self.max_inodes,
            self.used_inodes,
            self.real_used_inodes,
            self.status,
        ]


CHECK_HEADER = ["capacity", "used", "realUsed", "inodes", "inodesUsed", "realInodesUsed", "status"]


def reconcile(
    capacity: int,
    used_bytes: int,
    max_inodes: int,
    used_inodes: int,
    real_used_bytes: int,
    real_used_inodes: int,
) -> Tuple[QuotaCheckRow, bool]:
    """
    Compare reported quota usage with recomputed usage.

    Args:
        capacity: Byte limit (0 = unlimited)
        used_bytes: Bytes used as reported by the quota
        max_inodes: Inode limit (0 = unlimited)
        used_inodes: Inodes used as reported by the quota
        real_used_bytes: Bytes recomputed from the directory tree
        real_used_inodes: Inodes recomputed from the directory tree

    Returns:
        (display row, consistent) where consistent means both counters match exactly
    """
    consistent = used_bytes == real_used_bytes and used_inodes == real_used_inodes
    row = QuotaCheckRow(
        capacity=limit_display(capacity),
        used_bytes=humanize.intcomma(used_bytes),
        real_used_bytes=humanize.intcomma(real_used_bytes),
        max_inodes=limit_display(max_inodes),
        used_inodes=humanize.intcomma(used_inodes),
        real_used_inodes=humanize.intcomma(real_used_inodes),
        status=CHECK_SUCCESS if consistent else CHECK_FAILED,
    )
    if not consistent:
        logger.warning(
            f"quota mismatch: bytes reported={used_bytes} real={real_used_bytes}, "
            f"inodes reported={used_inodes} real={real_used_inodes}"
        )
    return row, consistent
