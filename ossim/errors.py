from __future__ import annotations


class InvalidWorkloadError(ValueError):
    """
    Raised when an engine is handed input a correct caller would never send:
    duplicate ids, non-positive sizes, cylinders outside the disk.

    Business outcomes such as "no block fits" are not errors; they come back
    as a result with ``success=False``.
    """
