"""Input checks run before a scan enters the feature stages."""
import numpy as np

from .numba_kernels import MIN_SCAN_POINTS
from .types import CloudInfo


class MalformedScanError(ValueError):
    """The scan cannot be processed and must be dropped without publishing."""


def validate_scan(scan: CloudInfo, capacity: int, n_scan: int):
    """Check array shapes and ring bounds of a scan.

    Args:
        scan: Scan to check.
        capacity: Size of the working buffers (N_SCAN * Horizon_SCAN).
        n_scan: Configured ring count.

    Raises:
        MalformedScanError: on the first problem found.
    """
    if scan.points is None or scan.point_range is None or scan.point_col_ind is None:
        raise MalformedScanError("Scan is missing points, ranges or column indices")

    points = np.asarray(scan.points)
    if points.ndim != 2 or points.shape[1] != 3:
        raise MalformedScanError(f"Expected (N, 3) points, got shape {points.shape}")

    n = len(points)
    if n < MIN_SCAN_POINTS:
        raise MalformedScanError(f"Scan has {n} points, at least "
                                 f"{MIN_SCAN_POINTS} are needed")
    if n > capacity:
        raise MalformedScanError(f"Scan has {n} points, more than the "
                                 f"buffer capacity {capacity}")

    if len(scan.point_range) != n or len(scan.point_col_ind) != n:
        raise MalformedScanError(
            f"Per-point arrays disagree: {n} points, "
            f"{len(scan.point_range)} ranges, "
            f"{len(scan.point_col_ind)} column indices")
    if scan.intensities is not None and len(scan.intensities) != n:
        raise MalformedScanError(f"{len(scan.intensities)} intensities "
                                 f"for {n} points")
    if not np.all(np.isfinite(scan.point_range)):
        raise MalformedScanError("Scan contains non-finite ranges")

    if scan.start_ring_index is None or scan.end_ring_index is None:
        raise MalformedScanError("Scan is missing ring index bounds")
    start = np.asarray(scan.start_ring_index, dtype=np.int64)
    end = np.asarray(scan.end_ring_index, dtype=np.int64)
    if start.shape != end.shape or start.ndim != 1:
        raise MalformedScanError(
            f"Ring bound arrays disagree: {start.shape} vs {end.shape}")
    if len(start) > n_scan:
        raise MalformedScanError(f"Scan has {len(start)} rings, "
                                 f"configured N_SCAN is {n_scan}")

    # Rings with start > end are empty and never indexed
    used = start <= end
    bad = used & ((start < 0) | (end >= n))
    if np.any(bad):
        ring = int(np.flatnonzero(bad)[0])
        raise MalformedScanError(
            f"Ring {ring} bounds [{start[ring]}, {end[ring]}] outside "
            f"[0, {n})")
