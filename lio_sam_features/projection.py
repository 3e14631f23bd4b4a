"""Range image projection: ring-tagged cloud -> range-organized CloudInfo.

Matches the projectPointCloud() and cloudExtraction() steps of LIO-SAM's
imageProjection node, without deskewing. All operations are vectorized with
NumPy.
"""
import numpy as np

from .numba_kernels import CURVATURE_HALF_WINDOW
from .types import CloudInfo, RawScan


def _round_half_away(x: np.ndarray) -> np.ndarray:
    """C-style round(): halves go away from zero."""
    return np.sign(x) * np.floor(np.abs(x) + 0.5)


def azimuth_columns(points_xyz: np.ndarray, horizon_scan: int) -> np.ndarray:
    """Column index from horizontal angle for spinning LiDARs.

    Column 0 faces -x and column horizon_scan / 2 faces +x, as in LIO-SAM.
    """
    ang_res_x = 360.0 / horizon_scan
    horizon_angle = np.degrees(np.arctan2(points_xyz[:, 0], points_xyz[:, 1]))
    cols = (-_round_half_away((horizon_angle - 90.0) / ang_res_x)
            + horizon_scan // 2).astype(np.int64)
    cols[cols >= horizon_scan] -= horizon_scan
    return cols


def arrival_columns(rings: np.ndarray) -> np.ndarray:
    """Column index as the arrival order of each point within its ring (Livox)."""
    order = np.argsort(rings, kind='stable')
    sorted_rings = rings[order]
    ring_first = np.searchsorted(sorted_rings, sorted_rings, side='left')
    cols = np.empty(len(rings), dtype=np.int64)
    cols[order] = np.arange(len(rings)) - ring_first
    return cols


class RangeProjector:
    """Project raw scans into the N_SCAN x Horizon_SCAN range image."""

    def __init__(self, n_scan: int = 16, horizon_scan: int = 1800,
                 sensor: str = 'velodyne', lidar_min_range: float = 1.0,
                 lidar_max_range: float = 1000.0, downsample_rate: int = 1):
        """
        Args:
            n_scan: Number of rings (rows).
            horizon_scan: Number of columns per ring.
            sensor: 'velodyne' / 'ouster' (azimuth columns) or 'livox'
                (arrival-order columns).
            lidar_min_range: Points closer than this are removed.
            lidar_max_range: Points farther than this are removed.
            downsample_rate: Keep every Nth ring (1 = keep all).
        """
        self.n_scan = n_scan
        self.horizon_scan = horizon_scan
        self.sensor = sensor
        self.lidar_min_range = lidar_min_range
        self.lidar_max_range = lidar_max_range
        self.downsample_rate = max(1, downsample_rate)

    @classmethod
    def from_config(cls, config) -> 'RangeProjector':
        return cls(
            n_scan=config.n_scan,
            horizon_scan=config.horizon_scan,
            sensor=config.sensor,
            lidar_min_range=config.lidar_min_range,
            lidar_max_range=config.lidar_max_range,
            downsample_rate=config.downsample_rate,
        )

    def project(self, raw: RawScan) -> CloudInfo:
        """Build the range image and flatten its valid cells row-major.

        Ring bounds are shrunk by 5 points on each side, so every point inside
        [start_ring_index[r], end_ring_index[r]] has a full curvature window
        within its own ring.
        """
        xyz = np.asarray(raw.points, dtype=np.float64)
        rings = np.asarray(raw.rings, dtype=np.int64)
        if raw.intensities is not None:
            inten = np.asarray(raw.intensities, dtype=np.float32)
        else:
            inten = np.zeros(len(xyz), dtype=np.float32)

        point_range = np.sqrt(np.sum(xyz ** 2, axis=1))

        valid = np.all(np.isfinite(xyz), axis=1)
        valid &= (point_range >= self.lidar_min_range)
        valid &= (point_range <= self.lidar_max_range)
        valid &= (rings >= 0) & (rings < self.n_scan)
        valid &= (rings % self.downsample_rate) == 0

        xyz = xyz[valid]
        rings = rings[valid]
        inten = inten[valid]
        point_range = point_range[valid]

        if self.sensor == 'livox':
            cols = arrival_columns(rings)
        else:
            cols = azimuth_columns(xyz, self.horizon_scan)
        in_image = (cols >= 0) & (cols < self.horizon_scan)

        xyz = xyz[in_image]
        rings = rings[in_image]
        cols = cols[in_image]
        inten = inten[in_image]
        point_range = point_range[in_image]

        # First point to land in a cell wins; unique() also sorts row-major
        cell = rings * self.horizon_scan + cols
        _, keep = np.unique(cell, return_index=True)

        rows_kept = rings[keep]
        per_ring = np.bincount(rows_kept, minlength=self.n_scan)
        count_after = np.cumsum(per_ring)
        count_before = count_after - per_ring

        return CloudInfo(
            header_time=raw.header_time,
            frame_id=raw.frame_id,
            points=xyz[keep],
            intensities=inten[keep],
            point_range=point_range[keep],
            point_col_ind=cols[keep],
            start_ring_index=count_before - 1 + CURVATURE_HALF_WINDOW,
            end_ring_index=count_after - 1 - CURVATURE_HALF_WINDOW,
        )
