import os

import numpy as np
import pytest

from lio_sam_features.config import FeatureConfig
from lio_sam_features.types import CloudInfo

HORIZON_SCAN = 1800


# =============================================================================
# Synthetic Scan Fixtures
# =============================================================================

def _make_scan(ranges, cols=None, bounds=None, with_intensity=True,
               header_time=0.0, frame_id="base_link"):
    """Build a range-organized scan lying in the z=0 plane.

    Args:
        ranges: (N,) range per flattened point.
        cols: (N,) column index per point (default 0..N-1).
        bounds: list of (start, end) per ring (default one ring 0..N-1).
    """
    ranges = np.asarray(ranges, dtype=np.float64)
    n = len(ranges)
    if cols is None:
        cols = np.arange(n, dtype=np.int64)
    cols = np.asarray(cols, dtype=np.int64)
    if bounds is None:
        bounds = [(0, n - 1)]

    theta = cols * (2.0 * np.pi / HORIZON_SCAN)
    points = np.column_stack([ranges * np.cos(theta),
                              ranges * np.sin(theta),
                              np.zeros(n)])
    intensities = np.arange(n, dtype=np.float32) if with_intensity else None

    return CloudInfo(
        header_time=header_time,
        frame_id=frame_id,
        points=points,
        intensities=intensities,
        point_range=ranges,
        point_col_ind=cols,
        start_ring_index=np.array([b[0] for b in bounds], dtype=np.int64),
        end_ring_index=np.array([b[1] for b in bounds], dtype=np.int64),
    )


@pytest.fixture
def make_scan():
    """Factory for synthetic scans, see _make_scan."""
    return _make_scan


@pytest.fixture
def flat_scan():
    """One ring at constant range with unit column steps: zero curvature."""
    return _make_scan(np.full(300, 5.0))


@pytest.fixture
def rough_scan():
    """Three rings of a noisy wall with a few range jumps."""
    rng = np.random.default_rng(42)
    n_ring = 240
    ranges = 6.0 + 0.05 * rng.standard_normal(3 * n_ring)
    ranges[100:110] -= 2.0
    ranges[400:406] += 1.5
    cols = np.tile(np.arange(n_ring), 3)
    bounds = [(r * n_ring + 4, (r + 1) * n_ring - 6) for r in range(3)]
    return _make_scan(ranges, cols=cols, bounds=bounds)


@pytest.fixture
def feature_config():
    """Default thresholds, small ring count."""
    return FeatureConfig(n_scan=4, horizon_scan=HORIZON_SCAN)


@pytest.fixture
def params_yaml(tmp_path):
    """A LIO-SAM style params.yaml written to a temp dir."""
    path = os.path.join(str(tmp_path), "params.yaml")
    with open(path, "w") as f:
        f.write(
            "lio_sam:\n"
            "  pointCloudTopic: \"/velodyne_points\"\n"
            "  lidarFrame: \"velodyne\"\n"
            "  sensor: ouster\n"
            "  N_SCAN: 64\n"
            "  Horizon_SCAN: 1024\n"
            "  downsampleRate: 2\n"
            "  edgeThreshold: 0.5\n"
            "  surfThreshold: 0.05\n"
            "  odometrySurfLeafSize: 0.2\n"
            "  imuTopic: \"imu_correct\"\n"
        )
    return path
