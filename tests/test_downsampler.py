"""Tests for voxel_grid_downsample."""

import numpy as np
import pytest

from lio_sam_features.downsampler import voxel_grid_downsample


class TestVoxelGridDownsample:

    def test_one_point_per_voxel(self):
        points = np.array([
            [0.1, 0.1, 0.1],
            [0.3, 0.3, 0.3],
            [1.1, 0.1, 0.1],
        ])
        out = voxel_grid_downsample(points, 0.5)

        assert out.shape == (2, 3)
        assert any(np.allclose(p, [0.2, 0.2, 0.2]) for p in out)
        assert any(np.allclose(p, [1.1, 0.1, 0.1]) for p in out)

    def test_extra_columns_averaged(self):
        points = np.array([
            [0.1, 0.1, 0.1, 10.0],
            [0.2, 0.2, 0.2, 20.0],
        ])
        out = voxel_grid_downsample(points, 1.0)

        assert out.shape == (1, 4)
        assert out[0, 3] == pytest.approx(15.0)

    def test_negative_coordinates(self):
        points = np.array([[-0.1, -0.1, -0.1], [0.1, 0.1, 0.1]])
        out = voxel_grid_downsample(points, 1.0)
        assert len(out) == 2

    def test_never_grows(self, small_cloud):
        out = voxel_grid_downsample(small_cloud, 0.3)
        assert 0 < len(out) <= len(small_cloud)

    def test_empty(self):
        out = voxel_grid_downsample(np.zeros((0, 3)), 0.4)
        assert out.shape == (0, 3)

    def test_rejects_bad_leaf(self):
        with pytest.raises(ValueError):
            voxel_grid_downsample(np.zeros((3, 3)), 0.0)


@pytest.fixture
def small_cloud():
    rng = np.random.default_rng(42)
    return rng.standard_normal((500, 3))
