"""Tests for PointCloud2 parsing (no bag file needed)."""

from types import SimpleNamespace

import numpy as np
import pytest

from lio_sam_features.bag_reader import parse_pointcloud2

FLOAT32 = 7
UINT16 = 4


def make_cloud_msg(xyz, intensity=None, ring=None, ring_name='ring'):
    """Pack a PointCloud2-like message with x,y,z[,intensity][,ring]."""
    fields = [
        SimpleNamespace(name='x', offset=0, datatype=FLOAT32, count=1),
        SimpleNamespace(name='y', offset=4, datatype=FLOAT32, count=1),
        SimpleNamespace(name='z', offset=8, datatype=FLOAT32, count=1),
    ]
    dtype = [('x', '<f4'), ('y', '<f4'), ('z', '<f4')]
    offset = 12
    if intensity is not None:
        fields.append(SimpleNamespace(name='intensity', offset=offset,
                                      datatype=FLOAT32, count=1))
        dtype.append(('intensity', '<f4'))
        offset += 4
    if ring is not None:
        fields.append(SimpleNamespace(name=ring_name, offset=offset,
                                      datatype=UINT16, count=1))
        dtype.append((ring_name, '<u2'))
        offset += 2

    arr = np.zeros(len(xyz), dtype=np.dtype(dtype))
    arr['x'], arr['y'], arr['z'] = xyz[:, 0], xyz[:, 1], xyz[:, 2]
    if intensity is not None:
        arr['intensity'] = intensity
    if ring is not None:
        arr[ring_name] = ring

    return SimpleNamespace(
        fields=fields, width=len(xyz), height=1,
        point_step=arr.dtype.itemsize, data=arr.tobytes())


class TestParsePointCloud2:

    def test_xyz_intensity_ring(self):
        xyz = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
        msg = make_cloud_msg(xyz, intensity=[10.0, 20.0], ring=[3, 7])

        out_xyz, inten, rings = parse_pointcloud2(msg)

        np.testing.assert_allclose(out_xyz, xyz)
        np.testing.assert_allclose(inten, [10.0, 20.0])
        np.testing.assert_array_equal(rings, [3, 7])
        assert out_xyz.dtype == np.float64
        assert rings.dtype == np.int64

    def test_livox_line_field(self):
        xyz = np.ones((3, 3))
        msg = make_cloud_msg(xyz, ring=[0, 1, 2], ring_name='line')
        _, inten, rings = parse_pointcloud2(msg)
        np.testing.assert_array_equal(rings, [0, 1, 2])
        np.testing.assert_array_equal(inten, [0.0, 0.0, 0.0])

    def test_no_ring_field(self):
        msg = make_cloud_msg(np.ones((2, 3)), intensity=[1.0, 1.0])
        _, _, rings = parse_pointcloud2(msg)
        assert rings is None

    def test_missing_xyz(self):
        msg = make_cloud_msg(np.ones((2, 3)))
        msg.fields = msg.fields[:2]
        with pytest.raises(ValueError):
            parse_pointcloud2(msg)

    def test_empty_cloud(self):
        msg = make_cloud_msg(np.zeros((0, 3)), ring=[])
        xyz, inten, rings = parse_pointcloud2(msg)
        assert xyz.shape == (0, 3)
        assert len(inten) == 0
        assert len(rings) == 0
