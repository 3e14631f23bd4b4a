"""ROS1 bag file reader using the rosbags library (no ROS install needed).

Parses ring-tagged sensor_msgs/PointCloud2 messages (Velodyne, Ouster,
Livox in PointCloud2 mode) from .bag files.
"""
import numpy as np
from pathlib import Path

from rosbags.rosbag1 import Reader
from rosbags.typesys import Stores, get_typestore
from tqdm import tqdm

from .types import RawScan


# Numpy dtype mapping for PointCloud2 field datatypes
_POINTFIELD_NP_DTYPES = {
    1: np.uint8,
    2: np.int8,
    3: np.uint16,
    4: np.int16,
    5: np.uint32,
    6: np.int32,
    7: np.float32,
    8: np.float64,
}

_RING_FIELD_NAMES = ('ring', 'line')


def _find_field(fields, name):
    """Find a field by name in PointCloud2 fields list."""
    for f in fields:
        if f.name == name:
            return f
    return None


def _find_ring_field(fields):
    """Auto-detect the per-point ring field.

    - Velodyne / Ouster: 'ring' (uint16 / uint8)
    - Livox: 'line' (uint8)
    """
    for name in _RING_FIELD_NAMES:
        f = _find_field(fields, name)
        if f is not None:
            return f
    return None


def _read_field(buf, field, out_dtype):
    dt = np.dtype(_POINTFIELD_NP_DTYPES[field.datatype])
    raw = buf[:, field.offset:field.offset + dt.itemsize].copy()
    return raw.view(dt).flatten().astype(out_dtype)


def parse_pointcloud2(msg):
    """Parse a PointCloud2 message into numpy arrays.

    Returns:
        xyz: (N, 3) float64
        intensities: (N,) float32
        rings: (N,) int64, or None if the cloud has no ring field
    """
    fields = msg.fields
    n_points = msg.width * msg.height

    fx = _find_field(fields, 'x')
    fy = _find_field(fields, 'y')
    fz = _find_field(fields, 'z')
    if fx is None or fy is None or fz is None:
        raise ValueError("PointCloud2 missing x/y/z fields")

    if n_points == 0:
        return np.zeros((0, 3)), np.zeros(0, dtype=np.float32), np.zeros(0, dtype=np.int64)

    buf = np.frombuffer(bytes(msg.data), dtype=np.uint8).reshape(
        n_points, msg.point_step)

    xyz = np.column_stack([_read_field(buf, ff, np.float64)
                           for ff in (fx, fy, fz)])

    fi = _find_field(fields, 'intensity')
    if fi is not None:
        intensities = _read_field(buf, fi, np.float32)
    else:
        intensities = np.zeros(n_points, dtype=np.float32)

    fr = _find_ring_field(fields)
    rings = _read_field(buf, fr, np.int64) if fr is not None else None

    return xyz, intensities, rings


def read_bag(bag_path: str, lidar_topic: str):
    """Read a ROS1 bag file and yield ring-tagged scans in bag order.

    Args:
        bag_path: Path to the .bag file.
        lidar_topic: Topic name for PointCloud2 messages.

    Yields:
        RawScan per message that carries a ring field.
    """
    typestore = get_typestore(Stores.ROS1_NOETIC)
    warned = False

    with Reader(Path(bag_path)) as reader:
        connections = [c for c in reader.connections if c.topic == lidar_topic]
        if not connections:
            tqdm.write(f"[Bag] No messages on topic {lidar_topic}")
            return

        total = sum(c.msgcount for c in connections)
        for connection, _, rawdata in tqdm(
            reader.messages(connections=connections), total=total,
            desc="Reading bag", unit="msg", dynamic_ncols=True,
        ):
            msg = typestore.deserialize_ros1(rawdata, connection.msgtype)
            xyz, intensities, rings = parse_pointcloud2(msg)
            if rings is None:
                if not warned:
                    tqdm.write(f"[Bag] WARNING: {lidar_topic} has no ring "
                               f"field ({'/'.join(_RING_FIELD_NAMES)}), "
                               f"skipping its messages")
                    warned = True
                continue

            stamp = msg.header.stamp
            yield RawScan(
                header_time=stamp.sec + stamp.nanosec * 1e-9,
                frame_id=msg.header.frame_id,
                points=xyz,
                intensities=intensities,
                rings=rings,
            )
