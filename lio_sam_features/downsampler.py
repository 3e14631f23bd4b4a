"""Voxel grid downsampling using NumPy.

Replaces pcl::VoxelGrid<PointType> used to thin per-ring surface points.
"""
import numpy as np


def voxel_grid_downsample(points: np.ndarray, leaf_size: float) -> np.ndarray:
    """Downsample a point cloud using voxel grid filtering.

    For each occupied voxel, the centroid of all points within it is returned.
    Voxels are keyed on the first three columns (xyz); any extra columns
    (e.g. intensity) are averaged the same way.

    Args:
        points: (N, D) array with D >= 3, xyz in the first three columns.
        leaf_size: Voxel edge length in meters.

    Returns:
        (M, D) downsampled points (centroids), M <= N, one per occupied voxel.
    """
    if leaf_size <= 0:
        raise ValueError(f"leaf_size must be positive, got {leaf_size}")
    if len(points) == 0:
        return points.copy()

    # Quantize to voxel indices
    voxel_idx = np.floor(points[:, :3] / leaf_size).astype(np.int64)

    # Shift to non-negative, then unique rows give one key per voxel
    shifted = voxel_idx - voxel_idx.min(axis=0)
    _, inverse = np.unique(shifted, axis=0, return_inverse=True)
    inverse = inverse.reshape(-1)
    n_voxels = inverse.max() + 1

    counts = np.bincount(inverse, minlength=n_voxels).astype(np.float64)
    centroids = np.zeros((n_voxels, points.shape[1]))

    for dim in range(points.shape[1]):
        centroids[:, dim] = np.bincount(
            inverse, weights=points[:, dim], minlength=n_voxels
        ) / counts

    return centroids
