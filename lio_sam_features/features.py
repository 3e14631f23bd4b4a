"""Feature extraction stages.

Matches C++ FeatureExtraction::laserCloudInfoHandler() from LIO-SAM
(src/featureExtraction.cpp): calculateSmoothness, markOccludedPoints,
extractFeatures, publishFeatureCloud.

Each stage takes the result type of the previous one, so the four stages
can only be chained in order:

    compute_smoothness -> mark_occluded_points -> select_features
        -> reduce_surface
"""
import numpy as np
from dataclasses import dataclass

from .downsampler import voxel_grid_downsample
from .numba_kernels import (
    calc_smoothness_jit,
    mark_occluded_jit,
    extract_ring_jit,
)
from .state import FeatureBuffers
from .types import CloudInfo, FeatureCloudInfo


@dataclass
class _ScanState:
    scan: CloudInfo
    point_range: np.ndarray    # (N,) float64
    point_col_ind: np.ndarray  # (N,) int64
    curvature: np.ndarray      # views into FeatureBuffers
    picked: np.ndarray
    label: np.ndarray


@dataclass
class SmoothnessStage(_ScanState):
    """Curvature computed, working state reset."""


@dataclass
class MaskStage(_ScanState):
    """Occluded and parallel-beam points marked as picked."""


@dataclass
class SelectionStage:
    """Corner indices and per-ring surface candidate indices."""
    scan: CloudInfo
    label: np.ndarray
    corner_indices: np.ndarray  # (Nc,) flattened indices, ring then sector order
    ring_surface_indices: list  # one (Ns_r,) array per ring


def _expect(stage, cls):
    if not isinstance(stage, cls):
        raise TypeError(f"Expected {cls.__name__}, got {type(stage).__name__}")


def compute_smoothness(scan: CloudInfo, buffers: FeatureBuffers) -> SmoothnessStage:
    """Compute per-point curvature and reset the working state for this scan."""
    n = scan.size
    curvature, picked, label = buffers.view(n)
    point_range = np.ascontiguousarray(scan.point_range, dtype=np.float64)
    point_col_ind = np.ascontiguousarray(scan.point_col_ind, dtype=np.int64)

    calc_smoothness_jit(point_range, curvature, picked, label)

    return SmoothnessStage(scan, point_range, point_col_ind,
                           curvature, picked, label)


def mark_occluded_points(stage: SmoothnessStage) -> MaskStage:
    """Exclude occlusion edges and beams parallel to the surface."""
    _expect(stage, SmoothnessStage)
    mark_occluded_jit(stage.point_range, stage.point_col_ind, stage.picked)
    return MaskStage(stage.scan, stage.point_range, stage.point_col_ind,
                     stage.curvature, stage.picked, stage.label)


def select_features(stage: MaskStage, edge_threshold: float,
                    surf_threshold: float) -> SelectionStage:
    """Select corners and surface candidates ring by ring.

    Rings are processed in order; sectors within a ring are sequential
    because suppression near a sector boundary affects the next sector.
    """
    _expect(stage, MaskStage)
    scan = stage.scan
    corner_parts = []
    ring_surface = []

    for start, end in zip(scan.start_ring_index, scan.end_ring_index):
        corners, surface = extract_ring_jit(
            int(start), int(end), stage.curvature, stage.picked, stage.label,
            stage.point_col_ind, float(edge_threshold), float(surf_threshold))
        corner_parts.append(corners)
        ring_surface.append(surface)

    if corner_parts:
        corner_indices = np.concatenate(corner_parts)
    else:
        corner_indices = np.zeros(0, dtype=np.int64)

    return SelectionStage(scan, stage.label, corner_indices, ring_surface)


def _with_intensity(scan: CloudInfo, indices: np.ndarray) -> np.ndarray:
    points = np.asarray(scan.points, dtype=np.float64)[indices]
    if scan.intensities is None:
        return points
    inten = np.asarray(scan.intensities, dtype=np.float64)[indices]
    return np.column_stack([points, inten])


def reduce_surface(stage: SelectionStage, leaf_size: float) -> FeatureCloudInfo:
    """Downsample each ring's surface candidates and assemble the output.

    Corner points are passed through untouched. The per-point metadata of
    the input scan is not carried into the result.
    """
    _expect(stage, SelectionStage)
    scan = stage.scan
    has_intensity = scan.intensities is not None
    width = 4 if has_intensity else 3

    surface_parts = []
    for indices in stage.ring_surface_indices:
        if len(indices) == 0:
            continue
        surface_parts.append(
            voxel_grid_downsample(_with_intensity(scan, indices), leaf_size))

    if surface_parts:
        surface = np.concatenate(surface_parts, axis=0)
    else:
        surface = np.zeros((0, width))
    corner = _with_intensity(scan, stage.corner_indices)

    return FeatureCloudInfo(
        header_time=scan.header_time,
        frame_id=scan.frame_id,
        cloud_corner=corner[:, :3],
        cloud_surface=surface[:, :3],
        corner_intensities=corner[:, 3] if has_intensity else None,
        surface_intensities=surface[:, 3] if has_intensity else None,
        n_input_points=scan.size,
    )
