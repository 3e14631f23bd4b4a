"""Data structures passed between the ingestion, feature and output stages.

Matches the lio_sam/cloud_info message used between LIO-SAM's imageProjection,
featureExtraction and mapOptimization nodes.
"""
import numpy as np
from dataclasses import dataclass

# Per-point label values
LABEL_UNSET = 0
LABEL_CORNER = 1
LABEL_SURFACE = -1


@dataclass
class RawScan:
    """Ring-tagged point cloud as read from the bag, before projection."""
    header_time: float = 0.0
    frame_id: str = ""
    points: np.ndarray = None       # (N, 3) xyz in sensor frame
    intensities: np.ndarray = None  # (N,)
    rings: np.ndarray = None        # (N,) laser ring / line id


@dataclass
class CloudInfo:
    """Range-organized, deskewed scan fed to feature extraction.

    Points are flattened row-major (ring, column). Ring r occupies the
    flattened indices start_ring_index[r]..end_ring_index[r] inclusive.
    """
    header_time: float = 0.0
    frame_id: str = ""
    points: np.ndarray = None            # (N, 3)
    intensities: np.ndarray = None       # (N,) or None
    point_range: np.ndarray = None       # (N,)
    point_col_ind: np.ndarray = None     # (N,)
    start_ring_index: np.ndarray = None  # (R,)
    end_ring_index: np.ndarray = None    # (R,)

    @property
    def size(self) -> int:
        return 0 if self.points is None else len(self.points)


@dataclass
class FeatureCloudInfo:
    """Combined result record published once per scan.

    The per-point metadata of the input scan is dropped before publication,
    so the four metadata fields are always None here.
    """
    header_time: float = 0.0
    frame_id: str = ""
    cloud_corner: np.ndarray = None           # (Nc, 3)
    cloud_surface: np.ndarray = None          # (Ns, 3)
    corner_intensities: np.ndarray = None     # (Nc,) or None
    surface_intensities: np.ndarray = None    # (Ns,) or None
    n_input_points: int = 0
    start_ring_index: np.ndarray = None
    end_ring_index: np.ndarray = None
    point_col_ind: np.ndarray = None
    point_range: np.ndarray = None
