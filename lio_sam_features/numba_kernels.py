"""Numba JIT-compiled kernels for the feature extraction inner loops.

These functions replace per-point Python loops with machine-code compiled
equivalents via Numba's @njit decorator. Key targets:

1. calc_smoothness_jit: range-window curvature plus working-state reset
2. mark_occluded_jit: occlusion and parallel-beam rejection
3. select_sector_jit: greedy corner / surface selection in one sector
4. extract_ring_jit: six-sector split of a ring and remainder fallback
"""
import numpy as np
from numba import njit

from .types import LABEL_UNSET, LABEL_CORNER, LABEL_SURFACE

CURVATURE_HALF_WINDOW = 5
N_SECTORS = 6
MAX_CORNERS_PER_SECTOR = 20
SUPPRESS_WINDOW = 5
NEIGHBOR_COLUMN_GAP = 10
OCCLUSION_DEPTH_GAP = 0.3
PARALLEL_BEAM_RATIO = 0.02
MIN_SCAN_POINTS = 2 * CURVATURE_HALF_WINDOW + 1


# ─────────────────────────────────────────────────────────────
#  Curvature and validity mask
# ─────────────────────────────────────────────────────────────

@njit(cache=True)
def calc_smoothness_jit(point_range, curvature, picked, label):
    """Curvature of every point from the 10 neighbors along the scan.

    diff = sum(range[i-5..i-1]) + sum(range[i+1..i+5]) - 10 * range[i]
    curvature[i] = diff^2

    Also resets picked/label for the same index. The 5 leading and trailing
    points have no full window: they get zero curvature and stay picked.
    """
    n = point_range.shape[0]
    for i in range(n):
        label[i] = LABEL_UNSET
        if i < CURVATURE_HALF_WINDOW or i >= n - CURVATURE_HALF_WINDOW:
            curvature[i] = 0.0
            picked[i] = True
            continue

        diff = 0.0
        for k in range(i - CURVATURE_HALF_WINDOW, i):
            diff += point_range[k]
        for k in range(i + 1, i + CURVATURE_HALF_WINDOW + 1):
            diff += point_range[k]
        diff -= point_range[i] * 10.0

        curvature[i] = diff * diff
        picked[i] = False


@njit(cache=True)
def mark_occluded_jit(point_range, point_col_ind, picked):
    """Mark occluded points and parallel-beam points as picked."""
    n = point_range.shape[0]
    for i in range(CURVATURE_HALF_WINDOW, n - CURVATURE_HALF_WINDOW - 1):
        depth1 = point_range[i]
        depth2 = point_range[i + 1]
        column_diff = abs(point_col_ind[i + 1] - point_col_ind[i])

        # Only neighbors in azimuth can occlude each other
        if column_diff < NEIGHBOR_COLUMN_GAP:
            if depth1 - depth2 > OCCLUSION_DEPTH_GAP:
                for k in range(i - 5, i + 1):
                    picked[k] = True
            elif depth2 - depth1 > OCCLUSION_DEPTH_GAP:
                for k in range(i + 1, i + 7):
                    picked[k] = True

        # Beam nearly parallel to the surface
        diff1 = abs(point_range[i - 1] - depth1)
        diff2 = abs(point_range[i + 1] - depth1)
        if (diff1 > PARALLEL_BEAM_RATIO * depth1 and
                diff2 > PARALLEL_BEAM_RATIO * depth1):
            picked[i] = True


# ─────────────────────────────────────────────────────────────
#  Sector selection
# ─────────────────────────────────────────────────────────────

@njit(cache=True)
def suppress_neighbors_jit(ind, step, lo, hi, point_col_ind, picked):
    """Mark up to SUPPRESS_WINDOW points after (step=1) or before (step=-1) ind.

    The walk stays inside the ring bounds lo..hi (clamped to the scan) and
    stops at the first column jump wider than NEIGHBOR_COLUMN_GAP between
    consecutive points.
    """
    lo = max(lo, 0)
    hi = min(hi, picked.shape[0] - 1)
    prev = ind
    for l in range(1, SUPPRESS_WINDOW + 1):
        k = ind + step * l
        if k < lo or k > hi:
            break
        if abs(point_col_ind[k] - point_col_ind[prev]) > NEIGHBOR_COLUMN_GAP:
            break
        picked[k] = True
        prev = k


@njit(cache=True)
def select_sector_jit(sp, ep, ring_start, ring_end, curvature, picked, label,
                      point_col_ind, edge_threshold, surf_threshold, corner_out,
                      n_corner):
    """Pick corners then surface points among indices sp..ep (inclusive).

    Neighbor suppression never leaves ring_start..ring_end.

    Accepted corner indices are written to corner_out starting at n_corner.

    Returns:
        Updated corner count.
    """
    # Stable sort: equal curvature keeps index order
    order = np.argsort(curvature[sp:ep + 1], kind='mergesort') + sp

    largest_picked = 0
    for k in range(order.shape[0] - 1, -1, -1):
        ind = order[k]
        if not picked[ind] and curvature[ind] > edge_threshold:
            largest_picked += 1
            if largest_picked > MAX_CORNERS_PER_SECTOR:
                break
            label[ind] = LABEL_CORNER
            corner_out[n_corner] = ind
            n_corner += 1

            picked[ind] = True
            suppress_neighbors_jit(ind, 1, ring_start, ring_end,
                                   point_col_ind, picked)
            suppress_neighbors_jit(ind, -1, ring_start, ring_end,
                                   point_col_ind, picked)

    for k in range(order.shape[0]):
        ind = order[k]
        if not picked[ind] and curvature[ind] < surf_threshold:
            label[ind] = LABEL_SURFACE
            picked[ind] = True
            suppress_neighbors_jit(ind, 1, ring_start, ring_end,
                                   point_col_ind, picked)
            suppress_neighbors_jit(ind, -1, ring_start, ring_end,
                                   point_col_ind, picked)

    return n_corner


@njit(cache=True)
def extract_ring_jit(start, end, curvature, picked, label, point_col_ind,
                     edge_threshold, surf_threshold):
    """Split one ring into six sectors and select features in each.

    Returns:
        (corner_indices, surface_candidate_indices), both int64 arrays of
        flattened point indices. Every non-corner point of a non-empty
        sector is a surface candidate.
    """
    corner_out = np.empty(N_SECTORS * MAX_CORNERS_PER_SECTOR, dtype=np.int64)
    surface_out = np.empty(max(end - start + 1, 0), dtype=np.int64)
    n_corner = 0
    n_surface = 0

    for j in range(N_SECTORS):
        sp = (start * (N_SECTORS - j) + end * j) // N_SECTORS
        ep = (start * (N_SECTORS - 1 - j) + end * (j + 1)) // N_SECTORS - 1
        if sp >= ep:
            continue

        n_corner = select_sector_jit(
            sp, ep, start, end, curvature, picked, label, point_col_ind,
            edge_threshold, surf_threshold, corner_out, n_corner)

        for k in range(sp, ep + 1):
            if label[k] != LABEL_CORNER:
                surface_out[n_surface] = k
                n_surface += 1

    return corner_out[:n_corner], surface_out[:n_surface]


# ─────────────────────────────────────────────────────────────
#  Warm-up function: call once at startup to pre-compile all JIT
# ─────────────────────────────────────────────────────────────

def warmup():
    """Pre-compile all JIT functions with dummy data."""
    n = 32
    point_range = np.linspace(5.0, 6.0, n)
    point_col_ind = np.arange(n, dtype=np.int64)
    curvature = np.zeros(n)
    picked = np.ones(n, dtype=np.bool_)
    label = np.zeros(n, dtype=np.int8)

    calc_smoothness_jit(point_range, curvature, picked, label)
    mark_occluded_jit(point_range, point_col_ind, picked)
    suppress_neighbors_jit(10, 1, 0, n - 1, point_col_ind, picked)
    corner_out = np.empty(MAX_CORNERS_PER_SECTOR, dtype=np.int64)
    select_sector_jit(5, 10, 4, n - 6, curvature, picked, label, point_col_ind,
                      1.0, 0.1, corner_out, 0)
    extract_ring_jit(4, n - 6, curvature, picked, label, point_col_ind,
                     1.0, 0.1)
