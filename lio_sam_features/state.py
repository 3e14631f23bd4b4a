"""Reusable per-point working state for feature extraction.

Replaces the cloudCurvature / cloudNeighborPicked / cloudLabel raw arrays of
the C++ FeatureExtraction node: allocated once for the largest possible scan
and sliced to the current scan length on every call.
"""
import numpy as np


class FeatureBuffers:
    """Fixed-capacity curvature, picked-mask and label arrays.

    The buffers are not cleared here. The curvature pass resets every index
    of the active view, see numba_kernels.calc_smoothness_jit.
    """

    __slots__ = ['capacity', 'curvature', 'picked', 'label']

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError(f"Buffer capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.curvature = np.zeros(capacity, dtype=np.float64)
        self.picked = np.ones(capacity, dtype=np.bool_)
        self.label = np.zeros(capacity, dtype=np.int8)

    def view(self, n: int):
        """Return (curvature, picked, label) views over the first n slots."""
        if n > self.capacity:
            raise ValueError(f"Scan of {n} points exceeds buffer capacity "
                             f"{self.capacity}")
        return self.curvature[:n], self.picked[:n], self.label[:n]
