"""Tests for FeatureBuffers."""

import numpy as np
import pytest

from lio_sam_features.state import FeatureBuffers


class TestFeatureBuffers:

    def test_view_shares_memory(self):
        buffers = FeatureBuffers(100)
        curvature, picked, label = buffers.view(40)

        curvature[3] = 9.0
        picked[3] = False
        label[3] = 1

        assert buffers.curvature[3] == 9.0
        assert not buffers.picked[3]
        assert buffers.label[3] == 1
        assert len(curvature) == len(picked) == len(label) == 40

    def test_dtypes(self):
        buffers = FeatureBuffers(10)
        assert buffers.curvature.dtype == np.float64
        assert buffers.picked.dtype == np.bool_
        assert buffers.label.dtype == np.int8

    def test_view_over_capacity(self):
        with pytest.raises(ValueError):
            FeatureBuffers(10).view(11)

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError):
            FeatureBuffers(0)
