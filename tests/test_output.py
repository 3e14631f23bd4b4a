"""Tests for the CSV writers."""

import numpy as np

from lio_sam_features.output import write_feature_csv, write_summary_csv


class TestWriters:

    def test_feature_csv_with_intensity(self, tmp_path):
        path = tmp_path / "corner.csv"
        pts = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
        write_feature_csv(str(path), pts, np.array([7.0, 8.0]))

        lines = path.read_text().splitlines()
        assert lines[0] == "x,y,z,intensity"
        assert lines[1] == "1.000000,2.000000,3.000000,7.0"
        assert len(lines) == 3

    def test_feature_csv_without_intensity(self, tmp_path):
        path = tmp_path / "surface.csv"
        write_feature_csv(str(path), np.zeros((1, 3)))

        lines = path.read_text().splitlines()
        assert lines == ["x,y,z", "0.000000,0.000000,0.000000"]

    def test_empty_cloud(self, tmp_path):
        path = tmp_path / "empty.csv"
        write_feature_csv(str(path), np.zeros((0, 3)), np.zeros(0))
        assert path.read_text() == "x,y,z,intensity\n"

    def test_summary_csv(self, tmp_path):
        path = tmp_path / "summary.csv"
        write_summary_csv(str(path), [(1.5, 1000, 40, 300), (1.6, 990, 38, 310)])

        lines = path.read_text().splitlines()
        assert lines[0] == "timestamp,n_points,n_corner,n_surface"
        assert lines[1] == "1.500000,1000,40,300"
        assert len(lines) == 3
