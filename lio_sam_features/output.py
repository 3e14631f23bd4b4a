"""Feature cloud and per-scan summary writers (CSV)."""
import numpy as np

SUMMARY_HEADER = "timestamp,n_points,n_corner,n_surface\n"


def write_feature_csv(filepath: str, points: np.ndarray,
                      intensities: np.ndarray = None):
    """Write a corner or surface cloud as CSV.

    Columns: x,y,z[,intensity]

    Args:
        filepath: Output file path.
        points: (N, 3) array of xyz coordinates.
        intensities: Optional (N,) array of intensity values.
    """
    with open(filepath, 'w') as f:
        if intensities is not None and len(intensities) == len(points):
            f.write("x,y,z,intensity\n")
            for i in range(len(points)):
                f.write(f"{points[i, 0]:.6f},{points[i, 1]:.6f},"
                        f"{points[i, 2]:.6f},{intensities[i]:.1f}\n")
        else:
            f.write("x,y,z\n")
            for i in range(len(points)):
                f.write(f"{points[i, 0]:.6f},{points[i, 1]:.6f},"
                        f"{points[i, 2]:.6f}\n")


def write_summary_csv(filepath: str, rows: list):
    """Write one line per processed scan.

    Args:
        filepath: Output file path.
        rows: List of (timestamp, n_points, n_corner, n_surface) tuples.
    """
    with open(filepath, 'w') as f:
        f.write(SUMMARY_HEADER)
        for ts, n_points, n_corner, n_surface in rows:
            f.write(f"{ts:.6f},{n_points},{n_corner},{n_surface}\n")
