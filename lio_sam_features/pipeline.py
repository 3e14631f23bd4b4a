"""Main feature extraction pipeline orchestration.

Matches the per-message flow of C++ FeatureExtraction::laserCloudInfoHandler()
with bag input in place of the ROS subscriber and CSV files in place of the
publishers.
"""
import os
import time
from tqdm import tqdm

from .config import FeatureConfig
from .bag_reader import read_bag
from .features import (
    compute_smoothness,
    mark_occluded_points,
    select_features,
    reduce_surface,
)
from .numba_kernels import warmup as numba_warmup
from .output import write_feature_csv, write_summary_csv
from .projection import RangeProjector
from .state import FeatureBuffers
from .types import CloudInfo, FeatureCloudInfo
from .validation import MalformedScanError, validate_scan


class FeatureExtractionPipeline:
    """Offline corner / surface feature extraction.

    Holds the configuration and the reusable working buffers; no other state
    survives from one scan to the next.
    """

    def __init__(self, config: FeatureConfig):
        self.config = config
        self.buffers = FeatureBuffers(config.capacity)
        self.projector = RangeProjector.from_config(config)

    def process_scan(self, scan: CloudInfo) -> FeatureCloudInfo:
        """Extract corner and surface features from one range-organized scan.

        Raises:
            MalformedScanError: if the scan fails validation. Nothing is
                computed for it in that case.
        """
        validate_scan(scan, self.buffers.capacity, self.config.n_scan)

        smooth = compute_smoothness(scan, self.buffers)
        masked = mark_occluded_points(smooth)
        selected = select_features(masked,
                                   self.config.edge_threshold,
                                   self.config.surf_threshold)
        return reduce_surface(selected, self.config.odometry_surf_leaf_size)

    def run(self, bag_path: str, output_dir: str, write_clouds: bool = True):
        """Process every scan of a bag file and write the feature clouds.

        Args:
            bag_path: Path to the .bag file.
            output_dir: Directory for corner/, surface/ and the summary CSV.
            write_clouds: If False, only the summary CSV is written.

        Returns:
            Number of scans that produced features.
        """
        corner_dir = os.path.join(output_dir, 'corner')
        surface_dir = os.path.join(output_dir, 'surface')
        if write_clouds:
            os.makedirs(corner_dir, exist_ok=True)
            os.makedirs(surface_dir, exist_ok=True)
        else:
            os.makedirs(output_dir, exist_ok=True)

        print("[Pipeline] Compiling Numba JIT kernels...")
        numba_warmup()
        print("[Pipeline] JIT compilation complete.")

        print(f"[Pipeline] Reading bag: {bag_path}")
        print(f"[Pipeline] LiDAR topic: {self.config.point_cloud_topic}")
        print(f"[Pipeline] Sensor: {self.config.sensor} "
              f"({self.config.n_scan} x {self.config.horizon_scan})")

        summary = []
        scan_count = 0
        dropped = 0
        total_corner = 0
        total_surface = 0
        t_start = time.time()

        for raw in read_bag(bag_path, self.config.point_cloud_topic):
            scan = self.projector.project(raw)
            try:
                result = self.process_scan(scan)
            except MalformedScanError as e:
                dropped += 1
                tqdm.write(f"[Pipeline] Dropped scan at {raw.header_time:.6f}: {e}")
                continue

            n_corner = len(result.cloud_corner)
            n_surface = len(result.cloud_surface)
            summary.append((result.header_time, result.n_input_points,
                            n_corner, n_surface))

            if write_clouds:
                name = f"scan_{scan_count:06d}.csv"
                write_feature_csv(os.path.join(corner_dir, name),
                                  result.cloud_corner,
                                  result.corner_intensities)
                write_feature_csv(os.path.join(surface_dir, name),
                                  result.cloud_surface,
                                  result.surface_intensities)

            scan_count += 1
            total_corner += n_corner
            total_surface += n_surface

        summary_path = os.path.join(output_dir, 'features_summary.csv')
        write_summary_csv(summary_path, summary)

        elapsed = time.time() - t_start
        rate = scan_count / elapsed if elapsed > 0 else 0.0
        print(f"\n[Pipeline] Done. {scan_count} scans in {elapsed:.1f}s "
              f"({rate:.1f} scans/s), {dropped} dropped")
        if scan_count > 0:
            print(f"[Pipeline] Mean features per scan: "
                  f"{total_corner / scan_count:.1f} corner, "
                  f"{total_surface / scan_count:.1f} surface")
        print(f"[Pipeline] Summary written to: {summary_path}")
        return scan_count
