#!/usr/bin/env python3
"""LIO-SAM Feature Extraction Standalone Pipeline.

One-command processing: rosbag in -> per-scan corner / surface clouds out.

Usage:
    python run.py my_scan.bag
    python run.py my_scan.bag --config custom.yaml
    python run.py my_scan.bag --output-dir results/
    python run.py my_scan.bag --edge-threshold 0.5 --leaf-size 0.2

Outputs (all saved to --output-dir, default: same folder as bag):
    1. corner/               - Per-scan corner feature clouds (CSV)
    2. surface/              - Per-scan downsampled surface clouds (CSV)
    3. features_summary.csv  - Per-scan point and feature counts
"""
import argparse
import dataclasses
import os
import sys
import time

from lio_sam_features.config import load_config
from lio_sam_features.pipeline import FeatureExtractionPipeline


def apply_overrides(config, args):
    """Return a copy of config with command-line overrides applied."""
    overrides = {}
    if args.topic:
        overrides['point_cloud_topic'] = args.topic
    if args.edge_threshold is not None:
        overrides['edge_threshold'] = args.edge_threshold
    if args.surf_threshold is not None:
        overrides['surf_threshold'] = args.surf_threshold
    if args.leaf_size is not None:
        overrides['odometry_surf_leaf_size'] = args.leaf_size
    if not overrides:
        return config
    return dataclasses.replace(config, **overrides)


def main():
    parser = argparse.ArgumentParser(
        description='LIO-SAM Feature Extraction Standalone Pipeline\n\n'
                    'Process a rosbag and produce:\n'
                    '  1. Corner feature clouds\n'
                    '  2. Surface feature clouds\n'
                    '  3. Per-scan feature summary',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('bag', help='Path to ROS1 .bag file')
    parser.add_argument('--config', default=None,
                        help='Path to YAML config file '
                             '(default: params.yaml in this folder)')
    parser.add_argument('--output-dir', default=None,
                        help='Output directory '
                             '(default: same folder as bag file)')
    parser.add_argument('--topic', default=None,
                        help='Override pointCloudTopic from config')
    parser.add_argument('--edge-threshold', type=float, default=None,
                        help='Override edgeThreshold from config')
    parser.add_argument('--surf-threshold', type=float, default=None,
                        help='Override surfThreshold from config')
    parser.add_argument('--leaf-size', type=float, default=None,
                        help='Override odometrySurfLeafSize from config')
    parser.add_argument('--skip-clouds', action='store_true',
                        help='Only write the summary CSV')

    args = parser.parse_args()

    bag_path = os.path.abspath(args.bag)
    if not os.path.isfile(bag_path):
        print(f"Error: Bag file not found: {bag_path}")
        sys.exit(1)

    # Config
    if args.config:
        config_path = os.path.abspath(args.config)
    else:
        config_path = os.path.join(
            os.path.dirname(os.path.abspath(__file__)), 'params.yaml')

    if not os.path.isfile(config_path):
        print(f"Error: Config file not found: {config_path}")
        sys.exit(1)

    try:
        config = apply_overrides(load_config(config_path), args)
    except ValueError as e:
        print(f"[Config] Error: {e}")
        sys.exit(1)

    # Output directory
    if args.output_dir:
        out_dir = os.path.abspath(args.output_dir)
    else:
        out_dir = os.path.dirname(bag_path)

    print("=" * 60)
    print("  LIO-SAM Feature Extraction Standalone Pipeline")
    print("=" * 60)
    print(f"  Bag:        {bag_path}")
    print(f"  Config:     {config_path}")
    print(f"  Output dir: {out_dir}")
    print(f"  Thresholds: edge={config.edge_threshold} "
          f"surf={config.surf_threshold} "
          f"leaf={config.odometry_surf_leaf_size}")
    print("=" * 60)

    t0 = time.time()
    pipeline = FeatureExtractionPipeline(config)
    n_scans = pipeline.run(bag_path, out_dir,
                           write_clouds=not args.skip_clouds)

    total = time.time() - t0
    print("\n" + "=" * 60)
    print("  Pipeline Complete!")
    print("=" * 60)
    print(f"  Scans with features: {n_scans}")
    print(f"  Total time: {total:.1f}s")
    print()


if __name__ == '__main__':
    main()
