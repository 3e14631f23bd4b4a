"""Configuration loader for the feature extraction pipeline.

Reads YAML config files in the same layout as LIO-SAM's params.yaml,
mapping the same camelCase parameter names used in ParamServer.
"""
import yaml
from dataclasses import dataclass

SUPPORTED_SENSORS = ('velodyne', 'ouster', 'livox')


@dataclass(frozen=True)
class FeatureConfig:
    """Full pipeline configuration. Fixed for the lifetime of a pipeline."""
    # Topics / frames
    point_cloud_topic: str = "points_raw"
    lidar_frame: str = "base_link"

    # Sensor layout
    sensor: str = "velodyne"
    n_scan: int = 16
    horizon_scan: int = 1800
    downsample_rate: int = 1
    lidar_min_range: float = 1.0
    lidar_max_range: float = 1000.0

    # Feature extraction
    edge_threshold: float = 1.0
    surf_threshold: float = 0.1
    odometry_surf_leaf_size: float = 0.4

    def __post_init__(self):
        validate_config(self)

    @property
    def capacity(self) -> int:
        """Maximum number of points in one range-organized scan."""
        return self.n_scan * self.horizon_scan


def validate_config(cfg: FeatureConfig):
    """Raise ValueError if any parameter is outside its usable range."""
    if cfg.sensor not in SUPPORTED_SENSORS:
        raise ValueError(f"Unknown sensor type '{cfg.sensor}', "
                         f"expected one of {SUPPORTED_SENSORS}")
    if cfg.n_scan <= 0 or cfg.horizon_scan <= 0:
        raise ValueError(f"N_SCAN and Horizon_SCAN must be positive, got "
                         f"{cfg.n_scan} and {cfg.horizon_scan}")
    if cfg.downsample_rate < 1:
        raise ValueError(f"downsampleRate must be >= 1, "
                         f"got {cfg.downsample_rate}")
    if cfg.lidar_min_range < 0 or cfg.lidar_max_range <= cfg.lidar_min_range:
        raise ValueError(f"Invalid lidar range window "
                         f"[{cfg.lidar_min_range}, {cfg.lidar_max_range}]")
    if cfg.odometry_surf_leaf_size <= 0:
        raise ValueError(f"odometrySurfLeafSize must be positive, "
                         f"got {cfg.odometry_surf_leaf_size}")


# YAML key -> dataclass field
_PARAM_KEYS = {
    'pointCloudTopic': 'point_cloud_topic',
    'lidarFrame': 'lidar_frame',
    'sensor': 'sensor',
    'N_SCAN': 'n_scan',
    'Horizon_SCAN': 'horizon_scan',
    'downsampleRate': 'downsample_rate',
    'lidarMinRange': 'lidar_min_range',
    'lidarMaxRange': 'lidar_max_range',
    'edgeThreshold': 'edge_threshold',
    'surfThreshold': 'surf_threshold',
    'odometrySurfLeafSize': 'odometry_surf_leaf_size',
}

_FIELD_TYPES = {
    'point_cloud_topic': str,
    'lidar_frame': str,
    'sensor': str,
    'n_scan': int,
    'horizon_scan': int,
    'downsample_rate': int,
    'lidar_min_range': float,
    'lidar_max_range': float,
    'edge_threshold': float,
    'surf_threshold': float,
    'odometry_surf_leaf_size': float,
}


def config_from_dict(params: dict) -> FeatureConfig:
    """Build a FeatureConfig from a dict of LIO-SAM parameter names.

    Unknown keys are ignored so a complete LIO-SAM params.yaml can be used
    as-is. Missing keys keep their defaults.
    """
    kwargs = {}
    for key, name in _PARAM_KEYS.items():
        if key in params and params[key] is not None:
            kwargs[name] = _FIELD_TYPES[name](params[key])
    return FeatureConfig(**kwargs)


def load_config(yaml_path: str) -> FeatureConfig:
    """Load configuration from a YAML file.

    Supports the LIO-SAM layout where all parameters live under a top-level
    'lio_sam' key, as well as a flat mapping of the same names.
    """
    with open(yaml_path, 'r') as f:
        cfg = yaml.safe_load(f) or {}

    params = cfg.get('lio_sam', cfg)
    return config_from_dict(params)
