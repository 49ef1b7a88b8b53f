"""Point-cloud file I/O and synthetic dataset generation."""

from .pointcloud import load_point_cloud, save_point_cloud
from .synthetic import PATTERNS, generate_dataset

__all__ = ["load_point_cloud", "save_point_cloud", "PATTERNS", "generate_dataset"]
