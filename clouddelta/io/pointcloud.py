"""
Point-cloud file loading and saving.

Supported formats:
    - ``.npy``: a single array of shape ``[2, n]`` or ``[n, 2]``
    - ``.npz``: arrays named ``x`` and ``y``
    - ``.csv``: two comma-separated columns, with an optional ``x,y`` header row
"""

import numpy as np
from pathlib import Path
from typing import Union

from clouddelta.core.codec import PointCloud, as_point_cloud

SUPPORTED_SUFFIXES = (".npy", ".npz", ".csv")


def _from_matrix(matrix: np.ndarray, source: Path) -> PointCloud:
    if matrix.ndim != 2 or 2 not in matrix.shape:
        raise ValueError(
            f"{source} holds an array of shape {matrix.shape}; expected [2, n] or [n, 2]"
        )
    if matrix.shape[0] != 2:
        matrix = matrix.T
    return as_point_cloud((matrix[0], matrix[1]))


def load_point_cloud(file_path: Union[str, Path]) -> PointCloud:
    """
    Loads a point cloud from disk.

    Args:
        file_path: Path to a ``.npy``, ``.npz`` or ``.csv`` file

    Returns:
        Validated float32 PointCloud

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the suffix is unsupported or the contents have the wrong shape
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Point cloud file not found: {file_path}")

    suffix = file_path.suffix.lower()

    if suffix == ".npy":
        return _from_matrix(np.load(file_path, allow_pickle=False), file_path)

    if suffix == ".npz":
        with np.load(file_path, allow_pickle=False) as archive:
            missing = {"x", "y"} - set(archive.files)
            if missing:
                raise ValueError(f"{file_path} is missing arrays: {', '.join(sorted(missing))}")
            return as_point_cloud((archive["x"], archive["y"]))

    if suffix == ".csv":
        with open(file_path, "r", encoding="utf-8") as f:
            first_line = f.readline()
        try:
            float(first_line.split(",")[0])
            has_header = False
        except ValueError:
            has_header = True
        matrix = np.loadtxt(
            file_path,
            delimiter=",",
            dtype=np.float32,
            skiprows=1 if has_header else 0,
            ndmin=2
        )
        if matrix.shape[1] != 2:
            raise ValueError(f"{file_path} has {matrix.shape[1]} columns; expected 2 (x, y)")
        return as_point_cloud((matrix[:, 0], matrix[:, 1]))

    raise ValueError(
        f"Unsupported point cloud format '{suffix}'; expected one of {', '.join(SUPPORTED_SUFFIXES)}"
    )


def save_point_cloud(file_path: Union[str, Path], point_cloud) -> Path:
    """
    Writes a point cloud in the format implied by the file suffix.

    CSV output uses the shortest float32 formatting that round-trips, so the file reloads
    to identical values.

    Returns:
        The path written
    """
    file_path = Path(file_path)
    cloud = as_point_cloud(point_cloud)
    suffix = file_path.suffix.lower()

    if suffix == ".npy":
        np.save(file_path, np.stack([cloud.x, cloud.y]))
    elif suffix == ".npz":
        np.savez(file_path, x=cloud.x, y=cloud.y)
    elif suffix == ".csv":
        with open(file_path, "w", encoding="utf-8") as f:
            f.write("x,y\n")
            for x, y in zip(cloud.x.tolist(), cloud.y.tolist()):
                f.write(f"{np.float32(x)},{np.float32(y)}\n")
    else:
        raise ValueError(
            f"Unsupported point cloud format '{suffix}'; expected one of {', '.join(SUPPORTED_SUFFIXES)}"
        )

    return file_path
