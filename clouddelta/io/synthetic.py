"""
Synthetic 2D point clouds for testing and benchmarking.

Every pattern draws ``x`` uniformly from [0, 2] and adds Normal(0, 0.5)
noise to a pattern-specific ``y``:

    - ``squared``: y = x^2
    - ``sin``:     y = 2 * (sin(2 * pi * x) + 1), spanning [0, 4]
    - ``linear``:  y = 2x
    - ``random``:  y uniform in [0, 4], uncorrelated with x

With a power-of-two ``resolution`` (the default) every difference between values is exact
in float32, so the delta transform never has to adjust a step.
"""

import numpy as np
from typing import Optional

from clouddelta.core.codec import PointCloud

PATTERNS = ("squared", "sin", "linear", "random")

DEFAULT_RESOLUTION = 2 ** -12


def generate_dataset(
    n: int = 5,
    pattern: str = "squared",
    seed: int = 42,
    resolution: Optional[float] = DEFAULT_RESOLUTION
) -> PointCloud:
    """
    Generates a reproducible synthetic point cloud.

    Args:
        n: Number of points
        pattern: One of ``PATTERNS``
        seed: Random seed; the same seed always yields the same cloud
        resolution: Grid step; values are rounded to multiples of it, like
            readings from a sensor with fixed resolution. ``None`` keeps raw
            float32 noise, which often has steps no float32 delta reproduces

    Returns:
        float32 PointCloud of ``n`` points

    Example:
        >>> cloud = generate_dataset(100, "sin")
        >>> cloud.x.shape
        (100,)
    """
    if n < 1:
        raise ValueError(f"n must be at least 1, got {n}")

    rng = np.random.default_rng(seed)
    x = rng.uniform(0.0, 2.0, size=n)
    noise = rng.normal(0.0, 0.5, size=n)

    if pattern == "squared":
        y_base = x ** 2
    elif pattern == "sin":
        y_base = (np.sin(2 * np.pi * x) + 1.0) * 2.0
    elif pattern == "linear":
        y_base = 2.0 * x
    elif pattern == "random":
        y_base = rng.uniform(0.0, 4.0, size=n)
    else:
        raise ValueError(
            f"Unknown pattern {pattern!r}. Supported: {', '.join(PATTERNS)}"
        )

    y = y_base + noise

    if resolution is not None:
        if resolution <= 0:
            raise ValueError(f"resolution must be positive, got {resolution}")
        x = np.round(x / resolution) * resolution
        y = np.round(y / resolution) * resolution

    return PointCloud(x.astype(np.float32), y.astype(np.float32))
