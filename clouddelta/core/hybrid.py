"""Fixed-width float32 encoding of deltas, without entropy coding."""

import numpy as np

from clouddelta.core.errors import FormatError

_UNIT = np.dtype(">f4")


def encode(values: np.ndarray) -> bytes:
    """Big-endian float32 per symbol, in input order."""
    return np.asarray(values, dtype=np.float32).astype(_UNIT).tobytes()


def decode(data: bytes, count: int) -> np.ndarray:
    """
    Parses ``count`` consecutive float32 units.

    Raises:
        FormatError: If ``data`` is not exactly ``count`` units long
    """
    expected = count * _UNIT.itemsize
    if len(data) != expected:
        raise FormatError(
            f"Hybrid payload holds {len(data)} bytes, expected {expected} for {count} symbols"
        )
    return np.frombuffer(data, dtype=_UNIT, count=count).astype(np.float32)
