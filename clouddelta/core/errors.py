"""
Error taxonomy for the CloudDelta pipeline.

Every error aborts the current call with no partial result. Callers should
treat any of them as "this input cannot be processed": retrying the same
input or the same bytes will fail the same way.
"""


class CloudDeltaError(Exception):
    """Base class for all CloudDelta failures."""


class ShapeError(CloudDeltaError, ValueError):
    """Zero-length or mismatched-length sequences or permutations."""


class FormatError(CloudDeltaError, ValueError):
    """Container bytes inconsistent with their declared lengths or flags."""


class FatalCodecError(CloudDeltaError, RuntimeError):
    """
    Internal-consistency failure inside the codec.

    Raised for a codebook miss on encode, a tripped traversal-depth guard,
    a bitstream that runs out before the required symbol count, or a sorted
    step that no float32 delta can reproduce.
    """
