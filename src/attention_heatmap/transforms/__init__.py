"""Score transforms applied to decoded attention rows."""

from .score_transform import (
    RowStatistics,
    ScoreMode,
    compute_intensities,
    next_mode,
    precompute_row_statistics,
    row_statistics,
)

__all__ = [
    "RowStatistics",
    "ScoreMode",
    "compute_intensities",
    "next_mode",
    "precompute_row_statistics",
    "row_statistics",
]
