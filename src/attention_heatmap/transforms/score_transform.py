"""Per-query intensity transforms over a decoded attention matrix.

For a query row ``q`` only keys ``k <= q`` (the causal prefix) are transformed;
keys after ``q`` pass through with their raw score. Three modes are defined:

    raw         s
    normalized  (s - row_min) / (row_max - row_min) over the nonzero prefix
    amplified   min(s * (q + 1) / 2, 1)

A causal row spreads its mass over ``q + 1`` keys, so raw magnitudes shrink as
``q`` grows; amplification rescales by half the effective row length.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Union

import numpy as np

from attention_heatmap.decoding.binary_format import AttentionMatrix


class ScoreMode(str, Enum):
    """Display mode for attention intensities."""

    RAW = "raw"
    NORMALIZED = "normalized"
    AMPLIFIED = "amplified"


ModeLike = Union[ScoreMode, str]

_NEXT_MODE = {
    ScoreMode.RAW: ScoreMode.NORMALIZED,
    ScoreMode.NORMALIZED: ScoreMode.AMPLIFIED,
    ScoreMode.AMPLIFIED: ScoreMode.RAW,
}


def next_mode(mode: ModeLike) -> ScoreMode:
    """Advance the mode cycle raw -> normalized -> amplified -> raw."""
    return _NEXT_MODE[ScoreMode(mode)]


@dataclass(frozen=True, slots=True)
class RowStatistics:
    """Extremes of the strictly positive scores in a causal row prefix."""

    row_min: float
    row_max: float


def _check_query(matrix: AttentionMatrix, query_index: int) -> None:
    if not 0 <= query_index < matrix.rows:
        raise IndexError(f"query_index must be in [0, {matrix.rows}), received {query_index}")


def _dense_row(matrix: AttentionMatrix, query_index: int) -> np.ndarray:
    # A truncated score block leaves the tail of the last rows missing; those keys read as 0.
    values = np.zeros(matrix.cols, dtype=np.float64)
    stored = matrix.row(query_index)
    values[: stored.size] = stored
    return values


def row_statistics(matrix: AttentionMatrix, query_index: int) -> Optional[RowStatistics]:
    """Return min/max of positive scores in ``scores[q][0..q]``, or None if there are none.

    Complexity:
        - O(q).
    """

    _check_query(matrix, query_index)
    prefix = _dense_row(matrix, query_index)[: query_index + 1]
    positive = prefix[prefix > 0]
    if positive.size == 0:
        return None
    return RowStatistics(row_min=float(positive.min()), row_max=float(positive.max()))


def precompute_row_statistics(matrix: AttentionMatrix) -> List[Optional[RowStatistics]]:
    """Row statistics for every query row, for callers that recompute on each hover."""
    return [row_statistics(matrix, q) for q in range(matrix.rows)]


def compute_intensities(
    matrix: AttentionMatrix,
    query_index: int,
    mode: ModeLike,
    stats_cache: Optional[Sequence[Optional[RowStatistics]]] = None,
) -> np.ndarray:
    """Compute per-key display intensities for the hovered ``query_index``.

    Pre:
        - 0 <= query_index < matrix.rows.
        - stats_cache, when given, comes from ``precompute_row_statistics(matrix)``.
    Post:
        - returns a new float64 array of length matrix.cols; the matrix is untouched.
        - keys k > query_index carry their raw score, except in normalized mode
          when the prefix has no positive score (the whole vector is then 0).
    Complexity:
        - O(cols), plus O(q) for normalized mode without a cache.
    """

    mode = ScoreMode(mode)
    _check_query(matrix, query_index)
    intensities = _dense_row(matrix, query_index)
    scope = min(query_index + 1, matrix.cols)
    prefix = intensities[:scope]

    if mode is ScoreMode.RAW:
        return intensities

    if mode is ScoreMode.AMPLIFIED:
        factor = (query_index + 1) / 2
        intensities[:scope] = np.minimum(prefix * factor, 1.0)
        return intensities

    if stats_cache is not None:
        stats = stats_cache[query_index]
    else:
        stats = row_statistics(matrix, query_index)
    if stats is None:
        return np.zeros(matrix.cols, dtype=np.float64)

    nonzero = prefix != 0
    if stats.row_max == stats.row_min:
        intensities[:scope] = np.where(nonzero, 1.0, 0.0)
    else:
        # Zeros are excluded before the linear map; they would otherwise land below 0.
        scaled = (prefix - stats.row_min) / (stats.row_max - stats.row_min)
        intensities[:scope] = np.where(nonzero, np.clip(scaled, 0.0, 1.0), 0.0)
    return intensities
