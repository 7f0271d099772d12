import numpy as np
import pytest

from attention_heatmap.decoding import decode, encode
from attention_heatmap.transforms import (
    RowStatistics,
    ScoreMode,
    compute_intensities,
    next_mode,
    precompute_row_statistics,
    row_statistics,
)


def _matrix(grid, tokens=None):
    grid = np.asarray(grid, dtype=np.float32)
    tokens = tokens or [f"t{i}" for i in range(grid.shape[1])]
    return decode(encode(tokens, grid))


def _random_causal_matrix(size: int = 6, seed: int = 0):
    rng = np.random.default_rng(seed)
    grid = rng.random((size, size), dtype=np.float32)
    grid[rng.random((size, size)) < 0.2] = 0.0
    return _matrix(grid)


def test_example_intensities(example_matrix) -> None:
    np.testing.assert_allclose(compute_intensities(example_matrix, 1, "raw"), [0.2, 0.8], rtol=1e-6)
    np.testing.assert_array_equal(compute_intensities(example_matrix, 1, "normalized"), [0.0, 1.0])
    np.testing.assert_array_equal(compute_intensities(example_matrix, 0, "amplified"), [0.25, 0.0])


def test_raw_mode_returns_row_unchanged() -> None:
    matrix = _random_causal_matrix()
    for q in range(matrix.rows):
        result = compute_intensities(matrix, q, ScoreMode.RAW)
        assert result.shape == (matrix.cols,)
        np.testing.assert_array_equal(result, matrix.row(q))


def test_amplified_mode_scales_prefix_and_passes_through_future_keys() -> None:
    matrix = _random_causal_matrix(size=8, seed=3)
    for q in range(matrix.rows):
        row = matrix.row(q).astype(np.float64)
        result = compute_intensities(matrix, q, ScoreMode.AMPLIFIED)
        assert np.all(result <= 1.0)
        for k in range(matrix.cols):
            if k <= q:
                assert result[k] == min(row[k] * (q + 1) / 2, 1.0)
            else:
                assert result[k] == row[k]


def test_amplified_mode_clips_at_one() -> None:
    matrix = _matrix([[1.0, 0.0, 0.0], [0.5, 0.5, 0.0], [0.1, 0.2, 0.7]])
    np.testing.assert_allclose(compute_intensities(matrix, 2, "amplified"), [0.15, 0.3, 1.0], rtol=1e-6)


def test_normalized_all_zero_prefix_yields_zero_vector() -> None:
    matrix = _matrix([[0.0, 0.7], [0.3, 0.7]])
    np.testing.assert_array_equal(compute_intensities(matrix, 0, "normalized"), [0.0, 0.0])


def test_normalized_single_distinct_value_maps_to_one() -> None:
    matrix = _matrix(
        [
            [0.3, 0.0, 0.0, 0.0],
            [0.3, 0.0, 0.0, 0.0],
            [0.3, 0.0, 0.3, 0.9],
            [0.1, 0.2, 0.3, 0.4],
        ]
    )
    result = compute_intensities(matrix, 2, "normalized")
    np.testing.assert_array_equal(result[:3], [1.0, 0.0, 1.0])
    assert result[3] == pytest.approx(0.9)


def test_normalized_rescales_nonzero_prefix() -> None:
    matrix = _random_causal_matrix(size=8, seed=11)
    for q in range(matrix.rows):
        row = matrix.row(q)
        result = compute_intensities(matrix, q, ScoreMode.NORMALIZED)
        prefix = row[: q + 1]
        positive = prefix[prefix > 0]
        if positive.size == 0:
            assert np.all(result == 0.0)
            continue
        assert np.all(result[: q + 1][prefix == 0] == 0.0)
        if np.unique(positive).size > 1:
            assert np.all((result[: q + 1] >= 0.0) & (result[: q + 1] <= 1.0))
            assert result[int(np.argmax(prefix))] == 1.0
        np.testing.assert_array_equal(result[q + 1 :], row[q + 1 :])


def test_normalized_zero_entry_never_goes_negative() -> None:
    matrix = _matrix([[0.0, 0.0, 0.0], [0.0, 0.0, 0.0], [0.2, 0.0, 0.6]])
    np.testing.assert_allclose(compute_intensities(matrix, 2, "normalized"), [0.0, 0.0, 1.0])


def test_row_statistics_ignores_zeros_and_future_keys() -> None:
    matrix = _matrix([[0.0, 0.0, 0.0], [0.0, 0.0, 0.0], [0.2, 0.0, 0.6]])
    assert row_statistics(matrix, 0) is None
    stats = row_statistics(matrix, 2)
    assert isinstance(stats, RowStatistics)
    assert stats.row_min == pytest.approx(0.2)
    assert stats.row_max == pytest.approx(0.6)


def test_precomputed_statistics_match_on_demand_results() -> None:
    matrix = _random_causal_matrix(size=7, seed=5)
    cache = precompute_row_statistics(matrix)
    assert len(cache) == matrix.rows
    for q in range(matrix.rows):
        np.testing.assert_array_equal(
            compute_intensities(matrix, q, "normalized", stats_cache=cache),
            compute_intensities(matrix, q, "normalized"),
        )


def test_compute_intensities_does_not_mutate_matrix() -> None:
    matrix = _random_causal_matrix()
    before = matrix.scores.copy()
    for mode in ScoreMode:
        result = compute_intensities(matrix, 3, mode)
        result[:] = -1.0
    np.testing.assert_array_equal(matrix.scores, before)


def test_truncated_score_block_reads_missing_keys_as_zero() -> None:
    matrix = decode(_short_payload())
    result = compute_intensities(matrix, 1, "raw")
    assert result.shape == (2,)
    np.testing.assert_allclose(result, [0.5, 0.0])


def _short_payload() -> bytes:
    return encode(["A", "B"], [0.4, 0.6, 0.5, 0.5], rows=2, cols=2)[:-4]


def test_query_index_out_of_range_raises() -> None:
    matrix = _random_causal_matrix(size=3)
    with pytest.raises(IndexError):
        compute_intensities(matrix, 3, "raw")
    with pytest.raises(IndexError):
        compute_intensities(matrix, -1, "raw")


def test_unknown_mode_raises() -> None:
    matrix = _random_causal_matrix(size=3)
    with pytest.raises(ValueError):
        compute_intensities(matrix, 0, "log")


def test_mode_cycle_order() -> None:
    assert next_mode(ScoreMode.RAW) is ScoreMode.NORMALIZED
    assert next_mode(ScoreMode.NORMALIZED) is ScoreMode.AMPLIFIED
    assert next_mode(ScoreMode.AMPLIFIED) is ScoreMode.RAW


@pytest.mark.parametrize("mode", list(ScoreMode) + ["raw", "normalized", "amplified"])
def test_mode_cycle_is_closed(mode) -> None:
    assert next_mode(next_mode(next_mode(mode))) == ScoreMode(mode)
