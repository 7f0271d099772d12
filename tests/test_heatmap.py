import numpy as np

from attention_heatmap.config import ViewerConfig
from attention_heatmap.display import (
    highlight_color,
    intensity_grid,
    plot_attention_heatmap,
    render_html,
    token_highlights,
)


def test_highlight_color_formats_and_clips() -> None:
    assert highlight_color(0.25) == "rgba(100, 214, 92, 0.25)"
    assert highlight_color(1.7) == "rgba(100, 214, 92, 1)"
    assert highlight_color(-0.1, (1, 2, 3)) == "rgba(1, 2, 3, 0)"


def test_no_hover_means_no_highlight(example_matrix) -> None:
    highlights = token_highlights(example_matrix, None, "raw")
    assert [h.intensity for h in highlights] == [0.0, 0.0]


def test_hovered_token_highlights_follow_mode(example_matrix) -> None:
    highlights = token_highlights(example_matrix, 1, "normalized")
    assert [h.text for h in highlights] == ["A", "B"]
    assert [h.intensity for h in highlights] == [0.0, 1.0]
    assert highlights[1].color == "rgba(100, 214, 92, 1)"


def test_render_html_escapes_tokens_and_shows_mode() -> None:
    from attention_heatmap.decoding import decode, encode

    matrix = decode(encode(["<b>", "▁x"], [[1.0, 0.0], [0.5, 0.5]]))
    markup = render_html(matrix, 1, "amplified", ViewerConfig())
    assert "&lt;b&gt;" in markup
    assert "\u00a0x" in markup
    assert "Mode: amplified" in markup
    assert 'class="token hovered" data-index="1"' in markup


def test_intensity_grid_uses_cache_without_changing_results(example_matrix) -> None:
    cached = intensity_grid(example_matrix, "normalized", ViewerConfig(cache_row_statistics=True))
    plain = intensity_grid(example_matrix, "normalized")
    np.testing.assert_array_equal(cached, plain)
    np.testing.assert_array_equal(plain, [[1.0, 0.0], [0.0, 1.0]])


def test_plot_attention_heatmap_writes_image(tmp_path, example_matrix) -> None:
    path = plot_attention_heatmap(example_matrix, "amplified", tmp_path / "fig" / "heatmap.png", ViewerConfig(dpi=50))
    assert path.exists()
    assert path.stat().st_size > 0
