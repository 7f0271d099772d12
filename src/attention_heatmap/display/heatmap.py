"""Hover-view highlights, static HTML rendering and heat-map figures."""

from __future__ import annotations

import html
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from attention_heatmap.config.viewer_config import ViewerConfig
from attention_heatmap.decoding.binary_format import AttentionMatrix
from attention_heatmap.display.tokens import format_token, format_tokens
from attention_heatmap.transforms.score_transform import (
    ModeLike,
    ScoreMode,
    compute_intensities,
    precompute_row_statistics,
)
from attention_heatmap.utils.logging_utils import create_logger


LOGGER = create_logger(__name__)


@dataclass(frozen=True, slots=True)
class TokenHighlight:
    """One token of the hover view with its background color."""

    index: int
    text: str
    intensity: float
    color: str


def highlight_color(alpha: float, rgb: Sequence[int] = (100, 214, 92)) -> str:
    """CSS ``rgba`` color with ``alpha`` clipped to [0, 1]."""
    alpha = float(np.clip(alpha, 0.0, 1.0))
    r, g, b = rgb
    return f"rgba({r}, {g}, {b}, {alpha:.4g})"


def token_highlights(
    matrix: AttentionMatrix,
    query_index: Optional[int],
    mode: ModeLike,
    config: Optional[ViewerConfig] = None,
) -> List[TokenHighlight]:
    """Highlight every token for the hovered ``query_index``; None means nothing is hovered."""

    config = config or ViewerConfig()
    if query_index is None:
        intensities = np.zeros(len(matrix.tokens))
    else:
        intensities = compute_intensities(matrix, query_index, mode)
    highlights = []
    for index, token in enumerate(matrix.tokens):
        # Tokens beyond the score columns have no score to show.
        intensity = float(intensities[index]) if index < intensities.size else 0.0
        highlights.append(
            TokenHighlight(
                index=index,
                text=format_token(token, config),
                intensity=intensity,
                color=highlight_color(intensity, config.highlight_rgb),
            )
        )
    return highlights


def render_html(
    matrix: AttentionMatrix,
    query_index: Optional[int],
    mode: ModeLike,
    config: Optional[ViewerConfig] = None,
) -> str:
    """Render the hover view as a static HTML fragment."""

    mode = ScoreMode(mode)
    spans = []
    for item in token_highlights(matrix, query_index, mode, config):
        css_class = "token hovered" if item.index == query_index else "token"
        spans.append(
            f'<span class="{css_class}" data-index="{item.index}" '
            f'style="background-color: {item.color}">{html.escape(item.text)}</span>'
        )
    return (
        '<div class="attention-display">\n'
        f'  <div class="tokens">{"".join(spans)}</div>\n'
        f'  <p class="mode">Mode: {mode.value}</p>\n'
        "</div>\n"
    )


def intensity_grid(
    matrix: AttentionMatrix,
    mode: ModeLike,
    config: Optional[ViewerConfig] = None,
) -> np.ndarray:
    """Stack ``compute_intensities`` for every query row into a (rows, cols) array."""

    config = config or ViewerConfig()
    stats_cache = precompute_row_statistics(matrix) if config.cache_row_statistics else None
    grid = np.zeros((matrix.rows, matrix.cols), dtype=np.float64)
    for q in range(matrix.rows):
        grid[q] = compute_intensities(matrix, q, mode, stats_cache=stats_cache)
    return grid


def _axis_labels(tokens: Tuple[str, ...], size: int, config: ViewerConfig) -> Union[List[str], bool]:
    if len(tokens) != size:
        return True
    return format_tokens(tokens, config)


def plot_attention_heatmap(
    matrix: AttentionMatrix,
    mode: ModeLike,
    output_path: Union[Path, str],
    config: Optional[ViewerConfig] = None,
    title: Optional[str] = None,
) -> Path:
    """Generate and save the full heat-map for ``mode``.

    Token labels are used on an axis only when the token count matches that
    dimension; otherwise seaborn's index labels are kept.
    """

    config = config or ViewerConfig()
    mode = ScoreMode(mode)
    grid = intensity_grid(matrix, mode, config)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=config.figsize)
    sns.heatmap(
        grid,
        xticklabels=_axis_labels(matrix.tokens, matrix.cols, config),
        yticklabels=_axis_labels(matrix.tokens, matrix.rows, config),
        cmap=config.cmap,
        vmin=0.0,
        vmax=1.0,
        annot=config.annotate_values,
        fmt=".2f",
        ax=ax,
        square=True,
        cbar_kws={"label": f"Attention ({mode.value})"},
    )
    ax.set_title(title or f"Attention Pattern ({mode.value})", fontsize=14, fontweight="bold")
    ax.set_xlabel("Key Tokens", fontsize=12)
    ax.set_ylabel("Query Tokens", fontsize=12)
    plt.setp(ax.get_xticklabels(), rotation=45, ha="right", fontsize=9)
    plt.setp(ax.get_yticklabels(), rotation=0, fontsize=9)

    fig.tight_layout()
    fig.savefig(output_path, dpi=config.dpi, bbox_inches="tight")
    plt.close(fig)
    LOGGER.info("Saved %s heat-map to %s", mode.value, output_path)
    return output_path
