"""Presentation helpers: token formatting, highlight colors and heat-map figures."""

from .heatmap import (
    TokenHighlight,
    highlight_color,
    intensity_grid,
    plot_attention_heatmap,
    render_html,
    token_highlights,
)
from .tokens import format_token, format_tokens

__all__ = [
    "TokenHighlight",
    "format_token",
    "format_tokens",
    "highlight_color",
    "intensity_grid",
    "plot_attention_heatmap",
    "render_html",
    "token_highlights",
]
