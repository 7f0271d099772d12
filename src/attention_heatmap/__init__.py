"""Public interface for the attention heat-map package."""

from attention_heatmap.config import ExportConfig, ViewerConfig
from attention_heatmap.decoding import AttentionMatrix, MalformedInput, decode, encode, load_attention_file
from attention_heatmap.transforms import ScoreMode, compute_intensities, next_mode

__all__ = [
    "AttentionMatrix",
    "ExportConfig",
    "MalformedInput",
    "ScoreMode",
    "ViewerConfig",
    "compute_intensities",
    "decode",
    "encode",
    "load_attention_file",
    "next_mode",
]
