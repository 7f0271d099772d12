"""Configuration dataclasses used across the attention heat-map project."""

from .viewer_config import (
    ExportConfig,
    ViewerConfig,
    default_viewer_config,
    get_viewer_preset,
    presentation_viewer_config,
    strict_viewer_config,
)

__all__ = [
    "ExportConfig",
    "ViewerConfig",
    "default_viewer_config",
    "get_viewer_preset",
    "presentation_viewer_config",
    "strict_viewer_config",
]
