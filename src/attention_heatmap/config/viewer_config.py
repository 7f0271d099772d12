"""Viewer and exporter configuration dataclasses with validation.

Both configs are JSON-serializable so a render or export run can be repeated
from a saved file.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, List, Tuple

from attention_heatmap.transforms.score_transform import ScoreMode


@dataclass(slots=True)
class ViewerConfig:
    """Display settings for the hover view and the heat-map figure.

    Attributes:
        default_mode: Mode shown before the first toggle (raw/normalized/amplified).
        highlight_rgb: Base color of highlighted tokens; alpha is the intensity.
        strict_decode: Reject payloads whose score block does not match the header.
        cache_row_statistics: Precompute per-row min/max once per payload.
        word_boundary_marker: Leading marker rendered as a non-breaking space.
        bos_tokens: Token texts rendered as blank.
        cmap: Colormap for the heat-map figure.
        figsize: Figure size in inches.
        dpi: Resolution of saved figures.
        annotate_values: Draw the intensity value in each heat-map cell.
    """

    default_mode: str = ScoreMode.RAW.value
    highlight_rgb: Tuple[int, int, int] = (100, 214, 92)
    strict_decode: bool = False
    cache_row_statistics: bool = False
    word_boundary_marker: str = "▁"
    bos_tokens: List[str] = field(default_factory=lambda: ["<s>"])
    cmap: str = "Greens"
    figsize: Tuple[float, float] = (10.0, 8.0)
    dpi: int = 150
    annotate_values: bool = False

    def __post_init__(self) -> None:
        valid_modes = {mode.value for mode in ScoreMode}
        if self.default_mode not in valid_modes:
            raise ValueError(f"default_mode must be one of {sorted(valid_modes)}, received {self.default_mode}")
        self.highlight_rgb = tuple(self.highlight_rgb)  # type: ignore[assignment]
        if len(self.highlight_rgb) != 3 or any(not 0 <= c <= 255 for c in self.highlight_rgb):
            raise ValueError(f"highlight_rgb must be three values in [0, 255], received {self.highlight_rgb}")
        if len(self.word_boundary_marker) != 1:
            raise ValueError(
                f"word_boundary_marker must be a single character, received {self.word_boundary_marker!r}"
            )
        self.figsize = tuple(self.figsize)  # type: ignore[assignment]
        if len(self.figsize) != 2 or any(size <= 0 for size in self.figsize):
            raise ValueError(f"figsize must be two positive values, received {self.figsize}")
        if self.dpi <= 0:
            raise ValueError(f"dpi must be positive, received {self.dpi}")

    @property
    def mode(self) -> ScoreMode:
        return ScoreMode(self.default_mode)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return asdict(self)

    def save(self, path: Path | str) -> None:
        """Save config to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

    @classmethod
    def load(cls, path: Path | str) -> ViewerConfig:
        """Load config from JSON file."""
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return cls(**data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ViewerConfig:
        """Create config from dictionary."""
        return cls(**data)


@dataclass(slots=True)
class ExportConfig:
    """Settings for extracting attention from a causal LM into a payload file.

    Attributes:
        model_name: Hugging Face model id or local path.
        text: Prompt whose attention is exported.
        layer: Layer index to export (negative counts from the end).
        device: "auto", "cpu", "cuda" or "cuda:N".
        max_length: Tokenizer truncation length.
        output_path: Destination of the binary payload.
    """

    model_name: str = "gpt2"
    text: str = "The quick brown fox jumps over the lazy dog."
    layer: int = -1
    device: str = "auto"
    max_length: int = 64
    output_path: str = "public/attention_data.bin"

    def __post_init__(self) -> None:
        if not self.model_name:
            raise ValueError("model_name must be non-empty")
        if not self.text:
            raise ValueError("text must be non-empty")
        if self.max_length <= 0:
            raise ValueError(f"max_length must be positive, received {self.max_length}")
        if not (self.device in {"auto", "cpu", "cuda"} or self.device.startswith("cuda:")):
            raise ValueError(f"device must be auto/cpu/cuda/cuda:N, received {self.device}")

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return asdict(self)

    @classmethod
    def load(cls, path: Path | str) -> ExportConfig:
        """Load config from JSON file."""
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return cls(**data)


# Preset viewer configurations

def default_viewer_config() -> ViewerConfig:
    """Settings for the standard hover view."""
    return ViewerConfig()


def strict_viewer_config() -> ViewerConfig:
    """Reject shape mismatches and cache row statistics for long sequences."""
    return ViewerConfig(strict_decode=True, cache_row_statistics=True)


def presentation_viewer_config() -> ViewerConfig:
    """Amplified, annotated figures for slides."""
    return ViewerConfig(
        default_mode=ScoreMode.AMPLIFIED.value,
        figsize=(14.0, 12.0),
        dpi=200,
        annotate_values=True,
    )


def get_viewer_preset(name: str) -> ViewerConfig:
    """Get a viewer preset by name.

    Pre: name is one of "default", "strict", "presentation".
    """
    presets = {
        "default": default_viewer_config,
        "strict": strict_viewer_config,
        "presentation": presentation_viewer_config,
    }
    if name not in presets:
        raise ValueError(f"Unknown viewer preset: {name}. Choose from {list(presets.keys())}")
    return presets[name]()
