#!/usr/bin/env python3
"""Render an attention payload as heat-maps and a static hover view.

Usage:
    python scripts/render_attention.py --input public/attention_data.bin
    python scripts/render_attention.py --input data.bin --mode normalized --query 5
    python scripts/render_attention.py --input data.bin --config strict --html
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from attention_heatmap.config import ViewerConfig, get_viewer_preset
from attention_heatmap.decoding import MalformedInput, load_attention_file
from attention_heatmap.display import plot_attention_heatmap, render_html
from attention_heatmap.transforms import ScoreMode, next_mode
from attention_heatmap.utils import create_logger, set_verbosity


LOGGER = create_logger("attention_heatmap.render")


def _load_config(value: str) -> ViewerConfig:
    if value.endswith(".json"):
        return ViewerConfig.load(value)
    return get_viewer_preset(value)


def _modes(first: ScoreMode, all_modes: bool) -> list[ScoreMode]:
    if not all_modes:
        return [first]
    modes = [first]
    while len(modes) < len(ScoreMode):
        modes.append(next_mode(modes[-1]))
    return modes


def main() -> int:
    parser = argparse.ArgumentParser(description="Render attention heat-maps from a binary payload")
    parser.add_argument("--input", type=str, required=True, help="Binary attention payload")
    parser.add_argument("--output-dir", type=str, default="report/figures")
    parser.add_argument("--config", type=str, default="default", help="Preset name or JSON file")
    parser.add_argument("--mode", type=str, choices=[m.value for m in ScoreMode], default=None)
    parser.add_argument("--all-modes", action="store_true", help="Render every mode in cycle order")
    parser.add_argument("--query", type=int, default=None, help="Hovered token index for the HTML view")
    parser.add_argument("--html", action="store_true", help="Also write the hover view as HTML")
    parser.add_argument("--verbose", action="store_true", help="Log decoder details")
    args = parser.parse_args()

    if args.verbose:
        set_verbosity(logging.DEBUG)

    config = _load_config(args.config)
    first_mode = ScoreMode(args.mode) if args.mode else config.mode

    try:
        matrix = load_attention_file(args.input, strict=config.strict_decode)
    except MalformedInput as exc:
        LOGGER.error("Could not decode %s: %s", args.input, exc)
        return 1

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    stem = Path(args.input).stem

    for mode in _modes(first_mode, args.all_modes):
        plot_attention_heatmap(matrix, mode, output_dir / f"{stem}_{mode.value}.png", config)
        if args.html:
            html_path = output_dir / f"{stem}_{mode.value}.html"
            html_path.write_text(render_html(matrix, args.query, mode, config), encoding="utf-8")
            LOGGER.info("Saved hover view to %s", html_path)

    return 0


if __name__ == "__main__":
    sys.exit(main())
