#!/usr/bin/env python3
"""Export one layer of a causal LM's attention as a binary payload.

Usage:
    python scripts/export_attention.py --text "The quick brown fox"
    python scripts/export_attention.py --model gpt2 --layer 5 --output public/attention_data.bin
    python scripts/export_attention.py --config configs/export.json
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from attention_heatmap.config import ExportConfig
from attention_heatmap.export import run_export
from attention_heatmap.utils import create_logger


LOGGER = create_logger("attention_heatmap.export_cli")


def main() -> int:
    parser = argparse.ArgumentParser(description="Export attention weights to a binary payload")
    parser.add_argument("--config", type=str, default=None, help="ExportConfig JSON file")
    parser.add_argument("--model", type=str, default=None)
    parser.add_argument("--text", type=str, default=None)
    parser.add_argument("--layer", type=int, default=None, help="Layer to export (-1 for last)")
    parser.add_argument("--device", type=str, default=None)
    parser.add_argument("--output", type=str, default=None)
    args = parser.parse_args()

    config = ExportConfig.load(args.config) if args.config else ExportConfig()
    overrides = {
        "model_name": args.model,
        "text": args.text,
        "layer": args.layer,
        "device": args.device,
        "output_path": args.output,
    }
    data = config.to_dict()
    data.update({key: value for key, value in overrides.items() if value is not None})
    config = ExportConfig(**data)

    path = run_export(config)
    LOGGER.info("Payload written to %s", path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
