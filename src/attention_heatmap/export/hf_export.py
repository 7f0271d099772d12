"""Extract attention from a Hugging Face causal LM and write a binary payload."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Tuple, Union

import numpy as np
import torch

from attention_heatmap.config.viewer_config import ExportConfig
from attention_heatmap.decoding.binary_format import save_attention_file
from attention_heatmap.utils.logging_utils import create_logger


LOGGER = create_logger(__name__)


def resolve_device(device: str) -> str:
    if device == "auto":
        return "cuda" if torch.cuda.is_available() else "cpu"
    return device


def load_model_and_tokenizer(model_name: str, device: str = "auto") -> Tuple[Any, Any]:
    """Load a causal LM that can return attention weights, plus its tokenizer."""
    from transformers import AutoModelForCausalLM, AutoTokenizer

    device = resolve_device(device)
    tokenizer = AutoTokenizer.from_pretrained(model_name)
    # SDPA kernels do not materialize attention probabilities.
    model = AutoModelForCausalLM.from_pretrained(model_name, attn_implementation="eager")
    model.to(device)
    model.eval()
    return model, tokenizer


def extract_attention(
    model: Any,
    tokenizer: Any,
    text: str,
    layer: int = -1,
    device: str = "cpu",
    max_length: int = 64,
) -> Tuple[List[str], np.ndarray]:
    """Return token strings and the head-averaged ``(seq, seq)`` attention of ``layer``.

    Pre:
        - model accepts ``output_attentions=True`` and returns ``.attentions``
          shaped (batch, heads, seq, seq) per layer.
    Post:
        - the matrix is float32 with one row per query token.
    """

    inputs = tokenizer(text, return_tensors="pt", truncation=True, max_length=max_length)
    inputs = {k: v.to(device) for k, v in inputs.items()}
    tokens = tokenizer.convert_ids_to_tokens(inputs["input_ids"][0])

    with torch.no_grad():
        outputs = model(**inputs, output_attentions=True)

    attentions = getattr(outputs, "attentions", None)
    if not attentions:
        raise ValueError("Model did not return attention weights; load it with attn_implementation='eager'")
    if not -len(attentions) <= layer < len(attentions):
        raise IndexError(f"layer must be in [-{len(attentions)}, {len(attentions)}), received {layer}")

    # Drop the batch dimension and average over heads.
    attention = attentions[layer][0].mean(dim=0)
    return list(tokens), attention.float().cpu().numpy()


def export_attention(
    model: Any,
    tokenizer: Any,
    text: str,
    output_path: Union[Path, str],
    layer: int = -1,
    device: str = "cpu",
    max_length: int = 64,
) -> Path:
    """Extract one layer's attention for ``text`` and write it as a payload file."""

    tokens, attention = extract_attention(
        model, tokenizer, text, layer=layer, device=device, max_length=max_length
    )
    LOGGER.info("Extracted layer %d attention for %d tokens", layer, len(tokens))
    return save_attention_file(output_path, tokens, attention)


def run_export(config: ExportConfig) -> Path:
    """Load the configured model and export its attention for ``config.text``."""

    device = resolve_device(config.device)
    LOGGER.info("Loading %s on %s", config.model_name, device)
    model, tokenizer = load_model_and_tokenizer(config.model_name, device)
    return export_attention(
        model,
        tokenizer,
        config.text,
        config.output_path,
        layer=config.layer,
        device=device,
        max_length=config.max_length,
    )
