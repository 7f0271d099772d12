"""Attention export from Hugging Face models into the binary payload format."""

from .hf_export import export_attention, extract_attention, load_model_and_tokenizer, run_export

__all__ = ["export_attention", "extract_attention", "load_model_and_tokenizer", "run_export"]
