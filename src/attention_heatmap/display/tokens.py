"""Token text normalization for display."""

from __future__ import annotations

from typing import Iterable, List, Optional

from attention_heatmap.config.viewer_config import ViewerConfig


NON_BREAKING_SPACE = "\u00a0"

# GPT-2 byte-level BPE markers for a leading space and a newline.
_BYTE_LEVEL_MARKERS = {"Ġ": " ", "Ċ": "\n"}


def format_token(text: str, config: Optional[ViewerConfig] = None) -> str:
    """Return the display form of a token.

    A start-of-sequence token renders blank, and a leading word-boundary marker
    (SentencePiece ``▁``) becomes a non-breaking space so the gap survives HTML
    whitespace collapsing.
    """

    config = config or ViewerConfig()
    if text in config.bos_tokens:
        return ""
    if text.startswith(config.word_boundary_marker):
        text = NON_BREAKING_SPACE + text[1:]
    for marker, replacement in _BYTE_LEVEL_MARKERS.items():
        text = text.replace(marker, replacement)
    return text


def format_tokens(tokens: Iterable[str], config: Optional[ViewerConfig] = None) -> List[str]:
    config = config or ViewerConfig()
    return [format_token(token, config) for token in tokens]
