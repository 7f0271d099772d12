"""Binary attention payload decoding and encoding."""

from .binary_format import (
    AttentionMatrix,
    MalformedInput,
    decode,
    encode,
    load_attention_file,
    save_attention_file,
)

__all__ = [
    "AttentionMatrix",
    "MalformedInput",
    "decode",
    "encode",
    "load_attention_file",
    "save_attention_file",
]
