"""Binary attention payload reader and writer.

Layout (little-endian throughout):

    offset 0   uint32  num_tokens
    offset 4   uint32  rows
    offset 8   uint32  cols
    offset 12  num_tokens x (uint32 length L, then L bytes of UTF-8 text)
    remainder  rows * cols float32 values, row-major

The decoder exposes the header dimensions as declared. It does not check them
against the token count, and by default it does not check them against the
size of the trailing float block either (see ``decode``).
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from attention_heatmap.utils.logging_utils import create_logger


LOGGER = create_logger(__name__)

HEADER_STRUCT = struct.Struct("<III")
LENGTH_STRUCT = struct.Struct("<I")
SCORE_DTYPE = np.dtype("<f4")

BufferLike = Union[bytes, bytearray, memoryview]


class MalformedInput(ValueError):
    """Raised when a payload is too short for its header or token table."""


@dataclass(frozen=True)
class AttentionMatrix:
    """Decoded attention payload: tokens plus a dense row-major score grid.

    ``scores`` is a read-only 1-D float32 array indexed as ``row * cols + col``.
    It normally holds exactly ``rows * cols`` values; a lenient decode of a short
    numeric block leaves it shorter (see ``is_complete``).
    """

    tokens: Tuple[str, ...]
    scores: np.ndarray
    rows: int
    cols: int

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.rows, self.cols)

    @property
    def num_tokens(self) -> int:
        return len(self.tokens)

    @property
    def is_complete(self) -> bool:
        """True when the score block holds exactly ``rows * cols`` values."""
        return self.scores.size == self.rows * self.cols

    def score(self, row: int, col: int) -> float:
        return float(self.scores[row * self.cols + col])

    def row(self, row: int) -> np.ndarray:
        """Return the stored values of ``row``; shorter than ``cols`` only if the block was truncated."""
        start = row * self.cols
        return self.scores[start : start + self.cols]

    def as_grid(self) -> np.ndarray:
        """Return a ``(rows, cols)`` float32 copy, zero-padded when the block was short."""
        grid = np.zeros(self.rows * self.cols, dtype=np.float32)
        count = min(self.scores.size, grid.size)
        grid[:count] = self.scores[:count]
        return grid.reshape(self.rows, self.cols)


def _read_uint32(view: memoryview, offset: int, what: str) -> int:
    if offset + LENGTH_STRUCT.size > len(view):
        raise MalformedInput(
            f"Buffer ends at byte {len(view)} while reading {what} at offset {offset}"
        )
    return LENGTH_STRUCT.unpack_from(view, offset)[0]


def decode(buffer: BufferLike, strict: bool = False) -> AttentionMatrix:
    """Decode a binary attention payload into an ``AttentionMatrix``.

    Pre:
        - buffer holds the complete payload (no streaming).
    Post:
        - tokens has exactly num_tokens entries, in payload order.
        - scores is a read-only float32 copy of the trailing block.
    Complexity:
        - O(len(buffer)).

    The trailing block is not checked against ``rows * cols * 4`` unless
    ``strict`` is set. In the default lenient mode a short or long block is
    kept as-is (only whole floats, a trailing partial float is dropped) and a
    warning is logged; indexing past the stored values is the caller's concern.

    Raises:
        MalformedInput: header shorter than 12 bytes, a token length prefix or
            token body running past the end of the buffer, or (strict only) a
            score block whose size does not match the header.
    """

    view = memoryview(buffer).cast("B")
    if len(view) < HEADER_STRUCT.size:
        raise MalformedInput(
            f"Buffer has {len(view)} bytes, header requires {HEADER_STRUCT.size}"
        )
    num_tokens, rows, cols = HEADER_STRUCT.unpack_from(view, 0)
    offset = HEADER_STRUCT.size
    LOGGER.debug("Header: num_tokens=%d rows=%d cols=%d", num_tokens, rows, cols)

    tokens = []
    for index in range(num_tokens):
        length = _read_uint32(view, offset, f"length of token {index}")
        offset += LENGTH_STRUCT.size
        end = offset + length
        if end > len(view):
            raise MalformedInput(
                f"Token {index} declares {length} bytes but only {len(view) - offset} remain"
            )
        tokens.append(bytes(view[offset:end]).decode("utf-8", errors="replace"))
        offset = end

    remaining = len(view) - offset
    expected = rows * cols * SCORE_DTYPE.itemsize
    if remaining != expected:
        # The header is not reconciled with the float block size; lenient
        # decoding keeps whatever whole floats are present.
        if strict:
            raise MalformedInput(
                f"Score block has {remaining} bytes, header {rows}x{cols} requires {expected}"
            )
        LOGGER.warning(
            "Score block has %d bytes but header %dx%d implies %d; keeping %d values",
            remaining,
            rows,
            cols,
            expected,
            remaining // SCORE_DTYPE.itemsize,
        )

    count = remaining // SCORE_DTYPE.itemsize
    if count:
        scores = np.frombuffer(view, dtype=SCORE_DTYPE, count=count, offset=offset).astype(np.float32)
    else:
        scores = np.empty(0, dtype=np.float32)
    scores.flags.writeable = False
    return AttentionMatrix(tokens=tuple(tokens), scores=scores, rows=rows, cols=cols)


def load_attention_file(path: Union[Path, str], strict: bool = False) -> AttentionMatrix:
    """Read ``path`` fully into memory and decode it."""

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Attention payload does not exist: {path}")
    matrix = decode(path.read_bytes(), strict=strict)
    LOGGER.info("Loaded %s: %d tokens, shape %dx%d", path, matrix.num_tokens, matrix.rows, matrix.cols)
    return matrix


def encode(
    tokens: Sequence[str],
    scores: Union[np.ndarray, Sequence[float], Sequence[Sequence[float]]],
    rows: Optional[int] = None,
    cols: Optional[int] = None,
) -> bytes:
    """Serialize tokens and a score grid into the binary payload layout.

    ``scores`` is either 2-D (its shape supplies ``rows`` and ``cols``) or flat,
    in which case ``rows`` and ``cols`` are required and must multiply to its
    length. Values are stored as little-endian float32.
    """

    grid = np.asarray(scores, dtype=SCORE_DTYPE)
    if grid.ndim == 2:
        rows = grid.shape[0] if rows is None else rows
        cols = grid.shape[1] if cols is None else cols
    elif grid.ndim == 1:
        if rows is None or cols is None:
            raise ValueError("rows and cols are required when scores is flat")
    else:
        raise ValueError(f"scores must be 1-D or 2-D, received {grid.ndim} dimensions")
    if rows < 0 or cols < 0:
        raise ValueError(f"rows and cols must be non-negative, received {rows}x{cols}")
    if grid.size != rows * cols:
        raise ValueError(f"scores has {grid.size} values, shape {rows}x{cols} requires {rows * cols}")

    parts = [HEADER_STRUCT.pack(len(tokens), rows, cols)]
    for token in tokens:
        data = token.encode("utf-8")
        parts.append(LENGTH_STRUCT.pack(len(data)))
        parts.append(data)
    parts.append(np.ascontiguousarray(grid).reshape(-1).tobytes())
    return b"".join(parts)


def save_attention_file(
    path: Union[Path, str],
    tokens: Sequence[str],
    scores: Union[np.ndarray, Sequence[float], Sequence[Sequence[float]]],
    rows: Optional[int] = None,
    cols: Optional[int] = None,
) -> Path:
    """Encode and write a payload, creating parent directories as needed."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = encode(tokens, scores, rows=rows, cols=cols)
    path.write_bytes(payload)
    LOGGER.info("Wrote %d bytes to %s", len(payload), path)
    return path
