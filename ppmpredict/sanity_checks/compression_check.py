"""Compare the model's log-loss code length with standard compressors.

This module is optional and purely diagnostic. It never influences training,
prediction or scoring.
"""

from __future__ import annotations

import bz2
import lzma
import zlib

import numpy as np

from ppmpredict.symbols import SYMBOL_BITS, SYMBOL_MAX


def sequence_to_bytes(seq: np.ndarray) -> bytes:
    """Convert a symbol sequence to bytes for standard compressors.

    Encoding:
    - every symbol < 256: one byte per symbol (`uint8`)
    - otherwise: two bytes per symbol (`uint16`, little-endian)
    """

    arr = np.asarray(seq, dtype=np.int64)
    if arr.ndim != 1:
        raise ValueError(f"Expected a 1D sequence, got shape {arr.shape}.")
    if arr.size == 0:
        return b""
    if np.any(arr < 0) or np.any(arr > SYMBOL_MAX):
        raise ValueError(f"Sequence contains symbols outside [0, {SYMBOL_MAX}].")
    if int(arr.max()) < 256:
        return np.asarray(arr, dtype=np.uint8).tobytes(order="C")
    return np.asarray(arr, dtype="<u2").tobytes(order="C")


def compress_bytes(payload: bytes) -> dict[str, int]:
    """Compress payload with standard-library compressors and return sizes in bytes."""

    return {
        "zlib": len(zlib.compress(payload, level=9)),
        "lzma": len(lzma.compress(payload, preset=9)),
        "bz2": len(bz2.compress(payload, compresslevel=9)),
    }


def summarize_compression(seq: np.ndarray, *, model_bits: float | None = None) -> dict:
    """Return raw, compressor and model code lengths in bits per symbol."""

    arr = np.asarray(seq, dtype=np.int64)
    n = int(arr.size)
    payload = sequence_to_bytes(arr)
    compressed = compress_bytes(payload)

    def _bps(num_bytes: int) -> float:
        return 0.0 if n == 0 else 8.0 * float(num_bytes) / float(n)

    summary: dict[str, object] = {
        "num_symbols": n,
        "symbol_bits": SYMBOL_BITS,
        "raw_bps": _bps(len(payload)),
        "compressors": {name: _bps(size) for name, size in compressed.items()},
    }
    if model_bits is not None:
        summary["model_bps"] = 0.0 if n == 0 else float(model_bits) / float(n)
    return summary


def format_compression_report(summary: dict) -> list[str]:
    lines = [
        "Compression comparison (bits per symbol)",
        f"  symbols: {summary['num_symbols']}",
        f"  raw: {summary['raw_bps']:.4f}",
    ]
    for name, bps in summary["compressors"].items():
        lines.append(f"  {name}: {bps:.4f}")
    if "model_bps" in summary:
        lines.append(f"  model: {summary['model_bps']:.4f}")
    return lines
