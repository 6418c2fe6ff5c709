"""Loading fixed-width symbol streams from disk."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import numpy as np
from numpy.typing import NDArray

from ppmpredict.symbols import DONE, SYMBOL_MAX


IntArray = NDArray[np.int64]

logger = logging.getLogger(__name__)


def load_symbols(path: str | Path) -> IntArray:
    """Load a symbol stream as int64.

    `.npy` files are loaded with NumPy; any other file is read as raw
    little-endian 16-bit symbols.
    """

    symbol_path = Path(path)
    if not symbol_path.exists():
        raise FileNotFoundError(f"Missing symbol file: {symbol_path}")
    if symbol_path.suffix == ".npy":
        arr = np.load(symbol_path)
        if arr.ndim != 1:
            raise ValueError(f"Expected a 1D symbol array at {symbol_path}, got shape {arr.shape}.")
        arr = np.asarray(arr, dtype=np.int64)
        if arr.size and (int(arr.min()) < 0 or int(arr.max()) > SYMBOL_MAX):
            raise ValueError(f"Symbols in {symbol_path} fall outside [0, {SYMBOL_MAX}].")
        return arr

    if symbol_path.stat().st_size % 2:
        logger.warning("%s has an odd byte count; the trailing byte is ignored.", symbol_path)
    raw = np.fromfile(symbol_path, dtype="<u2")
    return raw.astype(np.int64)


def load_test_symbols(path: str | Path, *, max_length: int) -> IntArray:
    """Load a held-out stream, truncating it to `max_length` symbols with a warning."""

    if max_length <= 0:
        raise ValueError("max_length must be positive.")
    arr = load_symbols(path)
    if arr.size > max_length:
        logger.warning(
            "Test stream %s has %d symbols; truncated to the first %d.",
            path,
            arr.size,
            max_length,
        )
        arr = arr[:max_length]
    return arr


def save_symbols(path: str | Path, symbols: IntArray) -> None:
    """Write symbols as raw little-endian 16-bit values."""

    arr = np.asarray(symbols, dtype=np.int64)
    if arr.ndim != 1:
        raise ValueError(f"Expected a 1D sequence, got shape {arr.shape}.")
    if arr.size and (int(arr.min()) < 0 or int(arr.max()) > SYMBOL_MAX):
        raise ValueError(f"Symbols must be in [0, {SYMBOL_MAX}] for 16-bit storage.")
    arr.astype("<u2").tofile(Path(path))


def iter_training_symbols(symbols: IntArray) -> Iterator[int]:
    """Yield a stored stream followed by the DONE marker."""

    for symbol in symbols:
        yield int(symbol)
    yield DONE
