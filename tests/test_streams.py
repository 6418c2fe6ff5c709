"""Loading symbol streams from raw 16-bit files and NumPy arrays."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pytest

from ppmpredict.data.streams import (
    iter_training_symbols,
    load_symbols,
    load_test_symbols,
    save_symbols,
)
from ppmpredict.symbols import DONE


def test_raw_files_are_little_endian_16_bit(tmp_path: Path) -> None:
    path = tmp_path / "trace.dat"
    path.write_bytes(bytes([0x20, 0x26, 0x01, 0x25]))
    arr = load_symbols(path)
    assert arr.dtype == np.int64
    assert arr.tolist() == [0x2620, 0x2501]


def test_save_then_load_preserves_symbols(tmp_path: Path) -> None:
    symbols = np.array([0x2500, 0x2620, 0x2501, 0x2621], dtype=np.int64)
    path = tmp_path / "trace.dat"
    save_symbols(path, symbols)
    assert path.stat().st_size == 8
    assert load_symbols(path).tolist() == symbols.tolist()


def test_npy_files_are_loaded_and_range_checked(tmp_path: Path) -> None:
    good = tmp_path / "good.npy"
    np.save(good, np.array([1, 2, 3]))
    assert load_symbols(good).tolist() == [1, 2, 3]

    bad = tmp_path / "bad.npy"
    np.save(bad, np.array([1, 70_000]))
    with pytest.raises(ValueError):
        load_symbols(bad)


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_symbols(tmp_path / "absent.dat")


def test_overlong_test_stream_is_truncated_with_warning(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    path = tmp_path / "test.dat"
    save_symbols(path, np.arange(10, dtype=np.int64))
    with caplog.at_level(logging.WARNING, logger="ppmpredict.data.streams"):
        arr = load_test_symbols(path, max_length=4)
    assert arr.tolist() == [0, 1, 2, 3]
    assert "truncated" in caplog.text

    caplog.clear()
    with caplog.at_level(logging.WARNING, logger="ppmpredict.data.streams"):
        assert len(load_test_symbols(path, max_length=10)) == 10
    assert caplog.text == ""


def test_training_iterator_ends_with_done() -> None:
    assert list(iter_training_symbols(np.array([4, 5]))) == [4, 5, DONE]
