"""Training pass: all-order updates, control markers and the compressibility monitor."""

from __future__ import annotations

import copy

import numpy as np
import pytest

from ppmpredict.config import ModelConfig
from ppmpredict.model.store import ContextModelStore
from ppmpredict.symbols import DONE, FLUSH
from ppmpredict.training.trainer import CompressionMonitor, Trainer


def _snapshot(store: ContextModelStore) -> list[dict[tuple[int, ...], dict[int, int]]]:
    return [
        {key: copy.copy(node.counts) for key, node in table.items()}
        for table in store._nodes_by_order
    ]


def test_each_symbol_updates_every_applicable_order() -> None:
    store = ContextModelStore(ModelConfig(max_order=2))
    summary = Trainer(store).train([1, 2, 3])

    assert summary.num_symbols == 3
    assert summary.nodes_per_order == (1, 2, 1)
    assert store.lookup(()).counts == {1: 1, 2: 1, 3: 1}
    assert store.lookup((1,)).counts == {2: 1}
    assert store.lookup((2,)).counts == {3: 1}
    assert store.lookup((1, 2)).counts == {3: 1}


def test_training_stops_at_done_and_records_it_at_control_level() -> None:
    store = ContextModelStore(ModelConfig(max_order=1))
    summary = Trainer(store).train([0, 1, DONE, 2])

    assert summary.num_symbols == 2
    assert store.alphabet == (0, 1)
    assert store.control_node is not None
    assert store.control_node.counts == {DONE: 1}


def test_flush_in_source_touches_only_the_control_level() -> None:
    store = ContextModelStore(ModelConfig(max_order=1))
    summary = Trainer(store).train([0, FLUSH, 1])

    assert summary.num_flushes == 1
    assert store.control_node.counts == {FLUSH: 1, DONE: 1}
    assert store.alphabet == (0, 1)
    # FLUSH never enters the history, so 0 is still followed directly by 1.
    assert store.lookup((0,)).counts == {1: 1}


def test_invalid_symbols_raise() -> None:
    store = ContextModelStore(ModelConfig(max_order=1))
    with pytest.raises(ValueError):
        Trainer(store).train([0, -1])
    with pytest.raises(ValueError):
        Trainer(store).train([70_000])


def test_compression_monitor_reports_poor_blocks() -> None:
    monitor = CompressionMonitor(window=4, threshold=0.5, symbol_bits=16)
    assert monitor.charge(10.0) is False
    assert monitor.charge(10.0) is False
    assert monitor.charge(10.0) is False
    assert monitor.charge(10.0) is True
    assert monitor.last_ratio == pytest.approx(40.0 / 64.0)

    # A well-compressed block does not trigger.
    for _ in range(3):
        assert monitor.charge(1.0) is False
    assert monitor.charge(1.0) is False
    assert monitor.last_ratio == pytest.approx(4.0 / 64.0)


def test_monitor_flush_is_recorded_without_perturbing_data_orders() -> None:
    config = ModelConfig(max_order=1, flush_window=4, flush_threshold=0.5)
    store = ContextModelStore(config)
    summary = Trainer(store).train([0, 1, 2, 3])

    # Fresh symbols cost about 16 bits each, so the first block is incompressible.
    assert summary.num_flushes == 1
    assert store.control_node.counts == {FLUSH: 1, DONE: 1}
    assert store.lookup(()).total == 4
    assert store.nodes_per_order() == [1, 3]


def test_repetitive_stream_never_flushes() -> None:
    config = ModelConfig(max_order=2, flush_window=256, flush_threshold=0.9)
    store = ContextModelStore(config)
    trainer = Trainer(store)
    summary = trainer.train([4, 5, 6, 7] * 1024)

    # Only the first few symbols pay for being unseen; a block holds 4096 raw bits.
    assert summary.num_flushes == 0
    assert trainer.monitor.last_ratio is not None
    assert trainer.monitor.last_ratio < 0.1


def test_training_twice_never_decreases_counts() -> None:
    rng = np.random.default_rng(3)
    sequence = rng.integers(0, 10, size=800, dtype=np.int64)
    store = ContextModelStore(ModelConfig(max_order=3))
    trainer = Trainer(store)

    trainer.train(sequence)
    first = _snapshot(store)
    trainer.train(sequence)
    second = _snapshot(store)

    for order, table in enumerate(first):
        for key, counts in table.items():
            assert key in second[order]
            for symbol, count in counts.items():
                assert second[order][key][symbol] >= count
    assert store.lookup(()).total == 2 * len(sequence)


def test_trainer_rejects_mismatched_config() -> None:
    store = ContextModelStore(ModelConfig(max_order=2))
    with pytest.raises(ValueError):
        Trainer(store, ModelConfig(max_order=3))
