"""Synthetic paired mobility traces used as realistic fixtures."""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest

from ppmpredict.config import Representation
from ppmpredict.data.classifiers import SymbolKind, build_classifier
from ppmpredict.data.neighbors import NeighborOracle
from ppmpredict.data.streams import load_symbols
from ppmpredict.data.synthetic_trace import MobilityTraceConfig, MobilityTraceSource


def test_trace_alternates_timeslots_and_locations() -> None:
    source = MobilityTraceSource(MobilityTraceConfig(num_locations=8, num_timeslots=4, seed=1))
    trace = source.sample(50, seed=2)
    classify = build_classifier(Representation.BINBOXSTRINGS)

    assert trace.shape == (100,)
    assert all(classify(int(s), i) is SymbolKind.STRT for i, s in enumerate(trace[0::2]))
    assert all(classify(int(s), i) is SymbolKind.LOC for i, s in enumerate(trace[1::2]))


def test_walk_only_moves_between_declared_neighbors() -> None:
    source = MobilityTraceSource(MobilityTraceConfig(num_locations=10, num_timeslots=6, seed=9))
    oracle = source.neighbor_oracle()
    locations = source.sample(2000, seed=4)[1::2]
    for prev, cur in zip(locations[:-1], locations[1:]):
        if prev != cur:
            assert oracle.are_neighbors(int(cur), int(prev))


def test_transition_rows_are_distributions() -> None:
    source = MobilityTraceSource(MobilityTraceConfig(num_locations=6, num_timeslots=3, seed=0))
    assert np.allclose(np.sum(source.transitions, axis=2), 1.0)
    assert np.all(source.transitions >= 0.0)


def test_same_seed_reproduces_the_split() -> None:
    config = MobilityTraceConfig(num_locations=6, num_timeslots=3, seed=11)
    a = MobilityTraceSource(config).generate_train_test_split(train_pairs=100, test_pairs=20, seed=3)
    b = MobilityTraceSource(config).generate_train_test_split(train_pairs=100, test_pairs=20, seed=3)
    assert np.array_equal(a.train, b.train)
    assert np.array_equal(a.test, b.test)
    assert a.metadata["alphabet_size"] == 9


def test_save_split_writes_symbols_and_neighbors(tmp_path: Path) -> None:
    source = MobilityTraceSource(MobilityTraceConfig(num_locations=6, num_timeslots=3, seed=2))
    split = source.generate_train_test_split(train_pairs=40, test_pairs=10, seed=1)
    source.save_split(split, tmp_path)

    assert load_symbols(tmp_path / "train.dat").tolist() == split.train.tolist()
    assert len(load_symbols(tmp_path / "test.dat")) == 20
    oracle = NeighborOracle.from_json(tmp_path / "neighbors.json")
    assert len(oracle) == 6
    metadata = json.loads((tmp_path / "metadata.json").read_text(encoding="utf-8"))
    assert metadata["train_pairs"] == 40


@pytest.mark.parametrize(
    "kwargs",
    [
        {"num_locations": 1},
        {"num_timeslots": 0},
        {"num_locations": 4, "neighbor_radius": 2},
        {"habit_concentration": 0.0},
    ],
)
def test_invalid_configs_are_rejected(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        MobilityTraceSource(MobilityTraceConfig(**kwargs))
