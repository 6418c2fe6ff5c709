"""Synthetic mobility traces of paired (timeslot, location) symbols.

This module produces reproducible test data in the binary box-string symbol
ranges. It supports:
- A ring of locations where each location's declared neighbors are the nearby
  ring positions
- A time-dependent sticky random walk, so the timeslot symbol carries real
  predictive information about the following location
- Train/test split export as raw 16-bit symbol files plus a neighbor table
"""

from __future__ import annotations

import argparse
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np
from numpy.typing import NDArray

from ppmpredict.data.classifiers import (
    FINAL_LOCATION,
    FINAL_START_TIME,
    INITIAL_LOCATION,
    INITIAL_START_TIME,
)
from ppmpredict.data.neighbors import NeighborOracle
from ppmpredict.data.streams import save_symbols


FloatArray = NDArray[np.float64]
IntArray = NDArray[np.int64]


@dataclass(frozen=True)
class MobilityTraceConfig:
    """Configuration for synthetic trace generation.

    Tuning notes:
    - Larger `stay_bias` -> longer dwell at one location.
    - Smaller `habit_concentration` -> sharper per-timeslot habits (more predictable).
    """

    num_locations: int = 24
    num_timeslots: int = 48
    neighbor_radius: int = 1
    stay_bias: float = 2.0
    habit_concentration: float = 0.3
    seed: int = 0

    def validate(self) -> None:
        max_locations = FINAL_LOCATION - INITIAL_LOCATION + 1
        max_timeslots = FINAL_START_TIME - INITIAL_START_TIME + 1
        if not 2 <= self.num_locations <= max_locations:
            raise ValueError(f"num_locations must be in [2, {max_locations}].")
        if not 1 <= self.num_timeslots <= max_timeslots:
            raise ValueError(f"num_timeslots must be in [1, {max_timeslots}].")
        if self.neighbor_radius < 1 or 2 * self.neighbor_radius >= self.num_locations:
            raise ValueError("neighbor_radius must be >= 1 and smaller than half the ring.")
        if self.stay_bias < 0:
            raise ValueError("stay_bias must be non-negative.")
        if self.habit_concentration <= 0:
            raise ValueError("habit_concentration must be positive.")


@dataclass(frozen=True)
class GeneratedTrace:
    """Generated train/test split and metadata."""

    train: IntArray
    test: IntArray
    metadata: dict[str, Any]


def location_symbol(index: int) -> int:
    return INITIAL_LOCATION + int(index)


def timeslot_symbol(slot: int) -> int:
    return INITIAL_START_TIME + int(slot)


class MobilityTraceSource:
    """Time-dependent random walk over a ring of locations."""

    def __init__(self, config: MobilityTraceConfig) -> None:
        config.validate()
        self.config = config
        self.num_locations = config.num_locations
        self.num_timeslots = config.num_timeslots

        rng = np.random.default_rng(config.seed)
        self.transitions = self._random_transitions(rng)
        self._transition_cdf = np.cumsum(self.transitions, axis=2)
        # Ensure the last CDF entry is exactly 1.0 to avoid edge-case search issues.
        self._transition_cdf[:, :, -1] = 1.0

    def _ring_neighbors(self, index: int) -> list[int]:
        radius = self.config.neighbor_radius
        offsets = [d for d in range(-radius, radius + 1) if d != 0]
        return [(index + d) % self.num_locations for d in offsets]

    def _random_transitions(self, rng: np.random.Generator) -> FloatArray:
        """Per-timeslot transition rows supported on {self} plus the ring neighbors."""

        shape = (self.num_timeslots, self.num_locations, self.num_locations)
        transitions = np.zeros(shape, dtype=np.float64)
        support_size = 2 * self.config.neighbor_radius + 1
        alpha = np.full(support_size, self.config.habit_concentration, dtype=np.float64)
        for slot in range(self.num_timeslots):
            for loc in range(self.num_locations):
                support = [loc] + self._ring_neighbors(loc)
                weights = rng.dirichlet(alpha)
                weights[0] += self.config.stay_bias
                transitions[slot, loc, support] = weights / np.sum(weights)
        return transitions

    def neighbor_table(self) -> dict[int, list[int]]:
        """Declared adjacency keyed by location symbol."""

        return {
            location_symbol(loc): [location_symbol(n) for n in self._ring_neighbors(loc)]
            for loc in range(self.num_locations)
        }

    def neighbor_oracle(self) -> NeighborOracle:
        return NeighborOracle(self.neighbor_table())

    def sample(self, num_pairs: int, *, seed: int = 0, start_slot: int = 0) -> IntArray:
        """Sample `num_pairs` (timeslot, location) pairs as a flat symbol array."""

        if num_pairs < 0:
            raise ValueError("num_pairs must be non-negative.")
        rng = np.random.default_rng(seed)
        out = np.empty(2 * num_pairs, dtype=np.int64)
        loc = int(rng.integers(self.num_locations))
        for idx in range(num_pairs):
            slot = (start_slot + idx) % self.num_timeslots
            cdf = self._transition_cdf[slot, loc]
            loc = int(np.searchsorted(cdf, rng.random(), side="right"))
            out[2 * idx] = timeslot_symbol(slot)
            out[2 * idx + 1] = location_symbol(loc)
        return out

    def generate_train_test_split(
        self,
        *,
        train_pairs: int,
        test_pairs: int,
        seed: int = 0,
    ) -> GeneratedTrace:
        """Generate a contiguous train/test split from one sample path."""

        if train_pairs <= 0 or test_pairs <= 0:
            raise ValueError("train_pairs and test_pairs must be positive.")
        trace = self.sample(train_pairs + test_pairs, seed=seed)
        train = trace[: 2 * train_pairs].copy()
        test = trace[2 * train_pairs:].copy()
        metadata = {
            "train_pairs": train_pairs,
            "test_pairs": test_pairs,
            "seed": seed,
            "num_locations": self.num_locations,
            "num_timeslots": self.num_timeslots,
            "neighbor_radius": self.config.neighbor_radius,
            "alphabet_size": self.num_locations + self.num_timeslots,
        }
        return GeneratedTrace(train=train, test=test, metadata=metadata)

    def save_split(self, split: GeneratedTrace, output_dir: str | Path) -> None:
        """Write train.dat, test.dat, neighbors.json and metadata.json."""

        out = Path(output_dir)
        out.mkdir(parents=True, exist_ok=True)
        save_symbols(out / "train.dat", split.train)
        save_symbols(out / "test.dat", split.test)
        self.neighbor_oracle().to_json(out / "neighbors.json")
        with (out / "metadata.json").open("w", encoding="utf-8") as fh:
            json.dump(split.metadata, fh, indent=2)


def _cli() -> None:
    parser = argparse.ArgumentParser(description="Generate a synthetic mobility trace split.")
    parser.add_argument("--train-pairs", type=int, default=20_000)
    parser.add_argument("--test-pairs", type=int, default=5_000)
    parser.add_argument("--num-locations", type=int, default=24)
    parser.add_argument("--num-timeslots", type=int, default=48)
    parser.add_argument("--neighbor-radius", type=int, default=1)
    parser.add_argument("--stay-bias", type=float, default=2.0)
    parser.add_argument("--habit-concentration", type=float, default=0.3)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--output-dir", type=str, default="data/traces")
    args = parser.parse_args()

    config = MobilityTraceConfig(
        num_locations=args.num_locations,
        num_timeslots=args.num_timeslots,
        neighbor_radius=args.neighbor_radius,
        stay_bias=args.stay_bias,
        habit_concentration=args.habit_concentration,
        seed=args.seed,
    )
    source = MobilityTraceSource(config)
    split = source.generate_train_test_split(
        train_pairs=args.train_pairs,
        test_pairs=args.test_pairs,
        seed=args.seed,
    )
    source.save_split(split, args.output_dir)

    print("Synthetic mobility trace generated")
    print(f"  train symbols: {len(split.train)}")
    print(f"  test symbols:  {len(split.test)}")
    print(f"  locations: {source.num_locations}")
    print(f"  timeslots: {source.num_timeslots}")
    print(f"  saved to: {args.output_dir}")


if __name__ == "__main__":
    _cli()
