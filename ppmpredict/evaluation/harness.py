"""Read-only evaluation of a frozen context model on held-out streams.

Two modes are provided:
- `evaluate_predictions`: discrete accuracy over the targets of a paired
  (context, target) stream, with spatial-neighbor soft scoring.
- `evaluate_logloss`: average negative log2 probability of every symbol.

Neither mode mutates the model.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
import logging
import math
from typing import Iterable, Sequence

import numpy as np

from ppmpredict.config import EvaluationConfig, Representation
from ppmpredict.data.classifiers import SymbolClassifier, SymbolKind, build_classifier
from ppmpredict.data.neighbors import NeighborOracle, UnknownLocationError
from ppmpredict.model.prediction import PredictionEngine, PredictionResult


logger = logging.getLogger(__name__)

MAX_POSITION_WARNINGS = 20


@dataclass(frozen=True)
class ScoredPosition:
    """One scored target of the prediction test, kept for the verbose trace."""

    index: int
    expected: int
    kind: SymbolKind
    result: PredictionResult
    correct: bool
    neighbor_flags: tuple[bool, ...]

    @property
    def neighbor_hit(self) -> bool:
        return not self.correct and any(self.neighbor_flags)


@dataclass(frozen=True)
class PredictionTestResult:
    """Aggregate counters of a discrete prediction test."""

    max_order: int
    num_scored: int
    num_correct: int
    num_fallback_correct: int
    num_fallback_total: int
    num_multi_prediction: int
    num_neighbor_correct: int
    positions: tuple[ScoredPosition, ...] = ()

    @property
    def percent_correct(self) -> float:
        if self.num_scored == 0:
            return 0.0
        return 100.0 * self.num_correct / self.num_scored


@dataclass(frozen=True)
class LogLossResult:
    """Summary of a log-loss evaluation run (losses in bits)."""

    max_order: int
    num_scored: int
    total_bits: float
    mean_loss: float
    num_clamped: int
    depth_counts: dict[int, int]


def _check_orders(engine: PredictionEngine, config: EvaluationConfig) -> None:
    config.validate()
    if config.max_order != engine.max_order:
        raise ValueError(
            f"Evaluation max_order {config.max_order} does not match the model's "
            f"max_order {engine.max_order}."
        )


def _context_before(sequence: Sequence[int], index: int, max_order: int) -> tuple[int, ...]:
    start = max(0, index - max_order)
    return tuple(int(s) for s in sequence[start:index])


def _neighbor_flags(
    oracle: NeighborOracle | None,
    result: PredictionResult,
    expected: int,
) -> tuple[bool, ...]:
    """Flag each candidate that neighbors `expected`.

    Raises `UnknownLocationError` when `expected` is not in the oracle's table.
    """

    if oracle is None:
        return tuple(False for _ in result.candidates)
    return tuple(
        candidate.symbol != expected and oracle.are_neighbors(candidate.symbol, expected)
        for candidate in result.candidates
    )


def evaluate_predictions(
    engine: PredictionEngine,
    sequence: Iterable[int],
    *,
    config: EvaluationConfig,
    oracle: NeighborOracle | None = None,
    classifier: SymbolClassifier | None = None,
    keep_trace: bool | None = None,
) -> PredictionTestResult:
    """Score every second symbol of a paired stream against the model's candidates.

    Position 0 is context only; positions 1, 3, 5, ... are targets. Each
    target's context is the preceding `max_order` symbols (fewer near the start).
    A target is correct if it appears anywhere in the tied candidate set.
    Per-position records are kept when `keep_trace` is set (default: `config.verbose`).
    """

    _check_orders(engine, config)
    if keep_trace is None:
        keep_trace = config.verbose
    symbols = [int(s) for s in sequence]
    if classifier is None:
        classifier = build_classifier(config.representation)
    check_kind = config.representation is not Representation.NONE

    num_scored = 0
    num_correct = 0
    num_fallback_correct = 0
    num_fallback_total = 0
    num_multi_prediction = 0
    num_neighbor_correct = 0
    kind_warnings = 0
    neighbor_warnings = 0
    positions: list[ScoredPosition] = []

    for index in range(1, len(symbols), 2):
        expected = symbols[index]
        result = engine.predict(_context_before(symbols, index, engine.max_order))

        kind = classifier(expected, index)
        if check_kind and kind is not SymbolKind.LOC and kind_warnings < MAX_POSITION_WARNINGS:
            logger.warning(
                "Expected a LOC symbol at position %d, got 0x%04x (%s).",
                index,
                expected,
                kind.value,
            )
            kind_warnings += 1

        correct = expected in result.symbols
        flags: tuple[bool, ...] = ()
        if not correct or keep_trace:
            try:
                flags = _neighbor_flags(oracle, result, expected)
            except UnknownLocationError as exc:
                if neighbor_warnings < MAX_POSITION_WARNINGS:
                    logger.warning("Neighbor lookup failed at position %d: %s", index, exc)
                neighbor_warnings += 1
                flags = tuple(False for _ in result.candidates)

        num_scored += 1
        if result.num_predictions > 1:
            num_multi_prediction += 1
        if result.is_fallback:
            num_fallback_total += 1
        if correct:
            num_correct += 1
            if result.is_fallback:
                num_fallback_correct += 1
        elif any(flags):
            num_neighbor_correct += 1

        if keep_trace:
            positions.append(
                ScoredPosition(
                    index=index,
                    expected=expected,
                    kind=kind,
                    result=result,
                    correct=correct,
                    neighbor_flags=flags,
                )
            )

    if neighbor_warnings > MAX_POSITION_WARNINGS:
        logger.warning(
            "Suppressed %d further neighbor lookup warnings.",
            neighbor_warnings - MAX_POSITION_WARNINGS,
        )

    return PredictionTestResult(
        max_order=engine.max_order,
        num_scored=num_scored,
        num_correct=num_correct,
        num_fallback_correct=num_fallback_correct,
        num_fallback_total=num_fallback_total,
        num_multi_prediction=num_multi_prediction,
        num_neighbor_correct=num_neighbor_correct,
        positions=tuple(positions),
    )


def evaluate_logloss(
    engine: PredictionEngine,
    sequence: Iterable[int],
    *,
    config: EvaluationConfig,
) -> LogLossResult:
    """Average `-log2 p(x_i | context)` over every position of the stream.

    Probabilities below `config.probability_floor` (including symbols absent
    from the resolving node) are clamped before the logarithm.
    Control symbols are scored by the control level once the search reaches
    the base level.
    """

    _check_orders(engine, config)
    symbols = [int(s) for s in sequence]
    floor = float(config.probability_floor)

    total_bits = 0.0
    num_clamped = 0
    depth_counts: Counter[int] = Counter()

    for index, symbol in enumerate(symbols):
        result = engine.predict(_context_before(symbols, index, engine.max_order))
        level = result.level_for(symbol)
        prob = level.probability_of(symbol)
        if prob < floor:
            prob = floor
            num_clamped += 1
        total_bits += -float(np.log2(prob))
        depth_counts[level.depth] += 1

    num_scored = len(symbols)
    mean_loss = total_bits / num_scored if num_scored else 0.0
    if not math.isfinite(mean_loss):
        raise RuntimeError("Log-loss is not finite; check the probability floor.")

    return LogLossResult(
        max_order=engine.max_order,
        num_scored=num_scored,
        total_bits=total_bits,
        mean_loss=mean_loss,
        num_clamped=num_clamped,
        depth_counts=dict(sorted(depth_counts.items())),
    )
