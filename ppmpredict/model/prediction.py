"""Prediction by order fallback over a context model store.

Search behavior:
- At most the last `max_order` symbols of the caller's context are used.
- Orders are tried from the full context length down to 1, dropping the oldest
  symbol at each step, until a context with recorded successors is found.
- Exhausting the non-empty contexts resolves at the base level (-1): a uniform
  prior over the observed data alphabet. Control symbols escape from there to
  the control level (-2) and take `count / total` of the control node.
- Before any data symbol has been trained the control level (-2) answers with
  the control symbols.

The engine holds a reference to the store and nothing else, so a frozen store
can be queried from any number of readers.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Sequence

from ppmpredict.model.store import BASE_ORDER, CONTROL_ORDER, ContextModelStore, ContextNode
from ppmpredict.symbols import CONTROL_SYMBOLS, is_control


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Candidate:
    symbol: int
    numerator: int


@dataclass(frozen=True)
class PredictionResult:
    """Tied candidate set produced at one resolving order.

    Every candidate shares `denominator`. At the base level any in-domain data
    symbol carries the uniform prior, whether or not it is listed, and control
    symbols are scored by `escape`, the control level below it.
    """

    candidates: tuple[Candidate, ...]
    denominator: int
    depth: int
    escape: PredictionResult | None = None

    @property
    def num_predictions(self) -> int:
        return len(self.candidates)

    @property
    def symbols(self) -> tuple[int, ...]:
        return tuple(c.symbol for c in self.candidates)

    @property
    def is_fallback(self) -> bool:
        """True when the result came from the base or control level."""

        return self.depth < 1

    def numerator_of(self, symbol: int) -> int:
        for candidate in self.candidates:
            if candidate.symbol == symbol:
                return candidate.numerator
        if self.depth == BASE_ORDER and not is_control(symbol):
            return 1
        return 0

    def level_for(self, symbol: int) -> PredictionResult:
        """Return the level that scores `symbol`: this one or the one it escapes to."""

        if self.escape is not None and is_control(int(symbol)):
            return self.escape
        return self

    def probability_of(self, symbol: int) -> float:
        level = self.level_for(symbol)
        return level.numerator_of(int(symbol)) / level.denominator

    def probabilities(self) -> dict[int, float]:
        return {c.symbol: c.numerator / self.denominator for c in self.candidates}


class PredictionEngine:
    """Read-only next-symbol predictor over a trained store."""

    def __init__(self, store: ContextModelStore) -> None:
        self.store = store
        self.max_order = store.max_order

    def predict(self, context: Sequence[int]) -> PredictionResult:
        """Return the candidate set for the symbol following `context`."""

        tail = self._extract_tail_context(context)
        for order in range(len(tail), 0, -1):
            # Stored nodes always record at least one successor.
            node = self.store.lookup(tail[len(tail) - order:])
            if node is not None:
                if order < len(tail) and logger.isEnabledFor(logging.DEBUG):
                    logger.debug(
                        "Prediction escaped: requested_order=%d chosen_order=%d context=%s",
                        len(tail),
                        order,
                        tail,
                    )
                return self._node_result(node, order)

        alphabet = self.store.alphabet
        if alphabet:
            return PredictionResult(
                candidates=tuple(Candidate(symbol, 1) for symbol in alphabet),
                denominator=self.store.base_alphabet_size,
                depth=BASE_ORDER,
                escape=self._control_result(),
            )
        return self._control_result()

    def _extract_tail_context(self, context: Sequence[int]) -> tuple[int, ...]:
        if self.max_order <= 0:
            return ()
        usable = min(len(context), self.max_order)
        if usable <= 0:
            return ()
        start = len(context) - usable
        return tuple(int(context[start + idx]) for idx in range(usable))

    def _node_result(self, node: ContextNode, order: int) -> PredictionResult:
        ranked = sorted(node.counts.items(), key=lambda item: (-item[1], item[0]))
        return PredictionResult(
            candidates=tuple(Candidate(symbol, count) for symbol, count in ranked),
            denominator=self.store.denominator(node),
            depth=order,
        )

    def _control_result(self) -> PredictionResult:
        node = self.store.control_node
        if node is None:
            symbols = tuple(sorted(CONTROL_SYMBOLS))
            return PredictionResult(
                candidates=tuple(Candidate(symbol, 1) for symbol in symbols),
                denominator=len(symbols),
                depth=CONTROL_ORDER,
            )
        # Last level: nothing to escape to, so no escape mass is reserved.
        ranked = sorted(node.counts.items(), key=lambda item: (-item[1], item[0]))
        return PredictionResult(
            candidates=tuple(Candidate(symbol, count) for symbol, count in ranked),
            denominator=node.total,
            depth=CONTROL_ORDER,
        )
