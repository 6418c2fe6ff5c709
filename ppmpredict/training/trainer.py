"""Single-pass training of the context model store."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
import logging
from typing import Iterable

from ppmpredict.config import ModelConfig
from ppmpredict.model.store import ContextModelStore
from ppmpredict.symbols import DONE, FLUSH, SYMBOL_BITS, validate_data_symbol


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrainingSummary:
    """Counts describing one training pass."""

    num_symbols: int
    num_flushes: int
    nodes_per_order: tuple[int, ...]


class CompressionMonitor:
    """Block-wise compressibility estimate over the most recent `window` symbols.

    Each symbol's model coding cost is accumulated; once `window` symbols have
    been charged the block's bits are compared with the raw fixed-width size.
    A ratio above `threshold` means the model is barely compressing the stream.
    """

    def __init__(self, window: int, threshold: float, symbol_bits: int = SYMBOL_BITS) -> None:
        if window <= 0:
            raise ValueError("window must be positive.")
        self.window = int(window)
        self.threshold = float(threshold)
        self.raw_bits = float(self.window * symbol_bits)
        self._bits = 0.0
        self._count = 0
        self.last_ratio: float | None = None

    def charge(self, bits: float) -> bool:
        """Add one symbol's cost; return True when a completed block exceeds the threshold."""

        self._bits += bits
        self._count += 1
        if self._count < self.window:
            return False
        self.last_ratio = self._bits / self.raw_bits
        self._bits = 0.0
        self._count = 0
        return self.last_ratio > self.threshold

    def reset(self) -> None:
        self._bits = 0.0
        self._count = 0
        self.last_ratio = None


class Trainer:
    """Populates a store from a symbol stream, one sequential pass per call."""

    def __init__(self, store: ContextModelStore, config: ModelConfig | None = None) -> None:
        self.store = store
        self.config = store.config if config is None else config
        if self.config.max_order != store.max_order:
            raise ValueError("Trainer config max_order must match the store's max_order.")
        self.monitor = CompressionMonitor(
            window=self.config.flush_window,
            threshold=self.config.flush_threshold,
        )

    def train(self, symbols: Iterable[int]) -> TrainingSummary:
        """Train on `symbols` until DONE or the end of the iterable.

        Every data symbol updates all context orders 0..max_order that end just
        before it (fewer at the start of the stream). FLUSH markers, whether in
        the source or raised by the compressibility monitor, are recorded at the
        control level only and never enter the history.
        """

        max_order = self.store.max_order
        history: deque[int] = deque(maxlen=max_order)
        self.monitor.reset()
        num_symbols = 0
        num_flushes = 0

        for raw_symbol in symbols:
            symbol = int(raw_symbol)
            if symbol == DONE:
                break
            if symbol == FLUSH:
                self.store.observe_control(FLUSH)
                num_flushes += 1
                continue
            symbol = validate_data_symbol(symbol)

            context = tuple(history)
            if self.monitor.charge(self.store.code_length_bits(context, symbol)):
                self.store.observe_control(FLUSH)
                num_flushes += 1
                logger.debug(
                    "FLUSH recorded at symbol %d (block ratio %.3f)",
                    num_symbols,
                    self.monitor.last_ratio,
                )

            for order in range(len(context) + 1):
                self.store.observe(context[len(context) - order:], symbol)
            if max_order > 0:
                history.append(symbol)
            num_symbols += 1

        self.store.observe_control(DONE)
        summary = TrainingSummary(
            num_symbols=num_symbols,
            num_flushes=num_flushes,
            nodes_per_order=tuple(self.store.nodes_per_order()),
        )
        logger.info(
            "Trained on %d symbols (max_order=%d, flushes=%d, nodes_per_order=%s)",
            summary.num_symbols,
            max_order,
            summary.num_flushes,
            list(summary.nodes_per_order),
        )
        return summary


def train_model(symbols: Iterable[int], config: ModelConfig | None = None) -> ContextModelStore:
    """Build a store, train it on `symbols`, and freeze it."""

    store = ContextModelStore(config)
    Trainer(store).train(symbols)
    store.freeze()
    return store
