"""Context model store: successor statistics at every order level.

Layout:
- Orders `0..max_order` each hold a dict keyed by context tuples of exactly that
  length. The order-0 table has a single key, the empty context, whose
  successor set is the observed data alphabet.
- Order `-2` is a single node holding control symbols (DONE, FLUSH) only.
- Order `-1` is not stored; it is the uniform prior over the data alphabet.

Nodes are created lazily on their first observation and are never removed, so a
materialized node always records at least one successor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import Sequence

from ppmpredict.config import EscapePolicy, ModelConfig, DEFAULT_PROBABILITY_FLOOR
from ppmpredict.symbols import DATA_DOMAIN_SIZE, is_control, validate_data_symbol


BASE_ORDER = -1
CONTROL_ORDER = -2

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ContextNode:
    """Sparse successor counts observed after one context."""

    total: int = 0
    counts: dict[int, int] = field(default_factory=dict)

    def increment(self, symbol: int) -> None:
        self.total += 1
        self.counts[symbol] = self.counts.get(symbol, 0) + 1

    @property
    def num_successors(self) -> int:
        return len(self.counts)


class ContextModelStore:
    """Frequency statistics for every context length up to `max_order`."""

    def __init__(self, config: ModelConfig | None = None) -> None:
        config = ModelConfig() if config is None else config
        config.validate()
        self.config = config
        self.max_order = int(config.max_order)
        self.escape_policy = config.escape_policy

        self._nodes_by_order: list[dict[tuple[int, ...], ContextNode]] = [
            {} for _ in range(self.max_order + 1)
        ]
        self._control_node: ContextNode | None = None
        self._frozen = False

    # Mutation -----------------------------------------------------------------
    def observe(self, context: Sequence[int], symbol: int) -> None:
        """Record `symbol` as a successor of `context` at order `len(context)`."""

        self._check_mutable()
        symbol = validate_data_symbol(symbol)
        key = tuple(int(s) for s in context)
        if len(key) > self.max_order:
            raise ValueError(
                f"Context length {len(key)} exceeds max_order {self.max_order}."
            )
        table = self._nodes_by_order[len(key)]
        node = table.get(key)
        if node is None:
            node = ContextNode()
            table[key] = node
        node.increment(symbol)

    def observe_control(self, symbol: int) -> None:
        """Record a control symbol at the control level only."""

        self._check_mutable()
        symbol = int(symbol)
        if not is_control(symbol):
            raise ValueError(f"Symbol 0x{symbol:04x} is not a control symbol.")
        if self._control_node is None:
            self._control_node = ContextNode()
        self._control_node.increment(symbol)

    def freeze(self) -> None:
        """Make the store read-only for the rest of the process."""

        if not self._frozen:
            logger.debug(
                "Freezing context model: nodes_per_order=%s", self.nodes_per_order()
            )
        self._frozen = True

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError("Context model is frozen; training updates are not allowed.")

    # Queries ------------------------------------------------------------------
    def lookup(self, context: Sequence[int]) -> ContextNode | None:
        """Return the node for `context` at order `len(context)`, or None if absent."""

        order = len(context)
        if order > self.max_order:
            return None
        key = tuple(int(s) for s in context)
        return self._nodes_by_order[order].get(key)

    @property
    def control_node(self) -> ContextNode | None:
        return self._control_node

    @property
    def alphabet(self) -> tuple[int, ...]:
        """Sorted data symbols observed so far."""

        root = self._nodes_by_order[0].get(())
        if root is None:
            return ()
        return tuple(sorted(root.counts))

    @property
    def base_alphabet_size(self) -> int:
        """Size of the uniform base-level prior (never smaller than the observed alphabet)."""

        observed = len(self.alphabet)
        configured = self.config.alphabet_size or 0
        return max(configured, observed)

    def node_count(self, order: int) -> int:
        if order == CONTROL_ORDER:
            return 0 if self._control_node is None else 1
        if order < 0 or order > self.max_order:
            raise ValueError(f"order must be in [0, {self.max_order}] or {CONTROL_ORDER}.")
        return len(self._nodes_by_order[order])

    def nodes_per_order(self) -> list[int]:
        return [len(table) for table in self._nodes_by_order]

    def escape_mass(self, node: ContextNode) -> int:
        if self.escape_policy is EscapePolicy.DISTINCT:
            return node.num_successors
        if self.escape_policy is EscapePolicy.UNIT:
            return 1
        return 0

    def denominator(self, node: ContextNode) -> int:
        return node.total + self.escape_mass(node)

    def code_length_bits(
        self,
        context: Sequence[int],
        symbol: int,
        *,
        floor: float = DEFAULT_PROBABILITY_FLOOR,
    ) -> float:
        """Return the PPM coding cost of `symbol` after `context`, in bits.

        Escapes are charged at every order whose node exists but does not record
        `symbol`; the first order that records it charges the symbol's own
        probability. A symbol recorded nowhere is charged at order -1 as a uniform
        draw from the configured alphabet (or the whole data domain).
        """

        key = tuple(int(s) for s in context)[-self.max_order:] if self.max_order > 0 else ()
        bits = 0.0
        for order in range(len(key), -1, -1):
            node = self._nodes_by_order[order].get(key[len(key) - order:])
            if node is None:
                continue
            denom = self.denominator(node)
            count = node.counts.get(symbol, 0)
            if count > 0:
                return bits - math.log2(max(count / denom, floor))
            bits -= math.log2(max(self.escape_mass(node) / denom, floor))
        coding_alphabet = self.config.alphabet_size or DATA_DOMAIN_SIZE
        return bits + math.log2(float(coding_alphabet))
