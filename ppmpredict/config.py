"""Run configuration passed explicitly into the training and evaluation engines."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ppmpredict.symbols import DATA_DOMAIN_SIZE


DEFAULT_MAX_ORDER = 3
DEFAULT_FLUSH_WINDOW = 256
DEFAULT_FLUSH_THRESHOLD = 0.90
DEFAULT_PROBABILITY_FLOOR = 1e-10
DEFAULT_MAX_TEST_LENGTH = 1 << 20


class EscapePolicy(str, Enum):
    """How much probability mass a context node reserves for unseen successors.

    - `distinct`: escape mass equals the number of distinct recorded successors.
    - `unit`: escape mass is always 1.
    - `none`: no escape mass; recorded successors share the whole unit.
    """

    DISTINCT = "distinct"
    UNIT = "unit"
    NONE = "none"


class Representation(str, Enum):
    """Input string representation, used only to label symbols in diagnostics."""

    NONE = "none"
    LOCSTRINGS = "locstrings"
    LOCTIMESTRINGS = "loctimestrings"
    BOXSTRINGS = "boxstrings"
    BINBOXSTRINGS = "binboxstrings"
    BINDOWTS = "bindowts"

    @property
    def label(self) -> str:
        return "Unknown" if self is Representation.NONE else self.value.capitalize()


@dataclass(frozen=True)
class ModelConfig:
    """Configuration of the context model and its training pass.

    Notes:
    - `alphabet_size` sizes the uniform base-level prior. When None, the number
      of distinct data symbols observed during training is used instead.
    - `flush_window` / `flush_threshold` drive the compressibility monitor that
      records FLUSH markers at the control level.
    """

    max_order: int = DEFAULT_MAX_ORDER
    escape_policy: EscapePolicy = EscapePolicy.DISTINCT
    alphabet_size: int | None = None
    flush_window: int = DEFAULT_FLUSH_WINDOW
    flush_threshold: float = DEFAULT_FLUSH_THRESHOLD

    def validate(self) -> None:
        if self.max_order < 0:
            raise ValueError("max_order must be non-negative.")
        if not isinstance(self.escape_policy, EscapePolicy):
            raise ValueError(f"Unknown escape policy: {self.escape_policy!r}")
        if self.alphabet_size is not None and not 0 < self.alphabet_size <= DATA_DOMAIN_SIZE:
            raise ValueError(f"alphabet_size must be in [1, {DATA_DOMAIN_SIZE}] or None.")
        if self.flush_window <= 0:
            raise ValueError("flush_window must be positive.")
        if not 0.0 < self.flush_threshold:
            raise ValueError("flush_threshold must be positive.")


@dataclass(frozen=True)
class EvaluationConfig:
    """Configuration shared by the accuracy and log-loss evaluation modes."""

    max_order: int = DEFAULT_MAX_ORDER
    representation: Representation = Representation.NONE
    verbose: bool = False
    probability_floor: float = DEFAULT_PROBABILITY_FLOOR
    max_test_length: int = DEFAULT_MAX_TEST_LENGTH

    def validate(self) -> None:
        if self.max_order < 0:
            raise ValueError("max_order must be non-negative.")
        if not 0.0 < self.probability_floor < 1.0:
            raise ValueError("probability_floor must be in (0, 1).")
        if self.max_test_length <= 0:
            raise ValueError("max_test_length must be positive.")
