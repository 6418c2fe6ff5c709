"""Fixed-width symbol domain and the reserved control values."""

from __future__ import annotations


SYMBOL_BITS = 16
SYMBOL_MAX = (1 << SYMBOL_BITS) - 1

# Reserved control values occupy the top of the 16-bit domain.
DONE = SYMBOL_MAX
FLUSH = SYMBOL_MAX - 1
CONTROL_SYMBOLS = (DONE, FLUSH)

DATA_DOMAIN_SIZE = FLUSH


def is_control(symbol: int) -> bool:
    return symbol == DONE or symbol == FLUSH


def validate_data_symbol(symbol: int) -> int:
    """Return `symbol` as an int, rejecting control values and out-of-range input."""

    value = int(symbol)
    if value < 0 or value > SYMBOL_MAX:
        raise ValueError(f"Symbol {value} out of range [0, {SYMBOL_MAX}].")
    if is_control(value):
        raise ValueError(f"Control symbol 0x{value:04x} is not a data symbol.")
    return value
