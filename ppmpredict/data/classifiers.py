"""Per-representation symbol classifiers used to label diagnostics.

None of these affect training or scoring; they only name the kind of symbol
being predicted in the verbose trace.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable

from ppmpredict.config import Representation


class SymbolKind(str, Enum):
    LOC = "LOC"
    STRT = "STRT"
    DUR = "DUR"
    DELIM = "DELIM"


# Binary box-string symbol ranges (inclusive).
INITIAL_START_TIME = 0x2500
FINAL_START_TIME = 0x255F
INITIAL_DURATION = 0x2560
FINAL_DURATION = 0x25FF
INITIAL_LOCATION = 0x2620
FINAL_LOCATION = 0x282B

# Day-of-week timeslot strings use a wider start-time block.
DOWTS_FINAL_START_TIME = 0x25FF
DOWTS_INITIAL_LOCATION = 0x2620
DOWTS_FINAL_LOCATION = 0x26FF

SymbolClassifier = Callable[[int, int], SymbolKind]


def classify_locstring(symbol: int, index: int) -> SymbolKind:
    del index
    return SymbolKind.DELIM if symbol == ord(":") else SymbolKind.LOC


def classify_boxstring(symbol: int, index: int) -> SymbolKind:
    del symbol
    slot = index % 6
    if slot < 2:
        return SymbolKind.STRT
    if slot < 4:
        return SymbolKind.LOC
    return SymbolKind.DUR


def classify_binboxstring(symbol: int, index: int) -> SymbolKind:
    del index
    if INITIAL_START_TIME <= symbol <= FINAL_START_TIME:
        return SymbolKind.STRT
    if INITIAL_DURATION <= symbol <= FINAL_DURATION:
        return SymbolKind.DUR
    if INITIAL_LOCATION <= symbol <= FINAL_LOCATION:
        return SymbolKind.LOC
    return SymbolKind.DELIM


def classify_bindowts(symbol: int, index: int) -> SymbolKind:
    del index
    if INITIAL_START_TIME <= symbol <= DOWTS_FINAL_START_TIME:
        return SymbolKind.STRT
    if DOWTS_INITIAL_LOCATION <= symbol <= DOWTS_FINAL_LOCATION:
        return SymbolKind.LOC
    return SymbolKind.DELIM


def classify_unknown(symbol: int, index: int) -> SymbolKind:
    del symbol, index
    return SymbolKind.DELIM


class LocTimeStringClassifier:
    """Labels `L}tt:tt~dd:dd` strings.

    Delimiters are recognised by value; every other symbol takes the next kind
    in the repeating LOC, STRT x4, DUR x4 cycle, so an instance must only see
    one stream.
    """

    DELIMITERS = frozenset(ord(ch) for ch in "}:~;")
    CYCLE = (SymbolKind.LOC,) + (SymbolKind.STRT,) * 4 + (SymbolKind.DUR,) * 4

    def __init__(self) -> None:
        self._next = 0

    def __call__(self, symbol: int, index: int) -> SymbolKind:
        del index
        if symbol in self.DELIMITERS:
            return SymbolKind.DELIM
        kind = self.CYCLE[self._next]
        self._next = (self._next + 1) % len(self.CYCLE)
        return kind


def build_classifier(representation: Representation) -> SymbolClassifier:
    """Return a fresh classifier for `representation`."""

    if representation is Representation.LOCSTRINGS:
        return classify_locstring
    if representation is Representation.BOXSTRINGS:
        return classify_boxstring
    if representation is Representation.LOCTIMESTRINGS:
        return LocTimeStringClassifier()
    if representation is Representation.BINBOXSTRINGS:
        return classify_binboxstring
    if representation is Representation.BINDOWTS:
        return classify_bindowts
    return classify_unknown
