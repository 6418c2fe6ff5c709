"""Symbol sources, neighbor tables and diagnostic classifiers."""

from ppmpredict.data.classifiers import SymbolKind, build_classifier
from ppmpredict.data.neighbors import NeighborOracle, UnknownLocationError
from ppmpredict.data.streams import iter_training_symbols, load_symbols, load_test_symbols

__all__ = [
    "NeighborOracle",
    "SymbolKind",
    "UnknownLocationError",
    "build_classifier",
    "iter_training_symbols",
    "load_symbols",
    "load_test_symbols",
]
