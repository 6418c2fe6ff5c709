"""Context model store and the order-fallback prediction engine."""

from ppmpredict.model.prediction import Candidate, PredictionEngine, PredictionResult
from ppmpredict.model.store import BASE_ORDER, CONTROL_ORDER, ContextModelStore, ContextNode

__all__ = [
    "BASE_ORDER",
    "CONTROL_ORDER",
    "Candidate",
    "ContextModelStore",
    "ContextNode",
    "PredictionEngine",
    "PredictionResult",
]
