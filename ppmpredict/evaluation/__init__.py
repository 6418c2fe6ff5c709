"""Evaluation engine: discrete accuracy and log-loss scoring."""

from ppmpredict.evaluation.harness import (
    LogLossResult,
    PredictionTestResult,
    ScoredPosition,
    evaluate_logloss,
    evaluate_predictions,
)

__all__ = [
    "LogLossResult",
    "PredictionTestResult",
    "ScoredPosition",
    "evaluate_logloss",
    "evaluate_predictions",
]
