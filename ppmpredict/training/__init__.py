"""Training engine."""

from ppmpredict.training.trainer import CompressionMonitor, Trainer, TrainingSummary, train_model

__all__ = ["CompressionMonitor", "Trainer", "TrainingSummary", "train_model"]
