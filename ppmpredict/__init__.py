"""Variable-order finite-context prediction and evaluation."""
