"""Models module for training, evaluation and submissions."""

from .trainer import ModelTrainer
from .evaluator import ModelEvaluator, compute_classification_metrics
from .submission import SubmissionWriter

__all__ = [
    "ModelTrainer",
    "ModelEvaluator",
    "compute_classification_metrics",
    "SubmissionWriter",
]
