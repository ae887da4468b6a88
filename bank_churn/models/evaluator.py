"""
Model Evaluator Module
======================

Confusion-matrix metrics, ROC-AUC and comparison plots shared by every model.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from loguru import logger
from sklearn.metrics import confusion_matrix, roc_auc_score, roc_curve

from config import get_config, FIGURES_DIR
from bank_churn.utils.helpers import safe_divide

# Negative class first: confusion_matrix rows/cols are [0, 1]
LABELS = [0, 1]


def compute_classification_metrics(
    y_true: Sequence[int],
    y_pred: Sequence[int],
    y_score: Optional[Sequence[float]] = None
) -> Dict[str, float]:
    """
    Confusion-matrix metrics and ROC-AUC for binary labels.

    Precision is NaN when nothing is predicted positive, recall is NaN when
    there are no actual positives, and ROC-AUC is NaN when ``y_true`` holds a
    single class.

    Args:
        y_true: Actual 0/1 labels
        y_pred: Predicted 0/1 labels
        y_score: Optional scores for ROC-AUC. Defaults to ``y_pred``

    Returns:
        Dictionary with tp, fp, tn, fn, accuracy, precision, recall, f1, roc_auc
    """
    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)
    y_score = y_pred if y_score is None else np.asarray(y_score, dtype=float)

    if not (len(y_true) == len(y_pred) == len(y_score)):
        raise ValueError(
            f"Label sequences differ in length: y_true={len(y_true)}, "
            f"y_pred={len(y_pred)}, y_score={len(y_score)}"
        )
    if len(y_true) == 0:
        raise ValueError("Cannot compute metrics for empty label sequences")

    # Probabilities passed as labels must fail here, not be floored to 0
    for name, values in (("y_true", y_true), ("y_pred", y_pred)):
        unexpected = set(pd.unique(values).tolist()) - set(LABELS)
        if unexpected:
            raise ValueError(f"{name} must hold 0/1 labels, got {sorted(map(str, unexpected))}")

    tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=LABELS).ravel()

    precision = safe_divide(tp, tp + fp)
    recall = safe_divide(tp, tp + fn)
    if np.isnan(precision):
        logger.warning("No positive predictions; precision is undefined")

    if np.isnan(precision) or np.isnan(recall):
        f1 = float("nan")
    else:
        f1 = safe_divide(2 * precision * recall, precision + recall, default=0.0)

    if len(np.unique(y_true)) < 2:
        roc_auc = float("nan")
    else:
        roc_auc = float(roc_auc_score(y_true, y_score))

    return {
        "tp": int(tp),
        "fp": int(fp),
        "tn": int(tn),
        "fn": int(fn),
        "accuracy": float(safe_divide(tp + tn, tp + tn + fp + fn)),
        "precision": float(precision),
        "recall": float(recall),
        "f1": float(f1),
        "roc_auc": roc_auc,
    }


class ModelEvaluator:
    """Evaluate and compare trained churn models."""

    def __init__(self, config: Optional[dict] = None, figures_dir: Optional[Path] = None):
        """
        Initialize ModelEvaluator.

        Args:
            config: Configuration dictionary
            figures_dir: Where plots are saved. Defaults to reports/figures
        """
        self.config = config or get_config()
        self.eval_config = self.config.get("evaluation", {})
        self.threshold = self.eval_config.get("threshold", 0.5)
        self.figures_dir = Path(figures_dir) if figures_dir is not None else FIGURES_DIR
        self.evaluation_results = {}

    def evaluate_model(
        self,
        model: Any,
        X: pd.DataFrame,
        y_true: Sequence[int],
        model_name: str = "model",
        threshold: Optional[float] = None
    ) -> Dict[str, float]:
        """
        Evaluate a fitted classifier.

        Args:
            model: Fitted model with ``predict_proba``
            X: Features
            y_true: True labels
            model_name: Name of model
            threshold: Classification threshold. Defaults to config

        Returns:
            Dictionary of metrics
        """
        threshold = self.threshold if threshold is None else threshold

        y_prob = model.predict_proba(X)[:, 1]
        y_pred = (y_prob >= threshold).astype(int)

        metrics = compute_classification_metrics(y_true, y_pred, y_prob)

        self.evaluation_results[model_name] = {
            "metrics": metrics,
            "y_pred": y_pred,
            "y_prob": y_prob,
            "y_true": np.asarray(y_true),
        }

        logger.info(
            f"{model_name} - Accuracy: {metrics['accuracy']:.4f}, F1: {metrics['f1']:.4f}, "
            f"ROC-AUC: {metrics['roc_auc']:.4f}"
        )

        return metrics

    def evaluate_all_models(
        self,
        models: Dict[str, Any],
        X: pd.DataFrame,
        y_true: Sequence[int]
    ) -> pd.DataFrame:
        """
        Evaluate multiple models and create comparison.

        Args:
            models: Dictionary of fitted models
            X: Features
            y_true: True labels

        Returns:
            DataFrame with one row per model, sorted by ROC-AUC
        """
        results = []

        for name, model in models.items():
            metrics = self.evaluate_model(model, X, y_true, name)
            results.append({"model": name, **metrics})

        df = pd.DataFrame(results).set_index("model")
        return df.sort_values("roc_auc", ascending=False)

    def plot_confusion_matrix(
        self,
        model_name: str,
        save: bool = True,
        figsize: Tuple[int, int] = (8, 6)
    ) -> plt.Figure:
        """
        Plot the confusion matrix of an evaluated model.

        Args:
            model_name: Name passed to ``evaluate_model``
            save: Whether to save figure
            figsize: Figure size

        Returns:
            Matplotlib figure
        """
        if model_name not in self.evaluation_results:
            raise ValueError(f"Model '{model_name}' has not been evaluated")

        results = self.evaluation_results[model_name]
        cm = confusion_matrix(results["y_true"], results["y_pred"], labels=LABELS)

        fig, ax = plt.subplots(figsize=figsize)
        sns.heatmap(
            cm, annot=True, fmt="d", cmap="Blues",
            xticklabels=["Stayed", "Churned"],
            yticklabels=["Stayed", "Churned"],
            ax=ax
        )
        ax.set_title(f"{model_name} - Confusion Matrix")
        ax.set_xlabel("Predicted")
        ax.set_ylabel("Actual")

        plt.tight_layout()

        if save:
            self._save(fig, f"confusion_matrix_{model_name.lower().replace(' ', '_')}.png")

        return fig

    def plot_roc_curves(
        self,
        save: bool = True,
        figsize: Tuple[int, int] = (10, 8)
    ) -> plt.Figure:
        """
        Plot ROC curves of every evaluated model.

        Args:
            save: Whether to save figure
            figsize: Figure size

        Returns:
            Matplotlib figure
        """
        fig, ax = plt.subplots(figsize=figsize)

        for name, results in self.evaluation_results.items():
            if len(np.unique(results["y_true"])) < 2:
                continue
            fpr, tpr, _ = roc_curve(results["y_true"], results["y_prob"])
            ax.plot(fpr, tpr, label=f"{name} (AUC={results['metrics']['roc_auc']:.3f})")

        ax.plot([0, 1], [0, 1], "k--", label="Random (AUC=0.500)")
        ax.set_xlabel("False Positive Rate")
        ax.set_ylabel("True Positive Rate")
        ax.set_title("ROC Curves Comparison")
        ax.legend(loc="lower right")
        ax.grid(True, alpha=0.3)

        plt.tight_layout()

        if save:
            self._save(fig, "roc_curves_comparison.png")

        return fig

    def plot_model_comparison(
        self,
        comparison_df: pd.DataFrame,
        save: bool = True,
        figsize: Tuple[int, int] = (12, 6)
    ) -> plt.Figure:
        """
        Plot model comparison bar chart.

        Args:
            comparison_df: DataFrame from ``evaluate_all_models``
            save: Whether to save figure
            figsize: Figure size

        Returns:
            Matplotlib figure
        """
        metrics = ["accuracy", "precision", "recall", "f1", "roc_auc"]
        available_metrics = [m for m in metrics if m in comparison_df.columns]

        fig, ax = plt.subplots(figsize=figsize)

        x = np.arange(len(comparison_df))
        width = 0.15

        for multiplier, metric in enumerate(available_metrics):
            ax.bar(x + width * multiplier, comparison_df[metric].fillna(0), width, label=metric.upper())

        ax.set_xlabel("Model")
        ax.set_ylabel("Score")
        ax.set_title("Model Performance Comparison")
        ax.set_xticks(x + width * (len(available_metrics) - 1) / 2)
        ax.set_xticklabels(comparison_df.index, rotation=45, ha="right")
        ax.legend(loc="upper right")
        ax.set_ylim(0, 1.1)
        ax.grid(True, alpha=0.3, axis="y")

        plt.tight_layout()

        if save:
            self._save(fig, "model_comparison.png")

        return fig

    def get_evaluation_summary(self) -> Dict:
        """Metrics of every evaluated model, keyed by name."""
        return {name: results["metrics"] for name, results in self.evaluation_results.items()}

    def _save(self, fig: plt.Figure, filename: str) -> Path:
        self.figures_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.figures_dir / filename
        fig.savefig(filepath, dpi=150, bbox_inches="tight")
        logger.info(f"Saved plot to {filepath}")
        return filepath
