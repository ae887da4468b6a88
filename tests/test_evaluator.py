"""Tests for classification metrics and the model evaluator."""

import math

import numpy as np
import pytest

from bank_churn.models import ModelEvaluator, compute_classification_metrics


def confusion_arrays(tp, fn, fp, tn):
    y_true = [1] * tp + [1] * fn + [0] * fp + [0] * tn
    y_pred = [1] * tp + [0] * fn + [1] * fp + [0] * tn
    return y_true, y_pred


class FixedProbabilityModel:
    """Stand-in classifier returning preset churn probabilities."""

    def __init__(self, probabilities):
        self.probabilities = np.asarray(probabilities, dtype=float)

    def predict_proba(self, X):
        return np.column_stack([1 - self.probabilities, self.probabilities])


def test_hand_computed_confusion_matrix():
    y_true, y_pred = confusion_arrays(tp=50, fn=10, fp=5, tn=100)

    metrics = compute_classification_metrics(y_true, y_pred)

    precision = 50 / 55
    recall = 50 / 60
    assert (metrics["tp"], metrics["fn"], metrics["fp"], metrics["tn"]) == (50, 10, 5, 100)
    assert metrics["accuracy"] == pytest.approx(150 / 165)
    assert metrics["precision"] == pytest.approx(precision)
    assert metrics["recall"] == pytest.approx(recall)
    assert metrics["f1"] == pytest.approx(2 * precision * recall / (precision + recall))


def test_roc_auc_from_hard_predictions():
    y_true, y_pred = confusion_arrays(tp=50, fn=10, fp=5, tn=100)

    metrics = compute_classification_metrics(y_true, y_pred)

    # With hard labels, AUC is the mean of TPR and TNR
    assert metrics["roc_auc"] == pytest.approx((50 / 60 + 100 / 105) / 2)


def test_roc_auc_uses_scores_when_given():
    y_true = [0, 0, 1, 1]
    y_pred = [0, 0, 0, 0]
    y_score = [0.1, 0.2, 0.3, 0.4]

    metrics = compute_classification_metrics(y_true, y_pred, y_score)

    assert metrics["roc_auc"] == pytest.approx(1.0)


def test_precision_is_nan_without_positive_predictions():
    metrics = compute_classification_metrics([0, 1, 1, 0], [0, 0, 0, 0])

    assert math.isnan(metrics["precision"])
    assert metrics["recall"] == 0.0
    assert math.isnan(metrics["f1"])
    assert metrics["accuracy"] == pytest.approx(0.5)


def test_recall_is_nan_without_actual_positives():
    metrics = compute_classification_metrics([0, 0, 0], [1, 0, 0])

    assert metrics["precision"] == 0.0
    assert math.isnan(metrics["recall"])
    assert math.isnan(metrics["roc_auc"])


def test_f1_is_zero_when_all_positive_predictions_are_wrong():
    metrics = compute_classification_metrics([1, 0, 0], [0, 1, 1])

    assert metrics["precision"] == 0.0
    assert metrics["recall"] == 0.0
    assert metrics["f1"] == 0.0


def test_label_ordering_is_pinned_when_one_label_is_absent():
    metrics = compute_classification_metrics([1, 1, 1], [1, 1, 0])

    assert (metrics["tp"], metrics["fn"], metrics["fp"], metrics["tn"]) == (2, 1, 0, 0)


def test_mismatched_lengths_are_rejected():
    with pytest.raises(ValueError, match="differ in length"):
        compute_classification_metrics([0, 1, 1], [0, 1])


def test_empty_input_is_rejected():
    with pytest.raises(ValueError, match="empty"):
        compute_classification_metrics([], [])


def test_probabilities_passed_as_labels_are_rejected():
    with pytest.raises(ValueError, match="y_pred must hold 0/1 labels"):
        compute_classification_metrics([1, 1, 0, 0], [0.9, 0.8, 0.2, 0.1])


def test_non_binary_true_labels_are_rejected():
    with pytest.raises(ValueError, match="y_true must hold 0/1 labels"):
        compute_classification_metrics([0, 1, 2], [0, 1, 1])


def test_float_encoded_binary_labels_are_accepted():
    metrics = compute_classification_metrics(np.array([1.0, 0.0, 1.0]), [1, 0, 0])

    assert (metrics["tp"], metrics["fn"], metrics["fp"], metrics["tn"]) == (1, 1, 0, 1)


def test_rates_are_plain_floats():
    y_true, y_pred = confusion_arrays(tp=3, fn=1, fp=1, tn=3)

    metrics = compute_classification_metrics(y_true, y_pred)

    for key in ["accuracy", "precision", "recall", "f1", "roc_auc"]:
        assert type(metrics[key]) is float
    for key in ["tp", "fp", "tn", "fn"]:
        assert type(metrics[key]) is int


def test_evaluate_model_applies_threshold(config):
    evaluator = ModelEvaluator(config)
    model = FixedProbabilityModel([0.9, 0.5, 0.49, 0.1])

    metrics = evaluator.evaluate_model(model, np.zeros((4, 1)), [1, 0, 1, 0], "fixed")

    assert (metrics["tp"], metrics["fp"], metrics["fn"], metrics["tn"]) == (1, 1, 1, 1)
    assert evaluator.evaluation_results["fixed"]["y_pred"].tolist() == [1, 1, 0, 0]


def test_evaluate_all_models_sorted_by_auc(config):
    evaluator = ModelEvaluator(config)
    y = [1, 0, 1, 0]
    models = {
        "weak": FixedProbabilityModel([0.4, 0.6, 0.5, 0.5]),
        "strong": FixedProbabilityModel([0.9, 0.1, 0.8, 0.2]),
    }

    comparison = evaluator.evaluate_all_models(models, np.zeros((4, 1)), y)

    assert list(comparison.index) == ["strong", "weak"]
    assert comparison.loc["strong", "roc_auc"] == pytest.approx(1.0)


def test_plots_are_saved(config, tmp_path):
    evaluator = ModelEvaluator(config, figures_dir=tmp_path)
    y = [1, 0, 1, 0]
    comparison = evaluator.evaluate_all_models(
        {"fixed": FixedProbabilityModel([0.9, 0.1, 0.8, 0.2])}, np.zeros((4, 1)), y
    )

    evaluator.plot_confusion_matrix("fixed")
    evaluator.plot_roc_curves()
    evaluator.plot_model_comparison(comparison)

    assert (tmp_path / "confusion_matrix_fixed.png").exists()
    assert (tmp_path / "roc_curves_comparison.png").exists()
    assert (tmp_path / "model_comparison.png").exists()


def test_confusion_plot_requires_evaluation(config, tmp_path):
    evaluator = ModelEvaluator(config, figures_dir=tmp_path)

    with pytest.raises(ValueError, match="not been evaluated"):
        evaluator.plot_confusion_matrix("missing")
