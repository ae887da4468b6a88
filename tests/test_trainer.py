"""Tests for the three model trainers."""

import numpy as np
import pytest

from bank_churn.models import ModelTrainer


@pytest.fixture
def trainer(config):
    return ModelTrainer(config)


def test_mlflow_disabled_by_fixture(trainer):
    assert trainer.log_to_mlflow is False


def test_logistic_regression_is_unpenalized(trainer, model_data):
    X_train, y_train, _ = model_data

    model = trainer.train_logistic_regression(X_train, y_train)

    assert model.penalty is None
    coefficients = trainer.training_info["logistic_regression"]["coefficients"]
    assert list(coefficients) == ["intercept"] + list(X_train.columns)


def test_logistic_regression_learns_age_effect(trainer, model_data):
    X_train, y_train, _ = model_data

    model = trainer.train_logistic_regression(X_train, y_train)
    coefficients = trainer.get_coefficients(model, list(X_train.columns))

    assert coefficients["Age"] > 0
    assert coefficients["IsActiveMember"] < 0


def test_random_forest_search(trainer, model_data, config):
    X_train, y_train, _ = model_data

    model = trainer.train_random_forest(X_train, y_train)
    info = trainer.training_info["random_forest"]

    assert 1 <= info["best_params"]["max_features"] <= X_train.shape[1]
    assert model.max_features == info["best_params"]["max_features"]
    assert len(info["cv_results"]) == config["models"]["random_forest"]["search"]["n_iter"]
    assert 0.0 <= info["best_cv_score"] <= 1.0


def test_random_forest_is_deterministic(config, model_data):
    X_train, y_train, X_test = model_data

    first = ModelTrainer(config).train_random_forest(X_train, y_train)
    second = ModelTrainer(config).train_random_forest(X_train, y_train)

    np.testing.assert_allclose(first.predict_proba(X_test), second.predict_proba(X_test))


def test_xgboost_fixed_depth_and_rounds(trainer, model_data):
    X_train, y_train, _ = model_data

    model = trainer.train_xgboost(X_train, y_train)
    info = trainer.training_info["xgboost"]

    assert model.get_params()["max_depth"] == 3
    assert model.get_params()["n_estimators"] == 20
    assert model.get_params()["objective"] == "binary:logistic"
    assert len(info["train_loss"]) == 20
    assert info["train_loss"][-1] < info["train_loss"][0]


def test_train_all_models(trainer, model_data):
    X_train, y_train, X_test = model_data

    models = trainer.train_all_models(X_train, y_train)

    assert list(models) == ["logistic_regression", "random_forest", "xgboost"]
    for model in models.values():
        proba = trainer.predict_proba(model, X_test)
        assert proba.shape == (len(X_test),)
        assert ((proba >= 0) & (proba <= 1)).all()


def test_unknown_model_is_rejected(trainer, model_data):
    X_train, y_train, _ = model_data

    with pytest.raises(ValueError, match="Unknown model"):
        trainer.train_model(X_train, y_train, "catboost")


@pytest.mark.parametrize("model_name", list(ModelTrainer.MODELS))
def test_train_model_builds_registered_class(trainer, model_data, model_name):
    X_train, y_train, _ = model_data

    model = trainer.train_model(X_train, y_train, model_name)

    assert isinstance(model, ModelTrainer.MODELS[model_name])
    assert trainer.trained_models[model_name] is model


def test_train_all_models_rejects_unknown_names(trainer, model_data):
    X_train, y_train, _ = model_data

    with pytest.raises(ValueError, match="Unknown model"):
        trainer.train_all_models(X_train, y_train, models=["logistic_regression", "catboost"])
