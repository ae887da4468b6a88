"""
Model Trainer Module
====================

Trains the three churn classifiers with optional MLflow experiment tracking.
"""

from typing import Any, Dict, List, Optional

import mlflow
import numpy as np
import pandas as pd
from loguru import logger
from sklearn.ensemble import RandomForestClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.model_selection import RandomizedSearchCV, StratifiedKFold
from xgboost import XGBClassifier

from config import get_config, MLFLOW_DIR
from bank_churn.utils.helpers import get_timestamp


class ModelTrainer:
    """Train churn classifiers and keep their training diagnostics."""

    # Registry of trainable models; each name has a matching train_<name> method
    MODELS = {
        "logistic_regression": LogisticRegression,
        "random_forest": RandomForestClassifier,
        "xgboost": XGBClassifier,
    }

    def __init__(self, config: Optional[dict] = None, log_to_mlflow: Optional[bool] = None):
        """
        Initialize ModelTrainer.

        Args:
            config: Configuration dictionary
            log_to_mlflow: Overrides ``mlflow.enabled`` from config
        """
        self.config = config or get_config()
        self.models_config = self.config.get("models", {})
        self.mlflow_config = self.config.get("mlflow", {})
        self.random_state = self.config.get("project", {}).get("random_state", 42)

        if log_to_mlflow is None:
            log_to_mlflow = self.mlflow_config.get("enabled", False)
        self.log_to_mlflow = log_to_mlflow

        self.trained_models = {}
        self.training_info = {}

        if self.log_to_mlflow:
            self._setup_mlflow()

    def _setup_mlflow(self):
        """Setup MLflow tracking."""
        tracking_uri = self.mlflow_config.get("tracking_uri", "mlflow_runs")
        mlflow_path = MLFLOW_DIR / tracking_uri

        mlflow.set_tracking_uri(f"file://{mlflow_path}")
        experiment_name = self.mlflow_config.get("experiment_name", "bank_churn")

        experiment = mlflow.get_experiment_by_name(experiment_name)
        if experiment is None:
            mlflow.create_experiment(experiment_name)
        mlflow.set_experiment(experiment_name)

        logger.info(f"MLflow tracking URI: {mlflow_path}")
        logger.info(f"MLflow experiment: {experiment_name}")

    def _log_run(self, model_name: str, params: dict, metrics: Dict[str, float]):
        if not self.log_to_mlflow:
            return

        with mlflow.start_run(run_name=f"{model_name}_{get_timestamp()}"):
            mlflow.set_tag("model_type", model_name)
            mlflow.log_params(params)
            for key, value in metrics.items():
                mlflow.log_metric(key, value)

    def _model_params(self, model_name: str) -> dict:
        if model_name not in self.MODELS:
            raise ValueError(f"Unknown model: {model_name}. Available: {list(self.MODELS.keys())}")

        params = dict(self.models_config.get(model_name, {}).get("params", {}))
        params.setdefault("random_state", self.random_state)
        return params

    def _build_model(self, model_name: str, params: dict) -> Any:
        return self.MODELS[model_name](**params)

    def train_logistic_regression(self, X: pd.DataFrame, y: pd.Series) -> LogisticRegression:
        """
        Fit a penalty-free logistic regression.

        Args:
            X: Training features
            y: Training labels

        Returns:
            Fitted model
        """
        params = self._model_params("logistic_regression")
        logger.info("Training logistic_regression...")

        model = self._build_model("logistic_regression", params)
        model.fit(X, y)

        coefficients = self.get_coefficients(model, list(X.columns))
        self.training_info["logistic_regression"] = {
            "params": params,
            "coefficients": coefficients,
        }
        rounded = {k: round(v, 4) for k, v in coefficients.items()}
        logger.info(f"Coefficients: {rounded}")

        self._log_run("logistic_regression", params, {"train_accuracy": model.score(X, y)})
        self.trained_models["logistic_regression"] = model
        return model

    def train_random_forest(self, X: pd.DataFrame, y: pd.Series) -> RandomForestClassifier:
        """
        Random forest tuned by randomized search over the per-split feature count.

        Args:
            X: Training features
            y: Training labels

        Returns:
            Best estimator, refit on all of ``X``
        """
        params = self._model_params("random_forest")
        search_config = self.models_config.get("random_forest", {}).get("search", {})

        param_name = search_config.get("param", "max_features")
        candidates = list(range(1, X.shape[1] + 1))
        n_iter = min(search_config.get("n_iter", 10), len(candidates))

        cv = StratifiedKFold(
            n_splits=search_config.get("cv_folds", 5),
            shuffle=True,
            random_state=self.random_state
        )
        search = RandomizedSearchCV(
            self._build_model("random_forest", params),
            param_distributions={param_name: candidates},
            n_iter=n_iter,
            cv=cv,
            scoring=search_config.get("scoring", "roc_auc"),
            refit=True,
            random_state=self.random_state
        )

        logger.info(f"Training random_forest ({n_iter} candidates of {param_name}, {cv.get_n_splits()}-fold CV)...")
        search.fit(X, y)

        cv_results = pd.DataFrame(search.cv_results_)[
            [f"param_{param_name}", "mean_test_score", "std_test_score", "rank_test_score"]
        ].sort_values("rank_test_score")

        self.training_info["random_forest"] = {
            "params": params,
            "best_params": search.best_params_,
            "best_cv_score": float(search.best_score_),
            "cv_results": cv_results,
        }
        logger.info(f"Best params: {search.best_params_}, CV score: {search.best_score_:.4f}")

        self._log_run(
            "random_forest",
            {**params, **search.best_params_},
            {"best_cv_score": float(search.best_score_)}
        )
        model = search.best_estimator_
        self.trained_models["random_forest"] = model
        return model

    def train_xgboost(self, X: pd.DataFrame, y: pd.Series) -> XGBClassifier:
        """
        Gradient-boosted trees with fixed depth and round count.

        The training set doubles as the evaluation set so the per-round
        training loss is recorded.

        Args:
            X: Training features
            y: Training labels

        Returns:
            Fitted model
        """
        params = self._model_params("xgboost")
        params.setdefault("eval_metric", "logloss")
        logger.info("Training xgboost...")

        model = self._build_model("xgboost", params)
        model.fit(X, y, eval_set=[(X, y)], verbose=False)

        eval_metric = params["eval_metric"]
        loss_log = [float(v) for v in model.evals_result()["validation_0"][eval_metric]]
        self.training_info["xgboost"] = {
            "params": params,
            "eval_metric": eval_metric,
            "train_loss": loss_log,
        }
        for round_idx, loss in enumerate(loss_log):
            logger.debug(f"[{round_idx}] train-{eval_metric}: {loss:.5f}")
        logger.info(f"Final train-{eval_metric}: {loss_log[-1]:.5f} after {len(loss_log)} rounds")

        self._log_run("xgboost", params, {f"train_{eval_metric}": loss_log[-1]})
        self.trained_models["xgboost"] = model
        return model

    def train_model(self, X: pd.DataFrame, y: pd.Series, model_name: str) -> Any:
        """
        Train a single model by name.

        Args:
            X: Training features
            y: Training labels
            model_name: One of ``MODELS``

        Returns:
            Fitted model
        """
        if model_name not in self.MODELS:
            raise ValueError(f"Unknown model: {model_name}. Available: {list(self.MODELS.keys())}")
        return getattr(self, f"train_{model_name}")(X, y)

    def train_all_models(
        self,
        X: pd.DataFrame,
        y: pd.Series,
        models: Optional[List[str]] = None
    ) -> Dict[str, Any]:
        """
        Train each model once, in order.

        Args:
            X: Training features
            y: Training labels
            models: Names to train. Defaults to all

        Returns:
            Dictionary of fitted models
        """
        models = models or list(self.MODELS.keys())
        logger.info(f"Training models: {models}")

        for model_name in models:
            self.train_model(X, y, model_name)

        return {name: self.trained_models[name] for name in models}

    @staticmethod
    def get_coefficients(model: LogisticRegression, feature_names: List[str]) -> Dict[str, float]:
        """Intercept and per-feature coefficients of a fitted logistic regression."""
        coefficients = {"intercept": float(model.intercept_[0])}
        coefficients.update(zip(feature_names, (float(c) for c in model.coef_.ravel())))
        return coefficients

    @staticmethod
    def predict_proba(model: Any, X: pd.DataFrame) -> np.ndarray:
        """Churn-class probabilities."""
        return model.predict_proba(X)[:, 1]

    def get_all_trained_models(self) -> Dict[str, Any]:
        """Get all trained models."""
        return self.trained_models
