"""Shared fixtures for the test suite."""

import copy

import matplotlib

matplotlib.use("Agg")

import pytest

from config import get_config
from bank_churn.data import make_synthetic_bank_data


@pytest.fixture
def config():
    """Project config with tracking off and a smaller forest search."""
    cfg = copy.deepcopy(get_config())
    cfg["mlflow"]["enabled"] = False
    cfg["models"]["random_forest"]["params"]["n_estimators"] = 20
    cfg["models"]["random_forest"]["search"]["n_iter"] = 3
    return cfg


@pytest.fixture
def train_df():
    return make_synthetic_bank_data(600, random_state=0)


@pytest.fixture
def test_df():
    return make_synthetic_bank_data(200, random_state=1, labeled=False, start_id=600)


@pytest.fixture
def model_data(config, train_df, test_df):
    """Transformed train features, labels and test features."""
    from bank_churn.features import FeatureEngineer

    engineer = FeatureEngineer(config)
    train_features = engineer.transform(train_df)
    X_train = train_features[engineer.model_features]
    y_train = train_features[config["data"]["target_column"]]
    X_test = engineer.transform(test_df)
    return X_train, y_train, X_test
