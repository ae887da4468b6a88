"""Tests for data loading and the synthetic data generator."""

import pandas as pd
import pytest

from bank_churn.data import DataLoader, make_synthetic_bank_data

RAW_COLUMNS = [
    "id", "CustomerId", "Surname", "CreditScore", "Geography", "Gender", "Age",
    "Tenure", "Balance", "NumOfProducts", "HasCrCard", "IsActiveMember", "EstimatedSalary",
]


@pytest.fixture
def data_dir(tmp_path, train_df, test_df):
    train_df.to_csv(tmp_path / "train.csv", index=False)
    test_df.to_csv(tmp_path / "test.csv", index=False)
    return tmp_path


def test_load_train_and_test(config, data_dir, train_df, test_df):
    loader = DataLoader(config, data_dir=data_dir)

    train = loader.load_train()
    test = loader.load_test()

    assert train.shape == train_df.shape
    assert test.shape == test_df.shape
    assert "Exited" not in test.columns


def test_missing_file_raises(config, tmp_path):
    loader = DataLoader(config, data_dir=tmp_path)

    with pytest.raises(FileNotFoundError):
        loader.load_train("absent.csv")


def test_train_without_target_raises(config, data_dir):
    loader = DataLoader(config, data_dir=data_dir)

    with pytest.raises(ValueError, match="target"):
        loader.load_train("test.csv")


def test_unsupported_extension_raises(config, tmp_path):
    (tmp_path / "train.json").write_text("{}")
    loader = DataLoader(config, data_dir=tmp_path)

    with pytest.raises(ValueError, match="Unsupported"):
        loader.load_raw_data("train.json")


def test_validate_data(config, train_df):
    df = pd.concat([train_df, train_df.iloc[:2]], ignore_index=True)

    report = DataLoader(config).validate_data(df)

    assert report["total_rows"] == len(train_df) + 2
    assert report["duplicates"] == 2
    assert sum(report["target_distribution"].values()) == len(df)
    assert sum(report["target_balance"].values()) == pytest.approx(1.0)


def test_synthetic_data_schema():
    labeled = make_synthetic_bank_data(100, random_state=3)
    unlabeled = make_synthetic_bank_data(50, random_state=3, labeled=False, start_id=100)

    assert list(labeled.columns) == RAW_COLUMNS + ["Exited"]
    assert list(unlabeled.columns) == RAW_COLUMNS
    assert set(labeled["Exited"]) <= {0, 1}
    assert set(labeled["Geography"]) <= {"France", "Germany", "Spain"}
    assert unlabeled["id"].tolist() == list(range(100, 150))


def test_synthetic_data_is_deterministic():
    pd.testing.assert_frame_equal(
        make_synthetic_bank_data(80, random_state=5),
        make_synthetic_bank_data(80, random_state=5),
    )
