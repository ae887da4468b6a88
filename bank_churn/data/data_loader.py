"""
Data Loader Module
==================

Handles loading the train/test tables and basic validation.
"""

from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd
from loguru import logger

from config import RAW_DATA_DIR, get_config


class DataLoader:
    """Load and validate the bank churn train and test tables."""

    def __init__(self, config: Optional[dict] = None, data_dir: Optional[Path] = None):
        """
        Initialize DataLoader.

        Args:
            config: Configuration dictionary. If None, loads from config.yaml
            data_dir: Directory holding the raw files. Defaults to data/raw
        """
        self.config = config or get_config()
        self.data_config = self.config.get("data", {})
        self.raw_data_path = Path(data_dir) if data_dir is not None else RAW_DATA_DIR
        self.target_col = self.data_config.get("target_column", "Exited")

    def load_raw_data(self, filename: str, **kwargs) -> pd.DataFrame:
        """
        Load a raw data file.

        Args:
            filename: Name of the data file
            **kwargs: Additional arguments to pass to the pandas reader

        Returns:
            DataFrame containing raw data
        """
        file_path = self.raw_data_path / filename

        if not file_path.exists():
            logger.error(f"Data file not found: {file_path}")
            raise FileNotFoundError(f"Data file not found: {file_path}")

        logger.info(f"Loading data from {file_path}")

        ext = file_path.suffix.lower()
        if ext == ".csv":
            df = pd.read_csv(file_path, **kwargs)
        elif ext in [".xlsx", ".xls"]:
            df = pd.read_excel(file_path, **kwargs)
        elif ext == ".parquet":
            df = pd.read_parquet(file_path, **kwargs)
        else:
            raise ValueError(f"Unsupported file format: {ext}")

        logger.info(f"Loaded {len(df)} rows and {len(df.columns)} columns")
        return df

    def load_train(self, filename: Optional[str] = None) -> pd.DataFrame:
        """
        Load the labeled training table.

        Args:
            filename: Overrides ``data.train_file`` from config

        Returns:
            Training DataFrame
        """
        filename = filename or self.data_config.get("train_file", "train.csv")
        df = self.load_raw_data(filename)

        if self.target_col not in df.columns:
            raise ValueError(f"Training data has no target column '{self.target_col}'")

        return df

    def load_test(self, filename: Optional[str] = None) -> pd.DataFrame:
        """
        Load the unlabeled test table.

        Args:
            filename: Overrides ``data.test_file`` from config

        Returns:
            Test DataFrame
        """
        filename = filename or self.data_config.get("test_file", "test.csv")
        return self.load_raw_data(filename)

    def validate_data(self, df: pd.DataFrame) -> dict:
        """
        Validate data quality.

        Args:
            df: DataFrame to validate

        Returns:
            Dictionary with validation results
        """
        validation_results = {
            "total_rows": len(df),
            "total_columns": len(df.columns),
            "missing_values": df.isnull().sum().to_dict(),
            "missing_percentage": (df.isnull().sum() / len(df) * 100).to_dict(),
            "duplicates": int(df.duplicated().sum()),
            "dtypes": df.dtypes.astype(str).to_dict(),
        }

        if self.target_col in df.columns:
            validation_results["target_distribution"] = df[self.target_col].value_counts().to_dict()
            validation_results["target_balance"] = df[self.target_col].value_counts(normalize=True).to_dict()

        return validation_results


SURNAMES = [
    "Okwudilichukwu", "Hargrave", "Hill", "Onio", "Boni", "Mitchell", "Bartlett",
    "Obinna", "He", "H?", "Bearce", "Andrews", "Kay", "Chin", "Scott", "Goforth",
    "Romeo", "Henderson", "Muldrow", "Hao", "McDonald", "Yeh", "Zuyeva", "Lombardo",
]


def make_synthetic_bank_data(
    n_samples: int = 1000,
    random_state: int = 42,
    labeled: bool = True,
    start_id: int = 0
) -> pd.DataFrame:
    """
    Create a synthetic table with the bank churn schema.

    The churn label is drawn from a logistic model of age, activity, balance,
    product count, geography and gender so that the models have signal to fit.

    Args:
        n_samples: Number of rows
        random_state: Random seed
        labeled: Whether to include the ``Exited`` column
        start_id: First value of the ``id`` column

    Returns:
        DataFrame with raw columns
    """
    rng = np.random.default_rng(random_state)

    geography = rng.choice(["France", "Germany", "Spain"], n_samples, p=[0.5, 0.25, 0.25])
    gender = rng.choice(["Male", "Female"], n_samples, p=[0.55, 0.45])
    age = rng.integers(18, 80, n_samples)
    num_products = rng.choice([1, 2, 3, 4], n_samples, p=[0.5, 0.45, 0.04, 0.01])
    is_active = rng.choice([0, 1], n_samples)
    balance = np.where(
        rng.random(n_samples) < 0.4,
        0.0,
        np.round(rng.normal(120000, 30000, n_samples).clip(1000, None), 2)
    )

    df = pd.DataFrame({
        "id": np.arange(start_id, start_id + n_samples),
        "CustomerId": rng.integers(15565701, 15815690, n_samples),
        "Surname": rng.choice(SURNAMES, n_samples),
        "CreditScore": rng.integers(350, 851, n_samples),
        "Geography": geography,
        "Gender": gender,
        "Age": age.astype(float),
        "Tenure": rng.integers(0, 11, n_samples),
        "Balance": balance,
        "NumOfProducts": num_products,
        "HasCrCard": rng.choice([0, 1], n_samples, p=[0.25, 0.75]),
        "IsActiveMember": is_active,
        "EstimatedSalary": np.round(rng.uniform(11.58, 199992.48, n_samples), 2),
    })

    if labeled:
        logit = (
            -4.0
            + 0.07 * (age - 18)
            - 1.0 * is_active
            + 0.6 * (balance > 0)
            - 1.5 * (num_products == 2)
            + 0.8 * (geography == "Germany")
            + 0.5 * (gender == "Female")
        )
        prob = 1 / (1 + np.exp(-logit))
        df["Exited"] = (rng.random(n_samples) < prob).astype(int)

    return df
