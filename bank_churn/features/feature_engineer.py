"""
Feature Engineering Module
==========================

Feature derivation, one-hot encoding and L1 feature selection for the bank
churn tables. The same ``transform`` is applied to train and test data.
"""

import string
from typing import Dict, List, Optional

import numpy as np
import pandas as pd
from loguru import logger
from sklearn.linear_model import LogisticRegressionCV
from sklearn.model_selection import StratifiedKFold
from sklearn.preprocessing import StandardScaler

from config import get_config

FIRST_LETTERS = list(string.ascii_uppercase)
CONTINUOUS_FEATURES = ["Age"]


class FeatureEngineer:
    """Create, encode and select features for churn prediction."""

    def __init__(self, config: Optional[dict] = None):
        """
        Initialize FeatureEngineer.

        Args:
            config: Configuration dictionary
        """
        self.config = config or get_config()
        self.feature_config = self.config.get("features", {})
        self.selection_config = self.config.get("selection", {})
        self.random_state = self.config.get("project", {}).get("random_state", 42)
        self.target_col = self.config.get("data", {}).get("target_column", "Exited")

        self.surname_col = self.feature_config.get("surname_column", "Surname")
        self.categories = self.feature_config.get("categories", {
            "Geography": ["France", "Germany", "Spain"],
            "Gender": ["Female", "Male"],
        })
        self.reference_levels = self.feature_config.get("reference_levels", {})
        self.encode_first_letter = self.feature_config.get("first_letter_encoding", True)
        self.model_features = list(self.feature_config.get("model_features", []))

        excluded = [f"{col}_{level}" for col, level in self.reference_levels.items()]
        leaked = [f for f in self.model_features if f in excluded]
        if leaked:
            raise ValueError(f"Model features contain reference levels: {leaked}")

        self.created_features = []
        self.selected_features = []
        self.lasso_coefficients = {}

    def create_all_features(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Create all engineered features.

        Args:
            df: Raw DataFrame

        Returns:
            DataFrame with raw and engineered columns
        """
        logger.info("Starting feature engineering...")

        self.created_features = []
        df = self._engineer(df, self.created_features)

        logger.info(f"Created {len(self.created_features)} new features")
        return df

    def _engineer(self, df: pd.DataFrame, created: List[str]) -> pd.DataFrame:
        df = df.copy()
        df = self.create_name_features(df, created)
        df = self.create_indicator_features(df, created)
        return self.encode_categoricals(df, created)

    def create_name_features(self, df: pd.DataFrame, created: Optional[List[str]] = None) -> pd.DataFrame:
        """
        Derive ``FirstLetter`` and ``NameLength`` from the surname.

        Args:
            df: Input DataFrame
            created: List that receives the new column names. Defaults to
                ``created_features``

        Returns:
            DataFrame with name features
        """
        created = self.created_features if created is None else created
        if self.surname_col in df.columns:
            surname = df[self.surname_col].fillna("").astype(str).str.strip()

            df["FirstLetter"] = surname.str[0].str.upper()
            created.append("FirstLetter")

            df["NameLength"] = surname.str.len()
            created.append("NameLength")

            logger.debug("Created name features")

        return df

    def create_indicator_features(self, df: pd.DataFrame, created: Optional[List[str]] = None) -> pd.DataFrame:
        """
        Derive the ``two_prod`` and ``BalanceGroup`` indicators.

        Args:
            df: Input DataFrame
            created: List that receives the new column names

        Returns:
            DataFrame with indicator features
        """
        created = self.created_features if created is None else created
        if "NumOfProducts" in df.columns:
            df["two_prod"] = (df["NumOfProducts"] == 2).astype(int)
            created.append("two_prod")

        if "Balance" in df.columns:
            df["BalanceGroup"] = (df["Balance"] != 0).astype(int)
            created.append("BalanceGroup")

        logger.debug("Created indicator features")
        return df

    def encode_categoricals(self, df: pd.DataFrame, created: Optional[List[str]] = None) -> pd.DataFrame:
        """
        One-hot encode the categorical columns against fixed category lists.

        Geography and Gender values outside their configured categories are
        rejected so that each group sums to one per row. Surname initials
        outside A-Z encode as all zeros.

        Args:
            df: Input DataFrame
            created: List that receives the new column names

        Returns:
            DataFrame with indicator columns appended
        """
        created = self.created_features if created is None else created
        encodings = dict(self.categories)
        if self.encode_first_letter and "FirstLetter" in df.columns:
            encodings["FirstLetter"] = FIRST_LETTERS

        for col, values in encodings.items():
            if col not in df.columns:
                continue

            if col in self.categories:
                unknown = [v for v in df[col].dropna().unique() if v not in values]
                if unknown or df[col].isnull().any():
                    raise ValueError(
                        f"Column '{col}' has values outside {values}: "
                        f"{unknown or ['<missing>']}"
                    )

            dummies = pd.get_dummies(
                pd.Categorical(df[col], categories=values),
                prefix=col,
                dtype=int
            )
            dummies.index = df.index

            df = df.drop(columns=[c for c in dummies.columns if c in df.columns])
            df = pd.concat([df, dummies], axis=1)
            created.extend(dummies.columns)

        logger.debug("Encoded categorical features")
        return df

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Build the model feature table.

        Tables that already carry every model feature are only re-selected,
        so transforming a transformed table returns an equal table.

        Args:
            df: Raw (or already transformed) DataFrame

        Returns:
            DataFrame of model features, plus the target when present
        """
        if all(f in df.columns for f in self.model_features):
            engineered = df
        else:
            engineered = self._engineer(df, [])

        missing = [f for f in self.model_features if f not in engineered.columns]
        if missing:
            raise ValueError(f"Cannot build model features {missing} from columns {list(df.columns)}")

        columns = list(self.model_features)
        if self.target_col in engineered.columns:
            columns.append(self.target_col)

        features = engineered[columns].copy()
        for col in columns:
            features[col] = features[col].astype(float if col in CONTINUOUS_FEATURES else int)

        return features

    def select_features_lasso(
        self,
        df: pd.DataFrame,
        candidate_features: Optional[List[str]] = None
    ) -> pd.DataFrame:
        """
        Rank candidate features with a cross-validated L1 logistic regression.

        Features are standardized first so coefficient magnitudes are
        comparable. A feature is selected when its absolute coefficient
        exceeds ``selection.tolerance``.

        Args:
            df: Labeled raw or engineered DataFrame
            candidate_features: Overrides ``selection.candidate_features``

        Returns:
            DataFrame with feature, coefficient, abs_coefficient and selected
        """
        candidates = candidate_features or self.selection_config.get(
            "candidate_features", self.model_features
        )
        if self.target_col not in df.columns:
            raise ValueError(f"Feature selection needs the target column '{self.target_col}'")

        if not all(c in df.columns for c in candidates):
            df = self.create_all_features(df)

        X = StandardScaler().fit_transform(df[candidates].astype(float))
        y = df[self.target_col].astype(int).values

        cv = StratifiedKFold(
            n_splits=self.selection_config.get("cv_folds", 5),
            shuffle=True,
            random_state=self.random_state
        )
        lasso = LogisticRegressionCV(
            Cs=self.selection_config.get("n_cs", 10),
            cv=cv,
            penalty="l1",
            solver="liblinear",
            scoring=self.selection_config.get("scoring", "roc_auc"),
            max_iter=1000,
            random_state=self.random_state
        )
        lasso.fit(X, y)

        tolerance = self.selection_config.get("tolerance", 0.01)
        coefficients = lasso.coef_.ravel()
        report = pd.DataFrame({
            "feature": candidates,
            "coefficient": coefficients,
            "abs_coefficient": np.abs(coefficients),
        })
        report["selected"] = report["abs_coefficient"] > tolerance
        report = report.sort_values("abs_coefficient", ascending=False).reset_index(drop=True)

        self.lasso_coefficients = dict(zip(candidates, coefficients))
        self.selected_features = report.loc[report["selected"], "feature"].tolist()

        dropped = report.loc[~report["selected"], "feature"].tolist()
        logger.info(f"L1 selection: C={lasso.C_[0]:.4g}, kept {len(self.selected_features)} of {len(candidates)}")
        if dropped:
            logger.info(f"Near-zero coefficients: {dropped}")

        return report

    def compare_with_model_features(self, report: pd.DataFrame) -> Dict[str, List[str]]:
        """
        Compare an L1 selection report with the configured model features.

        Args:
            report: Output of ``select_features_lasso``

        Returns:
            Dictionary with ``dropped_by_lasso`` (model features the L1 fit
            shrank to zero) and ``not_in_model`` (selected features the model
            does not use)
        """
        selected = set(report.loc[report["selected"], "feature"])
        dropped_by_lasso = [f for f in self.model_features if f in set(report["feature"]) - selected]
        not_in_model = [f for f in report.loc[report["selected"], "feature"] if f not in self.model_features]

        if dropped_by_lasso:
            logger.warning(f"Model features with near-zero L1 coefficients: {dropped_by_lasso}")
        if not_in_model:
            logger.debug(f"Selected features outside the model set: {not_in_model}")

        return {"dropped_by_lasso": dropped_by_lasso, "not_in_model": not_in_model}

    def get_created_features(self) -> List[str]:
        """Get list of created feature names."""
        return self.created_features

    def get_feature_engineering_summary(self) -> Dict:
        """
        Get summary of feature engineering.

        Returns:
            Dictionary with summary
        """
        return {
            "created_features": self.created_features,
            "num_created": len(self.created_features),
            "model_features": self.model_features,
            "selected_features": self.selected_features,
            "lasso_coefficients": self.lasso_coefficients,
        }
