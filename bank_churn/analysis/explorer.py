"""
Exploratory Analysis Module
===========================

Summary statistics, churn breakdowns, hypothesis tests and distribution
plots for the bank churn tables.
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from loguru import logger
from scipy import stats
from statsmodels.stats.proportion import proportions_ztest

from config import get_config, FIGURES_DIR


class DataExplorer:
    """Univariate and bivariate exploration of churn data."""

    def __init__(self, config: Optional[dict] = None, figures_dir: Optional[Path] = None):
        """
        Initialize DataExplorer.

        Args:
            config: Configuration dictionary
            figures_dir: Where plots are saved. Defaults to reports/figures
        """
        self.config = config or get_config()
        self.analysis_config = self.config.get("analysis", {})
        self.target_col = self.config.get("data", {}).get("target_column", "Exited")
        self.figures_dir = Path(figures_dir) if figures_dir is not None else FIGURES_DIR

    def summary_statistics(self, df: pd.DataFrame) -> pd.DataFrame:
        """Descriptive statistics of the numeric columns, one row per column."""
        return df.select_dtypes(include=np.number).describe().T

    def missing_values(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Count missing values per column.

        Args:
            df: Input DataFrame

        Returns:
            DataFrame with ``missing`` and ``missing_pct`` per column
        """
        missing = df.isnull().sum()
        result = pd.DataFrame({
            "missing": missing,
            "missing_pct": missing / len(df) * 100 if len(df) else 0.0,
        })
        total = int(missing.sum())
        if total:
            logger.warning(f"{total} missing values across {int((missing > 0).sum())} columns")
        else:
            logger.info("No missing values")
        return result

    def churn_rate_by(self, df: pd.DataFrame, column: str) -> pd.DataFrame:
        """
        Churn rate and row count for each level of ``column``.

        Args:
            df: Labeled DataFrame
            column: Grouping column

        Returns:
            DataFrame indexed by level with ``churn_rate`` and ``count``
        """
        grouped = df.groupby(column)[self.target_col]
        return pd.DataFrame({
            "churn_rate": grouped.mean(),
            "count": grouped.size(),
        })

    def correlation_matrix(
        self,
        df: pd.DataFrame,
        columns: Optional[List[str]] = None
    ) -> pd.DataFrame:
        """
        Pearson correlation matrix.

        Args:
            df: Input DataFrame
            columns: Columns to include. Defaults to every numeric column

        Returns:
            Square correlation DataFrame
        """
        data = df[columns] if columns is not None else df.select_dtypes(include=np.number)
        return data.corr()

    def two_proportion_ztest(self, df: pd.DataFrame, feature: str) -> Dict[str, float]:
        """
        Two-sided z-test of equal churn rates for ``feature == 1`` vs ``feature == 0``.

        Args:
            df: Labeled DataFrame
            feature: Binary (0/1) column

        Returns:
            Dictionary with group sizes, churn counts, churn rates, z and p-value
        """
        group_1 = df.loc[df[feature] == 1, self.target_col]
        group_0 = df.loc[df[feature] == 0, self.target_col]

        if group_1.empty or group_0.empty:
            raise ValueError(f"Both levels of '{feature}' need rows for a two-proportion test")

        count = np.array([group_1.sum(), group_0.sum()])
        nobs = np.array([len(group_1), len(group_0)])
        z_stat, p_value = proportions_ztest(count, nobs, alternative="two-sided")

        result = {
            "n_1": int(nobs[0]),
            "n_0": int(nobs[1]),
            "churned_1": int(count[0]),
            "churned_0": int(count[1]),
            "rate_1": count[0] / nobs[0],
            "rate_0": count[1] / nobs[1],
            "z_stat": float(z_stat),
            "p_value": float(p_value),
        }
        logger.debug(f"z-test {feature}: z={z_stat:.3f}, p={p_value:.3g}")
        return result

    def one_way_anova(self, df: pd.DataFrame, feature: str) -> Dict[str, float]:
        """
        One-way ANOVA of the churn label across the levels of ``feature``.

        Args:
            df: Labeled DataFrame
            feature: Grouping column

        Returns:
            Dictionary with F statistic and p-value
        """
        groups = [g[self.target_col].values for _, g in df.groupby(feature)]
        if len(groups) < 2:
            raise ValueError(f"ANOVA needs at least two levels of '{feature}'")

        f_stat, p_value = stats.f_oneway(*groups)
        logger.debug(f"ANOVA {feature}: F={f_stat:.3f}, p={p_value:.3g}")
        return {"f_stat": float(f_stat), "p_value": float(p_value)}

    def test_binary_predictors(
        self,
        df: pd.DataFrame,
        features: Optional[List[str]] = None
    ) -> pd.DataFrame:
        """
        Run the z-test and ANOVA for each binary predictor.

        Args:
            df: Labeled DataFrame with engineered features
            features: Overrides ``analysis.binary_predictors``

        Returns:
            DataFrame indexed by feature
        """
        features = features or self.analysis_config.get("binary_predictors", ["BalanceGroup", "two_prod"])
        rows = []

        for feature in features:
            ztest = self.two_proportion_ztest(df, feature)
            anova = self.one_way_anova(df, feature)
            rows.append({
                "feature": feature,
                "rate_1": ztest["rate_1"],
                "rate_0": ztest["rate_0"],
                "z_stat": ztest["z_stat"],
                "z_p_value": ztest["p_value"],
                "f_stat": anova["f_stat"],
                "anova_p_value": anova["p_value"],
            })
            logger.info(
                f"{feature}: churn {ztest['rate_1']:.3f} vs {ztest['rate_0']:.3f} "
                f"(z p={ztest['p_value']:.3g}, ANOVA p={anova['p_value']:.3g})"
            )

        return pd.DataFrame(rows).set_index("feature")

    def plot_distributions(
        self,
        df: pd.DataFrame,
        columns: Optional[List[str]] = None,
        save: bool = True,
        figsize: Tuple[int, int] = (15, 10)
    ) -> plt.Figure:
        """
        Histogram of each numeric column, split by churn when labeled.

        Args:
            df: Input DataFrame
            columns: Overrides ``analysis.distribution_columns``
            save: Whether to save figure
            figsize: Figure size

        Returns:
            Matplotlib figure
        """
        columns = columns or self.analysis_config.get("distribution_columns", [])
        columns = [c for c in columns if c in df.columns]
        hue = self.target_col if self.target_col in df.columns else None

        n_cols = 3
        n_rows = max(1, int(np.ceil(len(columns) / n_cols)))
        fig, axes = plt.subplots(n_rows, n_cols, figsize=figsize, squeeze=False)

        for ax, col in zip(axes.flat, columns):
            sns.histplot(data=df, x=col, hue=hue, bins=30, stat="density", common_norm=False, ax=ax)
            ax.set_title(col)
        for ax in list(axes.flat)[len(columns):]:
            ax.set_visible(False)

        plt.tight_layout()

        if save:
            self._save(fig, "distributions.png")

        return fig

    def plot_churn_by_category(
        self,
        df: pd.DataFrame,
        columns: Optional[List[str]] = None,
        save: bool = True,
        figsize: Tuple[int, int] = (15, 8)
    ) -> plt.Figure:
        """
        Bar chart of churn rate per level of each categorical column.

        Args:
            df: Labeled DataFrame
            columns: Overrides ``analysis.category_columns``
            save: Whether to save figure
            figsize: Figure size

        Returns:
            Matplotlib figure
        """
        columns = columns or self.analysis_config.get("category_columns", [])
        columns = [c for c in columns if c in df.columns]

        n_cols = 3
        n_rows = max(1, int(np.ceil(len(columns) / n_cols)))
        fig, axes = plt.subplots(n_rows, n_cols, figsize=figsize, squeeze=False)

        for ax, col in zip(axes.flat, columns):
            rates = self.churn_rate_by(df, col)
            ax.bar(rates.index.astype(str), rates["churn_rate"], color="steelblue")
            ax.set_title(f"Churn rate by {col}")
            ax.set_ylim(0, 1)
        for ax in list(axes.flat)[len(columns):]:
            ax.set_visible(False)

        plt.tight_layout()

        if save:
            self._save(fig, "churn_by_category.png")

        return fig

    def plot_correlation_heatmap(
        self,
        df: pd.DataFrame,
        columns: Optional[List[str]] = None,
        save: bool = True,
        figsize: Tuple[int, int] = (12, 10)
    ) -> plt.Figure:
        """
        Heatmap of the correlation matrix.

        Args:
            df: Input DataFrame
            columns: Columns to include
            save: Whether to save figure
            figsize: Figure size

        Returns:
            Matplotlib figure
        """
        corr = self.correlation_matrix(df, columns)

        fig, ax = plt.subplots(figsize=figsize)
        sns.heatmap(corr, annot=True, fmt=".2f", cmap="coolwarm", center=0, ax=ax)
        ax.set_title("Correlation Matrix")

        plt.tight_layout()

        if save:
            self._save(fig, "correlation_matrix.png")

        return fig

    def _save(self, fig: plt.Figure, filename: str) -> Path:
        self.figures_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.figures_dir / filename
        fig.savefig(filepath, dpi=150, bbox_inches="tight")
        logger.info(f"Saved plot to {filepath}")
        return filepath
