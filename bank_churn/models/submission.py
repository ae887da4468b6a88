"""
Submission Writer Module
========================

Writes leaderboard files of per-customer churn probabilities.
"""

from pathlib import Path
from typing import Any, Optional, Sequence

import pandas as pd
from loguru import logger

from config import get_config, SUBMISSIONS_DIR


class SubmissionWriter:
    """Write ``id,Exited`` probability files for fitted models."""

    def __init__(self, config: Optional[dict] = None, output_dir: Optional[Path] = None):
        """
        Initialize SubmissionWriter.

        Args:
            config: Configuration dictionary
            output_dir: Where files are written. Defaults to submissions/
        """
        self.config = config or get_config()
        self.submission_config = self.config.get("submission", {})
        self.id_col = self.config.get("data", {}).get("id_column", "id")
        self.prediction_col = self.submission_config.get("prediction_column", "Exited")
        self.output_dir = Path(output_dir) if output_dir is not None else SUBMISSIONS_DIR

    def filename_for(self, model_name: str) -> str:
        """Configured submission filename for a model, e.g. ``RF_Model.csv``."""
        files = self.submission_config.get("files", {})
        return files.get(model_name, f"{model_name}.csv")

    def build(self, model: Any, X_test: pd.DataFrame, ids: Sequence) -> pd.DataFrame:
        """
        Build the submission table.

        Args:
            model: Fitted model with ``predict_proba``
            X_test: Transformed test features
            ids: Test row identifiers, aligned with ``X_test``

        Returns:
            DataFrame with id and probability columns
        """
        if len(ids) != len(X_test):
            raise ValueError(f"Got {len(ids)} ids for {len(X_test)} test rows")

        return pd.DataFrame({
            self.id_col: list(ids),
            self.prediction_col: model.predict_proba(X_test)[:, 1],
        })

    def write(
        self,
        model: Any,
        X_test: pd.DataFrame,
        ids: Sequence,
        filename: str
    ) -> Path:
        """
        Write a submission file.

        Args:
            model: Fitted model with ``predict_proba``
            X_test: Transformed test features
            ids: Test row identifiers
            filename: Output file name

        Returns:
            Path to the written file
        """
        submission = self.build(model, X_test, ids)

        self.output_dir.mkdir(parents=True, exist_ok=True)
        file_path = self.output_dir / filename
        submission.to_csv(file_path, index=False)

        logger.info(f"Wrote {len(submission)} predictions to {file_path}")
        return file_path
