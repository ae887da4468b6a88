"""
Churn Analysis Pipeline
=======================

Runs exploration, feature selection, model training, evaluation and
submission writing end to end on in-memory train/test tables.
"""

from pathlib import Path
from typing import Dict, Optional

import matplotlib.pyplot as plt
import pandas as pd
from loguru import logger

from config import get_config, FIGURES_DIR, REPORTS_DIR, SUBMISSIONS_DIR
from bank_churn.analysis import DataExplorer
from bank_churn.data import DataLoader
from bank_churn.features import FeatureEngineer
from bank_churn.models import ModelEvaluator, ModelTrainer, SubmissionWriter
from bank_churn.utils import format_metrics


def _output_dirs(output_dir: Optional[Path]) -> Dict[str, Path]:
    if output_dir is None:
        dirs = {"reports": REPORTS_DIR, "figures": FIGURES_DIR, "submissions": SUBMISSIONS_DIR}
    else:
        output_dir = Path(output_dir)
        dirs = {
            "reports": output_dir / "reports",
            "figures": output_dir / "reports" / "figures",
            "submissions": output_dir / "submissions",
        }
    for path in dirs.values():
        path.mkdir(parents=True, exist_ok=True)
    return dirs


def run_pipeline(
    train_df: pd.DataFrame,
    test_df: pd.DataFrame,
    config: Optional[dict] = None,
    output_dir: Optional[Path] = None,
    explore: bool = True,
    log_to_mlflow: Optional[bool] = None
) -> Dict:
    """
    Run the full churn analysis.

    Args:
        train_df: Labeled raw training table
        test_df: Unlabeled raw test table
        config: Configuration dictionary
        output_dir: Root for reports and submissions. Defaults to project dirs
        explore: Whether to run exploratory statistics and save plots
        log_to_mlflow: Overrides ``mlflow.enabled`` from config

    Returns:
        Dictionary with models, comparison, selection report, statistical
        tests, training info and submission paths
    """
    config = config or get_config()
    dirs = _output_dirs(output_dir)
    data_config = config.get("data", {})
    id_col = data_config.get("id_column", "id")
    target_col = data_config.get("target_column", "Exited")

    if target_col not in train_df.columns:
        raise ValueError(f"Training data has no target column '{target_col}'")
    if id_col not in test_df.columns:
        raise ValueError(f"Test data has no id column '{id_col}'")

    loader = DataLoader(config)
    for name, df in (("train", train_df), ("test", test_df)):
        validation = loader.validate_data(df)
        logger.info(
            f"{name}: {validation['total_rows']} rows, {validation['total_columns']} columns, "
            f"{validation['duplicates']} duplicates"
        )
    logger.info(f"Target balance: {loader.validate_data(train_df)['target_balance']}")

    # Feature engineering
    engineer = FeatureEngineer(config)
    engineered = engineer.create_all_features(train_df)

    # Exploration
    statistical_tests = None
    if explore:
        explorer = DataExplorer(config, figures_dir=dirs["figures"])
        logger.info(f"Summary statistics:\n{explorer.summary_statistics(train_df)}")
        explorer.missing_values(train_df)
        explorer.missing_values(test_df)

        statistical_tests = explorer.test_binary_predictors(engineered)
        statistical_tests.to_csv(dirs["reports"] / "binary_predictor_tests.csv")

        corr_columns = list(dict.fromkeys(
            config.get("analysis", {}).get("distribution_columns", [])
            + engineer.model_features
            + [target_col]
        ))
        explorer.plot_distributions(train_df)
        explorer.plot_churn_by_category(engineered)
        explorer.plot_correlation_heatmap(
            engineered, columns=[c for c in corr_columns if c in engineered.columns]
        )
        plt.close("all")

    # Feature selection
    selection = engineer.select_features_lasso(engineered)
    engineer.compare_with_model_features(selection)
    selection.to_csv(dirs["reports"] / "lasso_selection.csv", index=False)

    # Model features, built identically for train and test
    train_features = engineer.transform(train_df)
    test_features = engineer.transform(test_df)
    X_train = train_features[engineer.model_features]
    y_train = train_features[target_col]
    X_test = test_features[engineer.model_features]
    logger.info(f"Model features: {list(X_train.columns)}")

    # Training
    trainer = ModelTrainer(config, log_to_mlflow=log_to_mlflow)
    models = trainer.train_all_models(X_train, y_train)

    # Evaluation on training predictions
    evaluator = ModelEvaluator(config, figures_dir=dirs["figures"])
    comparison = evaluator.evaluate_all_models(models, X_train, y_train)
    comparison.to_csv(dirs["reports"] / "model_comparison.csv")
    logger.info(f"\nModel Comparison:\n{comparison}")
    for name, metrics in evaluator.get_evaluation_summary().items():
        logger.debug(f"{name}: {format_metrics(metrics)}")

    if explore:
        for name in models:
            evaluator.plot_confusion_matrix(name)
        evaluator.plot_roc_curves()
        evaluator.plot_model_comparison(comparison)
        plt.close("all")

    # Submissions
    writer = SubmissionWriter(config, output_dir=dirs["submissions"])
    submissions = {
        name: writer.write(model, X_test, test_df[id_col], writer.filename_for(name))
        for name, model in models.items()
    }

    logger.info("Pipeline complete!")
    return {
        "models": models,
        "comparison": comparison,
        "selection": selection,
        "statistical_tests": statistical_tests,
        "training_info": trainer.training_info,
        "feature_summary": engineer.get_feature_engineering_summary(),
        "submissions": submissions,
    }
