"""
Training Script
===============

Command-line script to explore the bank churn data, train the three models
and write the submission files.

Usage:
    python scripts/train.py
    python scripts/train.py --train train.csv --test test.csv --no-eda
    python scripts/train.py --demo --demo-rows 1000 --no-mlflow
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from loguru import logger

from config import get_config
from bank_churn.data import DataLoader, make_synthetic_bank_data
from bank_churn.pipeline import run_pipeline
from bank_churn.utils import setup_logging


def parse_args(argv=None):
    """Parse command line arguments (``sys.argv`` when ``argv`` is None)."""
    parser = argparse.ArgumentParser(description="Train bank churn models and write submissions")

    parser.add_argument(
        "--train",
        type=str,
        default=None,
        help="Name of the training file in data/raw/ (default from config)"
    )
    parser.add_argument(
        "--test",
        type=str,
        default=None,
        help="Name of the test file in data/raw/ (default from config)"
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Root directory for reports and submissions"
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Use synthetic data instead of the raw files"
    )
    parser.add_argument(
        "--demo-rows",
        type=int,
        default=5000,
        help="Training rows generated with --demo; the test table gets two fifths as many"
    )
    parser.add_argument(
        "--no-eda",
        action="store_true",
        help="Skip exploratory statistics and plots"
    )
    parser.add_argument(
        "--no-mlflow",
        action="store_true",
        help="Disable MLflow tracking for this run"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default from config)"
    )

    return parser.parse_args(argv)


def main(argv=None):
    """Main training function."""
    args = parse_args(argv)
    config = get_config()

    log_config = config.get("logging", {})
    setup_logging(
        level=args.log_level or log_config.get("level", "INFO"),
        log_file=log_config.get("log_file")
    )
    logger.info("Starting churn analysis...")

    if args.demo:
        random_state = config.get("project", {}).get("random_state", 42)
        logger.info("Using synthetic demonstration data")
        n_test = max(args.demo_rows * 2 // 5, 1)
        train_df = make_synthetic_bank_data(args.demo_rows, random_state=random_state)
        test_df = make_synthetic_bank_data(
            n_test, random_state=random_state + 1, labeled=False, start_id=args.demo_rows
        )
    else:
        loader = DataLoader(config)
        train_df = loader.load_train(args.train)
        test_df = loader.load_test(args.test)

    results = run_pipeline(
        train_df,
        test_df,
        config=config,
        output_dir=args.output_dir,
        explore=not args.no_eda,
        log_to_mlflow=False if args.no_mlflow else None
    )

    for name, path in results["submissions"].items():
        logger.info(f"{name}: {path}")

    return results


if __name__ == "__main__":
    main()
