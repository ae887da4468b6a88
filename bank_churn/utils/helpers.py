"""
Utility Helper Functions
========================

Common utility functions used across the project.
"""

import math
import sys
from datetime import datetime
from typing import Dict, Optional

from loguru import logger

from config import ROOT_DIR


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    rotation: str = "10 MB",
    retention: str = "7 days"
):
    """
    Setup logging configuration.

    Args:
        level: Logging level
        log_file: Optional log file name, written under ``logs/``
        rotation: Log rotation setting
        retention: Log retention setting
    """
    # Remove default handler
    logger.remove()

    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    )

    if log_file:
        log_path = ROOT_DIR / "logs" / log_file
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path,
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation=rotation,
            retention=retention,
            compression="zip"
        )

    logger.info(f"Logging configured at {level} level")


def get_timestamp(format_str: str = "%Y%m%d_%H%M%S") -> str:
    """
    Get current timestamp string.

    Args:
        format_str: Datetime format string

    Returns:
        Formatted timestamp
    """
    return datetime.now().strftime(format_str)


def format_metrics(metrics: Dict[str, float], precision: int = 4) -> Dict[str, str]:
    """
    Format metric values for display.

    Integer counts are shown as-is and undefined values as ``nan``.

    Args:
        metrics: Dictionary of metric values
        precision: Decimal precision

    Returns:
        Dictionary with formatted values
    """
    formatted = {}
    for k, v in metrics.items():
        if isinstance(v, int):
            formatted[k] = str(v)
        elif v is None or math.isnan(v):
            formatted[k] = "nan"
        else:
            formatted[k] = f"{v:.{precision}f}"
    return formatted


def safe_divide(numerator: float, denominator: float, default: float = float("nan")) -> float:
    """
    Division returning ``default`` when the denominator is zero.

    Args:
        numerator: Numerator value
        denominator: Denominator value
        default: Value returned for a zero denominator

    Returns:
        Division result or default
    """
    return numerator / denominator if denominator != 0 else default
