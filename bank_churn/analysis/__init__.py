"""Exploratory data analysis."""

from .explorer import DataExplorer

__all__ = ["DataExplorer"]
