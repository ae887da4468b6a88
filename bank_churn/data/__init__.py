"""Data module for loading and validating data."""

from .data_loader import DataLoader, make_synthetic_bank_data

__all__ = ["DataLoader", "make_synthetic_bank_data"]
