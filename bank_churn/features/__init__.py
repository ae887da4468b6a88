"""Features module for engineering and selecting features."""

from .feature_engineer import FeatureEngineer

__all__ = ["FeatureEngineer"]
