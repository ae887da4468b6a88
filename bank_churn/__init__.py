"""
Bank Churn Analysis
===================

Exploratory analysis and model comparison for predicting churn of bank
customers.

Modules:
    - data: Data loading and validation
    - features: Feature engineering and L1 feature selection
    - analysis: Exploratory statistics and plots
    - models: Model training, evaluation and submission files
    - utils: Utility functions
"""

__version__ = "1.0.0"
