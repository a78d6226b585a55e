"""Configuration management."""

from anomaly_eval.config.config_manager import ConfigManager
from anomaly_eval.config.schema import EvaluationConfig, FeatureConfig, GridSearchConfig

__all__ = [
    "ConfigManager",
    "EvaluationConfig",
    "FeatureConfig",
    "GridSearchConfig",
]
