"""Utility modules for the anomaly detection evaluation."""

from anomaly_eval.utils.logging_utils import setup_logging

__all__ = ["setup_logging"]
