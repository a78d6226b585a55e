"""One-class classifier adapters."""

from anomaly_eval.classifier.one_class_svm import OneClassClassifier

__all__ = ["OneClassClassifier"]
