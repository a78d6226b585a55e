"""Data models for the anomaly detection evaluation system."""

from anomaly_eval.models.data_models import (LABEL_ANOMALY, LABEL_NORMAL,
                                             AnnotationSet, AnomalyRegion,
                                             EvaluationMetrics, FeatureSet,
                                             GridSearchResult, GroundTruth,
                                             UnclearRegion)

__all__ = [
    "LABEL_ANOMALY",
    "LABEL_NORMAL",
    "AnnotationSet",
    "AnomalyRegion",
    "EvaluationMetrics",
    "FeatureSet",
    "GridSearchResult",
    "GroundTruth",
    "UnclearRegion",
]
