"""Evaluation module for cell-level anomaly detection."""

from anomaly_eval.evaluation.annotation_indexer import AnnotationIndexer
from anomaly_eval.evaluation.frame_index import FrameIndex
from anomaly_eval.evaluation.grid_search import GridSearchDriver, format_grid_cell
from anomaly_eval.evaluation.label_synthesizer import LabelSynthesizer
from anomaly_eval.evaluation.metrics import MetricsAggregator, log_metrics

__all__ = [
    "AnnotationIndexer",
    "FrameIndex",
    "GridSearchDriver",
    "LabelSynthesizer",
    "MetricsAggregator",
    "format_grid_cell",
    "log_metrics",
]
