"""Anomaly annotation loading."""

from anomaly_eval.annotation.reader import parse_annotations, read_annotations

__all__ = ["parse_annotations", "read_annotations"]
