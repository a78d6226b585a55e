"""Dataset preparation utilities."""

from anomaly_eval.data.feature_cache import FeatureCache
from anomaly_eval.data.matrix import samples_per_frame, stack_samples
from anomaly_eval.data.split import split_normal_frames

__all__ = [
    "FeatureCache",
    "samples_per_frame",
    "split_normal_frames",
    "stack_samples",
]
