"""Feature extraction modules."""

from anomaly_eval.features.hog_extractor import HogFeatureExtractor

__all__ = ["HogFeatureExtractor"]
