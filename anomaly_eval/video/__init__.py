"""Video frame access."""

from anomaly_eval.video.frame_reader import VideoFrameReader

__all__ = ["VideoFrameReader"]
