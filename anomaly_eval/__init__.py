"""Cell-level anomaly detection evaluation for video frames."""

__version__ = "0.1.0"
