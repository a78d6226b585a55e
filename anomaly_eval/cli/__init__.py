"""Command-line interface."""

from anomaly_eval.cli.arguments import parse_arguments

__all__ = ["parse_arguments"]
