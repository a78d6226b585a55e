"""Pipeline processing modules."""

from anomaly_eval.pipeline.orchestrator import EvaluationOrchestrator

__all__ = ["EvaluationOrchestrator"]
