from .metrics import MetricsCollector, SubmissionMetrics

__all__ = ["MetricsCollector", "SubmissionMetrics"]
