"""Monitor package - Polling and reconciliation of GitLab pipelines."""

from pipewatch.monitor.enricher import JobEnricher
from pipewatch.monitor.fetcher import PipelineFetcher
from pipewatch.monitor.models import (
    CycleResult,
    MonitorSnapshot,
    Notification,
    TrackedPipeline,
    canonicalize,
)
from pipewatch.monitor.monitor import PipelineMonitor
from pipewatch.monitor.reconciler import ReconcileResult, Reconciler
from pipewatch.monitor.transitions import TransitionDetector

__all__ = [
    "CycleResult",
    "JobEnricher",
    "MonitorSnapshot",
    "Notification",
    "PipelineFetcher",
    "PipelineMonitor",
    "ReconcileResult",
    "Reconciler",
    "TrackedPipeline",
    "TransitionDetector",
    "canonicalize",
]
