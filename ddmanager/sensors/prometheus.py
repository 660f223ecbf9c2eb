"""Prometheus monitoring backend for dd-manager.

This module provides PrometheusMonitor, which collects operator lifecycle events
and exposes them as Prometheus metrics:

1. Reconciliation Loop Health - Duration, queue depth, throughput, retries, drops
2. Monitor Sync - Create/update/no-op/delete decisions and their results
3. Rulesets - Reload results and rule counts

Metrics are labelled by object kind, never by object key, to bound cardinality.
"""

from typing import Dict, Optional, Any
import time
import logging

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram, Gauge

from ddmanager.sensors.base import OperatorSensor

logger = logging.getLogger(__name__)


def _kind_of(key: str) -> str:
    return key.split("/", 1)[0]


class PrometheusMonitor(OperatorSensor):
    """Prometheus metrics monitor for dd-manager.

    Exposes metrics via prometheus_client that can be scraped by Prometheus.

    Example:
        monitor = PrometheusMonitor()

        state = monitor.on_reconcile_start("deployment", "deployment/default/web")
        monitor.on_reconcile_complete("deployment", "deployment/default/web", state, True)
    """

    def __init__(self, registry: CollectorRegistry = REGISTRY):
        """Initialize Prometheus metrics."""
        super().__init__()

        # =============================================================================
        # Reconciliation Loop Metrics
        # =============================================================================

        self.reconcile_duration = Histogram(
            'ddmanager_reconcile_duration_seconds',
            'Time spent reconciling one object',
            labelnames=['kind', 'result'],
            buckets=[0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
            registry=registry,
        )

        self.reconcile_total = Counter(
            'ddmanager_reconcile_total',
            'Total number of reconcile attempts',
            labelnames=['kind', 'result'],
            registry=registry,
        )

        self.reconcile_errors = Counter(
            'ddmanager_reconcile_errors_total',
            'Total number of reconcile errors',
            labelnames=['kind', 'error_type'],
            registry=registry,
        )

        self.reconcile_retries = Counter(
            'ddmanager_reconcile_retries_total',
            'Total number of reconciles scheduled for retry',
            labelnames=['kind'],
            registry=registry,
        )

        self.reconcile_dropped = Counter(
            'ddmanager_reconcile_dropped_total',
            'Total number of keys dropped after exhausting retries',
            labelnames=['kind'],
            registry=registry,
        )

        self.queue_depth = Gauge(
            'ddmanager_queue_depth',
            'Number of keys waiting in the work queue',
            labelnames=['kind'],
            registry=registry,
        )

        self.queue_wait_seconds = Histogram(
            'ddmanager_queue_wait_seconds',
            'Time spent waiting in the work queue',
            labelnames=['kind'],
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0],
            registry=registry,
        )

        self.controller_restarts = Counter(
            'ddmanager_controller_restarts_total',
            'Total number of resource controller restarts',
            labelnames=['kind'],
            registry=registry,
        )

        # =============================================================================
        # Monitor Sync Metrics
        # =============================================================================

        self.sync_operations = Counter(
            'ddmanager_sync_operations_total',
            'Total number of monitor sync decisions',
            labelnames=['kind', 'action', 'result'],
            registry=registry,
        )

        self.render_errors = Counter(
            'ddmanager_render_errors_total',
            'Total number of template fields that could not be rendered',
            labelnames=['kind', 'field'],
            registry=registry,
        )

        # =============================================================================
        # Ruleset Metrics
        # =============================================================================

        self.ruleset_reloads = Counter(
            'ddmanager_ruleset_reloads_total',
            'Total number of ruleset reloads',
            labelnames=['result'],
            registry=registry,
        )

        self.ruleset_rules = Gauge(
            'ddmanager_ruleset_rules',
            'Number of rules in the current ruleset',
            registry=registry,
        )

        self.ruleset_failed_sources = Gauge(
            'ddmanager_ruleset_failed_sources',
            'Number of sources that failed during the last reload',
            registry=registry,
        )

        logger.info("PrometheusMonitor initialized with all metrics")

    # =============================================================================
    # Reconciliation Lifecycle Hooks
    # =============================================================================

    def on_reconcile_queued(self, kind: str, key: str, queue_depth: int) -> None:
        self.queue_depth.labels(kind=kind).set(queue_depth)

    def on_reconcile_dequeued(self, kind: str, key: str, wait_time: float) -> None:
        self.queue_wait_seconds.labels(kind=kind).observe(wait_time)

    def on_reconcile_start(self, kind: str, key: str) -> Optional[Dict[str, Any]]:
        """Record reconciliation start time."""
        return {'start_time': time.time()}

    def on_reconcile_complete(
        self,
        kind: str,
        key: str,
        state: Optional[Dict[str, Any]],
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        """Record reconciliation duration and result."""
        result = 'success' if success else 'failure'
        if state:
            duration = time.time() - state['start_time']
            self.reconcile_duration.labels(kind=kind, result=result).observe(duration)
        self.reconcile_total.labels(kind=kind, result=result).inc()
        if error:
            self.reconcile_errors.labels(
                kind=kind, error_type=error.__class__.__name__
            ).inc()

    def on_reconcile_retry(self, kind: str, key: str, attempt: int, delay: float) -> None:
        self.reconcile_retries.labels(kind=kind).inc()

    def on_reconcile_dropped(self, kind: str, key: str, error: Exception) -> None:
        self.reconcile_dropped.labels(kind=kind).inc()

    def on_controller_restart(self, kind: str, error: Exception) -> None:
        self.controller_restarts.labels(kind=kind).inc()

    # =============================================================================
    # Monitor Sync Hooks
    # =============================================================================

    def on_render_error(self, key: str, monitor_name: str, field: str) -> None:
        self.render_errors.labels(kind=_kind_of(key), field=field).inc()

    def on_sync_operation(
        self,
        key: str,
        monitor_name: str,
        action: str,
        success: bool,
        dry_run: bool = False,
    ) -> None:
        if dry_run:
            result = 'dry_run'
        else:
            result = 'success' if success else 'failure'
        self.sync_operations.labels(kind=_kind_of(key), action=action, result=result).inc()

    # =============================================================================
    # Ruleset Hooks
    # =============================================================================

    def on_ruleset_reload(self, sources: int, failed: int, rules: int) -> None:
        result = 'success' if not failed else ('partial' if failed < sources else 'failure')
        self.ruleset_reloads.labels(result=result).inc()
        self.ruleset_rules.set(rules)
        self.ruleset_failed_sources.set(failed)
