"""Base sensor classes for operator monitoring.

This module defines the base OperatorSensor class that provides lifecycle hooks
for monitoring various operator events. All hooks are no-ops by default, allowing
subclasses to override only the events they care about.

The hook pattern:
- Hooks come in pairs where an operation spans time: on_X_start() and on_X_complete()
- Start hooks return an optional state dict for tracking multi-phase operations
- Complete hooks receive the state dict from their corresponding start hook
- All hooks are optional - sensors only implement what they need
"""

from typing import Dict, Optional, Any
import logging

logger = logging.getLogger(__name__)


class OperatorSensor:
    """Base sensor class for dd-manager monitoring.

    This class defines lifecycle hooks for three main categories:
    1. Work queue and reconciliation lifecycle
    2. Monitor sync operations against the monitoring backend
    3. Ruleset reloads

    All methods are no-ops by default. Subclasses override only the hooks
    they need to monitor.

    Example:
        class LoggingSensor(OperatorSensor):
            def on_reconcile_start(self, kind: str, key: str) -> Dict:
                return {'start_time': time.time()}

            def on_reconcile_complete(self, kind, key, state, success, error=None) -> None:
                duration = time.time() - state['start_time']
                logger.info(f"Reconciled {key} in {duration}s")
    """

    # =============================================================================
    # Reconciliation Lifecycle Hooks
    # =============================================================================

    def on_reconcile_queued(self, kind: str, key: str, queue_depth: int) -> None:
        """Called when an object key is added to its kind's work queue.

        Args:
            kind: Object kind of the controller (deployment, namespace, ...)
            key: Object key
            queue_depth: Number of keys waiting in the queue
        """
        pass

    def on_reconcile_dequeued(self, kind: str, key: str, wait_time: float) -> None:
        """Called when a worker takes an object key from the queue.

        Args:
            kind: Object kind of the controller
            key: Object key
            wait_time: Time spent in queue (seconds)
        """
        pass

    def on_reconcile_start(self, kind: str, key: str) -> Optional[Dict[str, Any]]:
        """Called when the reconcile of an object key begins.

        Returns:
            Optional state dict passed to on_reconcile_complete
        """
        pass

    def on_reconcile_complete(
        self,
        kind: str,
        key: str,
        state: Optional[Dict[str, Any]],
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        """Called when the reconcile of an object key completes.

        Args:
            kind: Object kind of the controller
            key: Object key
            state: State dict returned from on_reconcile_start
            success: Whether reconciliation succeeded
            error: Exception if reconciliation failed
        """
        pass

    def on_reconcile_retry(self, kind: str, key: str, attempt: int, delay: float) -> None:
        """Called when a failed reconcile is scheduled for another attempt."""
        pass

    def on_reconcile_dropped(self, kind: str, key: str, error: Exception) -> None:
        """Called when a key exhausted its retries and is dropped."""
        pass

    def on_controller_restart(self, kind: str, error: Exception) -> None:
        """Called when a crashed resource controller is restarted."""
        pass

    # =============================================================================
    # Monitor Sync Hooks
    # =============================================================================

    def on_render_error(self, key: str, monitor_name: str, field: str) -> None:
        """Called when a template field could not be rendered.

        Args:
            key: Object key the template was rendered against
            monitor_name: Name of the monitor template
            field: The field left unrendered
        """
        pass

    def on_sync_operation(
        self,
        key: str,
        monitor_name: str,
        action: str,
        success: bool,
        dry_run: bool = False,
    ) -> None:
        """Called for every sync decision of the sync engine.

        Args:
            key: Object key being reconciled
            monitor_name: Rendered monitor name
            action: create, update, noop or delete
            success: Whether the backend call succeeded
            dry_run: Whether the call was skipped because of dry run
        """
        pass

    # =============================================================================
    # Ruleset Hooks
    # =============================================================================

    def on_ruleset_reload(self, sources: int, failed: int, rules: int) -> None:
        """Called after every ruleset reload.

        Args:
            sources: Number of configured sources
            failed: Number of sources that could not be loaded
            rules: Number of rules in the published ruleset
        """
        pass

    # =============================================================================
    # Utility Methods
    # =============================================================================

    def asdict(self) -> Dict[str, Any]:
        """Return sensor state as dictionary.

        This method should be overridden by sensors that maintain state
        (like Monitor classes with counters and metrics).

        Returns:
            Dictionary representation of sensor state
        """
        return {}
