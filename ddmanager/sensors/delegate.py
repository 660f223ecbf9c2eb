"""Sensor delegation for fan-out pattern.

This module provides SensorDelegate, which implements the delegation pattern
for routing sensor events to multiple monitoring backends simultaneously.
Each backend receives the same events and can maintain independent state.
A failing sensor is logged and never interrupts the operation it observes.
"""

from typing import Set, Dict, Optional, Any
import logging

from ddmanager.sensors.base import OperatorSensor

logger = logging.getLogger(__name__)


class SensorDelegate(OperatorSensor):
    """Delegate sensor that fans out events to multiple backends.

    This class maintains a set of child sensors and forwards all lifecycle
    events to each one. State tracking is handled per-sensor, so each backend
    receives its own state dict from start/complete hook pairs.

    Example:
        delegate = SensorDelegate()
        delegate.add(PrometheusMonitor())

        state = delegate.on_reconcile_start("deployment", "deployment/default/web")
        delegate.on_reconcile_complete("deployment", "deployment/default/web", state, True)
    """

    def __init__(self) -> None:
        """Initialize empty sensor delegate."""
        self._sensors: Set[OperatorSensor] = set()

    def add(self, sensor: OperatorSensor) -> None:
        logger.info(f"Adding sensor: {sensor.__class__.__name__}")
        self._sensors.add(sensor)

    def remove(self, sensor: OperatorSensor) -> None:
        logger.info(f"Removing sensor: {sensor.__class__.__name__}")
        self._sensors.discard(sensor)

    def clear(self) -> None:
        """Remove all sensors from the delegate."""
        logger.info(f"Clearing {len(self._sensors)} sensors")
        self._sensors.clear()

    def _fan_out(self, hook: str, *args: Any) -> None:
        for sensor in self._sensors:
            try:
                getattr(sensor, hook)(*args)
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.{hook}: {e}",
                    exc_info=True,
                )

    # =============================================================================
    # Reconciliation Lifecycle Hooks
    # =============================================================================

    def on_reconcile_queued(self, kind: str, key: str, queue_depth: int) -> None:
        self._fan_out("on_reconcile_queued", kind, key, queue_depth)

    def on_reconcile_dequeued(self, kind: str, key: str, wait_time: float) -> None:
        self._fan_out("on_reconcile_dequeued", kind, key, wait_time)

    def on_reconcile_start(
        self, kind: str, key: str
    ) -> Optional[Dict[OperatorSensor, Any]]:
        """Delegate reconcile_start to all sensors.

        Returns:
            Dict mapping each sensor to its returned state, or None if no sensors
        """
        if not self._sensors:
            return None

        states = {}
        for sensor in self._sensors:
            try:
                state = sensor.on_reconcile_start(kind, key)
                if state is not None:
                    states[sensor] = state
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.on_reconcile_start: {e}",
                    exc_info=True,
                )

        return states if states else None

    def on_reconcile_complete(
        self,
        kind: str,
        key: str,
        state: Optional[Dict[OperatorSensor, Any]],
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        """Delegate reconcile_complete to all sensors with their specific state."""
        for sensor in self._sensors:
            try:
                sensor_state = state.get(sensor) if state else None
                sensor.on_reconcile_complete(kind, key, sensor_state, success, error)
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.on_reconcile_complete: {e}",
                    exc_info=True,
                )

    def on_reconcile_retry(self, kind: str, key: str, attempt: int, delay: float) -> None:
        self._fan_out("on_reconcile_retry", kind, key, attempt, delay)

    def on_reconcile_dropped(self, kind: str, key: str, error: Exception) -> None:
        self._fan_out("on_reconcile_dropped", kind, key, error)

    def on_controller_restart(self, kind: str, error: Exception) -> None:
        self._fan_out("on_controller_restart", kind, error)

    # =============================================================================
    # Monitor Sync Hooks
    # =============================================================================

    def on_render_error(self, key: str, monitor_name: str, field: str) -> None:
        self._fan_out("on_render_error", key, monitor_name, field)

    def on_sync_operation(
        self,
        key: str,
        monitor_name: str,
        action: str,
        success: bool,
        dry_run: bool = False,
    ) -> None:
        self._fan_out("on_sync_operation", key, monitor_name, action, success, dry_run)

    # =============================================================================
    # Ruleset Hooks
    # =============================================================================

    def on_ruleset_reload(self, sources: int, failed: int, rules: int) -> None:
        self._fan_out("on_ruleset_reload", sources, failed, rules)

    # =============================================================================
    # Utility Methods
    # =============================================================================

    def asdict(self) -> Dict[str, Any]:
        """Return aggregated state from all sensors.

        Returns:
            Dict mapping sensor class name to its state dict
        """
        return {
            sensor.__class__.__name__: sensor.asdict()
            for sensor in self._sensors
        }
