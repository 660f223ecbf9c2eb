"""dd-manager Sensor Framework.

This module provides a monitoring and observability framework for the operator.
It enables non-invasive instrumentation of reconcile, sync and ruleset events
through a hook-based pattern.

Key components:
- OperatorSensor: Base class defining lifecycle hooks for operator events
- SensorDelegate: Fan-out pattern for routing events to multiple sensor backends
- PrometheusMonitor: Prometheus metrics exporter

Usage:
    from ddmanager.sensors import SensorDelegate, PrometheusMonitor

    delegate = SensorDelegate()
    delegate.add(PrometheusMonitor())
"""

from ddmanager.sensors.base import OperatorSensor
from ddmanager.sensors.delegate import SensorDelegate
from ddmanager.sensors.prometheus import PrometheusMonitor
from ddmanager.sensors.server import init_metrics_server

__all__ = [
    'OperatorSensor',
    'SensorDelegate',
    'PrometheusMonitor',
    'init_metrics_server',
]
