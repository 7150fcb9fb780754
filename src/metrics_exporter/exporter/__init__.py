"""Pacote exporter: core do ciclo de exportação, collectors e integração Prometheus.

Re-exports para ``from metrics_exporter.exporter import Exporter``.
"""

from .base import Exporter, MetricReporter
from .collectors import CollectorMap
from .prometheus import start_exporter, sanitize_metric_name

__all__ = ["Exporter", "MetricReporter", "CollectorMap", "start_exporter", "sanitize_metric_name"]
