"""Exporter genérico de métricas: busca JSON via HTTP e expõe como métricas Prometheus."""

from .errors import DeserializationError, ExporterError, InvalidSuffix, ReportingError, TransportError
from .exporter.base import Exporter, MetricReporter
from .exporter.collectors import CollectorMap
from .exporter.reporters import FieldMapReporter, MetricSpec, NumericFieldReporter
from .system.provider import ContentProvider, HttpContentProvider

__all__ = [
    "CollectorMap",
    "ContentProvider",
    "DeserializationError",
    "Exporter",
    "ExporterError",
    "FieldMapReporter",
    "HttpContentProvider",
    "InvalidSuffix",
    "MetricReporter",
    "MetricSpec",
    "NumericFieldReporter",
    "ReportingError",
    "TransportError",
]
