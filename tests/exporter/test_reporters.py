from dataclasses import dataclass

import pytest
from prometheus_client import Counter, Gauge
from pydantic import BaseModel

from metrics_exporter.errors import ReportingError
from metrics_exporter.exporter.collectors import CollectorMap
from metrics_exporter.exporter.prometheus import counter_factory
from metrics_exporter.exporter.reporters import (
    FieldMapReporter,
    MetricSpec,
    NumericFieldReporter,
    as_mapping,
    flatten,
)


class Host(BaseModel):
    cpu: float
    up: bool
    name: str


@dataclass
class Disk:
    used: int
    total: int


def _value(cm, name, labels=None):
    return cm.registry.get_sample_value(name, labels or {})


def test_as_mapping_variants():
    assert as_mapping({"a": 1}) == {"a": 1}
    assert as_mapping(Host(cpu=1.0, up=True, name="h")) == {"cpu": 1.0, "up": True, "name": "h"}
    assert as_mapping(Disk(1, 2)) == {"used": 1, "total": 2}
    with pytest.raises(ReportingError):
        as_mapping([1, 2])


def test_flatten_nested():
    assert list(flatten({"a": {"b": 1, "c": {"d": 2}}, "e": 3})) == [("a_b", 1), ("a_c_d", 2), ("e", 3)]


def test_numeric_field_reporter_maps_numbers_and_bools():
    cm = CollectorMap()
    NumericFieldReporter(prefix="host_").report(Host(cpu=12.5, up=True, name="web-1"), cm)
    assert sorted(cm) == ["host_cpu", "host_up"]
    assert _value(cm, "host_cpu") == 12.5
    assert _value(cm, "host_up") == 1.0
    assert isinstance(cm["host_cpu"], Gauge)


def test_numeric_field_reporter_sanitizes_and_flattens():
    cm = CollectorMap()
    NumericFieldReporter().report({"disk-usage": {"root.fs": 80}}, cm)
    assert list(cm) == ["disk_usage_root_fs"]
    assert _value(cm, "disk_usage_root_fs") == 80.0


def test_numeric_field_reporter_overwrites_values():
    cm = CollectorMap()
    reporter = NumericFieldReporter()
    reporter.report({"value": 1}, cm)
    gauge = cm["value"]
    reporter.report({"value": 5}, cm)
    assert cm["value"] is gauge
    assert _value(cm, "value") == 5.0


def test_numeric_field_reporter_rejects_null_without_partial_update():
    """Um campo nulo rejeita o componente inteiro; o valor anterior permanece."""
    cm = CollectorMap()
    reporter = NumericFieldReporter()
    reporter.report({"a": 1, "b": 2}, cm)
    with pytest.raises(ReportingError):
        reporter.report({"a": 10, "b": None}, cm)
    assert _value(cm, "a") == 1.0
    assert _value(cm, "b") == 2.0


def test_numeric_field_reporter_skip_none():
    cm = CollectorMap()
    NumericFieldReporter(skip_none=True).report({"a": None, "b": 3}, cm)
    assert list(cm) == ["b"]


def test_numeric_field_reporter_rejects_nan():
    with pytest.raises(ReportingError):
        NumericFieldReporter().report({"a": float("nan")}, CollectorMap())


def test_numeric_field_reporter_rejects_name_collision():
    with pytest.raises(ReportingError):
        NumericFieldReporter().report({"a-b": 1, "a_b": 2}, CollectorMap())


def test_numeric_field_reporter_rejects_kind_mismatch():
    cm = CollectorMap()
    cm.get_or_create("value", counter_factory(cm.registry, "value"))
    with pytest.raises(ReportingError):
        NumericFieldReporter().report({"value": 1}, cm)


def test_field_map_reporter_gauge_and_counter():
    cm = CollectorMap()
    reporter = FieldMapReporter(
        {
            "queue_depth": MetricSpec("queue.depth"),
            "jobs_processed": MetricSpec("jobs.done", kind="counter", description="Jobs concluídos"),
        }
    )
    reporter.report({"queue": {"depth": 4}, "jobs": {"done": 10}}, cm)
    reporter.report({"queue": {"depth": 2}, "jobs": {"done": 15}}, cm)

    assert _value(cm, "queue_depth") == 2.0
    assert isinstance(cm["jobs_processed"], Counter)
    assert _value(cm, "jobs_processed_total") == 15.0


def test_field_map_reporter_rejects_decreasing_counter():
    cm = CollectorMap()
    reporter = FieldMapReporter({"depth": MetricSpec("depth"), "done": MetricSpec("done", kind="counter")})
    reporter.report({"depth": 1, "done": 10}, cm)
    with pytest.raises(ReportingError):
        reporter.report({"depth": 9, "done": 3}, cm)
    # nenhuma atualização parcial
    assert _value(cm, "depth") == 1.0
    assert _value(cm, "done_total") == 10.0


def test_field_map_reporter_missing_or_non_numeric_field():
    cm = CollectorMap()
    with pytest.raises(ReportingError):
        FieldMapReporter({"x": MetricSpec("nope")}).report({"value": 1}, cm)
    with pytest.raises(ReportingError):
        FieldMapReporter({"x": MetricSpec("value")}).report({"value": "high"}, cm)


def test_metric_spec_rejects_unknown_kind():
    with pytest.raises(ValueError):
        MetricSpec("a", kind="summary")


def test_numeric_field_reporter_first_failure_registers_nothing():
    """Falha no primeiro report não deixa collectors novos no mapa nem no registry."""
    cm = CollectorMap()
    with pytest.raises(ReportingError):
        NumericFieldReporter().report({"a": 5, "b": None}, cm)
    assert len(cm) == 0
    assert _value(cm, "a") is None


def test_field_map_reporter_first_failure_registers_nothing():
    cm = CollectorMap()
    reporter = FieldMapReporter({"g": MetricSpec("g"), "h": MetricSpec("missing")})
    with pytest.raises(ReportingError):
        reporter.report({"g": 3}, cm)
    assert len(cm) == 0
    assert _value(cm, "g") is None


def test_kind_mismatch_leaves_other_fields_unregistered():
    cm = CollectorMap()
    cm.get_or_create("z", counter_factory(cm.registry, "z"))
    with pytest.raises(ReportingError):
        NumericFieldReporter().report({"a": 1, "z": 2}, cm)
    assert list(cm) == ["z"]


def test_field_map_reporter_negative_first_counter_total():
    cm = CollectorMap()
    with pytest.raises(ReportingError, match="diminuiu"):
        FieldMapReporter({"c": MetricSpec("c", kind="counter")}).report({"c": -5}, cm)
    assert len(cm) == 0


def test_coerce_huge_int_is_reporting_error():
    cm = CollectorMap()
    with pytest.raises(ReportingError):
        NumericFieldReporter().report({"a": 10**400}, cm)
    assert len(cm) == 0


def test_field_map_reporter_rejects_sanitized_name_collision():
    with pytest.raises(ValueError):
        FieldMapReporter({"a-b": MetricSpec("x"), "a_b": MetricSpec("y")})
