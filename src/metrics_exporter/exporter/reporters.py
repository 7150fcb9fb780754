"""Reporters prontos para uso.

Ambos trabalham em duas fases: primeiro validam todos os valores sem tocar
o registry (plano), só depois criam collectors e aplicam. Um componente
rejeitado não deixa collectors novos nem valores antigos e novos misturados.
"""

import dataclasses
import logging
import math
import threading
from dataclasses import dataclass
from typing import Any, Iterator, Mapping

from prometheus_client import Counter, Gauge
from pydantic import BaseModel

from ..errors import ReportingError
from .base import MetricReporter
from .collectors import CollectorMap
from .prometheus import counter_factory, gauge_factory, sanitize_metric_name

logger = logging.getLogger(__name__)

_SKIP = object()


# ========================
# 1. Helpers de conversão
# ========================


def as_mapping(component: Any) -> Mapping[str, Any]:
    """Converte mapping, modelo pydantic ou dataclass em mapping."""
    if isinstance(component, Mapping):
        return component
    if isinstance(component, BaseModel):
        return component.model_dump()
    if dataclasses.is_dataclass(component) and not isinstance(component, type):
        return dataclasses.asdict(component)
    raise ReportingError(f"tipo de componente não suportado: {type(component).__name__}")


def flatten(mapping: Mapping[str, Any], parent: str = "", sep: str = "_") -> Iterator[tuple[str, Any]]:
    """Achata mappings aninhados: ``{"a": {"b": 1}}`` -> ``("a_b", 1)``."""
    for key, value in mapping.items():
        name = f"{parent}{sep}{key}" if parent else str(key)
        if isinstance(value, Mapping):
            yield from flatten(value, name, sep)
        else:
            yield name, value


def lookup(mapping: Mapping[str, Any], path: str) -> Any:
    """Resolve um caminho pontuado (``"a.b"``) num mapping aninhado."""
    current: Any = mapping
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            raise ReportingError(f"campo ausente: {path}")
        current = current[part]
    return current


def coerce_value(name: str, value: Any, skip_none: bool = False) -> Any:
    """Converte um valor de campo em float para um collector.

    Booleanos viram 0/1. Tipos não numéricos retornam ``_SKIP``. ``None``,
    NaN e infinito levantam ``ReportingError`` (``None`` é pulado com ``skip_none``).
    """
    if value is None:
        if skip_none:
            return _SKIP
        raise ReportingError(f"valor nulo para a métrica {name}")
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if not isinstance(value, (int, float)):
        return _SKIP
    try:
        out = float(value)
    except OverflowError as exc:
        # repr de inteiros enormes pode falhar; não incluir o valor
        raise ReportingError(f"valor fora do intervalo para a métrica {name}: inteiro grande demais") from exc
    if math.isnan(out) or math.isinf(out):
        raise ReportingError(f"valor fora do intervalo para a métrica {name}: {value!r}")
    return out


def _require_kind(name: str, collector: Any, kind: type) -> None:
    if not isinstance(collector, kind):
        raise ReportingError(f"métrica {name} já registrada como {type(collector).__name__}, esperado {kind.__name__}")


def _check_existing_kinds(collectors: CollectorMap, kinds: Mapping[str, type]) -> None:
    """Rejeita nomes já registrados com outro tipo, sem criar nada."""
    for name, kind in kinds.items():
        existing = collectors.get(name)
        if existing is not None:
            _require_kind(name, existing, kind)


# ========================
# 2. Reporters
# ========================


class NumericFieldReporter(MetricReporter[Any]):
    """Expõe cada campo numérico do componente como Gauge ``<prefix><campo>``.

    Mappings aninhados são achatados com ``_``; campos não numéricos são
    ignorados.
    """

    def __init__(self, prefix: str = "", skip_none: bool = False, description: str = ""):
        self.prefix = prefix
        self.skip_none = skip_none
        self.description = description

    def report(self, component: Any, collectors: CollectorMap) -> None:
        plan: dict[str, tuple[str, float]] = {}
        for field, raw in flatten(as_mapping(component)):
            name = sanitize_metric_name(f"{self.prefix}{field}")
            value = coerce_value(name, raw, self.skip_none)
            if value is _SKIP:
                continue
            if name in plan:
                raise ReportingError(f"campos distintos geram o mesmo nome de métrica: {name}")
            plan[name] = (field, value)
        _check_existing_kinds(collectors, {name: Gauge for name in plan})

        for name, (field, value) in plan.items():
            gauge = collectors.get_or_create(
                name, gauge_factory(collectors.registry, name, self.description or f"Field {field}")
            )
            _require_kind(name, gauge, Gauge)
            gauge.set(value)
        logger.debug("NumericFieldReporter: %d gauges atualizados", len(plan))


@dataclass(frozen=True)
class MetricSpec:
    """Mapeia um campo (caminho pontuado) para um collector do tipo ``kind``."""

    field: str
    kind: str = "gauge"
    description: str = ""

    def __post_init__(self):
        if self.kind not in ("gauge", "counter"):
            raise ValueError(f"kind inválido: {self.kind}")


_KINDS = {"gauge": Gauge, "counter": Counter}


class FieldMapReporter(MetricReporter[Any]):
    """Reporter explícito: ``{nome_da_métrica: MetricSpec}``.

    Para ``counter`` o campo é um total monotônico da origem; o counter é
    incrementado pelo delta desde o último total visto. Uma queda do total
    levanta ``ReportingError``.
    """

    def __init__(self, metrics: Mapping[str, MetricSpec]):
        self.metrics: dict[str, MetricSpec] = {}
        for raw_name, spec in metrics.items():
            name = sanitize_metric_name(raw_name)
            if name in self.metrics:
                raise ValueError(f"nomes distintos geram o mesmo nome de métrica: {name}")
            self.metrics[name] = spec
        self._last_totals: dict[str, float] = {}
        self._lock = threading.Lock()

    def report(self, component: Any, collectors: CollectorMap) -> None:
        mapping = as_mapping(component)
        with self._lock:
            plan = [(name, spec, self._plan_value(name, spec, mapping)) for name, spec in self.metrics.items()]
            _check_existing_kinds(collectors, {name: _KINDS[spec.kind] for name, spec, _ in plan})

            for name, spec, value in plan:
                if spec.kind == "gauge":
                    gauge = collectors.get_or_create(name, gauge_factory(collectors.registry, name, spec.description))
                    _require_kind(name, gauge, Gauge)
                    gauge.set(value)
                else:
                    counter = collectors.get_or_create(
                        name, counter_factory(collectors.registry, name, spec.description)
                    )
                    _require_kind(name, counter, Counter)
                    delta = value - self._last_totals.get(name, 0.0)
                    if delta:
                        counter.inc(delta)
                    self._last_totals[name] = value

    def _plan_value(self, name: str, spec: MetricSpec, mapping: Mapping[str, Any]) -> float:
        value = coerce_value(name, lookup(mapping, spec.field))
        if value is _SKIP:
            raise ReportingError(f"campo {spec.field} não é numérico")
        if spec.kind == "counter":
            last = self._last_totals.get(name, 0.0)
            if value < last:
                raise ReportingError(f"total do counter {name} diminuiu: {value} < {last}")
        return value
