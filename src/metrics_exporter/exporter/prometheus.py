"""Utilitários para exportação de métricas no padrão Prometheus.

Sanitização de nomes, fábricas de collectors ligadas a um
``CollectorRegistry`` e o servidor HTTP de scraping.
"""

import logging
import os
import threading
import weakref
from typing import Callable, Sequence

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest, start_http_server

logger = logging.getLogger(__name__)

_served_registry: CollectorRegistry | None = None
_cycle_histograms: "weakref.WeakKeyDictionary[CollectorRegistry, Histogram]" = weakref.WeakKeyDictionary()
_histograms_lock = threading.Lock()

CYCLE_DURATION_METRIC = "exporter_cycle_duration_seconds"


def sanitize_metric_name(name: str) -> str:
    """Sanitiza o nome da métrica para o padrão Prometheus, substituindo caracteres inválidos por underline."""
    # Prometheus metric names: [a-zA-Z_:][a-zA-Z0-9_:]*
    out = []
    for i, ch in enumerate(name):
        if i == 0:
            if ch.isascii() and (ch.isalpha() or ch in ("_", ":")):
                out.append(ch)
            else:
                out.append("_")
        else:
            if ch.isascii() and (ch.isalnum() or ch in ("_", ":")):
                out.append(ch)
            else:
                out.append("_")
    return "".join(out)


# ========================
# 1. Fábricas de collectors
# ========================


def gauge_factory(
    registry: CollectorRegistry, name: str, description: str = "", labelnames: Sequence[str] = ()
) -> Callable[[], Gauge]:
    """Retorna uma fábrica que cria o Gauge ``name`` registrado em ``registry``.

    A fábrica é entregue a ``CollectorMap.get_or_create`` e só é invocada na
    primeira observação do nome.
    """

    def _create() -> Gauge:
        return Gauge(name, description or f"Gauge for {name}", labelnames=tuple(labelnames), registry=registry)

    return _create


def counter_factory(
    registry: CollectorRegistry, name: str, description: str = "", labelnames: Sequence[str] = ()
) -> Callable[[], Counter]:
    """Retorna uma fábrica que cria o Counter ``name`` registrado em ``registry``."""

    def _create() -> Counter:
        return Counter(name, description or f"Counter for {name}", labelnames=tuple(labelnames), registry=registry)

    return _create


def cycle_duration_histogram(registry: CollectorRegistry) -> Histogram:
    """Retorna o histograma de duração dos ciclos (labels: exporter, outcome).

    Exporters que compartilham um registry compartilham o mesmo histograma.
    """
    with _histograms_lock:
        hist = _cycle_histograms.get(registry)
        if hist is None:
            hist = Histogram(
                CYCLE_DURATION_METRIC,
                "Duração de um ciclo de exportação em segundos",
                labelnames=("exporter", "outcome"),
                registry=registry,
            )
            _cycle_histograms[registry] = hist
        return hist


# ========================
# 2. Exposição para scraping
# ========================


def render_registry(registry: CollectorRegistry) -> str:
    """Formata o registry no formato de exposição texto do Prometheus."""
    return generate_latest(registry).decode("utf-8")


def start_exporter(registry: CollectorRegistry, port: int | None = None, addr: str | None = None) -> bool:
    """Inicia o servidor HTTP do Prometheus para ``registry`` no endereço e porta informados.

    Porta e endereço podem vir de ``EXPORTER_HTTP_PORT`` / ``EXPORTER_HTTP_ADDR``
    quando omitidos. Retorna True quando o servidor está ativo para ``registry``.
    Só um servidor por processo: outro registry depois do primeiro retorna False.
    """
    global _served_registry

    if _served_registry is not None:
        if _served_registry is registry:
            logger.debug("prometheus exporter already started")
            return True
        logger.warning("Prometheus exporter já serve outro registry; registry ignorado")
        return False

    if port is None:
        try:
            port = int(os.getenv("EXPORTER_HTTP_PORT", "8000"))
        except ValueError:
            logger.warning("EXPORTER_HTTP_PORT inválido: %s", os.getenv("EXPORTER_HTTP_PORT"))
            port = 8000
    if addr is None:
        addr = os.getenv("EXPORTER_HTTP_ADDR", "127.0.0.1")

    try:
        start_http_server(port, addr, registry=registry)
    except OSError as exc:
        logger.exception("Falha ao iniciar Prometheus exporter: %s", exc)
        return False
    _served_registry = registry
    logger.info("Prometheus exporter iniciado em %s:%d", addr, port)
    return True
