"""Core do exporter: um ciclo de exportação por chamada.

Um ``Exporter`` fica ligado a uma URL base e a um tipo de domínio. Cada
chamada de ``export_metrics`` compõe a URL, busca o conteúdo, desserializa no
tipo de domínio e delega ao ``MetricReporter``, cronometrando o ciclo inteiro.

Ordem dentro de um ciclo: fetch -> desserialização -> report -> finalização.
A finalização (tempo decorrido em log e no histograma) roda exatamente uma vez,
com sucesso ou falha. Falhas são registradas e relançadas; não há retries.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from ..errors import DeserializationError, ExporterError, InvalidSuffix, ReportingError
from ..system.logs import ScopedLogger, truncate_content
from ..system.provider import ContentProvider
from .collectors import CollectorMap
from .prometheus import cycle_duration_histogram

T = TypeVar("T")

DEFAULT_LOG_CONTENT_MAX_CHARS = 2048


class MetricReporter(ABC, Generic[T]):
    """Ponto de customização: converte um componente de domínio em observações.

    Implementações devem registrar collectors via ``collectors.get_or_create``,
    não guardar referência ao componente e validar tudo antes de alterar
    qualquer collector, levantando ``ReportingError`` em vez de truncar valores.
    """

    @abstractmethod
    def report(self, component: T, collectors: CollectorMap) -> None: ...


def validate_suffix(suffix: Any) -> None:
    """Aceita ``None`` ou uma string não vazia que comece com '/'."""
    if suffix is None:
        return
    if not isinstance(suffix, str) or not suffix.startswith("/"):
        raise InvalidSuffix(suffix)


def deserialize(content: str, adapter: TypeAdapter) -> Any:
    """Desserializa ``content`` (JSON) no tipo do ``adapter``."""
    try:
        return adapter.validate_json(content)
    except ValidationError as exc:
        errors = exc.errors(include_url=False)
        first = errors[0]["msg"] if errors else str(exc)
        raise DeserializationError(f"conteúdo inválido ({exc.error_count()} erro(s)): {first}") from exc


class Exporter(Generic[T]):
    """Orquestra ciclos de exportação para um endpoint e um tipo de domínio."""

    def __init__(
        self,
        content_provider: ContentProvider,
        reporter: MetricReporter[T],
        endpoint_url: str,
        domain_type: Any,
        collectors: CollectorMap | None = None,
        logger: logging.Logger | None = None,
        name: str | None = None,
        log_content_max_chars: int = DEFAULT_LOG_CONTENT_MAX_CHARS,
    ):
        self.content_provider = content_provider
        self.reporter = reporter
        self.endpoint_url = endpoint_url
        self.domain_type = domain_type
        self.collectors = collectors if collectors is not None else CollectorMap()
        self.name = name or type(reporter).__name__
        self.log_content_max_chars = log_content_max_chars
        self.logger = ScopedLogger(logger or logging.getLogger(__name__), {"exporter": self.name})
        self._adapter: TypeAdapter = TypeAdapter(domain_type)
        self._duration = cycle_duration_histogram(self.collectors.registry)
        self.last_elapsed: float | None = None

    @property
    def registry(self):
        return self.collectors.registry

    def compose_url(self, suffix: str | None = None) -> str:
        validate_suffix(suffix)
        return self.endpoint_url if suffix is None else self.endpoint_url + suffix

    async def export_metrics(self, suffix: str | None = None) -> None:
        """Executa um ciclo de exportação; ``suffix`` é anexado à URL base.

        Levanta ``InvalidSuffix`` antes de qualquer I/O quando o sufixo é
        inválido. Demais falhas (``TransportError``, ``DeserializationError``,
        ``ReportingError``) são registradas com o conteúdo observado e relançadas.
        """
        url = self.compose_url(suffix)

        content = ""
        outcome = "failure"
        started = time.perf_counter()
        try:
            self.logger.info("export_metrics Started.")
            content = await self.content_provider.get_response_content(url)
            component = deserialize(content, self._adapter)
            self._report(component)
            outcome = "success"
        except (Exception, asyncio.CancelledError):
            self.logger.error(
                "%s.export_metrics: Failed to export metrics. Content: %s",
                self.name,
                truncate_content(content, self.log_content_max_chars),
                exc_info=True,
            )
            raise
        finally:
            elapsed = time.perf_counter() - started
            self.last_elapsed = elapsed
            self._duration.labels(self.name, outcome).observe(elapsed)
            self.logger.info("Runtime: %s.", timedelta(seconds=elapsed))

    def _report(self, component: T) -> None:
        try:
            self.reporter.report(component, self.collectors)
        except ExporterError:
            raise
        except Exception as exc:
            raise ReportingError(f"{type(self.reporter).__name__} falhou ao reportar: {exc}") from exc
