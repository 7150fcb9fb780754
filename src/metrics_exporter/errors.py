"""Erros do ciclo de exportação.

Todas as falhas após a validação do sufixo são registradas pelo core e
relançadas para o chamador, que decide sobre retry/backoff/alertas.
"""


class ExporterError(Exception):
    """Base para todos os erros levantados pelo exporter."""


class InvalidSuffix(ExporterError, ValueError):
    """Sufixo de URL inválido: vazio ou sem '/' inicial. Nenhum I/O é feito."""

    def __init__(self, suffix):
        self.suffix = suffix
        super().__init__(f"export_metrics recebeu um sufixo de URL inválido - {suffix!r}.")


class TransportError(ExporterError):
    """Falha ao obter o conteúdo (timeout, conexão recusada, status não-2xx)."""

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class DeserializationError(ExporterError):
    """O corpo da resposta não corresponde ao tipo de domínio esperado."""


class ReportingError(ExporterError):
    """O reporter rejeitou o componente ou não conseguiu aplicá-lo aos collectors."""
