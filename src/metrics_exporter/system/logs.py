"""Subsistema de logs: escopo estruturado, formatação JSON e configuração.

O core anexa a cada evento um mapa de escopo (ex.: ``{"exporter": "StatusExporter"}``)
para correlacionar logs de exporters rodando em paralelo. O escopo fica no
atributo ``scope`` do ``LogRecord`` e é serializado pelo ``JSONFormatter``.
"""

import json as _json
import logging
import os
import sys
import traceback
from pathlib import Path
from typing import Any, Mapping

logger = logging.getLogger(__name__)

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
TRUNCATION_MARKER = "...[truncated {count} chars]"


# ========================
# 1. Escopo estruturado
# ========================


class ScopedLogger(logging.LoggerAdapter):
    """LoggerAdapter que injeta um mapa de escopo em cada registro."""

    def __init__(self, logger: logging.Logger, scope: Mapping[str, Any] | None = None):
        super().__init__(logger, dict(scope or {}))

    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra") or {})
        scope = dict(self.extra)
        scope.update(extra.pop("scope", None) or {})
        extra["scope"] = scope
        kwargs["extra"] = extra
        return msg, kwargs

    def child(self, **scope: Any) -> "ScopedLogger":
        """Retorna um novo adapter com o escopo atual acrescido de ``scope``."""
        merged = dict(self.extra)
        merged.update(scope)
        return ScopedLogger(self.logger, merged)


def truncate_content(content: str | None, limit: int) -> str:
    """Limita o conteúdo registrado em logs de erro.

    ``limit < 0`` mantém o conteúdo integral; ``limit == 0`` omite o conteúdo.
    """
    if not content:
        return ""
    if limit < 0 or len(content) <= limit:
        return content
    if limit == 0:
        return TRUNCATION_MARKER.format(count=len(content))
    return content[:limit] + TRUNCATION_MARKER.format(count=len(content) - limit)


# ========================
# 2. Formatação e configuração
# ========================


class JSONFormatter(logging.Formatter):
    """Uma linha JSON por evento: ts, level, name, msg, scope e exc."""

    def format(self, record):
        obj = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        scope = getattr(record, "scope", None)
        if scope:
            obj["scope"] = scope
        if record.exc_info:
            obj["exc"] = "".join(traceback.format_exception(*record.exc_info))
        return _json.dumps(obj, ensure_ascii=False, default=str)


def _has_existing_file_handler(root: logging.Logger, path: Path) -> bool:
    target = os.path.abspath(str(path))
    for h in root.handlers:
        if isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", None) == target:
            return True
    return False


def configure_logging(level: str = "INFO", json_path: str | Path | None = None) -> None:
    """Configura o logger root: formato texto no stderr e, opcionalmente, JSONL em arquivo.

    Não duplica o handler JSON se já existir um para o mesmo caminho. Instala
    um ``sys.excepthook`` que envia exceções não tratadas para o logger root.
    """
    numeric = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric, int):
        logger.warning("Nível de log inválido: %s; usando INFO", level)
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=TEXT_FORMAT)
    root = logging.getLogger()
    root.setLevel(numeric)

    if json_path:
        path = Path(json_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        if not _has_existing_file_handler(root, path):
            jfh = logging.FileHandler(str(path), encoding="utf-8")
            jfh.setLevel(numeric)
            jfh.setFormatter(JSONFormatter())
            root.addHandler(jfh)

    def _exc_hook(exc_type, exc_value, exc_tb):
        root.error("Unhandled exception", exc_info=(exc_type, exc_value, exc_tb))

    sys.excepthook = _exc_hook
