"""Pacote system: provedores de conteúdo e subsistema de logs."""

from .logs import ScopedLogger, configure_logging
from .provider import HttpContentProvider

__all__ = ["ScopedLogger", "configure_logging", "HttpContentProvider"]
