"""Provedores de conteúdo: obtêm o corpo de resposta de uma URL.

``HttpContentProvider`` usa ``requests`` e executa a chamada bloqueante numa
thread de trabalho, para que o ciclo de exportação possa suspender no fetch.
Qualquer falha de transporte (timeout, conexão, status não-2xx) vira
``TransportError``; o core não distingue status.
"""

import asyncio
import logging
from typing import Protocol

import requests  # type: ignore[import-untyped]

from ..errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class ContentProvider(Protocol):
    async def get_response_content(self, url: str) -> str: ...


class HttpContentProvider:
    """Busca conteúdo via HTTP GET com ``requests.Session``.

    Retries não são feitos aqui nem no core; ficam a cargo do chamador.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
        headers: dict | None = None,
    ):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {"Accept": "application/json"}
        if headers:
            self.headers.update(headers)

    def fetch(self, url: str) -> str:
        """Versão síncrona do fetch; levanta ``TransportError`` em qualquer falha."""
        logger.debug("GET %s (timeout=%s)", url, self.timeout)
        try:
            resp = self.session.get(url, headers=self.headers, timeout=self.timeout)
            resp.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise TransportError(f"GET {url} retornou status {status}", url=url, status_code=status) from exc
        except requests.RequestException as exc:
            raise TransportError(f"GET {url} falhou: {exc}", url=url) from exc
        return resp.text

    async def get_response_content(self, url: str) -> str:
        return await asyncio.to_thread(self.fetch, url)

    def close(self) -> None:
        self.session.close()
