"""Ponto de entrada do exporter.

Este módulo realiza a inicialização da aplicação: parsing de argumentos CLI,
configuração de logging, montagem do exporter, início do endpoint de scraping
e execução do loop de ciclos. A lógica de runtime fica em `core` e `exporter`
para facilitar testes e reutilização.
"""

import asyncio
import logging
from typing import Any

from .core.args import parse_args
from .core.core import run_loop
from .errors import InvalidSuffix
from .exporter.base import Exporter
from .exporter.prometheus import start_exporter
from .exporter.reporters import NumericFieldReporter
from .system.logs import configure_logging
from .system.provider import HttpContentProvider

logger = logging.getLogger(__name__)


def build_exporter(args) -> Exporter[dict[str, Any]]:
    """Monta um exporter de campos numéricos para a URL de ``args``."""
    settings = args.settings
    provider = HttpContentProvider(timeout=settings["request_timeout"])
    return Exporter(
        provider,
        NumericFieldReporter(prefix=args.prefix),
        args.url,
        dict[str, Any],
        name="JsonEndpointExporter",
        log_content_max_chars=settings["log_content_max_chars"],
    )


def main(argv: list[str] | None = None) -> int:
    """Inicializa a aplicação e executa os ciclos pedidos.

    Retorna 0 quando ao menos um ciclo teve sucesso, 1 quando todos falharam
    e 2 para argumentos ou configuração inválidos.
    """
    try:
        args = parse_args(argv)
    except ValueError as exc:
        logging.basicConfig(level=logging.WARNING)
        logger.error("Argumentos inválidos: %s", exc)
        return 2

    configure_logging(args.log_level, args.log_json)

    exporter = build_exporter(args)
    if not args.no_http:
        start_exporter(exporter.registry, port=args.port, addr=args.addr)

    try:
        stats = asyncio.run(
            run_loop(exporter, args.interval, args.cycles, suffix=args.suffix, verbose_level=args.verbose)
        )
    except InvalidSuffix as exc:
        logger.error("%s", exc)
        return 2
    except KeyboardInterrupt:
        logger.info("Recebido KeyboardInterrupt, saindo...")
        return 0
    finally:
        exporter.content_provider.close()

    logger.info("Ciclos concluídos: %d sucesso(s), %d falha(s)", stats["succeeded"], stats["failed"])
    return 0 if stats["succeeded"] or not stats["failed"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
