"""Loop principal: dispara ciclos de exportação em intervalo fixo.

O exporter não agenda a si mesmo; este loop é o chamador externo usado pela
linha de comando. Falhas de ciclo já foram registradas pelo core do exporter;
aqui são contabilizadas e o loop segue para o próximo ciclo.
"""

import asyncio
import logging

from ..exporter.base import Exporter
from .emitter import emit_snapshot

logger = logging.getLogger(__name__)


async def run_loop(
    exporter: Exporter, interval: float, cycles: int, suffix: str | None = None, verbose_level: int = 0
) -> dict:
    """Executa ``cycles`` ciclos (0 = infinito) com ``interval`` segundos entre eles.

    Retorna ``{"succeeded": n, "failed": m}``. Qualquer exceção de um ciclo
    conta como falha e o loop segue; ``InvalidSuffix`` é verificado antes do
    primeiro ciclo, pois falharia em todos.
    """
    exporter.compose_url(suffix)
    stats = {"succeeded": 0, "failed": 0}
    executed = 0
    while True:
        try:
            await exporter.export_metrics(suffix)
            stats["succeeded"] += 1
        except Exception as exc:
            # já registrado com traceback pelo exporter
            stats["failed"] += 1
            logger.debug("Ciclo %d falhou: %s", executed + 1, exc)
        emit_snapshot(exporter.collectors, verbose_level)
        executed += 1
        if cycles != 0 and executed >= cycles:
            break
        if interval > 0.0:
            await asyncio.sleep(interval)
    return stats
