"""Emissor de snapshots dos collectors.

Imprime as leituras atuais do mapa de collectors no stdout, em formato curto
(uma linha) ou longo (uma métrica por linha), conforme a verbosidade.
"""

from ..exporter.collectors import CollectorMap, read_collector

_NO_DATA_STR = "Sem dados"


def collect_readings(collectors: CollectorMap) -> dict[str, float]:
    """Achata as leituras de todos os collectors num único dict ordenado por nome."""
    readings: dict[str, float] = {}
    for _name, collector in sorted(collectors.items()):
        readings.update(read_collector(collector))
    return readings


def _format_value(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:.3f}"


def _print_snapshot_short(readings: dict[str, float]) -> None:
    if not readings:
        print(_NO_DATA_STR)
        return
    print(" ".join(f"{k}={_format_value(v)}" for k, v in readings.items()))


def _print_snapshot_long(readings: dict[str, float]) -> None:
    if not readings:
        print("SNAPSHOT: Sem dados")
        return
    for k, v in readings.items():
        print(f"{k} {_format_value(v)}")


def emit_snapshot(collectors: CollectorMap, verbose_level: int) -> None:
    """Imprima o snapshot dos collectors: nada (0), curto (1) ou longo (>=2)."""
    if not verbose_level:
        return
    readings = collect_readings(collectors)
    if verbose_level == 1:
        _print_snapshot_short(readings)
    else:
        _print_snapshot_long(readings)
