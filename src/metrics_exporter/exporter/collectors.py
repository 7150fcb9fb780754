"""Mapa nome -> collector compartilhado entre ciclos de um exporter.

O mapa é o único recurso mutável compartilhado: ciclos concorrentes do mesmo
exporter criam collectors através de ``get_or_create``, que é atômico por
nome. Um nome registrado aponta sempre para a mesma instância.
"""

import threading
from typing import Any, Callable, Iterator, TypeVar

from prometheus_client import CollectorRegistry

C = TypeVar("C")


class CollectorMap:
    """Associação concorrente-segura de nome de métrica para collector."""

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry if registry is not None else CollectorRegistry()
        self._collectors: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get_or_create(self, name: str, factory: Callable[[], C]) -> C:
        """Retorna o collector de ``name``, criando-o com ``factory`` na primeira vez."""
        existing = self._collectors.get(name)
        if existing is not None:
            return existing
        with self._lock:
            # outro ciclo pode ter criado enquanto esperávamos o lock
            existing = self._collectors.get(name)
            if existing is None:
                existing = factory()
                self._collectors[name] = existing
            return existing

    def get(self, name: str, default: Any = None) -> Any:
        return self._collectors.get(name, default)

    def snapshot(self) -> dict[str, Any]:
        """Cópia somente-leitura do mapeamento atual para enumeração externa."""
        with self._lock:
            return dict(self._collectors)

    def items(self):
        return self.snapshot().items()

    def __contains__(self, name: object) -> bool:
        return name in self._collectors

    def __getitem__(self, name: str) -> Any:
        return self._collectors[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        return len(self._collectors)


def read_collector(collector: Any) -> dict[str, float]:
    """Lê os valores atuais de um collector via ``collect()``.

    Retorna ``{sample_name{labels}: value}``; para um Gauge sem labels o
    resultado tem uma única entrada com o nome da métrica.
    """
    readings: dict[str, float] = {}
    for family in collector.collect():
        for sample in family.samples:
            if sample.name.endswith("_created"):
                continue
            key = sample.name
            if sample.labels:
                labels = ",".join(f'{k}="{v}"' for k, v in sorted(sample.labels.items()))
                key = f"{key}{{{labels}}}"
            readings[key] = sample.value
    return readings
