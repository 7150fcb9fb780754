"""Pacote core: orquestração da linha de comando.

Contém o loop de ciclos, parsing de argumentos e o emissor de snapshots.
"""

from .emitter import emit_snapshot
from .core import run_loop

__all__ = ["emit_snapshot", "run_loop"]
