"""Parser de argumentos da linha de comando.

Este módulo fornece um parser simples que expõe:
- URL base do endpoint (-u / --url) e sufixo (-s / --suffix)
- intervalo entre ciclos (-i / --interval)
- número de ciclos (-c / --cycles), 0 = infinito
- prefixo das métricas (-p / --prefix)
- verbosidade (-v) e opções de logging
- endereço/porta do endpoint de scraping

Prioridade: CLI > variáveis de ambiente / .env > default.
"""

import argparse
import logging
import os
from typing import Sequence

from ..config.settings import load_settings, validate_settings

logger = logging.getLogger(__name__)

# ========================
# 0. Configuração do parser e argumentos padrão
# ========================


def configure_argparser() -> argparse.ArgumentParser:
    """Cria e retorna ArgumentParser configurado para o exporter."""
    parser = argparse.ArgumentParser(
        prog="metrics-exporter",
        description="Exporter de métricas: busca JSON de um endpoint HTTP e expõe como métricas Prometheus",
    )
    parser.add_argument("-u", "--url", dest="url", type=str, default=None, help="URL base do endpoint")
    parser.add_argument(
        "-s", "--suffix", dest="suffix", type=str, default=None, help="Sufixo anexado à URL base (deve começar com '/')"
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=float,
        default=15.0,
        help="Intervalo em segundos entre ciclos (float).",
    )
    parser.add_argument(
        "-c",
        "--cycles",
        type=int,
        default=1,
        help="Número de ciclos a executar (0 = infinito).",
    )
    parser.add_argument("-p", "--prefix", dest="prefix", type=str, default=None, help="Prefixo dos nomes de métricas")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Aumenta a verbosidade (-v, -vv)")
    parser.add_argument(
        "--log-level",
        dest="log_level",
        type=str,
        default=None,
        help="Nível de logging (DEBUG/INFO/WARNING/ERROR).",
    )
    parser.add_argument("--log-json", dest="log_json", type=str, default=None, help="Arquivo JSONL para os logs")
    parser.add_argument("--addr", dest="addr", type=str, default=None, help="Endereço do endpoint /metrics")
    parser.add_argument("--port", dest="port", type=int, default=None, help="Porta do endpoint /metrics")
    parser.add_argument(
        "--no-http", dest="no_http", action="store_true", help="Não inicia o servidor HTTP de scraping"
    )
    return parser


# ========================
# 1. Análise e validação de argumentos
# ========================


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Analisa argv, completa com as configurações e retorna Namespace validado."""
    parser = configure_argparser()
    ns = parser.parse_args(argv)

    env_map = {"interval": "EXPORTER_INTERVAL_SEC", "cycles": "EXPORTER_CYCLES"}
    for arg, env_var in env_map.items():
        env_val = os.getenv(env_var)
        if env_val is None or getattr(ns, arg) != parser.get_default(arg):
            # valor vindo da CLI tem prioridade
            continue
        try:
            setattr(ns, arg, float(env_val) if arg == "interval" else int(env_val))
        except ValueError:
            logger.warning("%s inválido ('%s'). Usando valor do argumento.", env_var, env_val)

    settings = load_settings()
    fallbacks = {
        "url": "endpoint_url",
        "prefix": "metric_prefix",
        "log_level": "log_level",
        "addr": "http_addr",
        "port": "http_port",
    }
    for arg, key in fallbacks.items():
        value = getattr(ns, arg)
        if value is not None:
            settings[key] = value
    ns.settings = validate_settings(settings)
    ns.url = settings["endpoint_url"]
    ns.prefix = settings["metric_prefix"]
    ns.log_level = settings["log_level"]
    ns.addr = settings["http_addr"]
    ns.port = settings["http_port"]

    validate_args(ns)
    return ns


def validate_args(args: argparse.Namespace) -> None:
    """Valida e normaliza intervalo e ciclos."""
    try:
        args.interval = float(args.interval)
    except (TypeError, ValueError) as exc:
        raise ValueError("intervalo deve ser um número") from exc
    if args.interval < 0.0:
        raise ValueError("intervalo deve ser >= 0.0")

    try:
        args.cycles = int(args.cycles)
    except (TypeError, ValueError) as exc:
        raise ValueError("cycles deve ser um inteiro >= 0") from exc
    if args.cycles < 0:
        raise ValueError("cycles deve ser >= 0")
