"""Configurações do exporter.

Carrega valores a partir de ``DEFAULT_SETTINGS`` e permite overrides via
arquivo ``.env`` ou variáveis de ambiente (prefixo ``EXPORTER_``). As funções
públicas principais são:

- ``load_settings()`` -> dicionário com as configurações efetivas.
- ``validate_settings()`` -> normaliza tipos e valida limites.
"""

import logging
import os
from pathlib import Path
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

# ========================
# Constantes e padrões globais
# ========================

DEFAULT_SETTINGS = {
    "endpoint_url": "http://127.0.0.1:8080",
    "request_timeout": 10.0,
    "metric_prefix": "",
    "log_level": "INFO",
    "log_content_max_chars": 2048,
    "http_addr": "127.0.0.1",
    "http_port": 8000,
}

# chave de ambiente -> (chave de configuração, conversor)
ENV_KEYS = {
    "EXPORTER_ENDPOINT_URL": ("endpoint_url", str),
    "EXPORTER_REQUEST_TIMEOUT": ("request_timeout", float),
    "EXPORTER_METRIC_PREFIX": ("metric_prefix", str),
    "EXPORTER_LOG_LEVEL": ("log_level", str),
    "EXPORTER_LOG_CONTENT_MAX_CHARS": ("log_content_max_chars", int),
    "EXPORTER_HTTP_ADDR": ("http_addr", str),
    "EXPORTER_HTTP_PORT": ("http_port", int),
}


# ========================
# 1. Carregamento das configurações
# ========================


def load_settings() -> dict:
    """Carrega configurações combinando DEFAULTS + .env + ambiente.

    As variáveis em ambiente sobrescrevem valores do arquivo `.env`. Valores
    inválidos são registrados como warning e o padrão é mantido.
    """
    settings = DEFAULT_SETTINGS.copy()

    project_root = Path(__file__).resolve().parents[3]
    env_path = Path(os.getenv("EXPORTER_ENV_FILE", project_root / ".env"))

    env_items = _merge_env_items(env_path)
    _apply_overrides(env_items, settings)
    return settings


# Auxilia load_settings; criado para centralizar leitura do .env
def _read_env_file(path: Path | str) -> dict:
    """Lê um arquivo `.env` e devolve um dicionário chave->valor.

    Linhas vazias e comentários (começando com '#') são ignorados.
    """
    result: dict[str, str] = {}
    p = Path(path)
    if not p.exists():
        return result
    try:
        with p.open("r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    continue
                key, val = line.split("=", 1)
                result[key.strip()] = val.strip().strip('"').strip("'")
    except OSError as exc:
        logger.debug("Falha ao ler .env em %s: %s", p, exc)
        return {}
    return result


def _merge_env_items(env_path: Path) -> dict:
    """Retorna um mapeamento combinado de `.env` e env vars do processo."""
    env_items = _read_env_file(env_path)
    if env_items == {} and env_path.exists():
        logger.warning("Erro ou ficheiro .env vazio em %s", env_path)
    env_items.update(os.environ)
    return env_items


def _apply_overrides(env_items: dict, settings: dict) -> None:
    for env_key, (key, convert) in ENV_KEYS.items():
        if env_key not in env_items:
            continue
        raw = env_items[env_key]
        try:
            settings[key] = convert(raw)
        except (TypeError, ValueError):
            logger.warning("Valor inválido para %s: %s", env_key, raw)


# ========================
# 2. Validação
# ========================


def validate_settings(settings: dict) -> dict:
    """Normaliza e valida o dicionário de configurações.

    Chaves ausentes recebem o padrão; levanta ``ValueError`` para URL que não
    seja http(s), timeout não positivo ou porta fora de 1..65535.
    """
    if not isinstance(settings, dict):
        raise TypeError("settings deve ser um dict")
    for key, default in DEFAULT_SETTINGS.items():
        settings.setdefault(key, default)

    url = str(settings["endpoint_url"]).rstrip("/")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"endpoint_url deve ser uma URL http(s): {settings['endpoint_url']!r}")
    settings["endpoint_url"] = url

    try:
        settings["request_timeout"] = float(settings["request_timeout"])
        settings["http_port"] = int(settings["http_port"])
        settings["log_content_max_chars"] = int(settings["log_content_max_chars"])
    except (TypeError, ValueError) as exc:
        raise ValueError(f"configuração numérica inválida: {exc}") from exc
    if settings["request_timeout"] <= 0.0:
        raise ValueError("request_timeout deve ser > 0")
    if not 1 <= settings["http_port"] <= 65535:
        raise ValueError("http_port deve ficar entre 1 e 65535")

    settings["log_level"] = str(settings["log_level"]).upper()
    logger.debug("Configurações validadas e normalizadas")
    return settings
