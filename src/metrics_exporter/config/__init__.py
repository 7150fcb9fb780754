"""Pacote config: carregamento e validação das configurações."""

from .settings import load_settings, validate_settings

__all__ = ["load_settings", "validate_settings"]
