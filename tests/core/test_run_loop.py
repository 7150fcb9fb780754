import asyncio

import pytest

from metrics_exporter.errors import InvalidSuffix, TransportError
from metrics_exporter.exporter.base import Exporter
from metrics_exporter.exporter.reporters import NumericFieldReporter
from metrics_exporter.core import core as core_mod


class ScriptedProvider:
    """Retorna (ou levanta) os itens de ``script`` em ordem."""

    def __init__(self, script):
        self.script = list(script)
        self.calls = []

    async def get_response_content(self, url):
        self.calls.append(url)
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def _exporter(provider):
    return Exporter(provider, NumericFieldReporter(), "http://host/api", dict)


def test_run_loop_counts_success_and_failure(monkeypatch):
    """Falhas de ciclo são contabilizadas e o loop continua."""
    sleeps = []

    async def fake_sleep(delay):
        sleeps.append(delay)

    monkeypatch.setattr(core_mod.asyncio, "sleep", fake_sleep)
    provider = ScriptedProvider(['{"a": 1}', TransportError("down"), '{"a": 3}'])
    exporter = _exporter(provider)

    stats = asyncio.run(core_mod.run_loop(exporter, interval=0.5, cycles=3, suffix="/s"))

    assert stats == {"succeeded": 2, "failed": 1}
    assert provider.calls == ["http://host/api/s"] * 3
    assert sleeps == [0.5, 0.5]
    assert exporter.registry.get_sample_value("a") == 3.0


def test_run_loop_rejects_invalid_suffix_upfront():
    provider = ScriptedProvider([])
    with pytest.raises(InvalidSuffix):
        asyncio.run(core_mod.run_loop(_exporter(provider), interval=0.0, cycles=1, suffix="bad"))
    assert provider.calls == []


def test_run_loop_prints_snapshot_when_verbose(capsys):
    exporter = _exporter(ScriptedProvider(['{"a": 1, "b": 2.5}']))
    asyncio.run(core_mod.run_loop(exporter, interval=0.0, cycles=1, verbose_level=1))
    assert "a=1 b=2.500" in capsys.readouterr().out


def test_run_loop_continues_after_non_exporter_error():
    """Exceções fora da hierarquia do exporter também contam como falha."""
    provider = ScriptedProvider([OSError("reset"), asyncio.TimeoutError(), '{"a": 2}'])
    exporter = _exporter(provider)

    stats = asyncio.run(core_mod.run_loop(exporter, interval=0.0, cycles=3))

    assert stats == {"succeeded": 1, "failed": 2}
    assert exporter.registry.get_sample_value("a") == 2.0
