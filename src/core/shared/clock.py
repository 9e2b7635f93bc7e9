"""
Relógio injetável.

Regras temporais (expediente, janela de reabertura) dependem do
instante atual. Os use cases recebem um Clock para que o tempo
possa ser fixado em testes.
"""

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    """Fonte do instante atual (sempre timezone-aware)."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Relógio do sistema em UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Relógio parado em um instante, avançável manualmente.

    Example:
        clock = FixedClock(datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc))
        clock.avancar(hours=48)
    """

    def __init__(self, instante: datetime):
        self._instante = instante

    def now(self) -> datetime:
        return self._instante

    def avancar(self, **kwargs) -> datetime:
        self._instante = self._instante + timedelta(**kwargs)
        return self._instante
