"""
Domain Events.

Um evento descreve um fato já consumado (chamado aberto, status
alterado). O Unit of Work acumula os eventos da operação e só os
entrega aos publishers depois do commit; quem consome recebe o
envelope serializado por `to_dict()`:

    {
        "event_id": "...",
        "event_type": "ChamadoAbertoEvent",
        "aggregate_id": "...",
        "aggregate_type": "Chamado",
        "occurred_at": "2025-01-06T12:00:00+00:00",
        "version": 1,
        "data": {...campos da subclasse...},
    }
"""

import uuid
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict

ENVELOPE = ("event_id", "aggregate_id", "occurred_at", "version")


@dataclass
class DomainEvent:
    """
    Base dos eventos de domínio.

    Subclasses declaram seus campos como dataclass e definem
    `aggregate_type`; o nome da classe vira o `event_type`.

    Example:
        @dataclass
        class ChamadoAbertoEvent(DomainEvent):
            aggregate_type: ClassVar[str] = "Chamado"
            codigo: str = ""
    """

    aggregate_type: ClassVar[str] = ""

    aggregate_id: str = ""
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    version: int = 1

    @property
    def event_type(self) -> str:
        return type(self).__name__

    def dados(self) -> Dict[str, Any]:
        """Campos próprios da subclasse, fora do envelope."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name not in ENVELOPE
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "aggregate_id": self.aggregate_id,
            "aggregate_type": self.aggregate_type,
            "occurred_at": self.occurred_at.isoformat(),
            "version": self.version,
            "data": self.dados(),
        }

    def __repr__(self) -> str:
        return f"{self.event_type}(aggregate_id={self.aggregate_id}, event_id={self.event_id[:8]})"
