"""
Shared Domain Components.

Contém componentes compartilhados entre todos os domínios:
- Exceções de domínio
- Interfaces (Ports)
- Base classes para Domain Events
- Relógio injetável
"""

from .exceptions import (
    DomainException,
    ValidationError,
    EntityNotFoundError,
    ForbiddenError,
    ConflictError,
    BusinessRuleViolationError,
    InfrastructureError,
)
from .events import DomainEvent
from .interfaces import UnitOfWork, EventPublisher
from .clock import Clock, SystemClock, FixedClock

__all__ = [
    "DomainException",
    "ValidationError",
    "EntityNotFoundError",
    "ForbiddenError",
    "ConflictError",
    "BusinessRuleViolationError",
    "InfrastructureError",
    "DomainEvent",
    "UnitOfWork",
    "EventPublisher",
    "Clock",
    "SystemClock",
    "FixedClock",
]
