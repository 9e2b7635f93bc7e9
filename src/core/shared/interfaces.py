"""
Interfaces (Ports) compartilhadas entre Core e Adapters.

- EventPublisher: entrega de eventos (fire-and-forget)
- UnitOfWork: transação de escrita no banco de chamados

O ledger de histórico não participa do Unit of Work; ele vive em
outro banco e é gravado pelos use cases depois do commit.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from .events import DomainEvent

logger = logging.getLogger(__name__)


class EventPublisher(ABC):

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        raise NotImplementedError


class UnitOfWork(ABC):
    """
    Unit of Work com fila de eventos pós-commit.

        with uow:
            repo.atualizar_condicional(chamado, versao)
            uow.publish_event(evento)

    Saída sem exceção confirma a transação e só então entrega os
    eventos ao publisher; exceção desfaz tudo e descarta a fila.
    Falha do publisher é logada e não reverte nada.

    Subclasses implementam `_iniciar`, `_confirmar` e `_desfazer`.
    """

    def __init__(self, event_publisher: Optional[EventPublisher] = None):
        self.event_publisher = event_publisher
        self.committed = False
        self.rolled_back = False
        self._pendentes: List[DomainEvent] = []

    def __enter__(self) -> "UnitOfWork":
        self.committed = False
        self.rolled_back = False
        self._iniciar()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is None:
            self.commit()
        else:
            self.rollback()
        return False

    def publish_event(self, event: DomainEvent) -> None:
        """Enfileira evento para depois do commit."""
        self._pendentes.append(event)

    @property
    def pending_events(self) -> List[DomainEvent]:
        return list(self._pendentes)

    def commit(self) -> None:
        eventos, self._pendentes = self._pendentes, []
        try:
            self._confirmar()
        except Exception:
            self.rolled_back = True
            raise
        self.committed = True
        self._entregar(eventos)

    def rollback(self) -> None:
        self._pendentes = []
        try:
            self._desfazer()
        finally:
            self.rolled_back = True

    def _entregar(self, eventos: List[DomainEvent]) -> None:
        for evento in eventos:
            logger.info(f"Publishing event: {evento.event_type} for aggregate {evento.aggregate_id}")
            if self.event_publisher is None:
                continue
            try:
                self.event_publisher.publish(evento)
            except Exception as e:
                logger.error(f"Failed to publish event {evento.event_type}: {e}", exc_info=True)

    @abstractmethod
    def _iniciar(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def _confirmar(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def _desfazer(self) -> None:
        raise NotImplementedError
