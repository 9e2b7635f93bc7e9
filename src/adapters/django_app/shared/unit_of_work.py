"""
Unit of Work - Implementação Django.

Delimita a transação de escrita do chamado no banco 'default'.
O ledger de histórico fica fora dela: o DomainDatabaseRouter envia
HistoricoChamadoModel para o alias 'historico', que tem conexão e
transação próprias.
"""

from typing import List, Optional
import logging

from django.db import transaction

from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventPublisher, UnitOfWork

logger = logging.getLogger(__name__)


class DjangoUnitOfWork(UnitOfWork):
    """
    Unit of Work sobre transaction.atomic(using=...).

    O bloco atomic é aberto e fechado manualmente; dentro de outra
    transação ele vira savepoint.

    Example:
        with DjangoUnitOfWork(event_publisher=publisher) as uow:
            repo.atualizar_condicional(chamado, versao)
            uow.publish_event(evento)
        # commit e depois publicação
    """

    def __init__(self, event_publisher: Optional[EventPublisher] = None, using: str = 'default'):
        super().__init__(event_publisher)
        self.using = using
        self._atomic = None

    def _iniciar(self) -> None:
        self._atomic = transaction.atomic(using=self.using)
        self._atomic.__enter__()
        logger.debug(f"Transaction started ({self.using})")

    def _confirmar(self) -> None:
        atomic, self._atomic = self._atomic, None
        if atomic is None:
            return
        try:
            atomic.__exit__(None, None, None)
        except Exception as e:
            logger.error(f"Commit failed ({self.using}): {e}")
            raise
        logger.debug("Transaction committed")

    def _desfazer(self) -> None:
        atomic, self._atomic = self._atomic, None
        if atomic is not None:
            atomic.__exit__(Exception, Exception("rollback"), None)
            logger.debug("Transaction rolled back")


class InMemoryUnitOfWork(UnitOfWork):
    """
    Unit of Work sem banco, para testes e para o TestingContainer.

    Guarda os eventos entregues em `published_events`.
    """

    def __init__(self, event_publisher: Optional[EventPublisher] = None):
        super().__init__(event_publisher)
        self.published_events: List[DomainEvent] = []

    def _iniciar(self) -> None:
        pass

    def _confirmar(self) -> None:
        pass

    def _desfazer(self) -> None:
        pass

    def _entregar(self, eventos: List[DomainEvent]) -> None:
        self.published_events.extend(eventos)
        super()._entregar(eventos)
