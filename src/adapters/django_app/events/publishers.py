"""
Event Publishers dos eventos de chamados.

EVENT_PUBLISHER_MODE escolhe a implementação (get_event_publisher):
- 'sync': LoggingEventPublisher, handlers na própria thread
- 'celery': CeleryEventPublisher, handlers nos workers

InMemoryEventPublisher e CompositeEventPublisher ficam para testes
e para montar vários destinos. Nenhuma falha de entrega sobe para
quem publicou.
"""

from collections import defaultdict
from typing import Callable, DefaultDict, Iterable, List
import json
import logging

from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventPublisher

logger = logging.getLogger(__name__)

Handler = Callable[[DomainEvent], None]


class LoggingEventPublisher(EventPublisher):
    """Loga o envelope e, se `run_handlers`, roda o handler localmente."""

    def __init__(self, log_level: int = logging.INFO, run_handlers: bool = True):
        self.log_level = log_level
        self.run_handlers = run_handlers

    def publish(self, event: DomainEvent) -> None:
        envelope = event.to_dict()
        logger.log(
            self.log_level,
            f"[EVENT] {event.event_type} | aggregate={event.aggregate_id} | "
            f"data={json.dumps(envelope['data'], default=str)}",
        )

        if not self.run_handlers:
            return

        from src.adapters.django_app.events.handlers import processar_evento

        try:
            processar_evento(event.event_type, envelope)
        except Exception as e:
            logger.error(f"[EVENT] Handler de {event.event_type} falhou: {e}", exc_info=True)


class CeleryEventPublisher(EventPublisher):
    """Enfileira o envelope no dispatcher Celery."""

    def publish(self, event: DomainEvent) -> None:
        from src.adapters.django_app.events.handlers import dispatch_domain_event

        logger.info(f"[EVENT->CELERY] {event.event_type} | aggregate={event.aggregate_id}")
        try:
            dispatch_domain_event.delay(event.event_type, event.to_dict())
        except Exception as e:
            logger.error(f"[EVENT->CELERY] Broker indisponível para {event.event_type}: {e}", exc_info=True)


class InMemoryEventPublisher(EventPublisher):
    """
    Guarda os eventos publicados e chama handlers registrados.

    Example:
        publisher = InMemoryEventPublisher()
        publisher.register_handler("ChamadoAbertoEvent", recebidos.append)
    """

    def __init__(self):
        self.published_events: List[DomainEvent] = []
        self._handlers: DefaultDict[str, List[Handler]] = defaultdict(list)

    def register_handler(self, event_type: str, handler: Handler) -> None:
        self._handlers[event_type].append(handler)

    def get_events_by_type(self, event_type: str) -> List[DomainEvent]:
        return [e for e in self.published_events if e.event_type == event_type]

    def publish(self, event: DomainEvent) -> None:
        self.published_events.append(event)
        for handler in self._handlers[event.event_type]:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Handler {handler!r} falhou para {event.event_type}: {e}")


class CompositeEventPublisher(EventPublisher):
    """Entrega para cada publisher; um destino com falha não bloqueia os outros."""

    def __init__(self, publishers: Iterable[EventPublisher] = ()):
        self.publishers = list(publishers)

    def publish(self, event: DomainEvent) -> None:
        for publisher in self.publishers:
            try:
                publisher.publish(event)
            except Exception as e:
                logger.error(f"{type(publisher).__name__} falhou para {event.event_type}: {e}")


PUBLISHERS = {
    'sync': LoggingEventPublisher,
    'celery': CeleryEventPublisher,
}


def get_event_publisher(mode: str = 'sync') -> EventPublisher:
    """
    Publisher para o EVENT_PUBLISHER_MODE informado.

    Raises:
        ValueError: Modo desconhecido
    """
    try:
        return PUBLISHERS[mode]()
    except KeyError:
        raise ValueError(f"EVENT_PUBLISHER_MODE inválido: {mode!r} (use 'sync' ou 'celery')") from None
