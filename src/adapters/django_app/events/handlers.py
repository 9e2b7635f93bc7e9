"""
Event Handlers - Processadores de Eventos de Chamados.

Handlers são executados via Celery (modo 'celery') ou na própria
thread pelo LoggingEventPublisher (modo 'sync'). Notificações:

- ChamadoAbertoEvent: email de confirmação ao criador
- ChamadoStatusAlteradoEvent (ENCERRADO): email de encerramento ao criador
- ChamadoAtribuidoEvent / ChamadoComentadoEvent: apenas log

O email do criador do chamado encerrado vem do registro ABERTURA
do ledger de histórico.

Padrão:
    @shared_task(bind=True, ...)
    def handle_<evento>(self, event_data: dict) -> None:
        ...
"""

import logging
from typing import Any, Dict, Optional

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def _dados(event_data: Dict[str, Any]) -> Dict[str, Any]:
    """Campos específicos do evento (envelope de DomainEvent.to_dict)."""
    return event_data.get('data', {})


def _email_do_criador(chamado_id: str) -> Optional[str]:
    from src.adapters.django_app.historico.repositories import DjangoHistoricoLedger
    from src.core.chamados.entities import HistoricoTipo
    from src.core.chamados.ports import FiltroHistorico

    registro = DjangoHistoricoLedger().query_latest(
        chamado_id,
        FiltroHistorico(tipo=HistoricoTipo.ABERTURA),
    )
    return registro.autor_email if registro and registro.autor_email else None


# =============================================================================
# Event Handlers - Chamados
# =============================================================================

@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_chamado_aberto(self, event_data: Dict[str, Any]) -> None:
    """
    Handler para ChamadoAbertoEvent.

    Envia email de confirmação ao criador.
    """
    dados = _dados(event_data)
    codigo = dados.get('codigo')

    logger.info(
        f"[HANDLER] ChamadoAberto: {codigo} | Criador: {dados.get('criador_id')}"
    )

    enviar_email.delay(
        destinatario=dados.get('criador_email', ''),
        assunto=f"Chamado {codigo} aberto",
        mensagem=(
            f"Seu chamado {codigo} foi aberto e está aguardando atendimento.\n\n"
            f"Descrição: {dados.get('descricao', '')}"
        ),
    )


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_chamado_status_alterado(self, event_data: Dict[str, Any]) -> None:
    """
    Handler para ChamadoStatusAlteradoEvent.

    Notifica o criador quando o chamado é encerrado.
    """
    dados = _dados(event_data)
    chamado_id = event_data.get('aggregate_id')
    codigo = dados.get('codigo')
    status_novo = dados.get('status_novo')

    logger.info(
        f"[HANDLER] ChamadoStatusAlterado: {codigo} | "
        f"{dados.get('status_anterior')} -> {status_novo}"
    )

    if status_novo != 'ENCERRADO':
        return

    destinatario = _email_do_criador(chamado_id)
    if not destinatario:
        logger.warning(f"[HANDLER] Email do criador de {codigo} não localizado")
        return

    enviar_email.delay(
        destinatario=destinatario,
        assunto=f"Chamado {codigo} encerrado",
        mensagem=(
            f"Seu chamado {codigo} foi encerrado.\n\n"
            f"Solução: {dados.get('descricao_encerramento') or '-'}\n\n"
            f"Se o problema persistir, você pode reabri-lo em até 48 horas."
        ),
    )


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def handle_chamado_atribuido(self, event_data: Dict[str, Any]) -> None:
    dados = _dados(event_data)
    logger.info(
        f"[HANDLER] ChamadoAtribuido: {event_data.get('aggregate_id')} | "
        f"Técnico: {dados.get('tecnico_id')}"
    )


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def handle_chamado_comentado(self, event_data: Dict[str, Any]) -> None:
    dados = _dados(event_data)
    logger.info(
        f"[HANDLER] ChamadoComentado: {event_data.get('aggregate_id')} | "
        f"Autor: {dados.get('autor_id')}"
    )


HANDLERS = {
    'ChamadoAbertoEvent': handle_chamado_aberto,
    'ChamadoStatusAlteradoEvent': handle_chamado_status_alterado,
    'ChamadoAtribuidoEvent': handle_chamado_atribuido,
    'ChamadoComentadoEvent': handle_chamado_comentado,
}


def processar_evento(event_type: str, event_data: Dict[str, Any]) -> bool:
    """
    Executa o handler do evento na thread atual (modo 'sync').

    Returns:
        False se não há handler para o tipo
    """
    handler = HANDLERS.get(event_type)
    if handler is None:
        logger.warning(f"[DISPATCHER] Handler não encontrado para {event_type}")
        return False

    handler(event_data)
    return True


# =============================================================================
# Event Dispatcher (Router)
# =============================================================================

@shared_task(bind=True, max_retries=5, default_retry_delay=30)
def dispatch_domain_event(self, event_type: str, event_data: Dict[str, Any]) -> None:
    """
    Dispatcher central para Domain Events (modo 'celery').

    Args:
        event_type: Tipo do evento (ex: 'ChamadoAbertoEvent')
        event_data: Evento serializado (DomainEvent.to_dict)
    """
    handler = HANDLERS.get(event_type)

    if handler:
        logger.info(f"[DISPATCHER] Roteando {event_type} para handler")
        handler.delay(event_data)
    else:
        logger.warning(f"[DISPATCHER] Handler não encontrado para {event_type}")


# =============================================================================
# Notification Tasks
# =============================================================================

@shared_task(bind=True, max_retries=3, default_retry_delay=120)
def enviar_email(self, destinatario: str, assunto: str, mensagem: str) -> bool:
    """
    Envia email via django.core.mail.

    Returns:
        True se enviado; False se não havia destinatário
    """
    if not destinatario:
        logger.info(f"[EMAIL] Sem destinatário para '{assunto}'")
        return False

    try:
        send_mail(
            subject=assunto,
            message=mensagem,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[destinatario],
        )
    except Exception as e:
        logger.error(f"[EMAIL] Falha ao enviar para {destinatario}: {e}", exc_info=True)
        raise self.retry(exc=e)

    logger.info(f"[EMAIL] '{assunto}' enviado para {destinatario}")
    return True
