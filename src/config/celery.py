"""
Aplicação Celery do Help Me Chamados.

Tarefas:
- dispatch_domain_event: roteia o envelope do evento para o handler
- handle_chamado_*: reações a cada evento (fila 'events')
- enviar_email: notificações ao criador (fila 'notifications')

Broker, backend e modo eager vêm das settings (CELERY_*). Com
EVENT_PUBLISHER_MODE='sync' tudo roda eager no próprio processo.

Worker:
    celery -A src.config.celery worker -l INFO -Q events,notifications
"""

import os

from celery import Celery
from kombu import Exchange, Queue

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

HANDLERS_MODULE = 'src.adapters.django_app.events.handlers'

FILAS = (
    Queue('default', Exchange('default'), routing_key='default'),
    Queue('events', Exchange('events'), routing_key='events.#'),
    Queue('notifications', Exchange('notifications'), routing_key='notifications.#'),
)

ROTAS = {
    f'{HANDLERS_MODULE}.enviar_email': {'queue': 'notifications'},
    f'{HANDLERS_MODULE}.*': {'queue': 'events'},
}

app = Celery('helpme_chamados')
app.config_from_object('django.conf:settings', namespace='CELERY')

app.conf.update(
    task_serializer='json',
    result_serializer='json',
    accept_content=['json'],
    enable_utc=True,
    # emails só são reconhecidos depois de enviados
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    result_expires=3600,
    task_queues=FILAS,
    task_routes=ROTAS,
    task_default_queue='default',
)

app.autodiscover_tasks(['src.adapters.django_app.events'], related_name='handlers')
