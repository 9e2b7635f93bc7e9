"""
Configuração do Django App para o Histórico de Chamados.

Models deste app vivem no banco 'historico' (ver DomainDatabaseRouter).
"""

from django.apps import AppConfig


class HistoricoConfig(AppConfig):
    """Configuração do app Histórico."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.historico'
    label = 'historico'
    verbose_name = 'Histórico de Chamados'
