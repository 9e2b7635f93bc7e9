"""
Configuração do Django App para Chamados.

Models deste app vivem no banco 'default' (ver DomainDatabaseRouter).
"""

from django.apps import AppConfig


class ChamadosConfig(AppConfig):
    """Configuração do app Chamados."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.chamados'
    label = 'chamados'
    verbose_name = 'Gestão de Chamados'
