"""
Configuração do projeto Help Me Chamados.

Módulos:
- settings: Configurações Django (dois bancos, router, engine)
- urls: Rotas principais
- celery: Aplicação Celery para eventos e notificações
- container: Dependency Injection Container
"""

from .celery import app as celery_app

__all__ = ('celery_app',)
