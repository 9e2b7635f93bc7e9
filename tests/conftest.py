"""
Configurações globais do Pytest para o HelpMe Chamados.

Este arquivo é carregado automaticamente pelo pytest e configura
o Django (dois bancos em memória, e-mail locmem, Celery eager)
antes de qualquer teste.
"""

import pytest
from pathlib import Path


def pytest_configure(config):
    """Configura Django antes dos testes."""
    from django.conf import settings

    if not settings.configured:
        settings.configure(
            DEBUG=True,
            SECRET_KEY='test-secret-key',
            ALLOWED_HOSTS=['testserver', 'localhost'],
            DATABASES={
                'default': {
                    'ENGINE': 'django.db.backends.sqlite3',
                    'NAME': ':memory:',
                },
                'historico': {
                    'ENGINE': 'django.db.backends.sqlite3',
                    'NAME': ':memory:',
                },
            },
            DATABASE_ROUTERS=['src.adapters.django_app.shared.database.DomainDatabaseRouter'],
            INSTALLED_APPS=[
                'django.contrib.contenttypes',
                'django.contrib.auth',
                'src.adapters.django_app.chamados.apps.ChamadosConfig',
                'src.adapters.django_app.historico.apps.HistoricoConfig',
            ],
            MIDDLEWARE=[
                'django.middleware.common.CommonMiddleware',
                'src.adapters.django_app.chamados.middleware.AtorMiddleware',
            ],
            ROOT_URLCONF='src.config.urls',
            DEFAULT_AUTO_FIELD='django.db.models.BigAutoField',
            USE_TZ=True,
            TIME_ZONE='America/Sao_Paulo',
            EMAIL_BACKEND='django.core.mail.backends.locmem.EmailBackend',
            DEFAULT_FROM_EMAIL='helpme@teste.local',
            EVENT_PUBLISHER_MODE='sync',
            REABERTURA_JANELA_HORAS=48,
            EXPEDIENTE_FUSO_HORARIO='America/Sao_Paulo',
            CODIGO_MAX_TENTATIVAS=10,
            HISTORICO_MAX_TENTATIVAS=2,
            CELERY_BROKER_URL='memory://',
            CELERY_RESULT_BACKEND='cache+memory://',
            CELERY_TASK_ALWAYS_EAGER=True,
            CELERY_TASK_EAGER_PROPAGATES=False,
        )

    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture(scope="session")
def project_root():
    """Retorna o caminho raiz do projeto."""
    return Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def reset_singletons():
    """
    Reset do container DI entre testes.

    Garante que cada teste inicia com estado limpo.
    """
    from src.config.container import reset_container

    reset_container()
    yield
    reset_container()
