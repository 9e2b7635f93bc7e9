"""
URL Configuration para Help Me Chamados.

Estrutura:
- /chamados/ - API de Chamados
- /health/ - Health check dos dois bancos
"""

from django.http import JsonResponse
from django.urls import path, include

from src.adapters.django_app.shared.database import check_database_connection


def health(request):
    bancos = [check_database_connection(alias) for alias in ('default', 'historico')]
    saudavel = all(b['healthy'] for b in bancos)
    return JsonResponse(
        {'status': 'ok' if saudavel else 'degraded', 'databases': bancos},
        status=200 if saudavel else 503,
    )


urlpatterns = [
    path('chamados/', include('src.adapters.django_app.chamados.urls')),
    path('health/', health, name='health'),
]
