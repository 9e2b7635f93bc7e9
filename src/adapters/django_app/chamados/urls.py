"""
URL patterns para o domínio de Chamados.

Endpoints API JSON:
- GET/POST   /chamados/api/
- GET/DELETE /chamados/api/<id>/
- PATCH      /chamados/api/<id>/status/
- PATCH      /chamados/api/<id>/reabrir/
- PATCH      /chamados/api/<id>/cancelar/
- PATCH      /chamados/api/<id>/atribuir/
- GET        /chamados/api/<id>/historico/
- POST       /chamados/api/<id>/comentarios/
"""

from django.urls import path
from . import api_views

app_name = 'chamados'

urlpatterns = [
    # Fila e abertura
    path('api/', api_views.ChamadoAPIListView.as_view(), name='api_list'),

    # Detalhe e exclusão
    path('api/<str:pk>/', api_views.ChamadoAPIDetailView.as_view(), name='api_detail'),

    # Ciclo de vida
    path('api/<str:pk>/status/', api_views.ChamadoAPIStatusView.as_view(), name='api_status'),
    path('api/<str:pk>/reabrir/', api_views.ChamadoAPIReabrirView.as_view(), name='api_reabrir'),
    path('api/<str:pk>/cancelar/', api_views.ChamadoAPICancelarView.as_view(), name='api_cancelar'),
    path('api/<str:pk>/atribuir/', api_views.ChamadoAPIAtribuirView.as_view(), name='api_atribuir'),

    # Histórico
    path('api/<str:pk>/historico/', api_views.ChamadoAPIHistoricoView.as_view(), name='api_historico'),
    path('api/<str:pk>/comentarios/', api_views.ChamadoAPIComentariosView.as_view(), name='api_comentarios'),
]
