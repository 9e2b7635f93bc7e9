"""
API Views JSON para o domínio de Chamados.

Endpoints:
- GET    /chamados/api/                    - Fila de chamados
- POST   /chamados/api/                    - Abrir chamado (USUARIO)
- GET    /chamados/api/<id>/               - Detalhe
- DELETE /chamados/api/<id>/               - Excluir (ADMIN)
- PATCH  /chamados/api/<id>/status/        - Alterar status (ADMIN/TECNICO)
- PATCH  /chamados/api/<id>/reabrir/       - Reabrir (criador, até 48h)
- PATCH  /chamados/api/<id>/cancelar/      - Cancelar (ADMIN/criador)
- PATCH  /chamados/api/<id>/atribuir/      - Atribuir técnico (ADMIN)
- GET    /chamados/api/<id>/historico/     - Histórico
- POST   /chamados/api/<id>/comentarios/   - Comentar

Formato:
- Entrada: JSON
- Saída: JSON com estrutura {success, data/error, meta}

Autenticação:
- request.ator preenchido pelo AtorMiddleware (headers do gateway)
"""

import json
import logging
from typing import Any, Dict, List

from django.views import View
from django.http import JsonResponse, HttpRequest
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt

from src.core.chamados.dtos import (
    AbrirChamadoInputDTO,
    AlterarStatusInputDTO,
    AtribuirChamadoInputDTO,
    CancelarChamadoInputDTO,
    ComentarChamadoInputDTO,
    ListarChamadosQueryDTO,
    ReabrirChamadoInputDTO,
)
from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    ConflictError,
    DomainException,
    EntityNotFoundError,
    ForbiddenError,
    InfrastructureError,
    ValidationError,
)
from src.config.container import get_container

logger = logging.getLogger(__name__)


# =============================================================================
# Helpers
# =============================================================================

def json_response(success: bool, data: Any = None, error: str = None,
                  status: int = 200, meta: Dict = None) -> JsonResponse:
    """
    Cria resposta JSON padronizada.

    Args:
        success: Se operação foi bem sucedida
        data: Dados da resposta
        error: Mensagem de erro (se aplicável)
        status: HTTP status code
        meta: Metadados adicionais
    """
    response = {'success': success}

    if data is not None:
        response['data'] = data

    if error is not None:
        response['error'] = error

    if meta is not None:
        response['meta'] = meta

    return JsonResponse(response, status=status)


def parse_json_body(request: HttpRequest) -> Dict:
    """
    Raises:
        ValueError: Se JSON inválido ou não for um objeto
    """
    if not request.body:
        return {}

    try:
        data = json.loads(request.body)
    except json.JSONDecodeError as e:
        raise ValueError(f"JSON inválido: {e}")

    if not isinstance(data, dict):
        raise ValueError("Corpo da requisição deve ser um objeto JSON")
    return data


def parse_status_filter(request: HttpRequest) -> List[str]:
    """?status=ABERTO&status=REABERTO ou ?status=ABERTO,REABERTO"""
    valores = []
    for item in request.GET.getlist('status'):
        valores.extend(v.strip() for v in item.split(',') if v.strip())
    return valores


# Exceção de domínio -> HTTP status
ERROR_STATUS = (
    (ValidationError, 400),
    (EntityNotFoundError, 404),
    (ForbiddenError, 403),
    (ConflictError, 409),
    (BusinessRuleViolationError, 400),
    (InfrastructureError, 503),
)


# =============================================================================
# Base API View
# =============================================================================

@method_decorator(csrf_exempt, name='dispatch')
class BaseAPIView(View):
    """
    View base para APIs JSON.

    Fornece:
    - Exigência de ator identificado (401 sem ator)
    - Parsing de JSON
    - Acesso ao container DI
    - Tratamento de erros padronizado
    """

    def dispatch(self, request, *args, **kwargs):
        if getattr(request, 'ator', None) is None:
            return json_response(
                success=False,
                error="Ator não identificado",
                status=401,
            )
        return super().dispatch(request, *args, **kwargs)

    def get_container(self):
        return get_container()

    def get_service(self, service_name: str):
        """Obtém service do container."""
        return getattr(self.get_container(), service_name)()

    def parse_body(self, request: HttpRequest) -> Dict:
        return parse_json_body(request)

    def chamado_response(self, output, status: int = 200) -> JsonResponse:
        """Resposta de operação de escrita (sinaliza histórico pendente)."""
        meta = {'historico_pendente': True} if output.historico_pendente else None
        return json_response(success=True, data=output.to_dict(), status=status, meta=meta)

    def handle_exception(self, e: Exception) -> JsonResponse:
        """
        Converte exceções em respostas JSON.

        Rejeições de regra de negócio são logadas em WARNING;
        erros inesperados em ERROR com traceback.
        """
        for exc_type, status in ERROR_STATUS:
            if isinstance(e, exc_type):
                logger.warning(f"API: {e}")
                detalhes = e.to_dict()
                detalhes.pop('message')
                return json_response(
                    success=False,
                    error=e.message,
                    status=status,
                    meta={'code': detalhes.pop('error'), **detalhes},
                )

        if isinstance(e, (DomainException, ValueError)):
            return json_response(
                success=False,
                error=str(e),
                status=400
            )

        logger.exception(f"Erro inesperado na API: {e}")
        return json_response(
            success=False,
            error="Erro interno do servidor",
            status=500
        )


# =============================================================================
# Chamado API Views
# =============================================================================

class ChamadoAPIListView(BaseAPIView):
    """
    GET /chamados/api/ - Fila de chamados
    POST /chamados/api/ - Abrir chamado
    """

    def get(self, request: HttpRequest) -> JsonResponse:
        """
        Query params:
        - status: Um ou mais status
        - criador_id / tecnico_id: Filtros
        - page: Página (default: 1)
        - limit: Itens por página (default: 10, máx. 100)
        """
        try:
            query = ListarChamadosQueryDTO(
                status=tuple(parse_status_filter(request)),
                criador_id=request.GET.get('criador_id') or None,
                tecnico_id=request.GET.get('tecnico_id') or None,
                pagina=int(request.GET.get('page', 1)),
                por_pagina=int(request.GET.get('limit', 10)),
            )

            resultado = self.get_service('listar_chamados_service').execute(query, request.ator)
            dados = resultado.to_dict()

            return json_response(
                success=True,
                data=dados.pop('items'),
                meta=dados,
            )

        except Exception as e:
            return self.handle_exception(e)

    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Body JSON:
        {
            "descricao": "string (obrigatório)",
            "servicos": ["id ou nome", ...] (pelo menos um)
        }
        """
        try:
            data = self.parse_body(request)

            servicos = data.get('servicos', [])
            if isinstance(servicos, str):
                servicos = [servicos]

            input_dto = AbrirChamadoInputDTO(
                descricao=data.get('descricao', ''),
                servicos=tuple(servicos),
            )

            output = self.get_service('abrir_chamado_service').execute(input_dto, request.ator)

            logger.info(f"API: Chamado aberto: {output.codigo}")
            return self.chamado_response(output, status=201)

        except Exception as e:
            return self.handle_exception(e)


class ChamadoAPIDetailView(BaseAPIView):
    """
    GET /chamados/api/<id>/ - Detalhe
    DELETE /chamados/api/<id>/ - Excluir
    """

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            output = self.get_service('obter_chamado_service').execute(pk)
            return json_response(success=True, data=output.to_dict())

        except Exception as e:
            return self.handle_exception(e)

    def delete(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            output = self.get_service('excluir_chamado_service').execute(pk, request.ator)
            return json_response(
                success=True,
                data={'id': output.id, 'codigo': output.codigo},
                meta={'mensagem': f"Chamado {output.codigo} excluído"},
            )

        except Exception as e:
            return self.handle_exception(e)


class ChamadoAPIStatusView(BaseAPIView):
    """PATCH /chamados/api/<id>/status/"""

    def patch(self, request: HttpRequest, pk: str) -> JsonResponse:
        """
        Body JSON:
        {
            "status": "EM_ATENDIMENTO|ENCERRADO|CANCELADO",
            "descricao_encerramento": "string (obrigatório ao encerrar)",
            "nota": "string (opcional, vai para o histórico)",
            "tecnico_id": "string (ADMIN colocando em atendimento)"
        }
        """
        try:
            data = self.parse_body(request)

            input_dto = AlterarStatusInputDTO(
                chamado_id=pk,
                status=data.get('status', ''),
                descricao_encerramento=data.get('descricao_encerramento'),
                nota=data.get('nota'),
                tecnico_id=data.get('tecnico_id'),
            )

            output = self.get_service('alterar_status_service').execute(input_dto, request.ator)

            logger.info(f"API: Chamado {output.codigo} -> {output.status}")
            return self.chamado_response(output)

        except Exception as e:
            return self.handle_exception(e)

    post = patch


class ChamadoAPIReabrirView(BaseAPIView):
    """PATCH /chamados/api/<id>/reabrir/"""

    def patch(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            data = self.parse_body(request)

            input_dto = ReabrirChamadoInputDTO(chamado_id=pk, nota=data.get('nota'))
            output = self.get_service('reabrir_chamado_service').execute(input_dto, request.ator)

            return self.chamado_response(output)

        except Exception as e:
            return self.handle_exception(e)

    post = patch


class ChamadoAPICancelarView(BaseAPIView):
    """PATCH /chamados/api/<id>/cancelar/"""

    def patch(self, request: HttpRequest, pk: str) -> JsonResponse:
        """
        Body JSON:
        {
            "justificativa": "string (obrigatório)"
        }
        """
        try:
            data = self.parse_body(request)

            input_dto = CancelarChamadoInputDTO(
                chamado_id=pk,
                justificativa=data.get('justificativa', ''),
            )
            output = self.get_service('cancelar_chamado_service').execute(input_dto, request.ator)

            return self.chamado_response(output)

        except Exception as e:
            return self.handle_exception(e)

    post = patch


class ChamadoAPIAtribuirView(BaseAPIView):
    """PATCH /chamados/api/<id>/atribuir/"""

    def patch(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            data = self.parse_body(request)

            input_dto = AtribuirChamadoInputDTO(
                chamado_id=pk,
                tecnico_id=data.get('tecnico_id', ''),
                nota=data.get('nota'),
            )
            output = self.get_service('atribuir_chamado_service').execute(input_dto, request.ator)

            logger.info(f"API: Chamado {output.codigo} atribuído a {output.tecnico_id}")
            return self.chamado_response(output)

        except Exception as e:
            return self.handle_exception(e)

    post = patch


class ChamadoAPIHistoricoView(BaseAPIView):
    """GET /chamados/api/<id>/historico/"""

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            registros = self.get_service('obter_historico_service').execute(pk)
            return json_response(
                success=True,
                data=[r.to_dict() for r in registros],
                meta={'total': len(registros)},
            )

        except Exception as e:
            return self.handle_exception(e)


class ChamadoAPIComentariosView(BaseAPIView):
    """POST /chamados/api/<id>/comentarios/"""

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            data = self.parse_body(request)

            input_dto = ComentarChamadoInputDTO(
                chamado_id=pk,
                comentario=data.get('comentario', ''),
            )
            registro = self.get_service('comentar_chamado_service').execute(input_dto, request.ator)

            return json_response(success=True, data=registro.to_dict(), status=201)

        except Exception as e:
            return self.handle_exception(e)
