"""
Middleware de identificação do ator.

A autenticação acontece antes desta aplicação (gateway). O gateway
repassa a identidade em headers:

    X-Ator-Id: id do usuário
    X-Ator-Regra: ADMIN | TECNICO | USUARIO
    X-Ator-Nome / X-Ator-Email: opcionais (gravados no histórico)

request.ator fica None quando os headers faltam ou a regra é inválida.
"""

import logging

from src.core.chamados.entities import Ator, Regra

logger = logging.getLogger(__name__)


class AtorMiddleware:
    """Anexa request.ator a partir dos headers do gateway."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.ator = self.extrair_ator(request)
        return self.get_response(request)

    @staticmethod
    def extrair_ator(request):
        ator_id = request.headers.get('X-Ator-Id', '').strip()
        regra = request.headers.get('X-Ator-Regra', '').strip()

        if not ator_id or not regra:
            return None

        try:
            regra = Regra.from_string(regra)
        except ValueError:
            logger.warning(f"Regra inválida no header para {ator_id}: {regra}")
            return None

        return Ator(
            id=ator_id,
            regra=regra,
            nome=request.headers.get('X-Ator-Nome', ''),
            email=request.headers.get('X-Ator-Email', ''),
        )
