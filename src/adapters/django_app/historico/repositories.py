"""
Ledger de histórico sobre Django ORM (banco 'historico').

Implementa HistoricoLedger de src/core/chamados/ports.py.
O DomainDatabaseRouter direciona HistoricoChamadoModel para o alias
'historico', fora da transação do banco principal.

Falhas de banco viram InfrastructureError para que o Core decida
entre repetir a gravação ou responder com histórico pendente.
"""

from typing import List, Optional
import logging

from django.db import DatabaseError

from src.core.chamados.entities import HistoricoTipo, RegistroHistorico
from src.core.chamados.ports import FiltroHistorico
from src.core.shared.exceptions import InfrastructureError

from .models import HistoricoChamadoModel

logger = logging.getLogger(__name__)


class HistoricoMapper:
    """Mapper entre RegistroHistorico e HistoricoChamadoModel."""

    @staticmethod
    def to_defaults(registro: RegistroHistorico) -> dict:
        return {
            'chamado_id': registro.chamado_id,
            'tipo': registro.tipo.value,
            'de': registro.de,
            'para': registro.para,
            'descricao': registro.descricao,
            'autor_id': registro.autor_id,
            'autor_nome': registro.autor_nome,
            'autor_email': registro.autor_email,
            'ocorrido_em': registro.ocorrido_em,
        }

    @staticmethod
    def to_registro(model: HistoricoChamadoModel) -> RegistroHistorico:
        return RegistroHistorico(
            id=model.id,
            chamado_id=model.chamado_id,
            tipo=HistoricoTipo(model.tipo),
            de=model.de,
            para=model.para,
            descricao=model.descricao,
            autor_id=model.autor_id,
            autor_nome=model.autor_nome,
            autor_email=model.autor_email,
            ocorrido_em=model.ocorrido_em,
        )


class DjangoHistoricoLedger:
    """
    Ledger append-only.

    append usa get_or_create pelo id determinístico do registro:
    reenviar o mesmo registro não cria duplicata.
    """

    def append(self, registro: RegistroHistorico) -> None:
        try:
            _, criado = HistoricoChamadoModel.objects.get_or_create(
                id=registro.id,
                defaults=HistoricoMapper.to_defaults(registro),
            )
        except DatabaseError as e:
            raise InfrastructureError(f"Falha ao gravar histórico: {e}", store="historico") from e

        if not criado:
            logger.debug(f"Registro de histórico {registro.id} já existia")

    def listar(self, chamado_id: str) -> List[RegistroHistorico]:
        try:
            models = list(
                HistoricoChamadoModel.objects
                .filter(chamado_id=chamado_id)
                .order_by('ocorrido_em', 'id')
            )
        except DatabaseError as e:
            raise InfrastructureError(f"Falha ao ler histórico: {e}", store="historico") from e

        return [HistoricoMapper.to_registro(m) for m in models]

    def query_latest(
        self,
        chamado_id: str,
        filtro: Optional[FiltroHistorico] = None,
    ) -> Optional[RegistroHistorico]:
        queryset = HistoricoChamadoModel.objects.filter(chamado_id=chamado_id)

        if filtro is not None:
            if filtro.tipo is not None:
                queryset = queryset.filter(tipo=filtro.tipo.value)
            if filtro.para is not None:
                queryset = queryset.filter(para=filtro.para)

        try:
            model = queryset.order_by('-ocorrido_em', '-id').first()
        except DatabaseError as e:
            raise InfrastructureError(f"Falha ao ler histórico: {e}", store="historico") from e

        return HistoricoMapper.to_registro(model) if model else None
