"""
Mappers para conversão entre Entities (Core) e Models (Django).

Responsabilidades:
- ChamadoEntity <-> ChamadoModel
- ExpedienteModel -> Expediente

Mappers são stateless e não contêm lógica de negócio.
"""

from typing import Any, Dict, List

from src.core.chamados.entities import ChamadoEntity, ChamadoStatus, Expediente

from .models import ChamadoModel, ExpedienteModel


class ChamadoMapper:
    """
    Mapper para conversão entre ChamadoEntity e ChamadoModel.

    - to_fields(): Entity -> dict de colunas (para create/update)
    - to_entity(): Model -> Entity
    """

    @staticmethod
    def to_fields(entity: ChamadoEntity) -> Dict[str, Any]:
        """
        Colunas do chamado (sem id e sem vínculos de serviço).

        Usado tanto no insert quanto no update condicional.
        """
        return {
            'codigo': entity.codigo,
            'descricao': entity.descricao,
            'status': entity.status.value,
            'criador_id': entity.criador_id,
            'tecnico_id': entity.tecnico_id,
            'criado_em': entity.criado_em,
            'atualizado_em': entity.atualizado_em,
            'encerrado_em': entity.encerrado_em,
            'descricao_encerramento': entity.descricao_encerramento,
            'versao': entity.versao,
        }

    @staticmethod
    def to_entity(model: ChamadoModel) -> ChamadoEntity:
        """
        Converte ChamadoModel para ChamadoEntity.

        Note:
            Bypassa validações do factory method .criar()
            pois dados já foram validados na abertura
        """
        return ChamadoEntity(
            id=model.id,
            codigo=model.codigo,
            descricao=model.descricao,
            status=ChamadoStatus(model.status),
            criador_id=model.criador_id,
            tecnico_id=model.tecnico_id,
            criado_em=model.criado_em,
            atualizado_em=model.atualizado_em,
            encerrado_em=model.encerrado_em,
            descricao_encerramento=model.descricao_encerramento,
            servicos=[ordem.servico_id for ordem in model.ordens.all()],
            versao=model.versao,
        )

    @staticmethod
    def to_entity_list(models: List[ChamadoModel]) -> List[ChamadoEntity]:
        return [ChamadoMapper.to_entity(model) for model in models]


class ExpedienteMapper:
    """Mapper de ExpedienteModel para o value object do Core."""

    @staticmethod
    def to_entity(model: ExpedienteModel) -> Expediente:
        return Expediente(
            tecnico_id=model.tecnico_id,
            entrada=model.entrada,
            saida=model.saida,
        )
