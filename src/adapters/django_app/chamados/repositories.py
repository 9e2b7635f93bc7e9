"""
Repositórios Django para persistência de Chamados.

Implementam as interfaces (Ports) definidas em src/core/chamados/ports.py.
São DRIVEN ADAPTERS - acionados pelo Core em resposta a operações.

Responsabilidades:
- DjangoChamadoRepository: chamados e ordens de serviço
- DjangoExpedienteRepository: leitura de expedientes
- DjangoCatalogoServicos: resolução de serviços ativos

Concorrência:
    atualizar_condicional faz UPDATE ... WHERE id = ? AND versao = ?.
    Zero linhas afetadas significa que outra requisição ganhou a corrida.
"""

from typing import Dict, List, Optional, Tuple
import logging

from django.db import IntegrityError, transaction
from django.db.models import Q

from src.core.chamados.dtos import ListarChamadosQueryDTO
from src.core.chamados.entities import ChamadoEntity, Expediente
from src.core.shared.exceptions import ConflictError

from .models import ChamadoModel, ExpedienteModel, OrdemDeServicoModel, ServicoModel
from .mappers import ChamadoMapper, ExpedienteMapper

logger = logging.getLogger(__name__)


class DjangoChamadoRepository:
    """
    Implementação Django do ChamadoRepository.

    Example:
        repo = DjangoChamadoRepository()
        repo.adicionar(chamado)
        chamado = repo.get_by_id(chamado.id)
        if not repo.atualizar_condicional(chamado, versao_lida):
            raise ConflictError(...)
    """

    def __init__(self):
        self._mapper = ChamadoMapper()

    def adicionar(self, chamado: ChamadoEntity) -> None:
        """
        Insere chamado e ordens de serviço.

        Raises:
            ConflictError: Se o código já existir
        """
        try:
            with transaction.atomic():
                ChamadoModel.objects.create(id=chamado.id, **self._mapper.to_fields(chamado))
                OrdemDeServicoModel.objects.bulk_create([
                    OrdemDeServicoModel(chamado_id=chamado.id, servico_id=servico_id)
                    for servico_id in chamado.servicos
                ])
        except IntegrityError as e:
            logger.warning(f"Conflito ao inserir chamado {chamado.codigo}: {e}")
            raise ConflictError(f"Código {chamado.codigo} já existe") from e

        logger.debug(f"Chamado inserido: {chamado.codigo} ({len(chamado.servicos)} serviços)")

    def get_by_id(self, chamado_id: str) -> Optional[ChamadoEntity]:
        model = (
            ChamadoModel.objects
            .prefetch_related('ordens')
            .filter(id=chamado_id)
            .first()
        )
        if model is None:
            logger.debug(f"Chamado not found: {chamado_id}")
            return None
        return self._mapper.to_entity(model)

    def atualizar_condicional(self, chamado: ChamadoEntity, versao_esperada: int) -> bool:
        campos = self._mapper.to_fields(chamado)
        campos.pop('codigo')
        campos.pop('criado_em')

        atualizados = (
            ChamadoModel.objects
            .filter(id=chamado.id, versao=versao_esperada)
            .update(**campos)
        )

        if atualizados == 0:
            logger.info(
                f"Escrita condicional rejeitada para {chamado.codigo} "
                f"(versão esperada {versao_esperada})"
            )
        return atualizados == 1

    def excluir(self, chamado_id: str) -> None:
        OrdemDeServicoModel.objects.filter(chamado_id=chamado_id).delete()
        deleted_count, _ = ChamadoModel.objects.filter(id=chamado_id).delete()

        if deleted_count > 0:
            logger.info(f"Chamado deleted: {chamado_id}")

    def ultimo_codigo(self) -> Optional[str]:
        return (
            ChamadoModel.objects
            .order_by('-criado_em')
            .values_list('codigo', flat=True)
            .first()
        )

    def existe_codigo(self, codigo: str) -> bool:
        return ChamadoModel.objects.filter(codigo=codigo).exists()

    def listar(self, query: ListarChamadosQueryDTO) -> Tuple[List[ChamadoEntity], int]:
        queryset = ChamadoModel.objects.prefetch_related('ordens')

        if query.status:
            queryset = queryset.filter(status__in=query.status)

        if query.criador_id:
            queryset = queryset.filter(criador_id=query.criador_id)

        if query.tecnico_id:
            queryset = queryset.filter(tecnico_id=query.tecnico_id)

        queryset = queryset.order_by('-criado_em')

        total = queryset.count()

        offset = (query.pagina - 1) * query.por_pagina
        models = queryset[offset:offset + query.por_pagina]

        return self._mapper.to_entity_list(models), total


class DjangoExpedienteRepository:
    """Leitura das janelas de expediente cadastradas."""

    def windows_for(self, tecnico_id: str) -> List[Expediente]:
        return [
            ExpedienteMapper.to_entity(model)
            for model in ExpedienteModel.objects.filter(tecnico_id=tecnico_id)
        ]


class DjangoCatalogoServicos:
    """
    Catálogo de serviços sobre ServicoModel.

    Referências podem ser o id ou o nome do serviço.
    """

    def resolver_ativos(self, referencias: List[str]) -> Dict[str, str]:
        if not referencias:
            return {}

        servicos = ServicoModel.objects.filter(ativo=True).filter(
            Q(id__in=referencias) | Q(nome__in=referencias)
        )

        por_id = {s.id: s.id for s in servicos}
        por_nome = {s.nome: s.id for s in servicos}

        resolvidos = {}
        for ref in referencias:
            servico_id = por_id.get(ref) or por_nome.get(ref)
            if servico_id:
                resolvidos[ref] = servico_id
        return resolvidos
