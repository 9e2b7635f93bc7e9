"""
Data Transfer Objects (DTOs) do Domínio de Chamados.

Tipos de DTOs:
- Input DTOs: dados de entrada vindos da API
- Output DTOs: formato de resposta (to_dict serializável em JSON)
- Query DTOs: filtros e paginação de listagens
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List

from src.core.shared.exceptions import ValidationError

from .entities import ChamadoEntity, RegistroHistorico


def _iso(valor: Optional[datetime]) -> Optional[str]:
    return valor.isoformat() if valor else None


def _exigir_texto(dto, *campos: str) -> None:
    """
    Campos de texto vindos do corpo JSON devem ser str (ou None).

    Raises:
        ValidationError: Se algum campo tiver outro tipo (número, lista, ...)
    """
    for campo in campos:
        valor = getattr(dto, campo)
        if valor is not None and not isinstance(valor, str):
            raise ValidationError(f"O campo '{campo}' deve ser um texto", field=campo)


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class AbrirChamadoInputDTO:
    """
    DTO de entrada para abrir chamado.

    Attributes:
        descricao: Descrição do problema
        servicos: IDs ou nomes de serviços do catálogo
    """

    descricao: str
    servicos: tuple = field(default_factory=tuple)

    def __post_init__(self):
        _exigir_texto(self, "descricao")

    def to_dict(self) -> dict:
        return {
            "descricao": self.descricao,
            "servicos": list(self.servicos),
        }


@dataclass(frozen=True)
class AlterarStatusInputDTO:
    """
    DTO de entrada para alterar status.

    Attributes:
        chamado_id: ID do chamado
        status: Status solicitado (EM_ATENDIMENTO, ENCERRADO, CANCELADO)
        descricao_encerramento: Obrigatória ao encerrar
        nota: Texto livre para o histórico
        tecnico_id: Técnico a assumir (quando ADMIN coloca em atendimento)
    """

    chamado_id: str
    status: str
    descricao_encerramento: Optional[str] = None
    nota: Optional[str] = None
    tecnico_id: Optional[str] = None

    def __post_init__(self):
        _exigir_texto(self, "descricao_encerramento", "nota", "tecnico_id")

    def to_dict(self) -> dict:
        return {
            "chamado_id": self.chamado_id,
            "status": self.status,
            "descricao_encerramento": self.descricao_encerramento,
            "nota": self.nota,
            "tecnico_id": self.tecnico_id,
        }


@dataclass(frozen=True)
class ReabrirChamadoInputDTO:
    """DTO de entrada para reabrir chamado encerrado."""

    chamado_id: str
    nota: Optional[str] = None

    def __post_init__(self):
        _exigir_texto(self, "nota")

    def to_dict(self) -> dict:
        return {"chamado_id": self.chamado_id, "nota": self.nota}


@dataclass(frozen=True)
class CancelarChamadoInputDTO:
    """DTO de entrada para cancelar chamado."""

    chamado_id: str
    justificativa: str

    def __post_init__(self):
        _exigir_texto(self, "justificativa")

    def to_dict(self) -> dict:
        return {"chamado_id": self.chamado_id, "justificativa": self.justificativa}


@dataclass(frozen=True)
class AtribuirChamadoInputDTO:
    """DTO de entrada para o admin atribuir um técnico."""

    chamado_id: str
    tecnico_id: str
    nota: Optional[str] = None

    def __post_init__(self):
        _exigir_texto(self, "tecnico_id", "nota")

    def to_dict(self) -> dict:
        return {
            "chamado_id": self.chamado_id,
            "tecnico_id": self.tecnico_id,
            "nota": self.nota,
        }


@dataclass(frozen=True)
class ComentarChamadoInputDTO:
    """DTO de entrada para comentário no histórico."""

    chamado_id: str
    comentario: str

    def __post_init__(self):
        _exigir_texto(self, "comentario")

    def to_dict(self) -> dict:
        return {"chamado_id": self.chamado_id, "comentario": self.comentario}


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass
class HistoricoOutputDTO:
    """Registro do ledger formatado para resposta."""

    id: str
    chamado_id: str
    tipo: str
    de: Optional[str]
    para: Optional[str]
    descricao: str
    autor_id: str
    autor_nome: str
    autor_email: str
    ocorrido_em: datetime

    @classmethod
    def from_registro(cls, registro: RegistroHistorico) -> "HistoricoOutputDTO":
        return cls(
            id=registro.id,
            chamado_id=registro.chamado_id,
            tipo=registro.tipo.value,
            de=registro.de,
            para=registro.para,
            descricao=registro.descricao,
            autor_id=registro.autor_id,
            autor_nome=registro.autor_nome,
            autor_email=registro.autor_email,
            ocorrido_em=registro.ocorrido_em,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "chamado_id": self.chamado_id,
            "tipo": self.tipo,
            "de": self.de,
            "para": self.para,
            "descricao": self.descricao,
            "autor_id": self.autor_id,
            "autor_nome": self.autor_nome,
            "autor_email": self.autor_email,
            "ocorrido_em": self.ocorrido_em.isoformat(),
        }


@dataclass
class ChamadoOutputDTO:
    """
    DTO de saída completo do chamado.

    Attributes:
        historico_pendente: True quando o chamado foi alterado mas o
            registro de histórico não pôde ser gravado (sucesso degradado)
        ultima_atualizacao: Registro mais recente do histórico, quando
            consultado
    """

    id: str
    codigo: str
    descricao: str
    status: str
    criador_id: str
    tecnico_id: Optional[str]
    criado_em: datetime
    atualizado_em: Optional[datetime]
    encerrado_em: Optional[datetime]
    descricao_encerramento: Optional[str]
    servicos: List[str] = field(default_factory=list)
    versao: int = 1
    historico_pendente: bool = False
    ultima_atualizacao: Optional[HistoricoOutputDTO] = None

    @classmethod
    def from_entity(
        cls,
        entity: ChamadoEntity,
        historico_pendente: bool = False,
        ultima_atualizacao: Optional[RegistroHistorico] = None,
    ) -> "ChamadoOutputDTO":
        return cls(
            id=entity.id,
            codigo=entity.codigo,
            descricao=entity.descricao,
            status=entity.status.value,
            criador_id=entity.criador_id,
            tecnico_id=entity.tecnico_id,
            criado_em=entity.criado_em,
            atualizado_em=entity.atualizado_em,
            encerrado_em=entity.encerrado_em,
            descricao_encerramento=entity.descricao_encerramento,
            servicos=list(entity.servicos),
            versao=entity.versao,
            historico_pendente=historico_pendente,
            ultima_atualizacao=(
                HistoricoOutputDTO.from_registro(ultima_atualizacao)
                if ultima_atualizacao else None
            ),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "codigo": self.codigo,
            "descricao": self.descricao,
            "status": self.status,
            "criador_id": self.criador_id,
            "tecnico_id": self.tecnico_id,
            "criado_em": self.criado_em.isoformat(),
            "atualizado_em": _iso(self.atualizado_em),
            "encerrado_em": _iso(self.encerrado_em),
            "descricao_encerramento": self.descricao_encerramento,
            "servicos": self.servicos,
            "versao": self.versao,
            "historico_pendente": self.historico_pendente,
            "ultima_atualizacao": (
                self.ultima_atualizacao.to_dict() if self.ultima_atualizacao else None
            ),
        }


@dataclass
class ChamadoListItemDTO:
    """DTO reduzido para a fila de chamados."""

    id: str
    codigo: str
    status: str
    descricao: str
    criador_id: str
    tecnico_id: Optional[str]
    criado_em: datetime

    @classmethod
    def from_entity(cls, entity: ChamadoEntity) -> "ChamadoListItemDTO":
        return cls(
            id=entity.id,
            codigo=entity.codigo,
            status=entity.status.value,
            descricao=entity.descricao,
            criador_id=entity.criador_id,
            tecnico_id=entity.tecnico_id,
            criado_em=entity.criado_em,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "codigo": self.codigo,
            "status": self.status,
            "descricao": self.descricao,
            "criador_id": self.criador_id,
            "tecnico_id": self.tecnico_id,
            "criado_em": self.criado_em.isoformat(),
        }


# =============================================================================
# QUERY DTOs (Filtros de Busca)
# =============================================================================

@dataclass(frozen=True)
class ListarChamadosQueryDTO:
    """
    Filtros e paginação da fila de chamados.

    Attributes:
        status: Lista de status aceitos (vazia = todos)
        criador_id: Filtrar por criador
        tecnico_id: Filtrar por técnico
        pagina: Página (1-indexed)
        por_pagina: Itens por página (máx. 100)
    """

    status: tuple = field(default_factory=tuple)
    criador_id: Optional[str] = None
    tecnico_id: Optional[str] = None
    pagina: int = 1
    por_pagina: int = 10

    POR_PAGINA_MAX = 100

    def normalizado(self) -> "ListarChamadosQueryDTO":
        """Retorna cópia com pagina >= 1 e 1 <= por_pagina <= 100."""
        return ListarChamadosQueryDTO(
            status=self.status,
            criador_id=self.criador_id,
            tecnico_id=self.tecnico_id,
            pagina=max(1, self.pagina),
            por_pagina=min(max(1, self.por_pagina), self.POR_PAGINA_MAX),
        )

    def to_dict(self) -> dict:
        return {
            "status": list(self.status),
            "criador_id": self.criador_id,
            "tecnico_id": self.tecnico_id,
            "pagina": self.pagina,
            "por_pagina": self.por_pagina,
        }


@dataclass
class PaginatedResultDTO:
    """Resultado paginado."""

    items: List[ChamadoListItemDTO]
    total: int
    pagina: int
    por_pagina: int

    @property
    def total_paginas(self) -> int:
        if self.por_pagina <= 0:
            return 0
        return (self.total + self.por_pagina - 1) // self.por_pagina

    @property
    def tem_proxima(self) -> bool:
        return self.pagina < self.total_paginas

    @property
    def tem_anterior(self) -> bool:
        return self.pagina > 1

    def to_dict(self) -> dict:
        return {
            "items": [item.to_dict() for item in self.items],
            "total": self.total,
            "pagina": self.pagina,
            "por_pagina": self.por_pagina,
            "total_paginas": self.total_paginas,
            "tem_proxima": self.tem_proxima,
            "tem_anterior": self.tem_anterior,
        }
