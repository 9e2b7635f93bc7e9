"""
Ports (Interfaces) do Domínio de Chamados.

Contratos que os Adapters de infraestrutura implementam:
- ChamadoRepository: armazenamento de chamados (banco principal)
- ExpedienteRepository: janelas de expediente dos técnicos (somente leitura)
- HistoricoLedger: ledger append-only de histórico (banco separado)
- CatalogoServicos: consulta ao catálogo de serviços ativos

Cada port tem uma implementação InMemory para testes unitários.

Example:
    # No Adapter (Django)
    class DjangoChamadoRepository:
        def adicionar(self, chamado: ChamadoEntity) -> None:
            ChamadoModel.objects.create(**ChamadoMapper.to_fields(chamado))
"""

import copy
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Tuple, runtime_checkable

from src.core.shared.exceptions import ConflictError

from .entities import (
    ChamadoEntity,
    ChamadoStatus,
    Expediente,
    HistoricoTipo,
    RegistroHistorico,
)
from .dtos import ListarChamadosQueryDTO


@dataclass(frozen=True)
class FiltroHistorico:
    """
    Predicado de consulta ao ledger.

    Campos None não filtram. Traduzível para SQL pelos adapters.

    Example:
        FiltroHistorico(tipo=HistoricoTipo.STATUS, para=ChamadoStatus.EM_ATENDIMENTO.value)
    """

    tipo: Optional[HistoricoTipo] = None
    para: Optional[str] = None

    def aceita(self, registro: RegistroHistorico) -> bool:
        if self.tipo is not None and registro.tipo != self.tipo:
            return False
        if self.para is not None and registro.para != self.para:
            return False
        return True


# =============================================================================
# Protocols
# =============================================================================

@runtime_checkable
class ChamadoRepository(Protocol):
    """
    Interface para persistência de Chamados.

    Implementações:
    - DjangoChamadoRepository (ORM, banco 'default')
    - InMemoryChamadoRepository (testes)
    """

    def adicionar(self, chamado: ChamadoEntity) -> None:
        """
        Insere novo chamado com seus vínculos de serviço.

        Raises:
            ConflictError: Se o código já existir
        """
        ...

    def get_by_id(self, chamado_id: str) -> Optional[ChamadoEntity]:
        ...

    def atualizar_condicional(self, chamado: ChamadoEntity, versao_esperada: int) -> bool:
        """
        Grava o chamado somente se a versão persistida for a esperada.

        Returns:
            False se outra escrita ganhou a corrida (zero linhas afetadas)
        """
        ...

    def excluir(self, chamado_id: str) -> None:
        """Remove os vínculos de serviço e depois o chamado."""
        ...

    def ultimo_codigo(self) -> Optional[str]:
        """Código do chamado aberto mais recentemente."""
        ...

    def existe_codigo(self, codigo: str) -> bool:
        ...

    def listar(self, query: ListarChamadosQueryDTO) -> Tuple[List[ChamadoEntity], int]:
        """
        Lista chamados filtrados e paginados.

        Returns:
            (itens da página, total sem paginação)
        """
        ...


class ExpedienteRepository(Protocol):
    """Registro de expedientes (somente leitura para o core)."""

    def windows_for(self, tecnico_id: str) -> List[Expediente]:
        ...


class HistoricoLedger(Protocol):
    """
    Ledger de histórico (append-only, ordenado por ocorrido_em).

    append é idempotente: um registro com id já gravado é ignorado.
    """

    def append(self, registro: RegistroHistorico) -> None:
        ...

    def listar(self, chamado_id: str) -> List[RegistroHistorico]:
        """Registros do chamado em ordem crescente de ocorrido_em."""
        ...

    def query_latest(
        self,
        chamado_id: str,
        filtro: Optional[FiltroHistorico] = None,
    ) -> Optional[RegistroHistorico]:
        """Registro mais recente do chamado que satisfaz o filtro."""
        ...


class CatalogoServicos(Protocol):
    """Catálogo de serviços (gerido fora do engine)."""

    def resolver_ativos(self, referencias: List[str]) -> Dict[str, str]:
        """
        Resolve referências (id ou nome) para IDs de serviços ativos.

        Returns:
            {referencia: servico_id}; referências inativas ou
            desconhecidas ficam de fora
        """
        ...


# =============================================================================
# InMemory implementations
# =============================================================================

class InMemoryChamadoRepository:
    """
    Implementação em memória do ChamadoRepository.

    Guarda cópias das entidades para que alterações feitas pelo
    chamador só valham após atualizar_condicional.
    """

    def __init__(self):
        self._chamados: Dict[str, ChamadoEntity] = {}

    def adicionar(self, chamado: ChamadoEntity) -> None:
        if self.existe_codigo(chamado.codigo):
            raise ConflictError(f"Código {chamado.codigo} já existe")
        self._chamados[chamado.id] = copy.deepcopy(chamado)

    def save(self, chamado: ChamadoEntity) -> None:
        """Grava sem checagem de versão (útil para montar cenários)."""
        self._chamados[chamado.id] = copy.deepcopy(chamado)

    def get_by_id(self, chamado_id: str) -> Optional[ChamadoEntity]:
        chamado = self._chamados.get(chamado_id)
        return copy.deepcopy(chamado) if chamado else None

    def atualizar_condicional(self, chamado: ChamadoEntity, versao_esperada: int) -> bool:
        atual = self._chamados.get(chamado.id)
        if atual is None or atual.versao != versao_esperada:
            return False
        self._chamados[chamado.id] = copy.deepcopy(chamado)
        return True

    def excluir(self, chamado_id: str) -> None:
        self._chamados.pop(chamado_id, None)

    def ultimo_codigo(self) -> Optional[str]:
        if not self._chamados:
            return None
        mais_recente = max(self._chamados.values(), key=lambda c: c.criado_em)
        return mais_recente.codigo

    def existe_codigo(self, codigo: str) -> bool:
        return any(c.codigo == codigo for c in self._chamados.values())

    def listar(self, query: ListarChamadosQueryDTO) -> Tuple[List[ChamadoEntity], int]:
        status_aceitos = {ChamadoStatus.from_string(s) for s in query.status}
        chamados = [
            c for c in self._chamados.values()
            if (not status_aceitos or c.status in status_aceitos)
            and (not query.criador_id or c.criador_id == query.criador_id)
            and (not query.tecnico_id or c.tecnico_id == query.tecnico_id)
        ]
        chamados.sort(key=lambda c: c.criado_em, reverse=True)
        inicio = (query.pagina - 1) * query.por_pagina
        pagina = chamados[inicio:inicio + query.por_pagina]
        return [copy.deepcopy(c) for c in pagina], len(chamados)

    def count(self) -> int:
        return len(self._chamados)


class InMemoryExpedienteRepository:
    """Expedientes em memória."""

    def __init__(self, expedientes: Optional[List[Expediente]] = None):
        self._expedientes: List[Expediente] = list(expedientes or [])

    def adicionar(self, expediente: Expediente) -> None:
        self._expedientes.append(expediente)

    def windows_for(self, tecnico_id: str) -> List[Expediente]:
        return [e for e in self._expedientes if e.tecnico_id == tecnico_id]


class InMemoryHistoricoLedger:
    """Ledger em memória com append idempotente."""

    def __init__(self):
        self._registros: Dict[str, RegistroHistorico] = {}

    def append(self, registro: RegistroHistorico) -> None:
        if registro.id in self._registros:
            return
        self._registros[registro.id] = registro

    def listar(self, chamado_id: str) -> List[RegistroHistorico]:
        return sorted(
            (r for r in self._registros.values() if r.chamado_id == chamado_id),
            key=lambda r: r.ocorrido_em,
        )

    def query_latest(
        self,
        chamado_id: str,
        filtro: Optional[FiltroHistorico] = None,
    ) -> Optional[RegistroHistorico]:
        candidatos = [
            r for r in self.listar(chamado_id)
            if filtro is None or filtro.aceita(r)
        ]
        return candidatos[-1] if candidatos else None

    @property
    def registros(self) -> List[RegistroHistorico]:
        return sorted(self._registros.values(), key=lambda r: r.ocorrido_em)


class InMemoryCatalogoServicos:
    """
    Catálogo em memória.

    Example:
        catalogo = InMemoryCatalogoServicos({"srv-1": "Impressora"})
        catalogo.resolver_ativos(["Impressora"])  # {"Impressora": "srv-1"}
    """

    def __init__(self, servicos: Optional[Dict[str, str]] = None, inativos: Optional[List[str]] = None):
        self._servicos: Dict[str, str] = dict(servicos or {})
        self._inativos = set(inativos or [])

    def resolver_ativos(self, referencias: List[str]) -> Dict[str, str]:
        resolvidos = {}
        for ref in referencias:
            for servico_id, nome in self._servicos.items():
                if servico_id in self._inativos:
                    continue
                if ref == servico_id or ref == nome:
                    resolvidos[ref] = servico_id
                    break
        return resolvidos
