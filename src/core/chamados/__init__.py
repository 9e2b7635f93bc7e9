"""
Domínio de Chamados - Ciclo de vida de chamados de suporte.

Este módulo contém a lógica de negócio do helpdesk:
- Entidades (ChamadoEntity, ChamadoStatus, Ator, Expediente, RegistroHistorico)
- Policies (guarda de transição, expediente, reabertura, cancelamento)
- Use Cases (abrir, alterar status, reabrir, cancelar, excluir, ...)
- Domain Events (ChamadoAberto, ChamadoStatusAlterado, ...)
- Ports (repositórios, ledger de histórico, catálogo de serviços)

Características do Domínio:
- Técnicos só assumem chamados dentro do próprio expediente
- Reabertura pelo criador até 48h após o encerramento
- Cancelado é terminal
- Histórico append-only em banco separado
"""

from .entities import (
    Ator,
    ChamadoEntity,
    ChamadoStatus,
    Expediente,
    HistoricoTipo,
    Regra,
    RegistroHistorico,
)
from .events import (
    ChamadoAbertoEvent,
    ChamadoStatusAlteradoEvent,
    ChamadoAtribuidoEvent,
    ChamadoComentadoEvent,
)
from .dtos import (
    AbrirChamadoInputDTO,
    AlterarStatusInputDTO,
    ReabrirChamadoInputDTO,
    CancelarChamadoInputDTO,
    AtribuirChamadoInputDTO,
    ComentarChamadoInputDTO,
    ChamadoOutputDTO,
    ChamadoListItemDTO,
    HistoricoOutputDTO,
    ListarChamadosQueryDTO,
    PaginatedResultDTO,
)
from .ports import (
    ChamadoRepository,
    ExpedienteRepository,
    HistoricoLedger,
    CatalogoServicos,
    FiltroHistorico,
)
from .codigo import GeradorCodigoChamado
from .policies import (
    VerificadorExpediente,
    GuardaTransicaoStatus,
    PoliticaReabertura,
    PoliticaCancelamento,
    ResolvedorTecnico,
)
from .use_cases import (
    AbrirChamadoService,
    AlterarStatusService,
    ReabrirChamadoService,
    CancelarChamadoService,
    ExcluirChamadoService,
    AtribuirChamadoService,
    ComentarChamadoService,
    ObterHistoricoService,
    ObterChamadoService,
    ListarChamadosService,
)

__all__ = [
    # Entities
    "Ator",
    "ChamadoEntity",
    "ChamadoStatus",
    "Expediente",
    "HistoricoTipo",
    "Regra",
    "RegistroHistorico",
    # Events
    "ChamadoAbertoEvent",
    "ChamadoStatusAlteradoEvent",
    "ChamadoAtribuidoEvent",
    "ChamadoComentadoEvent",
    # DTOs
    "AbrirChamadoInputDTO",
    "AlterarStatusInputDTO",
    "ReabrirChamadoInputDTO",
    "CancelarChamadoInputDTO",
    "AtribuirChamadoInputDTO",
    "ComentarChamadoInputDTO",
    "ChamadoOutputDTO",
    "ChamadoListItemDTO",
    "HistoricoOutputDTO",
    "ListarChamadosQueryDTO",
    "PaginatedResultDTO",
    # Ports
    "ChamadoRepository",
    "ExpedienteRepository",
    "HistoricoLedger",
    "CatalogoServicos",
    "FiltroHistorico",
    # Policies
    "GeradorCodigoChamado",
    "VerificadorExpediente",
    "GuardaTransicaoStatus",
    "PoliticaReabertura",
    "PoliticaCancelamento",
    "ResolvedorTecnico",
    # Use Cases
    "AbrirChamadoService",
    "AlterarStatusService",
    "ReabrirChamadoService",
    "CancelarChamadoService",
    "ExcluirChamadoService",
    "AtribuirChamadoService",
    "ComentarChamadoService",
    "ObterHistoricoService",
    "ObterChamadoService",
    "ListarChamadosService",
]
