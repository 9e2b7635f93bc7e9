"""
Domain Events do Domínio de Chamados.

Eventos:
- ChamadoAbertoEvent: Novo chamado aberto
- ChamadoStatusAlteradoEvent: Status mudou (assumido, encerrado,
  cancelado, reaberto)
- ChamadoAtribuidoEvent: Admin definiu o técnico responsável
- ChamadoComentadoEvent: Comentário adicionado ao histórico

Eventos são enfileirados no UnitOfWork e entregues aos publishers
após o commit. Falhas de entrega nunca desfazem a operação.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional

from src.core.shared.events import DomainEvent


@dataclass
class ChamadoEvent(DomainEvent):
    aggregate_type: ClassVar[str] = "Chamado"


@dataclass
class ChamadoAbertoEvent(ChamadoEvent):
    """
    Evento: Chamado foi aberto.

    O handler envia email de confirmação para `criador_email`.
    """

    codigo: str = ""
    criador_id: str = ""
    criador_email: str = ""
    descricao: str = ""


@dataclass
class ChamadoStatusAlteradoEvent(ChamadoEvent):
    """
    Evento: Status do chamado foi alterado.

    Um evento por transição bem-sucedida. O handler envia email
    ao criador quando `status_novo` é ENCERRADO.

    Attributes:
        codigo: Código do chamado
        status_anterior: Status antes da transição
        status_novo: Status após a transição
        ator_id: Quem executou
        tecnico_id: Técnico responsável após a transição
        criador_id: Criador do chamado
        descricao_encerramento: Solução/justificativa (se finalizado)
    """

    codigo: str = ""
    status_anterior: str = ""
    status_novo: str = ""
    ator_id: str = ""
    tecnico_id: Optional[str] = None
    criador_id: str = ""
    descricao_encerramento: Optional[str] = None


@dataclass
class ChamadoAtribuidoEvent(ChamadoEvent):
    tecnico_id: str = ""
    atribuido_por_id: str = ""


@dataclass
class ChamadoComentadoEvent(ChamadoEvent):
    autor_id: str = ""
    conteudo_preview: str = ""
