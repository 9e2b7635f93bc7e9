"""
Políticas do ciclo de vida do chamado.

Componentes:
- VerificadorExpediente: admissão por horário de expediente do técnico
- GuardaTransicaoStatus: regras da alteração de status (ADMIN/TECNICO)
- PoliticaReabertura: janela de reabertura pelo criador
- PoliticaCancelamento: fluxo dedicado de cancelamento
- ResolvedorTecnico: recupera o técnico a partir do ledger quando
  o chamado não o carrega mais

As políticas não persistem nada. Rejeições são lançadas como
exceções de domínio e mapeadas para HTTP na camada de API.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional
from zoneinfo import ZoneInfo

from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    EntityNotFoundError,
    ForbiddenError,
    ValidationError,
)

from .entities import (
    Ator,
    ChamadoEntity,
    ChamadoStatus,
    Expediente,
    HistoricoTipo,
    Regra,
)
from .ports import ExpedienteRepository, FiltroHistorico, HistoricoLedger

logger = logging.getLogger(__name__)


DESCRICAO_PADRAO_STATUS = {
    ChamadoStatus.EM_ATENDIMENTO: "Chamado assumido pelo técnico",
    ChamadoStatus.ENCERRADO: "Chamado encerrado",
    ChamadoStatus.CANCELADO: "Chamado cancelado",
}
DESCRICAO_PADRAO_ALTERACAO = "Alteração de status"
DESCRICAO_PADRAO_REABERTURA = "Chamado reaberto pelo usuário dentro do prazo"


def _chamado_existente(chamado: Optional[ChamadoEntity], chamado_id: str) -> ChamadoEntity:
    if chamado is None:
        raise EntityNotFoundError(
            f"Chamado {chamado_id} não encontrado",
            entity_type="Chamado",
            entity_id=chamado_id,
        )
    return chamado


# =============================================================================
# Expediente
# =============================================================================

class VerificadorExpediente:
    """
    Decide se um técnico pode assumir um chamado agora.

    A hora atual é convertida para o fuso configurado e truncada
    para minutos; cada janela é avaliada de forma independente com
    limites inclusivos. Nada é cacheado entre chamadas.

    Example:
        verificador = VerificadorExpediente(expediente_repo, "America/Sao_Paulo")
        verificador.verificar("tec-1", clock.now())
    """

    def __init__(self, expediente_repo: ExpedienteRepository, fuso_horario: str = "America/Sao_Paulo"):
        self.expediente_repo = expediente_repo
        self.fuso = ZoneInfo(fuso_horario)

    def hora_local(self, agora: datetime):
        if agora.tzinfo is not None:
            agora = agora.astimezone(self.fuso)
        return agora.time().replace(second=0, microsecond=0)

    def verificar(self, tecnico_id: str, agora: datetime) -> Expediente:
        """
        Verifica admissão do técnico.

        Returns:
            A janela que admitiu o técnico

        Raises:
            ForbiddenError: Sem janelas cadastradas ou fora de todas elas
        """
        janelas: List[Expediente] = self.expediente_repo.windows_for(tecnico_id)

        if not janelas:
            raise ForbiddenError(
                "Sem horário de expediente cadastrado",
                reason="sem_expediente",
            )

        hora = self.hora_local(agora)
        for janela in janelas:
            if janela.contem(hora):
                return janela

        logger.info(f"Técnico {tecnico_id} fora do expediente às {hora.isoformat()}")
        raise ForbiddenError(
            "Chamado só pode ser assumido dentro do seu horário de trabalho",
            reason="fora_do_expediente",
        )


# =============================================================================
# Alteração de status
# =============================================================================

@dataclass(frozen=True)
class TransicaoAplicada:
    """Resultado de uma transição já aplicada à entidade."""

    de: ChamadoStatus
    para: ChamadoStatus
    descricao: str


class GuardaTransicaoStatus:
    """
    Regras da alteração de status, avaliadas em ordem:

    1. Status solicitado reconhecido (EM_ATENDIMENTO, ENCERRADO, CANCELADO)
       e ator ADMIN ou TECNICO
    2. Chamado existe
    3. Chamado CANCELADO não pode ser alterado
    4. TECNICO não altera chamado ENCERRADO
    5. TECNICO nunca cancela
    6. TECNICO colocando EM_ATENDIMENTO passa pelo expediente e
       vira o técnico do chamado
    7. ENCERRADO exige descrição de encerramento
    8. O resto é aplicado como pedido
    """

    STATUS_PERMITIDOS = (
        ChamadoStatus.EM_ATENDIMENTO,
        ChamadoStatus.ENCERRADO,
        ChamadoStatus.CANCELADO,
    )
    REGRAS_PERMITIDAS = (Regra.ADMIN, Regra.TECNICO)

    def __init__(self, verificador_expediente: VerificadorExpediente):
        self.verificador_expediente = verificador_expediente

    def validar_status(self, status_solicitado: str) -> ChamadoStatus:
        """
        Raises:
            ValidationError: Se vazio ou fora dos status permitidos
        """
        nomes = ", ".join(s.value for s in self.STATUS_PERMITIDOS)
        try:
            status = ChamadoStatus.from_string(status_solicitado)
        except ValueError:
            raise ValidationError(f"Status inválido. Use um dos seguintes: {nomes}", field="status")

        if status not in self.STATUS_PERMITIDOS:
            raise ValidationError(f"Status inválido. Use um dos seguintes: {nomes}", field="status")
        return status

    def aplicar(
        self,
        chamado: Optional[ChamadoEntity],
        chamado_id: str,
        ator: Ator,
        status_solicitado: str,
        agora: datetime,
        descricao_encerramento: Optional[str] = None,
        nota: Optional[str] = None,
        tecnico_id: Optional[str] = None,
    ) -> TransicaoAplicada:
        """
        Valida e aplica a transição na entidade.

        Args:
            chamado: Entidade carregada (None se inexistente)
            chamado_id: ID pedido (para mensagem de erro)
            ator: Quem pede a alteração
            status_solicitado: Nome do status desejado
            agora: Instante da operação
            descricao_encerramento: Solução (obrigatória para ENCERRADO)
            nota: Texto livre para o histórico
            tecnico_id: Técnico indicado pelo ADMIN ao colocar em atendimento

        Returns:
            TransicaoAplicada com status anterior, novo e descrição do histórico

        Raises:
            ForbiddenError: Papel sem permissão, expediente ou regra de técnico
            ValidationError: Status inválido ou campos obrigatórios ausentes
            EntityNotFoundError: Chamado inexistente
            BusinessRuleViolationError: Chamado cancelado
        """
        if ator.regra not in self.REGRAS_PERMITIDAS:
            raise ForbiddenError("Apenas administradores e técnicos podem alterar o status", reason="regra")

        novo_status = self.validar_status(status_solicitado)
        chamado = _chamado_existente(chamado, chamado_id)
        status_anterior = chamado.status

        if status_anterior == ChamadoStatus.CANCELADO:
            raise BusinessRuleViolationError(
                "Chamados cancelados não podem ser reabertos ou alterados",
                rule="chamado_cancelado_imutavel",
            )

        if ator.e_tecnico and status_anterior == ChamadoStatus.ENCERRADO:
            raise ForbiddenError(
                "Chamados encerrados não podem ser alterados por técnicos",
                reason="encerrado_tecnico",
            )

        if ator.e_tecnico and novo_status == ChamadoStatus.CANCELADO:
            raise ForbiddenError("Técnicos não podem cancelar chamados", reason="cancelamento_tecnico")

        if novo_status == ChamadoStatus.EM_ATENDIMENTO:
            if ator.e_tecnico:
                self.verificador_expediente.verificar(ator.id, agora)
                chamado.assumir(ator.id, agora)
            else:
                responsavel = tecnico_id or chamado.tecnico_id
                if not responsavel:
                    raise ValidationError(
                        "Informe o técnico que assumirá o chamado",
                        field="tecnico_id",
                    )
                chamado.assumir(responsavel, agora)
        elif novo_status == ChamadoStatus.ENCERRADO:
            chamado.encerrar(descricao_encerramento, agora)
        else:
            chamado.cancelar(
                descricao_encerramento or nota or DESCRICAO_PADRAO_STATUS[ChamadoStatus.CANCELADO],
                agora,
            )

        descricao = (nota or "").strip() or DESCRICAO_PADRAO_STATUS.get(
            novo_status, DESCRICAO_PADRAO_ALTERACAO
        )
        return TransicaoAplicada(de=status_anterior, para=novo_status, descricao=descricao)


# =============================================================================
# Reabertura
# =============================================================================

class PoliticaReabertura:
    """
    Janela de reabertura: o criador pode reabrir um chamado
    ENCERRADO em até `janela_horas` após o encerramento (inclusivo).
    """

    def __init__(self, janela_horas: int = 48):
        self.janela = timedelta(hours=janela_horas)

    def verificar(
        self,
        chamado: Optional[ChamadoEntity],
        chamado_id: str,
        ator: Ator,
        agora: datetime,
    ) -> ChamadoEntity:
        """
        Raises:
            EntityNotFoundError: Chamado inexistente
            ForbiddenError: Ator não é o criador, ou janela expirada
            BusinessRuleViolationError: Status diferente de ENCERRADO
                ou encerrado_em ausente
        """
        chamado = _chamado_existente(chamado, chamado_id)

        if chamado.criador_id != ator.id:
            raise ForbiddenError(
                "Você só pode reabrir chamados criados por você",
                reason="apenas_criador",
            )

        if chamado.status != ChamadoStatus.ENCERRADO:
            raise BusinessRuleViolationError(
                "Somente chamados encerrados podem ser reabertos",
                rule="apenas_encerrado_reabre",
            )

        if chamado.encerrado_em is None:
            raise BusinessRuleViolationError(
                "Data de encerramento não localizada",
                rule="encerrado_em_ausente",
            )

        if agora - chamado.encerrado_em > self.janela:
            raise ForbiddenError(
                f"Só é possível reabrir até {int(self.janela.total_seconds() // 3600)} horas após o encerramento",
                reason="janela_expirada",
            )

        return chamado


@dataclass(frozen=True)
class TecnicoResolvido:
    """Técnico recuperado (do chamado ou do ledger)."""

    id: str
    nome: str = ""
    email: str = ""


class ResolvedorTecnico:
    """
    Read-repair do técnico responsável.

    O chamado é a fonte primária. Se ele não carrega técnico, o
    registro STATUS → EM_ATENDIMENTO mais recente do ledger fornece
    o autor como técnico. Sem registro, o chamado fica sem técnico.
    """

    FILTRO = FiltroHistorico(
        tipo=HistoricoTipo.STATUS,
        para=ChamadoStatus.EM_ATENDIMENTO.value,
    )

    def __init__(self, ledger: HistoricoLedger):
        self.ledger = ledger

    def resolver(self, chamado: ChamadoEntity) -> Optional[TecnicoResolvido]:
        if chamado.tecnico_id:
            return TecnicoResolvido(id=chamado.tecnico_id)

        registro = self.ledger.query_latest(chamado.id, self.FILTRO)
        if registro is None:
            return None

        logger.info(f"Técnico do chamado {chamado.codigo} recuperado do histórico: {registro.autor_id}")
        return TecnicoResolvido(
            id=registro.autor_id,
            nome=registro.autor_nome,
            email=registro.autor_email,
        )


# =============================================================================
# Cancelamento
# =============================================================================

class PoliticaCancelamento:
    """
    Fluxo dedicado de cancelamento.

    Ordem: justificativa, existência, permissão (ADMIN sempre, criador
    USUARIO só o próprio chamado, TECNICO nunca), estado (não ENCERRADO
    nem CANCELADO).
    """

    def verificar(
        self,
        chamado: Optional[ChamadoEntity],
        chamado_id: str,
        ator: Ator,
        justificativa: Optional[str],
    ) -> ChamadoEntity:
        if not justificativa or not justificativa.strip():
            raise ValidationError(
                "É necessário informar a justificativa do cancelamento",
                field="justificativa",
            )

        chamado = _chamado_existente(chamado, chamado_id)

        if ator.e_tecnico:
            raise ForbiddenError("Técnicos não podem cancelar chamados", reason="cancelamento_tecnico")

        if ator.e_usuario and chamado.criador_id != ator.id:
            raise ForbiddenError(
                "Você não tem permissão para cancelar este chamado",
                reason="apenas_criador",
            )

        if chamado.status == ChamadoStatus.ENCERRADO:
            raise BusinessRuleViolationError(
                "Não é possível cancelar um chamado encerrado",
                rule="encerrado_nao_cancela",
            )

        if chamado.status == ChamadoStatus.CANCELADO:
            raise BusinessRuleViolationError(
                "Este chamado já está cancelado",
                rule="ja_cancelado",
            )

        return chamado
