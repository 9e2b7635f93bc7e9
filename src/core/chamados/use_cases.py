"""
Use Cases (Application Services) do Domínio de Chamados.

Use Cases implementados:
- AbrirChamadoService: Abre novo chamado (USUARIO)
- AlterarStatusService: Alteração guardada de status (ADMIN/TECNICO)
- ReabrirChamadoService: Reabertura pelo criador dentro da janela
- CancelarChamadoService: Cancelamento com justificativa
- ExcluirChamadoService: Exclusão definitiva (ADMIN)
- AtribuirChamadoService: Admin define o técnico responsável
- ComentarChamadoService: Comentário no histórico
- ObterHistoricoService: Histórico ordenado do chamado
- ObterChamadoService: Detalhe com a última atualização
- ListarChamadosService: Fila de chamados paginada

Fluxo das operações de escrita:
1. Carregar chamado dentro do UnitOfWork
2. Rodar a política correspondente
3. Gravar com checagem de versão (ConflictError se perder a corrida)
4. Enfileirar evento (publicado após commit)
5. Após o commit, gravar um registro no ledger de histórico

O ledger vive em outro banco e não participa da transação. Se a
gravação falhar após as tentativas, a operação retorna sucesso
degradado (historico_pendente=True) e o erro é logado.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from src.core.shared.clock import Clock, SystemClock
from src.core.shared.interfaces import UnitOfWork
from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    ConflictError,
    EntityNotFoundError,
    ForbiddenError,
    InfrastructureError,
    ValidationError,
)

from .codigo import GeradorCodigoChamado
from .dtos import (
    AbrirChamadoInputDTO,
    AlterarStatusInputDTO,
    AtribuirChamadoInputDTO,
    CancelarChamadoInputDTO,
    ChamadoListItemDTO,
    ChamadoOutputDTO,
    ComentarChamadoInputDTO,
    HistoricoOutputDTO,
    ListarChamadosQueryDTO,
    PaginatedResultDTO,
    ReabrirChamadoInputDTO,
)
from .entities import (
    Ator,
    ChamadoEntity,
    ChamadoStatus,
    HistoricoTipo,
    RegistroHistorico,
)
from .events import (
    ChamadoAbertoEvent,
    ChamadoAtribuidoEvent,
    ChamadoComentadoEvent,
    ChamadoStatusAlteradoEvent,
)
from .policies import (
    DESCRICAO_PADRAO_REABERTURA,
    DESCRICAO_PADRAO_STATUS,
    GuardaTransicaoStatus,
    PoliticaCancelamento,
    PoliticaReabertura,
    ResolvedorTecnico,
)
from .ports import CatalogoServicos, ChamadoRepository, HistoricoLedger

logger = logging.getLogger(__name__)


def _nao_encontrado(chamado_id: str) -> EntityNotFoundError:
    return EntityNotFoundError(
        f"Chamado {chamado_id} não encontrado",
        entity_type="Chamado",
        entity_id=chamado_id,
    )


class _RegistraHistorico:
    """
    Gravação do registro de histórico após o commit.

    Garante ocorrido_em estritamente maior que o último registro do
    chamado e reenvia o mesmo registro (mesmo id) em caso de falha.
    """

    ledger: HistoricoLedger
    max_tentativas_historico: int = 2

    def _registrar_historico(self, registro: RegistroHistorico) -> bool:
        """
        Grava o registro no ledger.

        Returns:
            True se gravado; False se todas as tentativas falharam
        """
        for tentativa in range(1, self.max_tentativas_historico + 1):
            try:
                registro = self._apos_ultimo(registro)
                self.ledger.append(registro)
                return True
            except Exception as e:
                logger.warning(
                    f"Falha ao gravar histórico do chamado {registro.chamado_id} "
                    f"(tentativa {tentativa}/{self.max_tentativas_historico}): {e}"
                )

        logger.error(
            f"Histórico pendente para o chamado {registro.chamado_id}: "
            f"{registro.tipo.value} {registro.de} -> {registro.para}"
        )
        return False

    def _apos_ultimo(self, registro: RegistroHistorico) -> RegistroHistorico:
        ultimo = self.ledger.query_latest(registro.chamado_id)
        if ultimo is None or ultimo.id == registro.id:
            return registro
        if registro.ocorrido_em <= ultimo.ocorrido_em:
            return registro.com_instante(ultimo.ocorrido_em + timedelta(microseconds=1))
        return registro


def _gravar_com_versao(repo: ChamadoRepository, chamado: ChamadoEntity, versao_esperada: int) -> None:
    if not repo.atualizar_condicional(chamado, versao_esperada):
        raise ConflictError(
            f"Chamado {chamado.codigo} foi modificado por outra requisição. Tente novamente"
        )


def _evento_status(chamado: ChamadoEntity, de: ChamadoStatus, ator: Ator) -> ChamadoStatusAlteradoEvent:
    return ChamadoStatusAlteradoEvent(
        aggregate_id=chamado.id,
        codigo=chamado.codigo,
        status_anterior=de.value,
        status_novo=chamado.status.value,
        ator_id=ator.id,
        tecnico_id=chamado.tecnico_id,
        criador_id=chamado.criador_id,
        descricao_encerramento=chamado.descricao_encerramento,
    )


class AbrirChamadoService(_RegistraHistorico):
    """
    Use Case: Abrir um novo chamado.

    Fluxo:
    1. Validar papel (USUARIO), descrição e serviços
    2. Resolver serviços ativos no catálogo
    3. Gerar código e inserir chamado (transação)
    4. Disparar ChamadoAbertoEvent
    5. Registrar ABERTURA no histórico

    Example:
        service = AbrirChamadoService(repo, catalogo, ledger, uow, gerador)
        output = service.execute(
            AbrirChamadoInputDTO(descricao="Sem acesso à VPN", servicos=("VPN",)),
            ator,
        )
        print(output.codigo)  # INC0001
    """

    def __init__(
        self,
        chamado_repo: ChamadoRepository,
        catalogo: CatalogoServicos,
        ledger: HistoricoLedger,
        uow: UnitOfWork,
        gerador_codigo: GeradorCodigoChamado,
        clock: Optional[Clock] = None,
        max_tentativas_historico: int = 2,
    ):
        self.chamado_repo = chamado_repo
        self.catalogo = catalogo
        self.ledger = ledger
        self.uow = uow
        self.gerador_codigo = gerador_codigo
        self.clock = clock or SystemClock()
        self.max_tentativas_historico = max_tentativas_historico

    def execute(self, input_dto: AbrirChamadoInputDTO, ator: Ator) -> ChamadoOutputDTO:
        """
        Raises:
            ForbiddenError: Se ator não é USUARIO
            ValidationError: Descrição vazia, nenhum serviço ou serviço inativo
            ConflictError: Se o código não pôde ser gerado
        """
        if not ator.e_usuario:
            raise ForbiddenError("Apenas usuários podem abrir chamados", reason="regra")

        ChamadoEntity._validar_descricao(input_dto.descricao)

        referencias = [
            s.strip() for s in input_dto.servicos
            if isinstance(s, str) and s.strip()
        ]
        if not referencias:
            raise ValidationError(
                "É obrigatório informar pelo menos um serviço válido para abrir o chamado",
                field="servicos",
            )

        resolvidos = self.catalogo.resolver_ativos(referencias)
        faltantes = [r for r in referencias if r not in resolvidos]
        if faltantes:
            raise ValidationError(
                f"Os seguintes serviços não foram encontrados ou estão inativos: {', '.join(faltantes)}",
                field="servicos",
            )

        agora = self.clock.now()
        chamado = self._inserir_com_codigo_livre(
            input_dto.descricao, [resolvidos[r] for r in referencias], ator, agora
        )

        logger.info(f"Chamado {chamado.codigo} aberto por {ator.id}")

        gravado = self._registrar_historico(
            RegistroHistorico.criar(
                chamado_id=chamado.id,
                tipo=HistoricoTipo.ABERTURA,
                para=ChamadoStatus.ABERTO.value,
                descricao=chamado.descricao,
                autor=ator,
                ocorrido_em=agora,
            )
        )
        return ChamadoOutputDTO.from_entity(chamado, historico_pendente=not gravado)

    def _inserir_com_codigo_livre(
        self, descricao: str, servicos: List[str], ator: Ator, agora: datetime
    ) -> ChamadoEntity:
        """
        Insere o chamado, gerando outro código se uma abertura
        concorrente tomar o candidato entre a geração e o insert.

        Cada tentativa roda em sua própria transação.

        Raises:
            ConflictError: Se o limite de tentativas do gerador se esgotar
        """
        limite = self.gerador_codigo.max_tentativas

        for tentativa in range(1, limite + 1):
            chamado = ChamadoEntity.criar(
                codigo=self.gerador_codigo.gerar(),
                descricao=descricao,
                criador_id=ator.id,
                servicos=servicos,
                agora=agora,
            )
            try:
                with self.uow:
                    self.chamado_repo.adicionar(chamado)
                    self.uow.publish_event(
                        ChamadoAbertoEvent(
                            aggregate_id=chamado.id,
                            codigo=chamado.codigo,
                            criador_id=ator.id,
                            criador_email=ator.email,
                            descricao=chamado.descricao,
                        )
                    )
            except ConflictError:
                logger.warning(
                    f"Código {chamado.codigo} tomado por outra abertura "
                    f"(tentativa {tentativa}/{limite})"
                )
                continue
            return chamado

        raise ConflictError(f"Não foi possível gerar código único após {limite} tentativas")


class AlterarStatusService(_RegistraHistorico):
    """
    Use Case: Alterar status do chamado (ADMIN ou TECNICO).

    As regras ficam em GuardaTransicaoStatus; este serviço cuida da
    transação, da escrita condicional, do evento e do histórico.
    """

    def __init__(
        self,
        chamado_repo: ChamadoRepository,
        ledger: HistoricoLedger,
        uow: UnitOfWork,
        guarda: GuardaTransicaoStatus,
        clock: Optional[Clock] = None,
        max_tentativas_historico: int = 2,
    ):
        self.chamado_repo = chamado_repo
        self.ledger = ledger
        self.uow = uow
        self.guarda = guarda
        self.clock = clock or SystemClock()
        self.max_tentativas_historico = max_tentativas_historico

    def execute(self, input_dto: AlterarStatusInputDTO, ator: Ator) -> ChamadoOutputDTO:
        """
        Executa a transição.

        Raises:
            ValidationError, EntityNotFoundError, ForbiddenError,
            BusinessRuleViolationError: Rejeições da guarda
            ConflictError: Outra requisição alterou o chamado antes
        """
        agora = self.clock.now()

        with self.uow:
            chamado = self.chamado_repo.get_by_id(input_dto.chamado_id)
            versao_esperada = chamado.versao if chamado else 0

            transicao = self.guarda.aplicar(
                chamado=chamado,
                chamado_id=input_dto.chamado_id,
                ator=ator,
                status_solicitado=input_dto.status,
                agora=agora,
                descricao_encerramento=input_dto.descricao_encerramento,
                nota=input_dto.nota,
                tecnico_id=input_dto.tecnico_id,
            )

            _gravar_com_versao(self.chamado_repo, chamado, versao_esperada)
            self.uow.publish_event(_evento_status(chamado, transicao.de, ator))

        logger.info(
            f"Chamado {chamado.codigo}: {transicao.de.value} -> {transicao.para.value} por {ator.id}"
        )

        gravado = self._registrar_historico(
            RegistroHistorico.criar(
                chamado_id=chamado.id,
                tipo=HistoricoTipo.STATUS,
                de=transicao.de.value,
                para=transicao.para.value,
                descricao=transicao.descricao,
                autor=ator,
                ocorrido_em=agora,
            )
        )
        return ChamadoOutputDTO.from_entity(chamado, historico_pendente=not gravado)


class ReabrirChamadoService(_RegistraHistorico):
    """
    Use Case: Reabrir chamado encerrado (criador, dentro da janela).

    Se o chamado não carrega técnico, ResolvedorTecnico o recupera
    do histórico (último STATUS -> EM_ATENDIMENTO).
    """

    def __init__(
        self,
        chamado_repo: ChamadoRepository,
        ledger: HistoricoLedger,
        uow: UnitOfWork,
        politica: PoliticaReabertura,
        resolvedor: ResolvedorTecnico,
        clock: Optional[Clock] = None,
        max_tentativas_historico: int = 2,
    ):
        self.chamado_repo = chamado_repo
        self.ledger = ledger
        self.uow = uow
        self.politica = politica
        self.resolvedor = resolvedor
        self.clock = clock or SystemClock()
        self.max_tentativas_historico = max_tentativas_historico

    def execute(self, input_dto: ReabrirChamadoInputDTO, ator: Ator) -> ChamadoOutputDTO:
        """
        Raises:
            EntityNotFoundError: Chamado inexistente
            ForbiddenError: Não é o criador ou janela expirada
            BusinessRuleViolationError: Chamado não está ENCERRADO
            ConflictError: Outra requisição alterou o chamado antes
        """
        agora = self.clock.now()
        descricao = (input_dto.nota or "").strip() or DESCRICAO_PADRAO_REABERTURA

        with self.uow:
            chamado = self.politica.verificar(
                self.chamado_repo.get_by_id(input_dto.chamado_id),
                input_dto.chamado_id,
                ator,
                agora,
            )
            versao_esperada = chamado.versao
            status_anterior = chamado.status

            tecnico = self.resolvedor.resolver(chamado)
            chamado.reabrir(agora, tecnico.id if tecnico else None)

            _gravar_com_versao(self.chamado_repo, chamado, versao_esperada)
            self.uow.publish_event(_evento_status(chamado, status_anterior, ator))

        logger.info(f"Chamado {chamado.codigo} reaberto por {ator.id} (técnico: {chamado.tecnico_id})")

        gravado = self._registrar_historico(
            RegistroHistorico.criar(
                chamado_id=chamado.id,
                tipo=HistoricoTipo.STATUS,
                de=status_anterior.value,
                para=ChamadoStatus.REABERTO.value,
                descricao=descricao,
                autor=ator,
                ocorrido_em=agora,
            )
        )
        return ChamadoOutputDTO.from_entity(chamado, historico_pendente=not gravado)


class CancelarChamadoService(_RegistraHistorico):
    """Use Case: Cancelar chamado com justificativa (ADMIN ou criador)."""

    def __init__(
        self,
        chamado_repo: ChamadoRepository,
        ledger: HistoricoLedger,
        uow: UnitOfWork,
        politica: Optional[PoliticaCancelamento] = None,
        clock: Optional[Clock] = None,
        max_tentativas_historico: int = 2,
    ):
        self.chamado_repo = chamado_repo
        self.ledger = ledger
        self.uow = uow
        self.politica = politica or PoliticaCancelamento()
        self.clock = clock or SystemClock()
        self.max_tentativas_historico = max_tentativas_historico

    def execute(self, input_dto: CancelarChamadoInputDTO, ator: Ator) -> ChamadoOutputDTO:
        agora = self.clock.now()

        with self.uow:
            chamado = self.politica.verificar(
                self.chamado_repo.get_by_id(input_dto.chamado_id),
                input_dto.chamado_id,
                ator,
                input_dto.justificativa,
            )
            versao_esperada = chamado.versao
            status_anterior = chamado.status

            chamado.cancelar(input_dto.justificativa, agora)

            _gravar_com_versao(self.chamado_repo, chamado, versao_esperada)
            self.uow.publish_event(_evento_status(chamado, status_anterior, ator))

        logger.info(f"Chamado {chamado.codigo} cancelado por {ator.id}")

        gravado = self._registrar_historico(
            RegistroHistorico.criar(
                chamado_id=chamado.id,
                tipo=HistoricoTipo.STATUS,
                de=status_anterior.value,
                para=ChamadoStatus.CANCELADO.value,
                descricao=chamado.descricao_encerramento or DESCRICAO_PADRAO_STATUS[ChamadoStatus.CANCELADO],
                autor=ator,
                ocorrido_em=agora,
            )
        )
        return ChamadoOutputDTO.from_entity(chamado, historico_pendente=not gravado)


class ExcluirChamadoService:
    """
    Use Case: Excluir chamado definitivamente (ADMIN).

    Remove vínculos de serviço e o chamado. Os registros do ledger
    permanecem.
    """

    def __init__(self, chamado_repo: ChamadoRepository, uow: UnitOfWork):
        self.chamado_repo = chamado_repo
        self.uow = uow

    def execute(self, chamado_id: str, ator: Ator) -> ChamadoOutputDTO:
        """
        Returns:
            Snapshot do chamado excluído

        Raises:
            ForbiddenError: Se ator não é ADMIN
            EntityNotFoundError: Chamado inexistente
        """
        if not ator.e_admin:
            raise ForbiddenError("Apenas administradores podem excluir chamados", reason="regra")

        with self.uow:
            chamado = self.chamado_repo.get_by_id(chamado_id)
            if chamado is None:
                raise _nao_encontrado(chamado_id)

            self.chamado_repo.excluir(chamado_id)

        logger.info(f"Chamado {chamado.codigo} excluído por {ator.id}")
        return ChamadoOutputDTO.from_entity(chamado)


class AtribuirChamadoService(_RegistraHistorico):
    """
    Use Case: Admin atribui técnico sem alterar o status.

    Permitido para chamados ABERTO, REABERTO ou EM_ATENDIMENTO.
    """

    STATUS_ATRIBUIVEIS = (
        ChamadoStatus.ABERTO,
        ChamadoStatus.REABERTO,
        ChamadoStatus.EM_ATENDIMENTO,
    )

    def __init__(
        self,
        chamado_repo: ChamadoRepository,
        ledger: HistoricoLedger,
        uow: UnitOfWork,
        clock: Optional[Clock] = None,
        max_tentativas_historico: int = 2,
    ):
        self.chamado_repo = chamado_repo
        self.ledger = ledger
        self.uow = uow
        self.clock = clock or SystemClock()
        self.max_tentativas_historico = max_tentativas_historico

    def execute(self, input_dto: AtribuirChamadoInputDTO, ator: Ator) -> ChamadoOutputDTO:
        if not ator.e_admin:
            raise ForbiddenError("Apenas administradores podem atribuir chamados", reason="regra")

        if not input_dto.tecnico_id:
            raise ValidationError("ID do técnico é obrigatório", field="tecnico_id")

        agora = self.clock.now()
        descricao = (input_dto.nota or "").strip() or f"Chamado atribuído ao técnico {input_dto.tecnico_id}"

        with self.uow:
            chamado = self.chamado_repo.get_by_id(input_dto.chamado_id)
            if chamado is None:
                raise _nao_encontrado(input_dto.chamado_id)

            if chamado.status not in self.STATUS_ATRIBUIVEIS:
                raise BusinessRuleViolationError(
                    f"Não é possível atribuir chamado {chamado.status.value}",
                    rule="status_nao_atribuivel",
                )

            versao_esperada = chamado.versao
            chamado.atribuir(input_dto.tecnico_id, agora)

            _gravar_com_versao(self.chamado_repo, chamado, versao_esperada)
            self.uow.publish_event(
                ChamadoAtribuidoEvent(
                    aggregate_id=chamado.id,
                    tecnico_id=input_dto.tecnico_id,
                    atribuido_por_id=ator.id,
                )
            )

        gravado = self._registrar_historico(
            RegistroHistorico.criar(
                chamado_id=chamado.id,
                tipo=HistoricoTipo.ATRIBUICAO,
                descricao=descricao,
                autor=ator,
                ocorrido_em=agora,
            )
        )
        return ChamadoOutputDTO.from_entity(chamado, historico_pendente=not gravado)


class ComentarChamadoService(_RegistraHistorico):
    """
    Use Case: Registrar comentário no histórico.

    Podem comentar o ADMIN, o criador e o técnico responsável.
    O chamado não é alterado; se o ledger falhar, a operação falha.
    """

    def __init__(
        self,
        chamado_repo: ChamadoRepository,
        ledger: HistoricoLedger,
        uow: UnitOfWork,
        clock: Optional[Clock] = None,
        max_tentativas_historico: int = 2,
    ):
        self.chamado_repo = chamado_repo
        self.ledger = ledger
        self.uow = uow
        self.clock = clock or SystemClock()
        self.max_tentativas_historico = max_tentativas_historico

    def execute(self, input_dto: ComentarChamadoInputDTO, ator: Ator) -> HistoricoOutputDTO:
        """
        Raises:
            ValidationError: Comentário vazio
            EntityNotFoundError: Chamado inexistente
            ForbiddenError: Ator sem vínculo com o chamado
            BusinessRuleViolationError: Chamado cancelado
            InfrastructureError: Ledger indisponível
        """
        comentario = (input_dto.comentario or "").strip()
        if not comentario:
            raise ValidationError("Comentário é obrigatório", field="comentario")

        chamado = self.chamado_repo.get_by_id(input_dto.chamado_id)
        if chamado is None:
            raise _nao_encontrado(input_dto.chamado_id)

        if not (ator.e_admin or ator.id in (chamado.criador_id, chamado.tecnico_id)):
            raise ForbiddenError("Você não tem permissão para comentar neste chamado", reason="sem_vinculo")

        if chamado.status == ChamadoStatus.CANCELADO:
            raise BusinessRuleViolationError(
                "Chamados cancelados não recebem comentários",
                rule="chamado_cancelado_imutavel",
            )

        registro = RegistroHistorico.criar(
            chamado_id=chamado.id,
            tipo=HistoricoTipo.COMENTARIO,
            descricao=comentario,
            autor=ator,
            ocorrido_em=self.clock.now(),
        )
        if not self._registrar_historico(registro):
            raise InfrastructureError("Histórico indisponível, comentário não registrado", store="historico")

        with self.uow:
            self.uow.publish_event(
                ChamadoComentadoEvent(
                    aggregate_id=chamado.id,
                    autor_id=ator.id,
                    conteudo_preview=comentario[:100],
                )
            )

        gravado = self.ledger.query_latest(chamado.id)
        return HistoricoOutputDTO.from_registro(gravado or registro)


class ObterHistoricoService:
    """
    Use Case: Histórico do chamado em ordem cronológica.

    Não exige que o chamado ainda exista: registros de chamados
    excluídos continuam consultáveis.
    """

    def __init__(self, ledger: HistoricoLedger):
        self.ledger = ledger

    def execute(self, chamado_id: str) -> List[HistoricoOutputDTO]:
        return [HistoricoOutputDTO.from_registro(r) for r in self.ledger.listar(chamado_id)]


class ObterChamadoService:
    """Use Case: Detalhe do chamado com o registro mais recente do histórico."""

    def __init__(self, chamado_repo: ChamadoRepository, ledger: HistoricoLedger):
        self.chamado_repo = chamado_repo
        self.ledger = ledger

    def execute(self, chamado_id: str) -> ChamadoOutputDTO:
        """
        Raises:
            EntityNotFoundError: Chamado inexistente
        """
        chamado = self.chamado_repo.get_by_id(chamado_id)
        if chamado is None:
            raise _nao_encontrado(chamado_id)

        return ChamadoOutputDTO.from_entity(
            chamado,
            ultima_atualizacao=self.ledger.query_latest(chamado_id),
        )


class ListarChamadosService:
    """
    Use Case: Fila de chamados com filtros e paginação.

    Usuários comuns só enxergam os próprios chamados.
    Não usa UoW pois é operação de leitura.
    """

    def __init__(self, chamado_repo: ChamadoRepository):
        self.chamado_repo = chamado_repo

    def execute(self, query: ListarChamadosQueryDTO, ator: Optional[Ator] = None) -> PaginatedResultDTO:
        """
        Raises:
            ValidationError: Status de filtro inválido
        """
        status = []
        for valor in query.status:
            try:
                status.append(ChamadoStatus.from_string(valor).value)
            except ValueError:
                raise ValidationError(f"Status inválido: {valor}", field="status")

        criador_id = query.criador_id
        if ator is not None and ator.e_usuario:
            criador_id = ator.id

        query = ListarChamadosQueryDTO(
            status=tuple(status),
            criador_id=criador_id,
            tecnico_id=query.tecnico_id,
            pagina=query.pagina,
            por_pagina=query.por_pagina,
        ).normalizado()

        chamados, total = self.chamado_repo.listar(query)

        return PaginatedResultDTO(
            items=[ChamadoListItemDTO.from_entity(c) for c in chamados],
            total=total,
            pagina=query.pagina,
            por_pagina=query.por_pagina,
        )
