"""
Entidades do Domínio de Chamados.

Entidades:
- ChamadoEntity: Agregado principal (o chamado)
- ChamadoStatus: Estados do ciclo de vida
- Regra: Papel do ator autenticado
- Ator: Quem executa a operação (id, papel, nome, email)
- Expediente: Janela de trabalho de um técnico
- RegistroHistorico: Linha do ledger de histórico (append-only)

Regras de Negócio Encapsuladas:
- encerrado_em preenchido se e somente se status ∈ {ENCERRADO, CANCELADO}
- descricao_encerramento obrigatória ao encerrar
- tecnico_id definido ao entrar em EM_ATENDIMENTO
- codigo imutável após criação
"""

from dataclasses import dataclass, field
from datetime import datetime, time, timezone
from enum import Enum
from typing import Optional, List
import uuid

from src.core.shared.exceptions import ValidationError


class ChamadoStatus(Enum):
    """
    Estados possíveis de um chamado.

    Fluxo de Estados:
        ABERTO → EM_ATENDIMENTO → ENCERRADO → REABERTO → EM_ATENDIMENTO
           ↓            ↓                         ↓
        CANCELADO    CANCELADO                 CANCELADO

    CANCELADO é terminal.
    """

    ABERTO = "ABERTO"
    EM_ATENDIMENTO = "EM_ATENDIMENTO"
    ENCERRADO = "ENCERRADO"
    CANCELADO = "CANCELADO"
    REABERTO = "REABERTO"

    @property
    def finalizado(self) -> bool:
        """Status que exigem encerrado_em preenchido."""
        return self in (ChamadoStatus.ENCERRADO, ChamadoStatus.CANCELADO)

    @classmethod
    def from_string(cls, value: str) -> "ChamadoStatus":
        """
        Converte string para enum.

        Aceita o nome com espaços ou hífens ("em atendimento").

        Raises:
            ValueError: Se valor vazio ou desconhecido
        """
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"Status vazio ou inválido: {value!r}")

        normalizado = value.strip().upper().replace(" ", "_").replace("-", "_")
        try:
            return cls[normalizado]
        except KeyError:
            raise ValueError(f"Status inválido: {value}")


class Regra(Enum):
    """Papel do ator, atribuído pela camada de autenticação."""

    ADMIN = "ADMIN"
    TECNICO = "TECNICO"
    USUARIO = "USUARIO"

    @classmethod
    def from_string(cls, value: str) -> "Regra":
        if not isinstance(value, str):
            raise ValueError(f"Regra inválida: {value!r}")
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Regra inválida: {value}")


@dataclass(frozen=True)
class Ator:
    """
    Ator autenticado que dispara uma operação.

    Attributes:
        id: ID do usuário
        regra: Papel (ADMIN, TECNICO, USUARIO)
        nome: Nome para o histórico
        email: Email para o histórico
    """

    id: str
    regra: Regra
    nome: str = ""
    email: str = ""

    @property
    def e_admin(self) -> bool:
        return self.regra == Regra.ADMIN

    @property
    def e_tecnico(self) -> bool:
        return self.regra == Regra.TECNICO

    @property
    def e_usuario(self) -> bool:
        return self.regra == Regra.USUARIO


@dataclass(frozen=True)
class Expediente:
    """
    Janela de expediente de um técnico (hora local).

    Um técnico pode ter várias janelas (turno partido). Uma janela
    com entrada > saida atravessa a meia-noite.
    """

    tecnico_id: str
    entrada: time
    saida: time

    def contem(self, hora: time) -> bool:
        """
        Verifica se a hora está dentro da janela (limites inclusivos).

        Args:
            hora: Hora local já truncada para minutos

        Returns:
            True se entrada <= hora <= saida
        """
        if self.entrada <= self.saida:
            return self.entrada <= hora <= self.saida
        return hora >= self.entrada or hora <= self.saida


class HistoricoTipo(Enum):
    """Tipos de registro no ledger de histórico."""

    ABERTURA = "ABERTURA"
    ATRIBUICAO = "ATRIBUICAO"
    STATUS = "STATUS"
    COMENTARIO = "COMENTARIO"
    REABERTURA = "REABERTURA"


_HISTORICO_NAMESPACE = uuid.UUID("6f1d3c2a-8b4e-4f0a-9c57-2d1e8a4b7f30")


@dataclass(frozen=True)
class RegistroHistorico:
    """
    Registro imutável do ledger de histórico.

    O id é derivado de (chamado, tipo, de, para, ocorrido_em), de modo
    que reenviar o mesmo registro após uma falha não gera duplicata.

    Attributes:
        id: UUID determinístico (uuid5)
        chamado_id: Chamado ao qual o registro pertence
        tipo: Tipo do registro
        de: Status anterior (opcional)
        para: Status novo (opcional)
        descricao: Texto do registro
        autor_id / autor_nome / autor_email: Quem executou
        ocorrido_em: Instante do registro (UTC)
    """

    chamado_id: str
    tipo: HistoricoTipo
    descricao: str
    autor_id: str
    ocorrido_em: datetime
    de: Optional[str] = None
    para: Optional[str] = None
    autor_nome: str = ""
    autor_email: str = ""
    id: str = ""

    @classmethod
    def criar(
        cls,
        chamado_id: str,
        tipo: HistoricoTipo,
        descricao: str,
        autor: Ator,
        ocorrido_em: datetime,
        de: Optional[str] = None,
        para: Optional[str] = None,
    ) -> "RegistroHistorico":
        """Cria registro com id determinístico."""
        return cls(
            id=cls.gerar_id(chamado_id, tipo, de, para, ocorrido_em),
            chamado_id=chamado_id,
            tipo=tipo,
            de=de,
            para=para,
            descricao=descricao,
            autor_id=autor.id,
            autor_nome=autor.nome,
            autor_email=autor.email,
            ocorrido_em=ocorrido_em,
        )

    @staticmethod
    def gerar_id(
        chamado_id: str,
        tipo: HistoricoTipo,
        de: Optional[str],
        para: Optional[str],
        ocorrido_em: datetime,
    ) -> str:
        chave = "|".join([
            chamado_id,
            tipo.value,
            de or "",
            para or "",
            ocorrido_em.astimezone(timezone.utc).isoformat(),
        ])
        return str(uuid.uuid5(_HISTORICO_NAMESPACE, chave))

    def com_instante(self, ocorrido_em: datetime) -> "RegistroHistorico":
        """Cópia com outro instante (e id recalculado)."""
        return RegistroHistorico(
            id=self.gerar_id(self.chamado_id, self.tipo, self.de, self.para, ocorrido_em),
            chamado_id=self.chamado_id,
            tipo=self.tipo,
            de=self.de,
            para=self.para,
            descricao=self.descricao,
            autor_id=self.autor_id,
            autor_nome=self.autor_nome,
            autor_email=self.autor_email,
            ocorrido_em=ocorrido_em,
        )


@dataclass
class ChamadoEntity:
    """
    Entidade de Domínio: Chamado.

    Agregado principal do domínio. As mutações de status passam
    pelos métodos abaixo, que mantêm os invariantes do agregado;
    as regras de quem pode fazer o quê ficam em policies.py.

    Invariantes:
    - encerrado_em != None ⇔ status ∈ {ENCERRADO, CANCELADO}
    - descricao_encerramento != None quando status == ENCERRADO
    - tecnico_id definido ao entrar em EM_ATENDIMENTO
    - codigo imutável

    Attributes:
        id: Identificador único (UUID)
        codigo: Código legível (INC0001)
        descricao: Descrição do problema
        status: Estado atual
        criador_id: ID do usuário que abriu
        tecnico_id: ID do técnico responsável
        criado_em: Data/hora de abertura
        atualizado_em: Data/hora da última alteração
        encerrado_em: Data/hora de encerramento ou cancelamento
        descricao_encerramento: Solução ou justificativa
        servicos: IDs dos serviços do catálogo
        versao: Token de concorrência otimista

    Example:
        chamado = ChamadoEntity.criar(
            codigo="INC0001",
            descricao="Impressora do 3º andar não imprime",
            criador_id="user-1",
            servicos=["srv-impressora"],
            agora=clock.now(),
        )
        chamado.assumir("tec-1", clock.now())
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    codigo: str = ""
    descricao: str = ""
    status: ChamadoStatus = field(default=ChamadoStatus.ABERTO)
    criador_id: str = ""
    tecnico_id: Optional[str] = None
    criado_em: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    atualizado_em: Optional[datetime] = None
    encerrado_em: Optional[datetime] = None
    descricao_encerramento: Optional[str] = None
    servicos: List[str] = field(default_factory=list)
    versao: int = 1

    DESCRICAO_MAX_LENGTH: int = 5000

    @classmethod
    def criar(
        cls,
        codigo: str,
        descricao: str,
        criador_id: str,
        servicos: List[str],
        agora: datetime,
    ) -> "ChamadoEntity":
        """
        Factory method para abrir chamado com validações.

        Args:
            codigo: Código já gerado (INC0001)
            descricao: Descrição do problema (obrigatória)
            criador_id: ID do usuário que abre o chamado
            servicos: IDs de serviços ativos (pelo menos um)
            agora: Instante de abertura

        Returns:
            Chamado ABERTO, sem técnico

        Raises:
            ValidationError: Se dados de entrada inválidos
        """
        cls._validar_descricao(descricao)
        cls._validar_criador(criador_id)
        cls._validar_servicos(servicos)

        return cls(
            codigo=codigo,
            descricao=descricao.strip(),
            criador_id=criador_id,
            servicos=list(dict.fromkeys(servicos)),
            status=ChamadoStatus.ABERTO,
            criado_em=agora,
        )

    @classmethod
    def _validar_descricao(cls, descricao: str) -> None:
        if not descricao or not descricao.strip():
            raise ValidationError(
                "A descrição do chamado é obrigatória",
                field="descricao"
            )

        if len(descricao.strip()) > cls.DESCRICAO_MAX_LENGTH:
            raise ValidationError(
                f"Descrição deve ter no máximo {cls.DESCRICAO_MAX_LENGTH} caracteres",
                field="descricao"
            )

    @classmethod
    def _validar_criador(cls, criador_id: str) -> None:
        if not criador_id:
            raise ValidationError("Criador é obrigatório", field="criador_id")

    @classmethod
    def _validar_servicos(cls, servicos: List[str]) -> None:
        if not servicos:
            raise ValidationError(
                "É obrigatório informar pelo menos um serviço válido",
                field="servicos"
            )

    # =========================================================================
    # Mutações (mantêm os invariantes; autorização fica nas policies)
    # =========================================================================

    def assumir(self, tecnico_id: str, agora: datetime) -> None:
        """
        Coloca o chamado EM_ATENDIMENTO com o técnico informado.

        Raises:
            ValidationError: Se tecnico_id vazio
        """
        if not tecnico_id:
            raise ValidationError(
                "Técnico é obrigatório para colocar o chamado em atendimento",
                field="tecnico_id"
            )

        self.status = ChamadoStatus.EM_ATENDIMENTO
        self.tecnico_id = tecnico_id
        self.encerrado_em = None
        self._tocar(agora)

    def encerrar(self, descricao_encerramento: str, agora: datetime) -> None:
        """
        Encerra o chamado com a descrição da solução.

        Raises:
            ValidationError: Se descrição de encerramento vazia
        """
        if not descricao_encerramento or not descricao_encerramento.strip():
            raise ValidationError(
                "A descrição de encerramento é obrigatória ao encerrar um chamado",
                field="descricao_encerramento"
            )

        self.status = ChamadoStatus.ENCERRADO
        self.descricao_encerramento = descricao_encerramento.strip()
        self.encerrado_em = agora
        self._tocar(agora)

    def cancelar(self, justificativa: str, agora: datetime) -> None:
        """
        Cancela o chamado (status terminal).

        Raises:
            ValidationError: Se justificativa vazia
        """
        if not justificativa or not justificativa.strip():
            raise ValidationError(
                "É necessário informar a justificativa do cancelamento",
                field="justificativa"
            )

        self.status = ChamadoStatus.CANCELADO
        self.descricao_encerramento = justificativa.strip()
        self.encerrado_em = agora
        self._tocar(agora)

    def reabrir(self, agora: datetime, tecnico_id: Optional[str] = None) -> None:
        """
        Reabre o chamado. descricao_encerramento é mantida.

        Args:
            agora: Instante da reabertura
            tecnico_id: Técnico resolvido (mantém o atual se None)
        """
        self.status = ChamadoStatus.REABERTO
        self.encerrado_em = None
        if tecnico_id:
            self.tecnico_id = tecnico_id
        self._tocar(agora)

    def atribuir(self, tecnico_id: str, agora: datetime) -> None:
        """Define o técnico responsável sem alterar o status."""
        if not tecnico_id:
            raise ValidationError("ID do técnico é obrigatório", field="tecnico_id")

        self.tecnico_id = tecnico_id
        self._tocar(agora)

    def _tocar(self, agora: datetime) -> None:
        self.atualizado_em = agora
        self.versao += 1

    def __repr__(self) -> str:
        return (
            f"ChamadoEntity("
            f"id={self.id[:8]}..., "
            f"codigo={self.codigo}, "
            f"status={self.status.value}, "
            f"versao={self.versao}"
            f")"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChamadoEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
