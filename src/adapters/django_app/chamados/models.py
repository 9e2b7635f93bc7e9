"""
Django Models para o domínio de Chamados.

Estes models são ADAPTERS - implementam a persistência para as
entidades de domínio definidas em src/core/chamados/entities.py.

IMPORTANTE:
- Models NÃO contêm lógica de negócio
- Lógica de negócio fica nas Entities e Policies do Core
- Models são mapeados para/de Entities via Mappers

Tabelas (banco 'default'):
- ServicoModel: Catálogo de serviços
- ChamadoModel: Tabela principal de chamados
- OrdemDeServicoModel: Vínculo chamado <-> serviço
- ExpedienteModel: Janelas de expediente dos técnicos
"""

from django.db import models
from django.utils import timezone


class ChamadoStatusChoices(models.TextChoices):
    """Choices para status de chamado (espelha ChamadoStatus do Core)."""
    ABERTO = 'ABERTO', 'Aberto'
    EM_ATENDIMENTO = 'EM_ATENDIMENTO', 'Em atendimento'
    ENCERRADO = 'ENCERRADO', 'Encerrado'
    CANCELADO = 'CANCELADO', 'Cancelado'
    REABERTO = 'REABERTO', 'Reaberto'


class ServicoModel(models.Model):
    """
    Serviço do catálogo (gerido fora do engine).

    Chamados só podem ser abertos com serviços ativos.
    """

    id = models.CharField(
        max_length=36,
        primary_key=True,
        help_text="ID do serviço"
    )

    nome = models.CharField(
        max_length=150,
        unique=True,
        help_text="Nome exibido no catálogo"
    )

    ativo = models.BooleanField(
        default=True,
        db_index=True,
    )

    class Meta:
        db_table = 'servicos'
        verbose_name = 'Serviço'
        verbose_name_plural = 'Serviços'
        ordering = ['nome']

    def __str__(self):
        return self.nome


class ChamadoModel(models.Model):
    """
    Model Django para persistência de Chamados.

    Fields:
        id: UUID como primary key (gerado pela Entity)
        codigo: Código legível único (INC0001)
        descricao: Descrição do problema
        status: Estado atual (choices)
        criador_id: ID do usuário que abriu
        tecnico_id: ID do técnico responsável
        criado_em / atualizado_em / encerrado_em: Timestamps
        descricao_encerramento: Solução ou justificativa
        versao: Contador para escrita condicional
    """

    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
        help_text="UUID único do chamado"
    )

    codigo = models.CharField(
        max_length=20,
        unique=True,
        help_text="Código legível (INC0001)"
    )

    descricao = models.TextField(
        help_text="Descrição do problema"
    )

    status = models.CharField(
        max_length=20,
        choices=ChamadoStatusChoices.choices,
        default=ChamadoStatusChoices.ABERTO,
        db_index=True,
    )

    criador_id = models.CharField(
        max_length=100,
        db_index=True,
        help_text="ID do usuário criador"
    )

    tecnico_id = models.CharField(
        max_length=100,
        null=True,
        blank=True,
        db_index=True,
        help_text="ID do técnico responsável"
    )

    criado_em = models.DateTimeField(
        default=timezone.now,
        db_index=True,
    )

    atualizado_em = models.DateTimeField(
        null=True,
        blank=True,
    )

    encerrado_em = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Instante do encerramento (base da janela de reabertura)"
    )

    descricao_encerramento = models.TextField(
        null=True,
        blank=True,
    )

    versao = models.PositiveIntegerField(
        default=1,
        help_text="Incrementado a cada alteração"
    )

    servicos = models.ManyToManyField(
        ServicoModel,
        through='OrdemDeServicoModel',
        related_name='chamados',
    )

    class Meta:
        db_table = 'chamados'
        verbose_name = 'Chamado'
        verbose_name_plural = 'Chamados'
        ordering = ['-criado_em']
        indexes = [
            models.Index(fields=['status', 'criado_em'], name='chamados_status_1b6c0e_idx'),
            models.Index(fields=['tecnico_id', 'status'], name='chamados_tecnico_5a9d21_idx'),
            models.Index(fields=['criador_id', 'criado_em'], name='chamados_criador_c7e4f3_idx'),
        ]

    def __str__(self):
        return f"{self.codigo} ({self.status})"

    def __repr__(self):
        return f"<ChamadoModel codigo={self.codigo} status={self.status} versao={self.versao}>"


class OrdemDeServicoModel(models.Model):
    """Vínculo entre chamado e serviço do catálogo."""

    chamado = models.ForeignKey(
        ChamadoModel,
        on_delete=models.CASCADE,
        related_name='ordens',
    )

    servico = models.ForeignKey(
        ServicoModel,
        on_delete=models.PROTECT,
        related_name='ordens',
    )

    class Meta:
        db_table = 'ordens_de_servico'
        verbose_name = 'Ordem de Serviço'
        verbose_name_plural = 'Ordens de Serviço'
        constraints = [
            models.UniqueConstraint(fields=['chamado', 'servico'], name='ordem_chamado_servico_unica'),
        ]

    def __str__(self):
        return f"{self.chamado_id} -> {self.servico_id}"


class ExpedienteModel(models.Model):
    """
    Janela diária de expediente de um técnico.

    Horários no fuso de EXPEDIENTE_FUSO_HORARIO. saida < entrada
    indica expediente que atravessa a meia-noite.
    """

    tecnico_id = models.CharField(
        max_length=100,
        db_index=True,
    )

    entrada = models.TimeField()

    saida = models.TimeField()

    class Meta:
        db_table = 'expedientes'
        verbose_name = 'Expediente'
        verbose_name_plural = 'Expedientes'
        ordering = ['tecnico_id', 'entrada']

    def __str__(self):
        return f"{self.tecnico_id}: {self.entrada:%H:%M}-{self.saida:%H:%M}"
