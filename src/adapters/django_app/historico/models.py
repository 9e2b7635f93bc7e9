"""
Django Models do ledger de histórico.

Banco separado ('historico'); sem FK para chamados. Registros de
chamados excluídos permanecem.
"""

from django.db import models


class HistoricoTipoChoices(models.TextChoices):
    """Choices para tipo de registro (espelha HistoricoTipo do Core)."""
    ABERTURA = 'ABERTURA', 'Abertura'
    ATRIBUICAO = 'ATRIBUICAO', 'Atribuição'
    STATUS = 'STATUS', 'Status'
    COMENTARIO = 'COMENTARIO', 'Comentário'
    REABERTURA = 'REABERTURA', 'Reabertura'


class HistoricoChamadoModel(models.Model):
    """
    Registro append-only do histórico de um chamado.

    Fields:
        id: UUID determinístico gerado pelo Core (idempotência)
        chamado_id: ID do chamado (sem FK, outro banco)
        tipo: Tipo do registro
        de / para: Status anterior e novo (quando aplicável)
        descricao: Texto do registro
        autor_*: Quem executou a ação
        ocorrido_em: Instante do registro
    """

    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
    )

    chamado_id = models.CharField(
        max_length=36,
        db_index=True,
    )

    tipo = models.CharField(
        max_length=20,
        choices=HistoricoTipoChoices.choices,
        db_index=True,
    )

    de = models.CharField(max_length=20, null=True, blank=True)

    para = models.CharField(max_length=20, null=True, blank=True)

    descricao = models.TextField()

    autor_id = models.CharField(max_length=100)

    autor_nome = models.CharField(max_length=150, blank=True, default='')

    autor_email = models.CharField(max_length=254, blank=True, default='')

    ocorrido_em = models.DateTimeField()

    class Meta:
        db_table = 'historico_chamados'
        verbose_name = 'Histórico de Chamado'
        verbose_name_plural = 'Histórico de Chamados'
        ordering = ['ocorrido_em']
        indexes = [
            models.Index(fields=['chamado_id', 'ocorrido_em'], name='historico_c_chamado_3f8a1d_idx'),
            models.Index(fields=['chamado_id', 'tipo', 'para'], name='historico_c_chamado_9e2b47_idx'),
        ]

    def __str__(self):
        return f"{self.tipo} {self.de or ''}->{self.para or ''} @ {self.ocorrido_em}"
