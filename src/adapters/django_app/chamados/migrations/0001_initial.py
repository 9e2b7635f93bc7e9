"""
Migration inicial para o domínio de Chamados.

Cria as tabelas (banco 'default'):
- servicos: Catálogo de serviços
- chamados: Tabela principal de chamados
- ordens_de_servico: Vínculo chamado <-> serviço
- expedientes: Janelas de expediente dos técnicos
"""

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        # =================================================================
        # Tabela: servicos
        # =================================================================
        migrations.CreateModel(
            name='ServicoModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    help_text='ID do serviço'
                )),
                ('nome', models.CharField(
                    max_length=150,
                    unique=True,
                    help_text='Nome exibido no catálogo'
                )),
                ('ativo', models.BooleanField(default=True, db_index=True)),
            ],
            options={
                'db_table': 'servicos',
                'verbose_name': 'Serviço',
                'verbose_name_plural': 'Serviços',
                'ordering': ['nome'],
            },
        ),

        # =================================================================
        # Tabela: chamados
        # =================================================================
        migrations.CreateModel(
            name='ChamadoModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                    help_text='UUID único do chamado'
                )),
                ('codigo', models.CharField(
                    max_length=20,
                    unique=True,
                    help_text='Código legível (INC0001)'
                )),
                ('descricao', models.TextField(help_text='Descrição do problema')),
                ('status', models.CharField(
                    max_length=20,
                    choices=[
                        ('ABERTO', 'Aberto'),
                        ('EM_ATENDIMENTO', 'Em atendimento'),
                        ('ENCERRADO', 'Encerrado'),
                        ('CANCELADO', 'Cancelado'),
                        ('REABERTO', 'Reaberto'),
                    ],
                    default='ABERTO',
                    db_index=True,
                )),
                ('criador_id', models.CharField(
                    max_length=100,
                    db_index=True,
                    help_text='ID do usuário criador'
                )),
                ('tecnico_id', models.CharField(
                    max_length=100,
                    null=True,
                    blank=True,
                    db_index=True,
                    help_text='ID do técnico responsável'
                )),
                ('criado_em', models.DateTimeField(
                    default=django.utils.timezone.now,
                    db_index=True,
                )),
                ('atualizado_em', models.DateTimeField(null=True, blank=True)),
                ('encerrado_em', models.DateTimeField(
                    null=True,
                    blank=True,
                    help_text='Instante do encerramento (base da janela de reabertura)'
                )),
                ('descricao_encerramento', models.TextField(null=True, blank=True)),
                ('versao', models.PositiveIntegerField(
                    default=1,
                    help_text='Incrementado a cada alteração'
                )),
            ],
            options={
                'db_table': 'chamados',
                'verbose_name': 'Chamado',
                'verbose_name_plural': 'Chamados',
                'ordering': ['-criado_em'],
            },
        ),

        # =================================================================
        # Tabela: ordens_de_servico
        # =================================================================
        migrations.CreateModel(
            name='OrdemDeServicoModel',
            fields=[
                ('id', models.BigAutoField(
                    auto_created=True,
                    primary_key=True,
                    serialize=False,
                    verbose_name='ID'
                )),
                ('chamado', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='ordens',
                    to='chamados.chamadomodel',
                )),
                ('servico', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='ordens',
                    to='chamados.servicomodel',
                )),
            ],
            options={
                'db_table': 'ordens_de_servico',
                'verbose_name': 'Ordem de Serviço',
                'verbose_name_plural': 'Ordens de Serviço',
            },
        ),
        migrations.AddField(
            model_name='chamadomodel',
            name='servicos',
            field=models.ManyToManyField(
                related_name='chamados',
                through='chamados.OrdemDeServicoModel',
                to='chamados.servicomodel',
            ),
        ),
        migrations.AddConstraint(
            model_name='ordemdeservicomodel',
            constraint=models.UniqueConstraint(
                fields=('chamado', 'servico'),
                name='ordem_chamado_servico_unica',
            ),
        ),

        # =================================================================
        # Tabela: expedientes
        # =================================================================
        migrations.CreateModel(
            name='ExpedienteModel',
            fields=[
                ('id', models.BigAutoField(
                    auto_created=True,
                    primary_key=True,
                    serialize=False,
                    verbose_name='ID'
                )),
                ('tecnico_id', models.CharField(max_length=100, db_index=True)),
                ('entrada', models.TimeField()),
                ('saida', models.TimeField()),
            ],
            options={
                'db_table': 'expedientes',
                'verbose_name': 'Expediente',
                'verbose_name_plural': 'Expedientes',
                'ordering': ['tecnico_id', 'entrada'],
            },
        ),

        # =================================================================
        # Índices
        # =================================================================
        migrations.AddIndex(
            model_name='chamadomodel',
            index=models.Index(fields=['status', 'criado_em'], name='chamados_status_1b6c0e_idx'),
        ),
        migrations.AddIndex(
            model_name='chamadomodel',
            index=models.Index(fields=['tecnico_id', 'status'], name='chamados_tecnico_5a9d21_idx'),
        ),
        migrations.AddIndex(
            model_name='chamadomodel',
            index=models.Index(fields=['criador_id', 'criado_em'], name='chamados_criador_c7e4f3_idx'),
        ),
    ]
