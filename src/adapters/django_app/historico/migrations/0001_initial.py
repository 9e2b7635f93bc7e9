"""
Migration inicial do ledger de histórico.

Cria a tabela historico_chamados no banco 'historico'.
"""

from django.db import migrations, models


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='HistoricoChamadoModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                )),
                ('chamado_id', models.CharField(max_length=36, db_index=True)),
                ('tipo', models.CharField(
                    max_length=20,
                    choices=[
                        ('ABERTURA', 'Abertura'),
                        ('ATRIBUICAO', 'Atribuição'),
                        ('STATUS', 'Status'),
                        ('COMENTARIO', 'Comentário'),
                        ('REABERTURA', 'Reabertura'),
                    ],
                    db_index=True,
                )),
                ('de', models.CharField(max_length=20, null=True, blank=True)),
                ('para', models.CharField(max_length=20, null=True, blank=True)),
                ('descricao', models.TextField()),
                ('autor_id', models.CharField(max_length=100)),
                ('autor_nome', models.CharField(max_length=150, blank=True, default='')),
                ('autor_email', models.CharField(max_length=254, blank=True, default='')),
                ('ocorrido_em', models.DateTimeField()),
            ],
            options={
                'db_table': 'historico_chamados',
                'verbose_name': 'Histórico de Chamado',
                'verbose_name_plural': 'Histórico de Chamados',
                'ordering': ['ocorrido_em'],
            },
        ),
        migrations.AddIndex(
            model_name='historicochamadomodel',
            index=models.Index(fields=['chamado_id', 'ocorrido_em'], name='historico_c_chamado_3f8a1d_idx'),
        ),
        migrations.AddIndex(
            model_name='historicochamadomodel',
            index=models.Index(fields=['chamado_id', 'tipo', 'para'], name='historico_c_chamado_9e2b47_idx'),
        ),
    ]
