"""
Fixtures para testes com Django.

Os dois bancos ('default' e 'historico') são criados pelo
pytest-django a partir das migrations; cada teste declara
os bancos que usa via django_db(databases=[...]).
"""

from datetime import time

import pytest


@pytest.fixture
def servico_factory():
    """Factory para criar ServicoModel no catálogo."""
    from src.adapters.django_app.chamados.models import ServicoModel

    def create_servico(id, nome, ativo=True):
        return ServicoModel.objects.create(id=id, nome=nome, ativo=ativo)

    return create_servico


@pytest.fixture
def catalogo_basico(servico_factory):
    servico_factory("srv-vpn", "VPN")
    servico_factory("srv-impressora", "Impressora")
    servico_factory("srv-legado", "Sistema Legado", ativo=False)


@pytest.fixture
def expediente_integral():
    """Técnico tec-1 com expediente cobrindo o dia todo."""
    from src.adapters.django_app.chamados.models import ExpedienteModel

    return ExpedienteModel.objects.create(tecnico_id="tec-1", entrada=time(0, 0), saida=time(23, 59))


def headers_de(ator_id, regra, nome="", email=""):
    """Headers do gateway no formato do Django test client."""
    return {
        "HTTP_X_ATOR_ID": ator_id,
        "HTTP_X_ATOR_REGRA": regra,
        "HTTP_X_ATOR_NOME": nome,
        "HTTP_X_ATOR_EMAIL": email,
    }


@pytest.fixture
def como_usuario():
    return headers_de("user-1", "USUARIO", "Ana Souza", "ana@empresa.com")


@pytest.fixture
def como_outro_usuario():
    return headers_de("user-2", "USUARIO", "Bruno Lima", "bruno@empresa.com")


@pytest.fixture
def como_tecnico():
    return headers_de("tec-1", "TECNICO", "Diego Técnico", "diego@empresa.com")


@pytest.fixture
def como_admin():
    return headers_de("admin-1", "ADMIN", "Carla Admin", "carla@empresa.com")
