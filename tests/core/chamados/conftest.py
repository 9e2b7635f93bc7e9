"""
Fixtures dos testes unitários do domínio de Chamados.

Tudo em memória: repositórios InMemory, InMemoryUnitOfWork e
relógio fixo. O instante base é uma segunda-feira, 09:00 em
São Paulo (12:00 UTC).
"""

from datetime import datetime, time, timezone
from types import SimpleNamespace

import pytest

from src.adapters.django_app.events.publishers import InMemoryEventPublisher
from src.adapters.django_app.shared.unit_of_work import InMemoryUnitOfWork
from src.core.chamados.codigo import GeradorCodigoChamado
from src.core.chamados.dtos import AbrirChamadoInputDTO
from src.core.chamados.entities import Ator, Expediente, Regra
from src.core.chamados.policies import (
    GuardaTransicaoStatus,
    PoliticaCancelamento,
    PoliticaReabertura,
    ResolvedorTecnico,
    VerificadorExpediente,
)
from src.core.chamados.ports import (
    InMemoryCatalogoServicos,
    InMemoryChamadoRepository,
    InMemoryExpedienteRepository,
    InMemoryHistoricoLedger,
)
from src.core.chamados.use_cases import (
    AbrirChamadoService,
    AlterarStatusService,
    AtribuirChamadoService,
    CancelarChamadoService,
    ComentarChamadoService,
    ExcluirChamadoService,
    ListarChamadosService,
    ObterChamadoService,
    ObterHistoricoService,
    ReabrirChamadoService,
)
from src.core.shared.clock import FixedClock

AGORA = datetime(2025, 1, 6, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return FixedClock(AGORA)


@pytest.fixture
def usuario():
    return Ator(id="user-1", regra=Regra.USUARIO, nome="Ana Souza", email="ana@empresa.com")


@pytest.fixture
def outro_usuario():
    return Ator(id="user-2", regra=Regra.USUARIO, nome="Bruno Lima", email="bruno@empresa.com")


@pytest.fixture
def admin():
    return Ator(id="admin-1", regra=Regra.ADMIN, nome="Carla Admin", email="carla@empresa.com")


@pytest.fixture
def tecnico():
    return Ator(id="tec-1", regra=Regra.TECNICO, nome="Diego Técnico", email="diego@empresa.com")


@pytest.fixture
def tecnico_sem_expediente():
    return Ator(id="tec-2", regra=Regra.TECNICO, nome="Elisa", email="elisa@empresa.com")


@pytest.fixture
def chamado_repo():
    return InMemoryChamadoRepository()


@pytest.fixture
def ledger():
    return InMemoryHistoricoLedger()


@pytest.fixture
def expediente_repo():
    return InMemoryExpedienteRepository([
        Expediente(tecnico_id="tec-1", entrada=time(8, 0), saida=time(18, 0)),
    ])


@pytest.fixture
def catalogo():
    return InMemoryCatalogoServicos(
        {"srv-vpn": "VPN", "srv-impressora": "Impressora", "srv-legado": "Sistema Legado"},
        inativos=["srv-legado"],
    )


@pytest.fixture
def publisher():
    return InMemoryEventPublisher()


@pytest.fixture
def uow(publisher):
    return InMemoryUnitOfWork(event_publisher=publisher)


@pytest.fixture
def verificador(expediente_repo):
    return VerificadorExpediente(expediente_repo, "America/Sao_Paulo")


@pytest.fixture
def servicos(chamado_repo, ledger, catalogo, uow, clock, verificador):
    """Todos os use cases ligados às mesmas dependências em memória."""
    return SimpleNamespace(
        abrir=AbrirChamadoService(
            chamado_repo, catalogo, ledger, uow, GeradorCodigoChamado(chamado_repo), clock
        ),
        alterar_status=AlterarStatusService(
            chamado_repo, ledger, uow, GuardaTransicaoStatus(verificador), clock
        ),
        reabrir=ReabrirChamadoService(
            chamado_repo, ledger, uow, PoliticaReabertura(48), ResolvedorTecnico(ledger), clock
        ),
        cancelar=CancelarChamadoService(chamado_repo, ledger, uow, PoliticaCancelamento(), clock),
        excluir=ExcluirChamadoService(chamado_repo, uow),
        atribuir=AtribuirChamadoService(chamado_repo, ledger, uow, clock),
        comentar=ComentarChamadoService(chamado_repo, ledger, uow, clock),
        historico=ObterHistoricoService(ledger),
        obter=ObterChamadoService(chamado_repo, ledger),
        listar=ListarChamadosService(chamado_repo),
    )


@pytest.fixture
def abrir_chamado(servicos, usuario):
    """Abre um chamado como `usuario` (ou outro ator informado)."""
    def _abrir(descricao="Sem acesso à VPN", ator=None, servicos_ref=("VPN",)):
        return servicos.abrir.execute(
            AbrirChamadoInputDTO(descricao=descricao, servicos=tuple(servicos_ref)),
            ator or usuario,
        )
    return _abrir
