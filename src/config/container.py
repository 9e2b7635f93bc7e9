"""
Dependency Injection Container.

Configura e gerencia todas as dependências da aplicação.
Usa dependency-injector para lazy-loading e injeção automática.

Padrões:
- Singleton: Uma instância para toda app (repositories, ledger, clock)
- Factory: Nova instância por chamada (services, UoW)
- Configuration: parâmetros do engine lidos das settings do Django
"""

from dependency_injector import containers, providers
from typing import Optional


def _lazy(modulo: str, nome: str):
    """
    Callable que importa `modulo.nome` só quando o provider é chamado.

    Evita importar Django/ORM ao carregar o container.
    """
    def criar(*args, **kwargs):
        return getattr(__import__(modulo, fromlist=[nome]), nome)(*args, **kwargs)

    criar.__name__ = nome
    return criar


USE_CASES = 'src.core.chamados.use_cases'
POLICIES = 'src.core.chamados.policies'


class Container(containers.DeclarativeContainer):
    """
    Container principal de Dependency Injection.

    Organização:
    - Configuration: settings do engine (janela, fuso, tentativas)
    - Infrastructure: relógio, publisher de eventos
    - Repositories: chamados, expedientes, catálogo, ledger
    - Unit of Work: transação do banco de chamados
    - Policies: regras do ciclo de vida
    - Services: Use Cases

    Example:
        container = get_container()
        service = container.alterar_status_service()
        output = service.execute(input_dto, ator)
    """

    config = providers.Configuration()

    # =========================================================================
    # Infrastructure
    # =========================================================================

    clock = providers.Singleton(_lazy('src.core.shared.clock', 'SystemClock'))

    event_publisher = providers.Singleton(
        _lazy('src.adapters.django_app.events.publishers', 'get_event_publisher'),
        mode=config.event_publisher_mode,
    )

    # =========================================================================
    # Repositories (Singleton)
    # =========================================================================

    chamado_repository = providers.Singleton(
        _lazy('src.adapters.django_app.chamados.repositories', 'DjangoChamadoRepository')
    )

    expediente_repository = providers.Singleton(
        _lazy('src.adapters.django_app.chamados.repositories', 'DjangoExpedienteRepository')
    )

    catalogo_servicos = providers.Singleton(
        _lazy('src.adapters.django_app.chamados.repositories', 'DjangoCatalogoServicos')
    )

    historico_ledger = providers.Singleton(
        _lazy('src.adapters.django_app.historico.repositories', 'DjangoHistoricoLedger')
    )

    # =========================================================================
    # Unit of Work (Factory - nova instância por operação)
    # =========================================================================

    unit_of_work = providers.Factory(
        _lazy('src.adapters.django_app.shared.unit_of_work', 'DjangoUnitOfWork'),
        event_publisher=event_publisher,
    )

    # =========================================================================
    # Policies
    # =========================================================================

    gerador_codigo = providers.Factory(
        _lazy('src.core.chamados.codigo', 'GeradorCodigoChamado'),
        chamado_repo=chamado_repository,
        max_tentativas=config.codigo_max_tentativas,
    )

    verificador_expediente = providers.Factory(
        _lazy(POLICIES, 'VerificadorExpediente'),
        expediente_repo=expediente_repository,
        fuso_horario=config.expediente_fuso_horario,
    )

    guarda_transicao = providers.Factory(
        _lazy(POLICIES, 'GuardaTransicaoStatus'),
        verificador_expediente=verificador_expediente,
    )

    politica_reabertura = providers.Factory(
        _lazy(POLICIES, 'PoliticaReabertura'),
        janela_horas=config.reabertura_janela_horas,
    )

    resolvedor_tecnico = providers.Factory(
        _lazy(POLICIES, 'ResolvedorTecnico'),
        ledger=historico_ledger,
    )

    politica_cancelamento = providers.Factory(_lazy(POLICIES, 'PoliticaCancelamento'))

    # =========================================================================
    # Services / Use Cases (Factory)
    # =========================================================================

    abrir_chamado_service = providers.Factory(
        _lazy(USE_CASES, 'AbrirChamadoService'),
        chamado_repo=chamado_repository,
        catalogo=catalogo_servicos,
        ledger=historico_ledger,
        uow=unit_of_work,
        gerador_codigo=gerador_codigo,
        clock=clock,
        max_tentativas_historico=config.historico_max_tentativas,
    )

    alterar_status_service = providers.Factory(
        _lazy(USE_CASES, 'AlterarStatusService'),
        chamado_repo=chamado_repository,
        ledger=historico_ledger,
        uow=unit_of_work,
        guarda=guarda_transicao,
        clock=clock,
        max_tentativas_historico=config.historico_max_tentativas,
    )

    reabrir_chamado_service = providers.Factory(
        _lazy(USE_CASES, 'ReabrirChamadoService'),
        chamado_repo=chamado_repository,
        ledger=historico_ledger,
        uow=unit_of_work,
        politica=politica_reabertura,
        resolvedor=resolvedor_tecnico,
        clock=clock,
        max_tentativas_historico=config.historico_max_tentativas,
    )

    cancelar_chamado_service = providers.Factory(
        _lazy(USE_CASES, 'CancelarChamadoService'),
        chamado_repo=chamado_repository,
        ledger=historico_ledger,
        uow=unit_of_work,
        politica=politica_cancelamento,
        clock=clock,
        max_tentativas_historico=config.historico_max_tentativas,
    )

    excluir_chamado_service = providers.Factory(
        _lazy(USE_CASES, 'ExcluirChamadoService'),
        chamado_repo=chamado_repository,
        uow=unit_of_work,
    )

    atribuir_chamado_service = providers.Factory(
        _lazy(USE_CASES, 'AtribuirChamadoService'),
        chamado_repo=chamado_repository,
        ledger=historico_ledger,
        uow=unit_of_work,
        clock=clock,
        max_tentativas_historico=config.historico_max_tentativas,
    )

    comentar_chamado_service = providers.Factory(
        _lazy(USE_CASES, 'ComentarChamadoService'),
        chamado_repo=chamado_repository,
        ledger=historico_ledger,
        uow=unit_of_work,
        clock=clock,
        max_tentativas_historico=config.historico_max_tentativas,
    )

    # Leitura (sem UoW)
    obter_historico_service = providers.Factory(
        _lazy(USE_CASES, 'ObterHistoricoService'),
        ledger=historico_ledger,
    )

    obter_chamado_service = providers.Factory(
        _lazy(USE_CASES, 'ObterChamadoService'),
        chamado_repo=chamado_repository,
        ledger=historico_ledger,
    )

    listar_chamados_service = providers.Factory(
        _lazy(USE_CASES, 'ListarChamadosService'),
        chamado_repo=chamado_repository,
    )


def configuracao_do_engine() -> dict:
    """Parâmetros do engine a partir das settings do Django."""
    from django.conf import settings

    return {
        'event_publisher_mode': getattr(settings, 'EVENT_PUBLISHER_MODE', 'sync'),
        'codigo_max_tentativas': getattr(settings, 'CODIGO_MAX_TENTATIVAS', 10),
        'historico_max_tentativas': getattr(settings, 'HISTORICO_MAX_TENTATIVAS', 2),
        'reabertura_janela_horas': getattr(settings, 'REABERTURA_JANELA_HORAS', 48),
        'expediente_fuso_horario': getattr(settings, 'EXPEDIENTE_FUSO_HORARIO', settings.TIME_ZONE),
    }


# =============================================================================
# Container Global (Singleton)
# =============================================================================

_container: Optional[Container] = None


def get_container() -> Container:
    """
    Retorna instância global do container.

    Cria e configura se não existir (lazy initialization).
    """
    global _container

    if _container is None:
        _container = Container()
        _container.config.from_dict(configuracao_do_engine())

    return _container


def reset_container() -> None:
    """Reset do container (para testes)."""
    global _container
    _container = None


# =============================================================================
# Testing Container
# =============================================================================

class TestingContainer(containers.DeclarativeContainer):
    """
    Providers InMemory que sobrescrevem os do Container.

    Os services continuam os do Container; só repositórios,
    ledger, UoW e publisher são trocados.

    Example:
        container = Container()
        container.override(TestingContainer())
        container.chamado_repository()  # InMemoryChamadoRepository
    """

    __test__ = False

    event_publisher = providers.Singleton(
        _lazy('src.adapters.django_app.events.publishers', 'InMemoryEventPublisher')
    )

    chamado_repository = providers.Singleton(
        _lazy('src.core.chamados.ports', 'InMemoryChamadoRepository')
    )

    expediente_repository = providers.Singleton(
        _lazy('src.core.chamados.ports', 'InMemoryExpedienteRepository')
    )

    catalogo_servicos = providers.Singleton(
        _lazy('src.core.chamados.ports', 'InMemoryCatalogoServicos')
    )

    historico_ledger = providers.Singleton(
        _lazy('src.core.chamados.ports', 'InMemoryHistoricoLedger')
    )

    unit_of_work = providers.Factory(
        _lazy('src.adapters.django_app.shared.unit_of_work', 'InMemoryUnitOfWork'),
        event_publisher=event_publisher,
    )


def get_testing_container(config: Optional[dict] = None) -> Container:
    """Container novo com os providers InMemory aplicados."""
    container = Container()
    container.config.from_dict(config or configuracao_do_engine())
    container.override(TestingContainer())
    return container
