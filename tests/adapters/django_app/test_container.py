"""Testes do container de Dependency Injection."""

from datetime import time

from dependency_injector import providers

from src.adapters.django_app.chamados.repositories import DjangoChamadoRepository
from src.adapters.django_app.events.publishers import InMemoryEventPublisher, LoggingEventPublisher
from src.adapters.django_app.shared.unit_of_work import InMemoryUnitOfWork
from src.config.container import configuracao_do_engine, get_container, get_testing_container, reset_container
from src.core.chamados.dtos import AbrirChamadoInputDTO, AlterarStatusInputDTO
from src.core.chamados.entities import Ator, Expediente, Regra
from src.core.chamados.ports import InMemoryCatalogoServicos, InMemoryChamadoRepository
from src.core.chamados.use_cases import AlterarStatusService


class TestContainer:

    def test_get_container_e_singleton(self):
        assert get_container() is get_container()

        anterior = get_container()
        reset_container()
        assert get_container() is not anterior

    def test_configuracao_vem_das_settings(self):
        config = configuracao_do_engine()

        assert config["reabertura_janela_horas"] == 48
        assert config["expediente_fuso_horario"] == "America/Sao_Paulo"
        assert config["event_publisher_mode"] == "sync"

    def test_providers_de_producao(self):
        container = get_container()

        assert isinstance(container.chamado_repository(), DjangoChamadoRepository)
        assert container.chamado_repository() is container.chamado_repository()
        assert isinstance(container.event_publisher(), LoggingEventPublisher)
        assert isinstance(container.alterar_status_service(), AlterarStatusService)
        assert container.politica_reabertura().janela.total_seconds() == 48 * 3600


class TestTestingContainer:

    def test_usa_implementacoes_em_memoria(self):
        container = get_testing_container()

        assert isinstance(container.chamado_repository(), InMemoryChamadoRepository)
        assert isinstance(container.event_publisher(), InMemoryEventPublisher)
        assert isinstance(container.unit_of_work(), InMemoryUnitOfWork)

    def test_services_ligados_ao_mesmo_estado(self):
        container = get_testing_container()
        container.catalogo_servicos.override(providers.Object(InMemoryCatalogoServicos({"srv-vpn": "VPN"})))
        container.expediente_repository().adicionar(Expediente("tec-1", time(0, 0), time(23, 59)))
        usuario = Ator(id="user-1", regra=Regra.USUARIO, email="ana@empresa.com")
        tecnico = Ator(id="tec-1", regra=Regra.TECNICO)

        aberto = container.abrir_chamado_service().execute(
            AbrirChamadoInputDTO(descricao="Sem VPN", servicos=("VPN",)), usuario
        )
        assumido = container.alterar_status_service().execute(
            AlterarStatusInputDTO(chamado_id=aberto.id, status="EM_ATENDIMENTO"), tecnico
        )

        assert assumido.tecnico_id == "tec-1"
        assert len(container.historico_ledger().listar(aberto.id)) == 2
        tipos = [e.event_type for e in container.event_publisher().published_events]
        assert tipos == ["ChamadoAbertoEvent", "ChamadoStatusAlteradoEvent"]
