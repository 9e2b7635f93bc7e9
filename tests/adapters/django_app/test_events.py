"""
Testes de eventos: publishers, handlers e tarefas de notificação.
"""

import logging
from datetime import datetime, timezone

import pytest

from src.adapters.django_app.events import handlers
from src.adapters.django_app.events.publishers import (
    CeleryEventPublisher,
    CompositeEventPublisher,
    InMemoryEventPublisher,
    LoggingEventPublisher,
    get_event_publisher,
)
from src.adapters.django_app.historico.repositories import DjangoHistoricoLedger
from src.adapters.django_app.shared.unit_of_work import DjangoUnitOfWork, InMemoryUnitOfWork
from src.core.chamados.entities import Ator, HistoricoTipo, Regra, RegistroHistorico
from src.core.chamados.events import ChamadoAbertoEvent, ChamadoStatusAlteradoEvent

BANCOS = ["default", "historico"]


def _evento_encerrado(chamado_id="c-1"):
    return ChamadoStatusAlteradoEvent(
        aggregate_id=chamado_id,
        codigo="INC0001",
        status_anterior="EM_ATENDIMENTO",
        status_novo="ENCERRADO",
        ator_id="tec-1",
        tecnico_id="tec-1",
        criador_id="user-1",
        descricao_encerramento="Cabo trocado",
    )


class PublisherQuebrado(InMemoryEventPublisher):
    def publish(self, event):
        raise RuntimeError("broker fora do ar")


class TestPublishers:

    def test_get_event_publisher(self):
        assert isinstance(get_event_publisher("sync"), LoggingEventPublisher)
        assert isinstance(get_event_publisher("celery"), CeleryEventPublisher)

        with pytest.raises(ValueError):
            get_event_publisher("kafka")

    def test_in_memory_registra_e_chama_handlers(self):
        publisher = InMemoryEventPublisher()
        recebidos = []
        publisher.register_handler("ChamadoAbertoEvent", recebidos.append)

        publisher.publish(ChamadoAbertoEvent(aggregate_id="c-1", codigo="INC0001"))

        assert len(publisher.get_events_by_type("ChamadoAbertoEvent")) == 1
        assert recebidos[0].codigo == "INC0001"

    def test_composite_isola_falhas(self):
        destino = InMemoryEventPublisher()
        composite = CompositeEventPublisher([PublisherQuebrado(), destino])

        composite.publish(ChamadoAbertoEvent(aggregate_id="c-1"))

        assert len(destino.published_events) == 1

    def test_logging_publisher_sem_handlers(self, caplog):
        publisher = LoggingEventPublisher(run_handlers=False)

        with caplog.at_level(logging.INFO):
            publisher.publish(ChamadoAbertoEvent(aggregate_id="c-1", codigo="INC0001"))

        assert "ChamadoAbertoEvent" in caplog.text


class TestUnitOfWork:

    def test_in_memory_publica_apos_commit(self):
        publisher = InMemoryEventPublisher()
        uow = InMemoryUnitOfWork(event_publisher=publisher)

        with uow:
            uow.publish_event(ChamadoAbertoEvent(aggregate_id="c-1"))
            assert publisher.published_events == []

        assert uow.committed
        assert len(publisher.published_events) == 1

    def test_in_memory_rollback_descarta_eventos(self):
        publisher = InMemoryEventPublisher()
        uow = InMemoryUnitOfWork(event_publisher=publisher)

        with pytest.raises(ValueError):
            with uow:
                uow.publish_event(ChamadoAbertoEvent(aggregate_id="c-1"))
                raise ValueError("falhou")

        assert uow.rolled_back
        assert publisher.published_events == []

    @pytest.mark.django_db(databases=BANCOS)
    def test_django_falha_do_publisher_nao_desfaz_commit(self, servico_factory):
        from src.adapters.django_app.chamados.models import ServicoModel

        uow = DjangoUnitOfWork(event_publisher=PublisherQuebrado())

        with uow:
            servico_factory("srv-x", "Serviço X")
            uow.publish_event(ChamadoAbertoEvent(aggregate_id="c-1"))

        assert uow.committed
        assert ServicoModel.objects.filter(id="srv-x").exists()

    @pytest.mark.django_db(databases=BANCOS)
    def test_django_rollback(self, servico_factory):
        from src.adapters.django_app.chamados.models import ServicoModel

        uow = DjangoUnitOfWork()

        with pytest.raises(RuntimeError):
            with uow:
                servico_factory("srv-y", "Serviço Y")
                raise RuntimeError("conflito")

        assert uow.rolled_back
        assert not ServicoModel.objects.filter(id="srv-y").exists()


class TestHandlers:

    def test_evento_sem_handler(self):
        assert handlers.processar_evento("EventoDesconhecido", {}) is False

    def test_enviar_email_sem_destinatario(self, mailoutbox):
        assert handlers.enviar_email("", "Assunto", "Mensagem") is False
        assert mailoutbox == []

    def test_enviar_email(self, mailoutbox):
        assert handlers.enviar_email("ana@empresa.com", "Chamado INC0001 aberto", "ok") is True
        assert mailoutbox[0].from_email == "helpme@teste.local"

    def test_aberto_notifica_criador(self, mailoutbox):
        evento = ChamadoAbertoEvent(
            aggregate_id="c-1", codigo="INC0001", criador_id="user-1",
            criador_email="ana@empresa.com", descricao="Sem VPN",
        )

        handlers.processar_evento(evento.event_type, evento.to_dict())

        assert mailoutbox[0].to == ["ana@empresa.com"]

    @pytest.mark.django_db(databases=BANCOS)
    def test_encerrado_busca_email_no_historico(self, mailoutbox):
        criador = Ator(id="user-1", regra=Regra.USUARIO, nome="Ana", email="ana@empresa.com")
        DjangoHistoricoLedger().append(RegistroHistorico.criar(
            "c-1", HistoricoTipo.ABERTURA, "Sem VPN", criador,
            datetime(2025, 1, 6, 12, 0, tzinfo=timezone.utc), para="ABERTO",
        ))
        evento = _evento_encerrado("c-1")

        handlers.processar_evento(evento.event_type, evento.to_dict())

        assert mailoutbox[0].to == ["ana@empresa.com"]
        assert "Cabo trocado" in mailoutbox[0].body

    @pytest.mark.django_db(databases=BANCOS)
    def test_encerrado_sem_abertura_no_historico(self, mailoutbox):
        evento = _evento_encerrado("c-sem-historico")

        handlers.processar_evento(evento.event_type, evento.to_dict())

        assert mailoutbox == []
