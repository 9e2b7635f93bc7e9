"""Testes do GeradorCodigoChamado (INC0001, INC0002, ...)."""

from datetime import datetime, timedelta, timezone

import pytest

from src.core.chamados.codigo import GeradorCodigoChamado
from src.core.chamados.entities import ChamadoEntity
from src.core.chamados.ports import InMemoryChamadoRepository
from src.core.shared.exceptions import ConflictError

BASE = datetime(2025, 1, 6, 12, 0, tzinfo=timezone.utc)


def _gravar(repo, codigo, minutos=0):
    repo.save(ChamadoEntity(codigo=codigo, criado_em=BASE + timedelta(minutes=minutos)))


class TestGeradorCodigoChamado:

    def test_base_vazia(self):
        assert GeradorCodigoChamado(InMemoryChamadoRepository()).gerar() == "INC0001"

    def test_segue_o_chamado_mais_recente(self):
        repo = InMemoryChamadoRepository()
        _gravar(repo, "INC0007", minutos=0)
        _gravar(repo, "INC0009", minutos=5)

        assert GeradorCodigoChamado(repo).gerar() == "INC0010"

    def test_passa_de_quatro_digitos(self):
        repo = InMemoryChamadoRepository()
        _gravar(repo, "INC9999")

        assert GeradorCodigoChamado(repo).gerar() == "INC10000"

    def test_pula_codigo_existente(self):
        """O mais recente é INC0003, mas INC0004 já foi usado antes."""
        repo = InMemoryChamadoRepository()
        _gravar(repo, "INC0004", minutos=0)
        _gravar(repo, "INC0003", minutos=1)

        assert GeradorCodigoChamado(repo).gerar() == "INC0005"

    def test_codigo_fora_do_padrao_reinicia(self):
        repo = InMemoryChamadoRepository()
        _gravar(repo, "LEGADO-77")

        assert GeradorCodigoChamado(repo).gerar() == "INC0001"

    def test_esgota_tentativas(self):
        repo = InMemoryChamadoRepository()
        _gravar(repo, "INC0002", minutos=0)
        _gravar(repo, "INC0003", minutos=0)
        _gravar(repo, "INC0001", minutos=1)

        with pytest.raises(ConflictError):
            GeradorCodigoChamado(repo, max_tentativas=2).gerar()

    def test_formatar(self):
        assert GeradorCodigoChamado.formatar(42) == "INC0042"
