"""
Testes Unitários para Entidades do Domínio de Chamados.

Coverage:
- ChamadoStatus / Regra (conversão de strings)
- Expediente.contem (limites inclusivos, meia-noite)
- RegistroHistorico (id determinístico)
- ChamadoEntity (criação, mutações, invariantes)
"""

from datetime import datetime, time, timedelta, timezone

import pytest

from src.core.chamados.entities import (
    Ator,
    ChamadoEntity,
    ChamadoStatus,
    Expediente,
    HistoricoTipo,
    Regra,
    RegistroHistorico,
)
from src.core.shared.exceptions import ValidationError

AGORA = datetime(2025, 1, 6, 12, 0, tzinfo=timezone.utc)


def _chamado(**kwargs) -> ChamadoEntity:
    defaults = {
        "codigo": "INC0001",
        "descricao": "Impressora do 3º andar não imprime",
        "criador_id": "user-1",
        "servicos": ["srv-impressora"],
        "agora": AGORA,
    }
    defaults.update(kwargs)
    return ChamadoEntity.criar(**defaults)


class TestChamadoStatus:

    def test_from_string_aceita_variacoes(self):
        """Deve aceitar minúsculas, espaços e hífens."""
        assert ChamadoStatus.from_string("em atendimento") == ChamadoStatus.EM_ATENDIMENTO
        assert ChamadoStatus.from_string("em-atendimento") == ChamadoStatus.EM_ATENDIMENTO
        assert ChamadoStatus.from_string(" encerrado ") == ChamadoStatus.ENCERRADO

    def test_from_string_invalido(self):
        with pytest.raises(ValueError):
            ChamadoStatus.from_string("PENDENTE")

        with pytest.raises(ValueError):
            ChamadoStatus.from_string("")

        with pytest.raises(ValueError):
            ChamadoStatus.from_string(5)

    def test_finalizado(self):
        """ENCERRADO e CANCELADO exigem encerrado_em."""
        assert ChamadoStatus.ENCERRADO.finalizado
        assert ChamadoStatus.CANCELADO.finalizado
        assert not ChamadoStatus.REABERTO.finalizado


class TestRegraEAtor:

    def test_regra_from_string(self):
        assert Regra.from_string("tecnico") == Regra.TECNICO

        with pytest.raises(ValueError):
            Regra.from_string("GERENTE")

    def test_ator_flags(self):
        ator = Ator(id="x", regra=Regra.ADMIN)

        assert ator.e_admin
        assert not ator.e_tecnico
        assert not ator.e_usuario


class TestExpediente:

    def test_limites_inclusivos(self):
        """Deve admitir exatamente a entrada e a saída."""
        janela = Expediente("tec-1", time(8, 0), time(18, 0))

        assert janela.contem(time(8, 0))
        assert janela.contem(time(18, 0))
        assert not janela.contem(time(7, 59))
        assert not janela.contem(time(18, 1))

    def test_janela_atravessa_meia_noite(self):
        janela = Expediente("tec-1", time(22, 0), time(6, 0))

        assert janela.contem(time(23, 30))
        assert janela.contem(time(0, 0))
        assert janela.contem(time(6, 0))
        assert not janela.contem(time(12, 0))


class TestRegistroHistorico:

    def test_id_deterministico(self):
        """Deve gerar o mesmo id para o mesmo conteúdo (reenvio sem duplicata)."""
        autor = Ator(id="tec-1", regra=Regra.TECNICO)

        r1 = RegistroHistorico.criar("c-1", HistoricoTipo.STATUS, "x", autor, AGORA, "ABERTO", "EM_ATENDIMENTO")
        r2 = RegistroHistorico.criar("c-1", HistoricoTipo.STATUS, "y", autor, AGORA, "ABERTO", "EM_ATENDIMENTO")

        assert r1.id == r2.id

    def test_com_instante_recalcula_id(self):
        autor = Ator(id="tec-1", regra=Regra.TECNICO)
        registro = RegistroHistorico.criar("c-1", HistoricoTipo.COMENTARIO, "oi", autor, AGORA)

        depois = registro.com_instante(AGORA + timedelta(microseconds=1))

        assert depois.id != registro.id
        assert depois.descricao == "oi"
        assert depois.ocorrido_em == AGORA + timedelta(microseconds=1)


class TestChamadoEntityCriacao:

    def test_criar_chamado_valido(self):
        chamado = _chamado(descricao="  Sem acesso à VPN  ")

        assert chamado.id is not None
        assert chamado.status == ChamadoStatus.ABERTO
        assert chamado.descricao == "Sem acesso à VPN"
        assert chamado.tecnico_id is None
        assert chamado.encerrado_em is None
        assert chamado.versao == 1
        assert chamado.criado_em == AGORA

    def test_criar_deduplica_servicos(self):
        chamado = _chamado(servicos=["srv-a", "srv-b", "srv-a"])

        assert chamado.servicos == ["srv-a", "srv-b"]

    def test_descricao_vazia(self):
        with pytest.raises(ValidationError) as exc_info:
            _chamado(descricao="   ")

        assert exc_info.value.field == "descricao"

    def test_descricao_muito_longa(self):
        with pytest.raises(ValidationError):
            _chamado(descricao="x" * (ChamadoEntity.DESCRICAO_MAX_LENGTH + 1))

    def test_sem_servicos(self):
        with pytest.raises(ValidationError) as exc_info:
            _chamado(servicos=[])

        assert exc_info.value.field == "servicos"


class TestChamadoEntityMutacoes:

    def test_assumir(self):
        chamado = _chamado()

        chamado.assumir("tec-1", AGORA)

        assert chamado.status == ChamadoStatus.EM_ATENDIMENTO
        assert chamado.tecnico_id == "tec-1"
        assert chamado.versao == 2

    def test_assumir_sem_tecnico(self):
        with pytest.raises(ValidationError):
            _chamado().assumir("", AGORA)

    def test_encerrar_preenche_encerrado_em(self):
        chamado = _chamado()
        chamado.assumir("tec-1", AGORA)

        chamado.encerrar("Toner trocado", AGORA + timedelta(hours=1))

        assert chamado.status == ChamadoStatus.ENCERRADO
        assert chamado.descricao_encerramento == "Toner trocado"
        assert chamado.encerrado_em == AGORA + timedelta(hours=1)

    def test_encerrar_exige_descricao(self):
        chamado = _chamado()

        with pytest.raises(ValidationError) as exc_info:
            chamado.encerrar("  ", AGORA)

        assert exc_info.value.field == "descricao_encerramento"
        assert chamado.status == ChamadoStatus.ABERTO

    def test_cancelar(self):
        chamado = _chamado()

        chamado.cancelar("Aberto por engano", AGORA)

        assert chamado.status == ChamadoStatus.CANCELADO
        assert chamado.encerrado_em == AGORA
        assert chamado.descricao_encerramento == "Aberto por engano"

    def test_reabrir_limpa_encerrado_em_e_mantem_solucao(self):
        chamado = _chamado()
        chamado.assumir("tec-1", AGORA)
        chamado.encerrar("Toner trocado", AGORA)

        chamado.reabrir(AGORA + timedelta(hours=2))

        assert chamado.status == ChamadoStatus.REABERTO
        assert chamado.encerrado_em is None
        assert chamado.tecnico_id == "tec-1"
        assert chamado.descricao_encerramento == "Toner trocado"

    def test_reabrir_com_tecnico_resolvido(self):
        chamado = _chamado()
        chamado.encerrado_em = AGORA

        chamado.reabrir(AGORA, tecnico_id="tec-9")

        assert chamado.tecnico_id == "tec-9"

    def test_atribuir_nao_altera_status(self):
        chamado = _chamado()

        chamado.atribuir("tec-1", AGORA)

        assert chamado.status == ChamadoStatus.ABERTO
        assert chamado.tecnico_id == "tec-1"
        assert chamado.atualizado_em == AGORA

    def test_igualdade_por_id(self):
        chamado = _chamado()
        copia = ChamadoEntity(id=chamado.id, codigo="OUTRO")

        assert chamado == copia
        assert hash(chamado) == hash(copia)
