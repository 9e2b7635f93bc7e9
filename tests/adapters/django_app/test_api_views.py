"""
Testes das API Views JSON de Chamados.

Usa o container real (repositórios Django, dois bancos, publisher
'sync' e Celery eager), exercitando a pilha completa:
middleware -> view -> use case -> ORM/ledger -> handlers -> e-mail.
"""

import json

import pytest

BANCOS = ["default", "historico"]
API = "/chamados/api/"


def _json(client, metodo, url, headers, corpo=None):
    chamada = getattr(client, metodo)
    if corpo is None:
        return chamada(url, **headers)
    return chamada(url, data=json.dumps(corpo), content_type="application/json", **headers)


@pytest.fixture
def abrir(client, catalogo_basico, como_usuario):
    def _abrir(descricao="Sem acesso à VPN", servicos=("VPN",), headers=None):
        response = _json(client, "post", API, headers or como_usuario, {
            "descricao": descricao,
            "servicos": list(servicos),
        })
        assert response.status_code == 201, response.content
        return response.json()["data"]
    return _abrir


@pytest.mark.django_db(databases=BANCOS)
class TestFluxoCompleto:

    def test_abrir_assumir_encerrar_reabrir(
        self, client, abrir, expediente_integral, como_usuario, como_tecnico, mailoutbox
    ):
        chamado = abrir()
        assert chamado["codigo"] == "INC0001"
        assert chamado["status"] == "ABERTO"
        assert mailoutbox[-1].to == ["ana@empresa.com"]

        url = f"{API}{chamado['id']}/"

        response = _json(client, "patch", f"{url}status/", como_tecnico, {"status": "EM_ATENDIMENTO"})
        assert response.status_code == 200
        assert response.json()["data"]["tecnico_id"] == "tec-1"

        response = _json(client, "patch", f"{url}status/", como_tecnico, {
            "status": "ENCERRADO",
            "descricao_encerramento": "Certificado da VPN renovado",
        })
        assert response.status_code == 200
        assert response.json()["data"]["encerrado_em"] is not None
        assert "INC0001 encerrado" in mailoutbox[-1].subject
        assert mailoutbox[-1].to == ["ana@empresa.com"]

        response = _json(client, "patch", f"{url}reabrir/", como_usuario, {})
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "REABERTO"
        assert response.json()["data"]["tecnico_id"] == "tec-1"

        response = client.get(f"{url}historico/", **como_usuario)
        corpo = response.json()
        assert corpo["meta"]["total"] == 4
        assert [(h["tipo"], h["para"]) for h in corpo["data"]] == [
            ("ABERTURA", "ABERTO"),
            ("STATUS", "EM_ATENDIMENTO"),
            ("STATUS", "ENCERRADO"),
            ("STATUS", "REABERTO"),
        ]

    def test_detalhe_com_ultima_atualizacao(self, client, abrir, como_admin):
        chamado = abrir()

        response = _json(client, "patch", f"{API}{chamado['id']}/atribuir/", como_admin, {"tecnico_id": "tec-9"})
        assert response.status_code == 200

        response = client.get(f"{API}{chamado['id']}/", **como_admin)
        dados = response.json()["data"]
        assert dados["tecnico_id"] == "tec-9"
        assert dados["ultima_atualizacao"]["tipo"] == "ATRIBUICAO"


@pytest.mark.django_db(databases=BANCOS)
class TestErros:

    def test_sem_ator(self, client):
        response = client.get(API)

        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_regra_invalida_no_header(self, client):
        response = client.get(API, HTTP_X_ATOR_ID="x", HTTP_X_ATOR_REGRA="GERENTE")

        assert response.status_code == 401

    def test_servico_inativo(self, client, catalogo_basico, como_usuario):
        response = _json(client, "post", API, como_usuario, {
            "descricao": "Erro no sistema antigo",
            "servicos": ["Sistema Legado"],
        })

        assert response.status_code == 400
        corpo = response.json()
        assert "Sistema Legado" in corpo["error"]
        assert corpo["meta"]["field"] == "servicos"

    def test_json_invalido(self, client, como_usuario):
        response = client.post(API, data="{nao e json", content_type="application/json", **como_usuario)

        assert response.status_code == 400

    def test_chamado_inexistente(self, client, como_admin):
        response = client.get(f"{API}nao-existe/", **como_admin)

        assert response.status_code == 404
        assert response.json()["meta"]["code"] == "ENTITY_NOT_FOUND"

    def test_usuario_nao_altera_status(self, client, abrir, como_usuario):
        chamado = abrir()

        response = _json(client, "patch", f"{API}{chamado['id']}/status/", como_usuario, {"status": "ENCERRADO"})

        assert response.status_code == 403

    def test_tecnico_sem_expediente(self, client, abrir, como_tecnico):
        chamado = abrir()

        response = _json(client, "patch", f"{API}{chamado['id']}/status/", como_tecnico, {"status": "EM_ATENDIMENTO"})

        assert response.status_code == 403
        assert response.json()["meta"]["reason"] == "sem_expediente"

    def test_cancelar_encerrado(self, client, abrir, como_admin):
        chamado = abrir()
        url = f"{API}{chamado['id']}/"
        _json(client, "patch", f"{url}status/", como_admin, {"status": "EM_ATENDIMENTO", "tecnico_id": "tec-1"})
        _json(client, "patch", f"{url}status/", como_admin, {"status": "ENCERRADO", "descricao_encerramento": "ok"})

        response = _json(client, "patch", f"{url}cancelar/", como_admin, {"justificativa": "x"})

        assert response.status_code == 400
        assert response.json()["meta"]["rule"] == "encerrado_nao_cancela"

    def test_reabrir_com_nota_numerica(self, client, abrir, como_admin, como_usuario):
        chamado = abrir()
        url = f"{API}{chamado['id']}/"
        _json(client, "patch", f"{url}status/", como_admin, {"status": "EM_ATENDIMENTO", "tecnico_id": "tec-1"})
        _json(client, "patch", f"{url}status/", como_admin, {"status": "ENCERRADO", "descricao_encerramento": "ok"})

        response = _json(client, "patch", f"{url}reabrir/", como_usuario, {"nota": 5})

        assert response.status_code == 400
        assert response.json()["meta"]["field"] == "nota"
        assert client.get(url, **como_usuario).json()["data"]["status"] == "ENCERRADO"
        historico = client.get(f"{url}historico/", **como_usuario).json()
        assert historico["meta"]["total"] == 3
        assert "REABERTO" not in [h["para"] for h in historico["data"]]

    def test_status_numerico(self, client, abrir, como_admin):
        chamado = abrir()

        response = _json(client, "patch", f"{API}{chamado['id']}/status/", como_admin, {"status": 5})

        assert response.status_code == 400
        assert response.json()["meta"]["code"] == "VALIDATION_ERROR_STATUS"
        assert client.get(f"{API}{chamado['id']}/", **como_admin).json()["data"]["status"] == "ABERTO"

    def test_comentario_nao_textual(self, client, abrir, como_usuario):
        chamado = abrir()

        response = _json(client, "post", f"{API}{chamado['id']}/comentarios/", como_usuario, {"comentario": ["a"]})

        assert response.status_code == 400
        assert response.json()["meta"]["field"] == "comentario"


@pytest.mark.django_db(databases=BANCOS)
class TestDemaisOperacoes:

    def test_fila_do_usuario(self, client, abrir, como_usuario, como_outro_usuario, como_admin):
        abrir()
        abrir(headers=como_outro_usuario)

        response = client.get(API, **como_outro_usuario)
        corpo = response.json()
        assert corpo["meta"]["total"] == 1
        assert corpo["data"][0]["criador_id"] == "user-2"

        response = client.get(f"{API}?status=ABERTO,EM_ATENDIMENTO&limit=1", **como_admin)
        corpo = response.json()
        assert corpo["meta"]["total"] == 2
        assert len(corpo["data"]) == 1
        assert corpo["meta"]["tem_proxima"] is True

    def test_cancelar_pelo_criador(self, client, abrir, como_usuario):
        chamado = abrir()

        response = _json(client, "patch", f"{API}{chamado['id']}/cancelar/", como_usuario, {
            "justificativa": "Abri por engano",
        })

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "CANCELADO"

    def test_comentar(self, client, abrir, como_usuario):
        chamado = abrir()

        response = _json(client, "post", f"{API}{chamado['id']}/comentarios/", como_usuario, {
            "comentario": "Ainda sem acesso pela manhã",
        })

        assert response.status_code == 201
        assert response.json()["data"]["tipo"] == "COMENTARIO"

    def test_excluir(self, client, abrir, como_admin, como_usuario):
        chamado = abrir()

        response = client.delete(f"{API}{chamado['id']}/", **como_usuario)
        assert response.status_code == 403

        response = client.delete(f"{API}{chamado['id']}/", **como_admin)
        assert response.status_code == 200
        assert response.json()["data"]["codigo"] == "INC0001"

        assert client.get(f"{API}{chamado['id']}/", **como_admin).status_code == 404
        assert client.get(f"{API}{chamado['id']}/historico/", **como_admin).json()["meta"]["total"] == 1

    def test_health(self, client):
        response = client.get("/health/")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
