"""
Geração do código legível do chamado (INC0001, INC0002, ...).

O próximo número segue o código do chamado mais recente. Se o
candidato já existir, o número seguinte é tentado, até o limite
de tentativas. A geração só lê o repositório: uma colisão não deixa
nenhuma escrita parcial.
"""

import logging
import re
from typing import Optional

from src.core.shared.exceptions import ConflictError

from .ports import ChamadoRepository

logger = logging.getLogger(__name__)


class GeradorCodigoChamado:
    """
    Gera códigos INC + número com pelo menos 4 dígitos.

    Attributes:
        chamado_repo: Repositório consultado para unicidade
        max_tentativas: Limite de candidatos testados

    Example:
        gerador = GeradorCodigoChamado(repo, max_tentativas=10)
        codigo = gerador.gerar()  # "INC0001" em base vazia
    """

    PREFIXO = "INC"
    DIGITOS = 4
    _PADRAO = re.compile(r"^INC(\d+)$")

    def __init__(self, chamado_repo: ChamadoRepository, max_tentativas: int = 10):
        self.chamado_repo = chamado_repo
        self.max_tentativas = max_tentativas

    def gerar(self) -> str:
        """
        Retorna o próximo código livre.

        Raises:
            ConflictError: Se todas as tentativas colidirem
        """
        numero = self._proximo_numero(self.chamado_repo.ultimo_codigo())

        for tentativa in range(1, self.max_tentativas + 1):
            candidato = self.formatar(numero)
            if not self.chamado_repo.existe_codigo(candidato):
                return candidato

            logger.debug(f"Código {candidato} já existe (tentativa {tentativa})")
            numero += 1

        raise ConflictError(
            f"Não foi possível gerar código único após {self.max_tentativas} tentativas"
        )

    @classmethod
    def formatar(cls, numero: int) -> str:
        return f"{cls.PREFIXO}{numero:0{cls.DIGITOS}d}"

    @classmethod
    def _proximo_numero(cls, ultimo_codigo: Optional[str]) -> int:
        if not ultimo_codigo:
            return 1
        match = cls._PADRAO.match(ultimo_codigo)
        if not match:
            return 1
        return int(match.group(1)) + 1
