"""
Exceções de Domínio do Help Me Chamados.

Este módulo define exceções específicas do domínio que permitem
comunicar erros de forma clara e tipada entre as camadas.

Hierarquia:
    DomainException (base)
    ├── ValidationError (entrada inválida, 400)
    ├── EntityNotFoundError (entidade não existe, 404)
    ├── ForbiddenError (ator sem permissão, 403)
    ├── ConflictError (escrita concorrente ou código duplicado, 409)
    ├── BusinessRuleViolationError (pré-condição de estado, 400)
    └── InfrastructureError (armazenamento indisponível, 503)
"""


class DomainException(Exception):
    """
    Exceção base para todos os erros de domínio.

    Todas as exceções específicas do domínio devem herdar desta classe.
    Isso permite capturar qualquer erro de domínio de forma genérica.

    Example:
        try:
            service.execute(chamado_id, ator, "ENCERRADO", payload)
        except DomainException as e:
            logger.warning(f"Operação rejeitada: {e}")
    """

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Serializa exceção para dicionário (útil para APIs)."""
        return {
            "error": self.code,
            "message": self.message,
        }


class ValidationError(DomainException):
    """
    Erro de validação de dados de entrada.

    Example:
        if not justificativa:
            raise ValidationError("Justificativa é obrigatória", field="justificativa")
    """

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class EntityNotFoundError(DomainException):
    """
    Entidade não encontrada no repositório.

    Example:
        chamado = repo.get_by_id(chamado_id)
        if not chamado:
            raise EntityNotFoundError(f"Chamado {chamado_id} não encontrado")
    """

    def __init__(self, message: str, entity_type: str = None, entity_id: str = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, "ENTITY_NOT_FOUND")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.entity_type:
            result["entity_type"] = self.entity_type
        if self.entity_id:
            result["entity_id"] = self.entity_id
        return result


class ForbiddenError(DomainException):
    """
    Ator não tem permissão para a operação.

    Lançada por regras que dependem do papel do ator, de ser o
    criador do chamado, do expediente do técnico ou da janela
    de reabertura.

    Example:
        if ator.regra == Regra.TECNICO and novo_status == ChamadoStatus.CANCELADO:
            raise ForbiddenError("Técnicos não podem cancelar chamados")
    """

    def __init__(self, message: str, reason: str = None):
        self.reason = reason
        super().__init__(message, "FORBIDDEN")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.reason:
            result["reason"] = self.reason
        return result


class BusinessRuleViolationError(DomainException):
    """
    Violação de regra de negócio.

    Lançada quando o estado atual do chamado não admite a operação
    (ex: cancelar um chamado já encerrado).
    """

    def __init__(self, message: str, rule: str = None):
        self.rule = rule
        super().__init__(message, "BUSINESS_RULE_VIOLATION")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.rule:
            result["rule"] = self.rule
        return result


class ConflictError(DomainException):
    """
    Conflito de escrita.

    Lançada quando outra requisição alterou o chamado entre a leitura
    e a escrita (versão divergente) ou quando a geração de código
    esgota as tentativas.

    Example:
        if not repo.atualizar_condicional(chamado, versao_esperada):
            raise ConflictError("Chamado foi modificado por outra requisição")
    """

    def __init__(self, message: str):
        super().__init__(message, "CONFLICT")


class InfrastructureError(DomainException):
    """
    Falha de armazenamento ou serviço externo.

    Usada quando o banco principal ou o ledger de histórico
    não respondem e a operação não pode continuar.
    """

    def __init__(self, message: str, store: str = None):
        self.store = store
        super().__init__(message, "INFRASTRUCTURE_ERROR")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.store:
            result["store"] = self.store
        return result
