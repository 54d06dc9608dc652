"""
ChurchApp Backend — Custom Exception Hierarchy
================================================

What:  Defines application-specific exceptions for different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services and dependencies; caught by global handlers.
When:  During request processing when recoverable errors occur.

Exception Hierarchy:
    ChurchAppError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── InvalidCredentialsError  → 401 Unauthorized (generic message)
    ├── UnauthorizedError        → 401 Unauthorized (missing/invalid token)
    ├── ForbiddenError           → 403 Forbidden (role/permission mismatch)
    │   └── PlanLimitError       → 403 Forbidden (subscription limit reached)
    ├── NotFoundError            → 404 Not Found
    ├── InvariantViolationError  → 409 Conflict (business rule breach)
    ├── FileStorageError         → 500 Internal Server Error
    ├── DatabaseError            → 500 Internal Server Error
    └── RateLimitExceededError   → 429 Too Many Requests

Messages are user-facing and written in Brazilian Portuguese; `context` is
logged server-side and, for validation errors, echoed as `details`.
"""

from typing import Any, Dict, Optional


class ChurchAppError(Exception):
    """
    Base exception for all ChurchApp application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "Ocorreu um erro inesperado",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ChurchAppError):
    """
    Raised when client input fails validation.

    When:    Schema rejection, wrong upload type or size, missing branch context.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Valor deve ser positivo",
            "details": {"field": "amount"}
        }
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Dados inválidos",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class InvalidCredentialsError(ChurchAppError):
    """
    Raised by login when the email is unknown OR the password is wrong.

    The message is identical for both cases so the response never reveals
    whether an account exists for a given email.
    """

    status_code = 401
    error_code = "invalid_credentials"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Credenciais inválidas", context=context)


class UnauthorizedError(ChurchAppError):
    """Missing, expired, or invalid bearer token (or no admin principal)."""

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "Autenticação necessária",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(ChurchAppError):
    """Authenticated principal lacks the role or permission the route requires."""

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "Acesso negado",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PlanLimitError(ForbiddenError):
    """
    Raised when creating a member or branch would exceed the plan limit.

    HTTP:    403 Forbidden, error code `plan_limit_reached` so clients can
             show the upgrade screen instead of a generic denial.
    """

    error_code = "plan_limit_reached"

    def __init__(
        self,
        resource: str,
        limit: int,
        current: int,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx.update({"resource": resource, "limit": limit, "current": current})
        message = (
            f"Limite do plano atingido: máximo de {limit} {resource} excedido. "
            f"Você tem {current} {resource}."
        )
        super().__init__(message=message, context=ctx)


class NotFoundError(ChurchAppError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing records; services convert that into
    this exception so routes stay free of status-code logic.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        message: str = "Recurso não encontrado",
        resource: Optional[str] = None,
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource:
            ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class InvariantViolationError(ChurchAppError):
    """
    Raised when an operation would break a business rule.

    When:    Deleting a default or referenced position, deleting a main branch,
             duplicate member email.
    HTTP:    409 Conflict
    """

    status_code = 409
    error_code = "invariant_violation"

    def __init__(
        self,
        message: str = "Operação viola uma regra de negócio",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(ChurchAppError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, directory not writable, I/O error.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Falha ao salvar o arquivo",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(ChurchAppError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the details stay
    in the server log.
    """

    def __init__(
        self,
        message: str = "Erro no banco de dados. Tente novamente mais tarde.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(ChurchAppError):
    """Client exceeded the per-IP request budget (429 with Retry-After)."""

    status_code = 429
    error_code = "rate_limit_exceeded"

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Muitas requisições. Aguarde {retry_after} segundos antes de tentar novamente."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
