"""Domain exceptions for the tenant directory.

Directory errors are raised at the point of violation and surfaced to the
caller unchanged. Authorization sync failures form a separate branch since
they never invalidate an already committed directory mutation.
"""

from typing import Any, Dict, List, Optional

from .base import NeoTenancyError


class DirectoryError(NeoTenancyError):
    """Base class for tenant directory violations."""


class NotFoundError(DirectoryError):
    """Referenced entity does not exist."""
    
    default_code = "NOT_FOUND"
    
    def __init__(self, entity: str, identifier: Optional[str] = None, message: Optional[str] = None):
        message = message or (f"{entity} not found" if identifier is None else f"{entity} '{identifier}' not found")
        super().__init__(message, details={"entity": entity, "identifier": identifier})
        self.entity = entity
        self.identifier = identifier


class AlreadyExistsError(DirectoryError):
    """Uniqueness constraint violation."""
    
    default_code = "ALREADY_EXISTS"


class ForbiddenError(DirectoryError):
    """Role hierarchy insufficient, owner protection or cross-organization reference."""
    
    default_code = "FORBIDDEN"


class LimitExceededError(ForbiddenError):
    """Configured organization, member or team limit reached."""
    
    default_code = "LIMIT_EXCEEDED"
    
    def __init__(self, message: str, limit: int, current: int):
        super().__init__(message, details={"limit": limit, "current": current})
        self.limit = limit
        self.current = current


class InvalidArgumentError(DirectoryError):
    """Argument violates a structural rule (self-parenting, cycles, self-transfer)."""
    
    default_code = "INVALID_ARGUMENT"


class InvalidStateError(DirectoryError):
    """Operation is not allowed in the entity's current state."""
    
    default_code = "INVALID_STATE"


class ExpiredError(DirectoryError):
    """Invitation is past its expiry."""
    
    default_code = "EXPIRED"


class AuthorizationSyncError(NeoTenancyError):
    """Authorization subsystem rejected or failed a sync command.
    
    The directory mutation that triggered the sync has already committed.
    ``commands`` holds the complete, idempotent command list for the
    operation so the caller or ops tooling can replay it.
    """
    
    default_code = "AUTHORIZATION_SYNC_FAILED"
    
    def __init__(
        self,
        operation: str,
        commands: List[Any],
        failed_command: Any,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(
            f"Authorization sync failed during {operation}: {cause}",
            details={
                "operation": operation,
                "failed_command": str(failed_command),
                "command_count": len(commands),
            },
        )
        self.operation = operation
        self.commands = list(commands)
        self.failed_command = failed_command
        self.cause = cause


class DatabaseError(NeoTenancyError):
    """Unexpected persistence failure."""
    
    default_code = "DATABASE_ERROR"


class TransactionError(DatabaseError):
    """Serializable transaction aborted by a concurrent writer; safe to retry."""
    
    default_code = "TRANSACTION_CONFLICT"


class ConfigurationError(NeoTenancyError):
    """Invalid or missing configuration."""
    
    default_code = "CONFIGURATION_ERROR"


def error_code_for(exception: BaseException) -> str:
    """Return the wire code used in bulk item results."""
    if isinstance(exception, NeoTenancyError):
        return exception.error_code
    return "ERROR"


def details_for(exception: BaseException) -> Dict[str, Any]:
    if isinstance(exception, NeoTenancyError):
        return exception.details
    return {}
