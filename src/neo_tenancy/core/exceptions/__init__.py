"""Exception hierarchy for neo-tenancy."""

from .base import NeoTenancyError, create_error_response, get_http_status_code
from .domain import (
    DirectoryError,
    NotFoundError,
    AlreadyExistsError,
    ForbiddenError,
    LimitExceededError,
    InvalidArgumentError,
    InvalidStateError,
    ExpiredError,
    AuthorizationSyncError,
    DatabaseError,
    TransactionError,
    ConfigurationError,
    error_code_for,
    details_for,
)
from .http_mapping import HTTP_STATUS_MAP

__all__ = [
    # Base
    "NeoTenancyError",
    "create_error_response",
    "get_http_status_code",
    "HTTP_STATUS_MAP",
    
    # Directory
    "DirectoryError",
    "NotFoundError",
    "AlreadyExistsError",
    "ForbiddenError",
    "LimitExceededError",
    "InvalidArgumentError",
    "InvalidStateError",
    "ExpiredError",
    
    # Authorization sync
    "AuthorizationSyncError",
    
    # Infrastructure
    "DatabaseError",
    "TransactionError",
    "ConfigurationError",
    
    # Helpers
    "error_code_for",
    "details_for",
]
