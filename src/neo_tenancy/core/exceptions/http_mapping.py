"""HTTP status code mapping for exceptions."""

from typing import Dict, Type

from .base import NeoTenancyError
from .domain import *


HTTP_STATUS_MAP: Dict[Type[Exception], int] = {
    # 400 Bad Request
    InvalidArgumentError: 400,
    
    # 403 Forbidden
    ForbiddenError: 403,
    LimitExceededError: 403,
    
    # 404 Not Found
    NotFoundError: 404,
    
    # 409 Conflict
    AlreadyExistsError: 409,
    InvalidStateError: 409,
    TransactionError: 409,
    
    # 410 Gone
    ExpiredError: 410,
    
    # 500 Internal Server Error
    DatabaseError: 500,
    ConfigurationError: 500,
    
    # 502 Bad Gateway
    AuthorizationSyncError: 502,
    
    # Default for NeoTenancyError
    NeoTenancyError: 500,
}


def get_http_status_code(exception: Exception) -> int:
    """Resolve the status code, walking the class hierarchy for unmapped subclasses."""
    for klass in type(exception).__mro__:
        if klass in HTTP_STATUS_MAP:
            return HTTP_STATUS_MAP[klass]
    return 500
