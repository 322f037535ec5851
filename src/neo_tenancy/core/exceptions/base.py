"""Base exceptions for neo-tenancy.

This module defines the base exception hierarchy for the neo-tenancy library.
All exceptions inherit from NeoTenancyError and include error codes, details,
and HTTP status code mappings for API responses.
"""

from typing import Any, Dict, Optional


class NeoTenancyError(Exception):
    """Base exception for all neo-tenancy errors.
    
    All exceptions in the neo-tenancy library inherit from this base class
    and include structured error information for better debugging and API responses.
    """
    
    default_code = "ERROR"
    
    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        *args,
        **kwargs
    ):
        super().__init__(message, *args, **kwargs)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}
    
    def __str__(self) -> str:
        return self.message


def get_http_status_code(exception: Exception) -> int:
    """Get HTTP status code for exception.
    
    Args:
        exception: The exception instance
        
    Returns:
        HTTP status code
    """
    from .http_mapping import get_http_status_code as get_mapped_status_code
    return get_mapped_status_code(exception)


def create_error_response(exception: NeoTenancyError) -> Dict[str, Any]:
    """Create standardized error response from exception.
    
    Args:
        exception: The neo-tenancy exception
        
    Returns:
        Error response dictionary
    """
    return {
        "error": {
            "code": exception.error_code,
            "message": exception.message,
            "details": exception.details,
            "type": exception.__class__.__name__,
        }
    }
